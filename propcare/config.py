"""
PropCare Configuration - YAML config file with ${VAR} substitution

Example config.yaml:

    llm:
      provider: anthropic
      model: claude-sonnet-4-5
      api_key: ${ANTHROPIC_API_KEY}

    database: ${DATABASE_URL}        # omit to run on the in-memory store

    notifications:
      provider: twilio
      account_sid: ${TWILIO_ACCOUNT_SID}
      auth_token: ${TWILIO_AUTH_TOKEN}
      from_number: "+447700900000"
      admin_phone: "+447700900999"

    orchestrator:
      country_code: "44"
      history_limit: 20
      max_handoff_depth: 3
      max_tool_iterations: 5
"""

import logging
import os
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import yaml

from .constants import (
    DEFAULT_COUNTRY_CODE, DEFAULT_HISTORY_LIMIT, DEFAULT_MAX_HANDOFF_DEPTH,
    DEFAULT_MAX_TOOL_ITERATIONS,
)

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "PROPCARE_CONFIG"
DEFAULT_CONFIG_PATH = "config.yaml"

_ENV_PATTERN = re.compile(r"\$\{(\w+)\}")


def _load_config(path: str) -> dict:
    """Read YAML config file with ${VAR} environment variable substitution."""
    with open(path, "r", encoding="utf-8") as f:
        raw = f.read()

    def _replace_env(match):
        var_name = match.group(1)
        value = os.environ.get(var_name)
        if value is None:
            raise ValueError(
                f"Environment variable '{var_name}' not set "
                f"(referenced in config file '{path}')"
            )
        return value

    resolved = _ENV_PATTERN.sub(_replace_env, raw)
    return yaml.safe_load(resolved) or {}


@dataclass
class LLMSection:
    provider: str
    model: str
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    timeout: float = 60.0


@dataclass
class NotificationSection:
    """Outbound messaging; provider "" disables sending."""
    provider: str = ""
    admin_phone: Optional[str] = None
    options: Dict[str, Any] = field(default_factory=dict)


@dataclass
class OrchestratorSection:
    country_code: str = DEFAULT_COUNTRY_CODE
    history_limit: int = DEFAULT_HISTORY_LIMIT
    max_handoff_depth: int = DEFAULT_MAX_HANDOFF_DEPTH
    max_tool_iterations: int = DEFAULT_MAX_TOOL_ITERATIONS


@dataclass
class PropCareConfig:
    llm: LLMSection
    database: Optional[str] = None
    notifications: NotificationSection = field(default_factory=NotificationSection)
    orchestrator: OrchestratorSection = field(default_factory=OrchestratorSection)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PropCareConfig":
        llm_cfg = data.get("llm") or {}
        if not llm_cfg.get("provider") or not llm_cfg.get("model"):
            raise ValueError("Missing required config fields: 'llm.provider' and 'llm.model'")

        notify_cfg = dict(data.get("notifications") or {})
        provider = notify_cfg.pop("provider", "") or ""
        admin_phone = notify_cfg.pop("admin_phone", None)

        orch_cfg = data.get("orchestrator") or {}

        return cls(
            llm=LLMSection(
                provider=llm_cfg["provider"],
                model=llm_cfg["model"],
                api_key=llm_cfg.get("api_key"),
                base_url=llm_cfg.get("base_url"),
                timeout=float(llm_cfg.get("timeout", 60.0)),
            ),
            database=data.get("database") or None,
            notifications=NotificationSection(
                provider=provider,
                admin_phone=str(admin_phone) if admin_phone else None,
                options=notify_cfg,
            ),
            orchestrator=OrchestratorSection(
                country_code=str(orch_cfg.get("country_code", DEFAULT_COUNTRY_CODE)),
                history_limit=int(orch_cfg.get("history_limit", DEFAULT_HISTORY_LIMIT)),
                max_handoff_depth=int(orch_cfg.get("max_handoff_depth", DEFAULT_MAX_HANDOFF_DEPTH)),
                max_tool_iterations=int(orch_cfg.get("max_tool_iterations", DEFAULT_MAX_TOOL_ITERATIONS)),
            ),
        )


def load_config(path: Optional[str] = None) -> PropCareConfig:
    """
    Load configuration from ``path``, $PROPCARE_CONFIG, or ./config.yaml.

    Raises:
        ValueError: Required fields missing or a referenced variable unset
    """
    path = path or os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH
    logger.info(f"Loading config from {path}")
    return PropCareConfig.from_dict(_load_config(path))
