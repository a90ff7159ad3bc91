"""
Sender resolution - phone normalisation and tenant/landlord lookup.
"""

import logging
import re
from typing import Optional

from ..constants import DEFAULT_COUNTRY_CODE, SenderType
from .models import SenderIdentity

logger = logging.getLogger(__name__)

_NON_DIAL_CHARS = re.compile(r"[^\d+]")


def normalize_phone(phone: str, country_code: str = DEFAULT_COUNTRY_CODE) -> str:
    """
    Normalise a phone number to international form.

    Everything but digits and ``+`` is stripped, a leading ``0`` becomes
    ``+{country_code}``, and ``+`` is prepended when missing. Applying it
    twice gives the same result.

    Example:
        normalize_phone("07700 900123")  # "+447700900123"
    """
    cleaned = _NON_DIAL_CHARS.sub("", phone or "")
    if cleaned.startswith("0"):
        cleaned = f"+{country_code}{cleaned[1:]}"
    if not cleaned.startswith("+"):
        cleaned = f"+{cleaned}"
    return cleaned


async def identify_sender(
    store,
    phone: str,
    country_code: str = DEFAULT_COUNTRY_CODE,
) -> Optional[SenderIdentity]:
    """Tenant first, then landlord; None when the number is unknown."""
    normalized = normalize_phone(phone, country_code)

    tenant = await store.find_tenant_by_phone(normalized)
    if tenant is not None:
        prop = tenant.property
        return SenderIdentity(
            type=SenderType.TENANT,
            tenant=tenant,
            property=prop,
            landlord=prop.landlord if prop is not None else None,
        )

    landlord = await store.find_landlord_by_phone(normalized)
    if landlord is not None:
        return SenderIdentity(type=SenderType.LANDLORD, landlord=landlord)

    logger.info(f"Unknown sender {normalized}")
    return None
