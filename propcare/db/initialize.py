"""
PropCare Database Schema Management.

Lightweight migration system:
- Tracks current schema version in a `schema_version` table
- Only runs migrations that haven't been applied yet
- Each migration is a (version, description, SQL) tuple
- Safe for concurrent startup (uses advisory lock)

Usage:
    db = Database(dsn="postgresql://...")
    await db.initialize()
    await ensure_schema(db)
"""

import logging
from typing import List, Tuple

from .database import Database

logger = logging.getLogger(__name__)

# ──────────────────────────────────────────────────────────────
# Migration registry
#
# Append-only. Never modify or delete existing entries.
# Each entry: (version, description, sql)
# ──────────────────────────────────────────────────────────────
MIGRATIONS: List[Tuple[int, str, str]] = [
    (
        1,
        "Create directory tables (leads, properties, tenants)",
        """
        CREATE TABLE IF NOT EXISTS leads (
            id              TEXT PRIMARY KEY,
            customer_name   TEXT NOT NULL,
            phone           TEXT NOT NULL,
            segment         TEXT,
            created_at      TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ NOT NULL DEFAULT NOW()
        );
        CREATE INDEX IF NOT EXISTS idx_leads_phone ON leads (phone);

        CREATE TABLE IF NOT EXISTS properties (
            id                  TEXT PRIMARY KEY,
            landlord_lead_id    TEXT NOT NULL REFERENCES leads (id),
            address             TEXT NOT NULL,
            postcode            TEXT NOT NULL DEFAULT '',
            nickname            TEXT,
            created_at          TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ NOT NULL DEFAULT NOW()
        );
        CREATE INDEX IF NOT EXISTS idx_properties_landlord ON properties (landlord_lead_id);

        CREATE TABLE IF NOT EXISTS tenants (
            id              TEXT PRIMARY KEY,
            name            TEXT NOT NULL,
            phone           TEXT NOT NULL,
            property_id     TEXT NOT NULL REFERENCES properties (id),
            created_at      TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ NOT NULL DEFAULT NOW()
        );
        CREATE INDEX IF NOT EXISTS idx_tenants_phone ON tenants (phone);
        """,
    ),
    (
        2,
        "Create landlord_settings table",
        """
        CREATE TABLE IF NOT EXISTS landlord_settings (
            id                                  TEXT PRIMARY KEY DEFAULT gen_random_uuid()::text,
            landlord_lead_id                    TEXT NOT NULL UNIQUE REFERENCES leads (id),
            auto_approve_under_pence            INTEGER DEFAULT 15000,
            require_approval_above_pence        INTEGER DEFAULT 50000,
            auto_approve_categories             JSONB DEFAULT '["plumbing_emergency", "heating", "security", "water_leak"]',
            always_require_approval_categories  JSONB DEFAULT '["cosmetic", "upgrade"]',
            emergency_auto_dispatch             BOOLEAN NOT NULL DEFAULT TRUE,
            emergency_contact_phone             TEXT,
            monthly_budget_pence                INTEGER,
            budget_alert_threshold              INTEGER NOT NULL DEFAULT 80,
            current_month_spend_pence           INTEGER NOT NULL DEFAULT 0,
            budget_reset_day                    INTEGER NOT NULL DEFAULT 1,
            notify_on_auto_approve              BOOLEAN NOT NULL DEFAULT TRUE,
            notify_on_completion                BOOLEAN NOT NULL DEFAULT TRUE,
            notify_on_new_issue                 BOOLEAN NOT NULL DEFAULT TRUE,
            preferred_channel                   TEXT NOT NULL DEFAULT 'whatsapp',
            created_at                          TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at                          TIMESTAMPTZ NOT NULL DEFAULT NOW()
        );
        """,
    ),
    (
        3,
        "Create conversations and messages tables",
        """
        CREATE TABLE IF NOT EXISTS conversations (
            id                      TEXT PRIMARY KEY,
            phone_number            TEXT NOT NULL,
            status                  TEXT NOT NULL DEFAULT 'active',
            last_message_at         TIMESTAMPTZ,
            last_message_preview    TEXT,
            created_at              TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at              TIMESTAMPTZ NOT NULL DEFAULT NOW()
        );

        CREATE TABLE IF NOT EXISTS messages (
            id                  TEXT PRIMARY KEY DEFAULT gen_random_uuid()::text,
            conversation_id     TEXT NOT NULL REFERENCES conversations (id),
            direction           TEXT NOT NULL,
            content             TEXT,
            type                TEXT NOT NULL DEFAULT 'text',
            media_url           TEXT,
            status              TEXT NOT NULL DEFAULT 'sent',
            created_at          TIMESTAMPTZ NOT NULL DEFAULT NOW()
        );
        CREATE INDEX IF NOT EXISTS idx_messages_conversation
            ON messages (conversation_id, created_at DESC);
        """,
    ),
    (
        4,
        "Create tenant_issues table",
        """
        CREATE TABLE IF NOT EXISTS tenant_issues (
            id                          TEXT PRIMARY KEY DEFAULT gen_random_uuid()::text,
            tenant_id                   TEXT NOT NULL REFERENCES tenants (id),
            property_id                 TEXT NOT NULL REFERENCES properties (id),
            landlord_lead_id            TEXT NOT NULL REFERENCES leads (id),
            conversation_id             TEXT NOT NULL REFERENCES conversations (id),
            status                      TEXT NOT NULL DEFAULT 'new',
            issue_description           TEXT,
            issue_category              TEXT,
            urgency                     TEXT,
            ai_resolution_attempted     BOOLEAN NOT NULL DEFAULT FALSE,
            photos                      JSONB,
            voice_notes                 JSONB,
            tenant_availability         TEXT,
            access_instructions         TEXT,
            additional_notes            TEXT,
            dispatch_decision           TEXT,
            dispatch_reason             TEXT,
            price_estimate_low_pence    INTEGER,
            price_estimate_high_pence   INTEGER,
            price_estimate_mid_pence    INTEGER,
            price_estimate_confidence   INTEGER,
            quote_id                    TEXT,
            job_id                      TEXT,
            landlord_notified_at        TIMESTAMPTZ,
            landlord_approved_at        TIMESTAMPTZ,
            landlord_rejected_at        TIMESTAMPTZ,
            landlord_rejection_reason   TEXT,
            created_at                  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at                  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            resolved_at                 TIMESTAMPTZ
        );
        CREATE INDEX IF NOT EXISTS idx_tenant_issues_tenant_conversation
            ON tenant_issues (tenant_id, conversation_id, created_at DESC);
        CREATE INDEX IF NOT EXISTS idx_tenant_issues_landlord_status
            ON tenant_issues (landlord_lead_id, status);
        """,
    ),
    (
        5,
        "Create productized_services catalog table",
        """
        CREATE TABLE IF NOT EXISTS productized_services (
            id                      TEXT PRIMARY KEY DEFAULT gen_random_uuid()::text,
            sku_code                TEXT NOT NULL UNIQUE,
            name                    TEXT NOT NULL,
            description             TEXT NOT NULL DEFAULT '',
            price_pence             INTEGER NOT NULL,
            keywords                TEXT[] NOT NULL DEFAULT '{}',
            category                TEXT,
            time_estimate_minutes   INTEGER NOT NULL DEFAULT 60,
            is_active               BOOLEAN NOT NULL DEFAULT TRUE,
            created_at              TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at              TIMESTAMPTZ NOT NULL DEFAULT NOW()
        );
        """,
    ),
    # ── Future migrations go here ──
]


# ──────────────────────────────────────────────────────────────
# Schema management
# ──────────────────────────────────────────────────────────────

_BOOTSTRAP_SQL = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY,
    description TEXT NOT NULL,
    applied_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
"""

# PostgreSQL advisory lock ID (arbitrary constant, unique to this app)
_LOCK_ID = 4_4770_0900


async def ensure_schema(db: Database) -> None:
    """Apply any pending migrations.

    Args:
        db: Initialized Database instance.
    """
    async with db.pool.acquire() as conn:
        # Advisory lock: only one process migrates at a time
        await conn.execute("SELECT pg_advisory_lock($1)", _LOCK_ID)
        try:
            await conn.execute(_BOOTSTRAP_SQL)

            current = await conn.fetchval(
                "SELECT COALESCE(MAX(version), 0) FROM schema_version"
            )

            pending = [(v, d, s) for v, d, s in MIGRATIONS if v > current]
            if not pending:
                logger.debug(f"Schema up to date (version {current})")
                return

            for version, description, sql in pending:
                async with conn.transaction():
                    await conn.execute(sql)
                    await conn.execute(
                        "INSERT INTO schema_version (version, description) VALUES ($1, $2)",
                        version,
                        description,
                    )
                logger.info(f"Migration {version}: {description}")

            logger.info(f"Schema migrated {current} -> {pending[-1][0]}")
        finally:
            await conn.execute("SELECT pg_advisory_unlock($1)", _LOCK_ID)
