"""
Database Manager - Saved Competitor Plans
=========================================
PostgreSQL storage for extracted competitor plans:
- competitor_plans (one row per plan, replaced per user on every save)

Nested values (included_units, features, evidence) are stored as JSONB.
"""

import uuid
from typing import Any, Dict, List, Union

import psycopg2
from psycopg2.extras import Json

from models.extracted_plan import ExtractedPlan
from models.pricing_response import SavedPlansResponse, SavePlansResponse
from utils_logging import log_error, log_info


# ==============================================================================
# UUID VALIDATION (FAIL-FAST)
# ==============================================================================

def assert_valid_uuid(user_id: Union[str, uuid.UUID], context: str = "") -> str:
    """
    Validates that user_id is a valid UUID string.

    Returns:
        Normalized UUID string

    Raises:
        ValueError: If user_id is not a valid UUID
    """
    if isinstance(user_id, uuid.UUID):
        return str(user_id)

    if not isinstance(user_id, str):
        raise ValueError(
            f"INVALID user_id TYPE in {context}: "
            f"Expected UUID string, got {type(user_id).__name__}"
        )

    try:
        return str(uuid.UUID(user_id))
    except (ValueError, AttributeError) as e:
        raise ValueError(f"INVALID user_id FORMAT in {context}: '{user_id}' ({e})")


# ==============================================================================
# CONNECTION
# ==============================================================================

def get_conn(pg_cfg):
    """
    Creates PostgreSQL connection.
    Accepts PGConf dataclass OR dict.
    """
    if hasattr(pg_cfg, "host"):
        host = pg_cfg.host
        port = pg_cfg.port
        db = pg_cfg.db
        user = pg_cfg.user
        password = pg_cfg.password
    else:
        host = pg_cfg.get("host")
        port = pg_cfg.get("port")
        db = pg_cfg.get("db")
        user = pg_cfg.get("user")
        password = pg_cfg.get("password")

    conn = psycopg2.connect(
        host=host,
        port=port,
        dbname=db,
        user=user,
        password=password,
    )
    log_info(f"🔧 DB connected → {user}@{host}:{port}/{db}")
    return conn


# ==============================================================================
# SCHEMA
# ==============================================================================

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS competitor_plans (
    id                          BIGSERIAL PRIMARY KEY,
    user_id                     UUID NOT NULL,
    website_url                 TEXT NOT NULL DEFAULT '',
    source_url                  TEXT NOT NULL DEFAULT '',
    extracted_at                TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    plan_name                   TEXT NOT NULL,
    price_amount                NUMERIC(12,2),
    price_string                TEXT NOT NULL DEFAULT '',
    currency                    TEXT NOT NULL DEFAULT '',
    price_frequency             TEXT NOT NULL DEFAULT '',
    billing_period              TEXT NOT NULL DEFAULT 'unknown',
    monthly_equivalent_amount   NUMERIC(12,2),
    annual_billed_amount        NUMERIC(12,2),
    included_units              JSONB NOT NULL DEFAULT '[]'::jsonb,
    features                    JSONB NOT NULL DEFAULT '[]'::jsonb,
    evidence                    JSONB NOT NULL DEFAULT '{}'::jsonb
);
CREATE INDEX IF NOT EXISTS idx_competitor_plans_user ON competitor_plans (user_id);
"""

PLAN_COLUMNS = [
    "website_url", "source_url", "extracted_at", "plan_name",
    "price_amount", "price_string", "currency", "price_frequency",
    "billing_period", "monthly_equivalent_amount", "annual_billed_amount",
    "included_units", "features", "evidence",
]


def ensure_schema(conn):
    """Creates the competitor_plans table if missing."""
    with conn:
        with conn.cursor() as cur:
            cur.execute(SCHEMA_SQL)


# ==============================================================================
# SAVED PLANS
# ==============================================================================

def _plan_row(user_id: str, website_url: str, source_url: str, plan: ExtractedPlan) -> tuple:
    return (
        user_id,
        website_url,
        source_url,
        plan.name,
        plan.price_amount,
        plan.price_string,
        plan.currency,
        plan.price_frequency,
        plan.billing_period.value,
        plan.monthly_equivalent_amount,
        plan.annual_billed_amount,
        Json([u.to_dict() for u in plan.included_units]),
        Json(list(plan.features)),
        Json(plan.evidence.to_dict()),
    )


def save_plans(
    conn,
    user_id: str,
    website_url: str,
    source_url: str,
    plans: List[ExtractedPlan],
) -> SavePlansResponse:
    """
    Replaces the user's saved plans with a new extraction (one transaction).

    Returns:
        SavePlansResponse (error "invalid user ID" for a malformed id)
    """
    try:
        uid = assert_valid_uuid(user_id, "save_plans")
    except ValueError:
        return SavePlansResponse(error="invalid user ID")

    rows = [_plan_row(uid, website_url, source_url, p) for p in plans]
    try:
        with conn:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM competitor_plans WHERE user_id = %s", (uid,))
                if rows:
                    cur.executemany("""
                        INSERT INTO competitor_plans (
                            user_id, website_url, source_url, plan_name,
                            price_amount, price_string, currency, price_frequency,
                            billing_period, monthly_equivalent_amount, annual_billed_amount,
                            included_units, features, evidence
                        ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                    """, rows)
    except psycopg2.Error as e:
        log_error(f"Failed to save plans: {e}")
        return SavePlansResponse(error=f"failed to save plans: {e}")

    log_info(f"💾 Saved {len(rows)} plans for user {uid}")
    return SavePlansResponse(saved_count=len(rows))


def _row_to_dict(row) -> Dict[str, Any]:
    d = dict(zip(PLAN_COLUMNS, row))
    for key in ("price_amount", "monthly_equivalent_amount", "annual_billed_amount"):
        if d[key] is not None:
            d[key] = float(d[key])
    if d["extracted_at"] is not None and hasattr(d["extracted_at"], "isoformat"):
        d["extracted_at"] = d["extracted_at"].isoformat()
    return d


def get_saved_plans(conn, user_id: str) -> SavedPlansResponse:
    """
    Saved plans for a user, in insertion order.

    Raises:
        ValueError: "invalid user ID"
    """
    try:
        uid = assert_valid_uuid(user_id, "get_saved_plans")
    except ValueError:
        raise ValueError("invalid user ID")

    with conn:
        with conn.cursor() as cur:
            cur.execute(f"""
                SELECT {', '.join(PLAN_COLUMNS)}
                FROM competitor_plans
                WHERE user_id = %s
                ORDER BY id
            """, (uid,))
            rows = cur.fetchall()

    plans = [_row_to_dict(r) for r in rows]
    return SavedPlansResponse(plans=plans, count=len(plans))
