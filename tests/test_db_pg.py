"""
Tests for saved competitor plans (PostgreSQL layer)
===================================================
Runs against FakeConn, which records SQL and counts commits/rollbacks
the way a psycopg2 connection used as a context manager does.
"""

import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

import datetime
import uuid
from decimal import Decimal

import psycopg2
import pytest

from db_pg import PLAN_COLUMNS, assert_valid_uuid, ensure_schema, get_saved_plans, save_plans
from models.extracted_plan import ExtractedPlan, IncludedUnit, PlanEvidence
from fakes import FakeConn, FakeCursor


USER = "3f1c2a4e-8b7d-4c2e-9f10-6a5b4c3d2e1f"


def _plans():
    return [
        ExtractedPlan(
            name="Pro", price_amount=120.0, price_string="$10/mo billed annually",
            currency="USD", price_frequency="per_month", billing_period="yearly",
            monthly_equivalent_amount=10.0, annual_billed_amount=120.0,
            included_units=[IncludedUnit(name="seats", amount=5, unit="users")],
            features=["SSO", "API"],
            evidence=PlanEvidence(price_snippet="$10/mo billed annually"),
        ),
        ExtractedPlan(name="Starter", price_amount=12.0, billing_period="monthly"),
    ]


def test_assert_valid_uuid():
    print("\n=== TEST: UUID Validation ===")

    assert assert_valid_uuid(USER.upper()) == USER
    assert assert_valid_uuid(uuid.UUID(USER)) == USER
    for bad in ("not-a-uuid", 12345, None, ""):
        with pytest.raises(ValueError):
            assert_valid_uuid(bad, "test")

    print("✅ PASSED")


def test_save_plans_replaces_in_one_transaction():
    print("\n=== TEST: Save Plans ===")

    conn = FakeConn()
    response = save_plans(conn, USER, "https://example.com/", "https://example.com/pricing", _plans())

    assert response.error is None
    assert response.saved_count == 2
    assert conn.commits == 1 and conn.rollbacks == 0

    (delete_sql, delete_params), (insert_sql, rows) = conn.executed
    assert delete_sql == "DELETE FROM competitor_plans WHERE user_id = %s"
    assert delete_params == (USER,)
    assert insert_sql.startswith("INSERT INTO competitor_plans")
    assert len(rows) == 2

    pro = rows[0]
    assert pro[:4] == (USER, "https://example.com/", "https://example.com/pricing", "Pro")
    assert pro[8] == "yearly"
    assert pro[9] == 10.0 and pro[10] == 120.0
    assert pro[11].adapted == [{"name": "seats", "amount": 5.0, "unit": "users", "raw_text": ""}]
    assert pro[12].adapted == ["SSO", "API"]
    assert pro[13].adapted["price_snippet"] == "$10/mo billed annually"

    print("✅ PASSED")


def test_save_empty_list_clears_user():
    conn = FakeConn()
    response = save_plans(conn, USER, "", "", [])
    assert response.saved_count == 0
    assert len(conn.executed) == 1
    assert conn.executed[0][0].startswith("DELETE")


def test_save_invalid_user():
    conn = FakeConn()
    response = save_plans(conn, "user-42", "", "", _plans())
    assert response.error == "invalid user ID"
    assert conn.executed == []


class _FailingCursor(FakeCursor):
    def executemany(self, sql, rows):
        raise psycopg2.OperationalError("server closed the connection unexpectedly")


class _FailingConn(FakeConn):
    def cursor(self):
        return _FailingCursor(self)


def test_save_database_error():
    conn = _FailingConn()
    response = save_plans(conn, USER, "", "", _plans())
    assert response.error.startswith("failed to save plans: ")
    assert conn.rollbacks == 1 and conn.commits == 0


def test_get_saved_plans():
    print("\n=== TEST: Get Saved Plans ===")

    extracted_at = datetime.datetime(2024, 5, 1, 12, 0, tzinfo=datetime.timezone.utc)
    row = (
        "https://example.com/", "https://example.com/pricing", extracted_at, "Pro",
        Decimal("120.00"), "$10/mo billed annually", "USD", "per_month",
        "yearly", Decimal("10.00"), Decimal("120.00"),
        [], ["SSO"], {"price_snippet": "$10/mo billed annually"},
    )
    conn = FakeConn(rows=[row])

    response = get_saved_plans(conn, USER)

    assert response.count == 1
    plan = response.plans[0]
    assert set(plan) == set(PLAN_COLUMNS)
    assert plan["plan_name"] == "Pro"
    assert plan["price_amount"] == 120.0 and isinstance(plan["price_amount"], float)
    assert plan["monthly_equivalent_amount"] == 10.0
    assert plan["extracted_at"] == "2024-05-01T12:00:00+00:00"
    assert conn.executed[0][1] == (USER,)
    assert "ORDER BY id" in conn.executed[0][0]

    with pytest.raises(ValueError, match="invalid user ID"):
        get_saved_plans(conn, "nope")

    print("✅ PASSED")


def test_ensure_schema():
    conn = FakeConn()
    ensure_schema(conn)
    assert "CREATE TABLE IF NOT EXISTS competitor_plans" in conn.executed[0][0]
    assert conn.commits == 1


if __name__ == "__main__":
    print("\n" + "="*60)
    print("RUNNING DATABASE TESTS")
    print("="*60)

    test_assert_valid_uuid()
    test_save_plans_replaces_in_one_transaction()
    test_save_empty_list_clears_user()
    test_save_invalid_user()
    test_save_database_error()
    test_get_saved_plans()
    test_ensure_schema()

    print("\n" + "="*60)
    print("✅ ALL DATABASE TESTS PASSED")
    print("="*60)
