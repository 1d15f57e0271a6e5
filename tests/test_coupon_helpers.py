"""
Unit tests for coupon validation rules
"""
import unittest
from datetime import datetime, timedelta, timezone

from policy.errors import AlreadyExists, ValidationFailed
from policy.principal import Principal, Role
from routers.coupons.helpers import (
    as_utc, coupon_to_response, ensure_unique_code, normalize_code, validate_scope, validate_terms
)
from fakes import InMemoryDocumentStore

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
VENDOR_A = Principal(id="cred-a", role=Role.VENDOR, vendor_record_id="vendor-a")


def coupon(**overrides):
    record = {
        "id": "c1",
        "code": "WELCOME10",
        "owner_id": "vendor-a",
        "discount_type": "percentage",
        "discount_value": 10.0,
        "min_order_value": 0.0,
        "active_from": NOW,
        "expires_at": NOW + timedelta(days=7),
        "category_id": None,
        "subcategory_id": None,
        "is_active": True,
        "used_count": 0,
        "created_at": NOW,
        "updated_at": NOW,
    }
    record.update(overrides)
    return record


class TestCouponTerms(unittest.TestCase):

    def test_valid_coupon_passes(self):
        validate_terms(coupon())

    def test_expiry_must_follow_start(self):
        with self.assertRaises(ValidationFailed) as ctx:
            validate_terms(coupon(expires_at=NOW))
        self.assertIn("after the active date", ctx.exception.message)

    def test_naive_and_aware_times_compare(self):
        naive_expiry = (NOW + timedelta(hours=1)).replace(tzinfo=None)
        validate_terms(coupon(expires_at=naive_expiry))
        self.assertEqual(as_utc(naive_expiry), NOW + timedelta(hours=1))

    def test_percentage_capped_at_hundred(self):
        with self.assertRaises(ValidationFailed):
            validate_terms(coupon(discount_value=120.0))
        validate_terms(coupon(discount_type="fixed", discount_value=120.0))

    def test_subcategory_requires_category(self):
        with self.assertRaises(ValidationFailed):
            validate_terms(coupon(subcategory_id="sub"))

    def test_code_is_normalized(self):
        self.assertEqual(normalize_code("  welcome10 "), "WELCOME10")
        with self.assertRaises(ValidationFailed):
            normalize_code("   ")

    def test_expired_flag(self):
        self.assertFalse(coupon_to_response(coupon(), now=NOW).is_expired)
        self.assertTrue(coupon_to_response(coupon(), now=NOW + timedelta(days=8)).is_expired)


class TestCouponStoreChecks(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.store = InMemoryDocumentStore()
        self.store.seed("coupons", **coupon())
        self.store.seed("categories", id="main", owner_id="vendor-a", parent_id=None, is_global=False)
        self.store.seed("categories", id="sub", owner_id="vendor-a", parent_id="main", is_global=False)
        self.store.seed("categories", id="elsewhere", owner_id="vendor-a", parent_id=None, is_global=False)

    async def test_duplicate_code_is_refused(self):
        with self.assertRaises(AlreadyExists):
            await ensure_unique_code(self.store, "WELCOME10")
        await ensure_unique_code(self.store, "WELCOME10", coupon_id="c1")
        await ensure_unique_code(self.store, "FRESH20")

    async def test_subcategory_must_belong_to_category(self):
        await validate_scope(self.store, VENDOR_A, {"category_id": "main", "subcategory_id": "sub"})
        with self.assertRaises(ValidationFailed):
            await validate_scope(self.store, VENDOR_A, {"category_id": "elsewhere", "subcategory_id": "sub"})


if __name__ == "__main__":
    unittest.main()
