"""
Unit tests for visibility filtering and the listing query variants
"""
import unittest

from policy.authorization import ResourceKind
from policy.principal import ADMIN_OWNER, Principal, Role
from policy.visibility import filter_visible
from store import (
    READ_DEGRADED_WARNING, AllRecords, ByOwner, ByOwnerAndFlag, fetch_records, list_visible, queries_for
)
from fakes import InMemoryDocumentStore

ADMIN = Principal(id="adm-1", role=Role.ADMIN)
VENDOR_A = Principal(id="cred-a", role=Role.VENDOR, vendor_record_id="vendor-a")
CUSTOMER = Principal(id="cust-1", role=Role.CUSTOMER)


class TestFilterVisible(unittest.TestCase):

    def setUp(self):
        self.products = [
            {"id": "p1", "owner_id": "vendor-a", "approval_state": "approved"},
            {"id": "p2", "owner_id": "vendor-b", "approval_state": "approved"},
            {"id": "p3", "owner_id": "vendor-a", "approval_state": "pending"},
        ]

    def test_admin_sees_everything(self):
        self.assertEqual(filter_visible(ADMIN, ResourceKind.PRODUCT, self.products), self.products)

    def test_vendor_sees_own_records_in_order(self):
        visible = filter_visible(VENDOR_A, ResourceKind.PRODUCT, self.products)
        self.assertEqual([p["id"] for p in visible], ["p1", "p3"])

    def test_customer_sees_approved_records(self):
        visible = filter_visible(CUSTOMER, ResourceKind.PRODUCT, self.products)
        self.assertEqual([p["id"] for p in visible], ["p1", "p2"])


class TestQueriesFor(unittest.TestCase):

    def test_admin_reads_all_records(self):
        self.assertEqual(queries_for(ADMIN, ResourceKind.PRODUCT), (AllRecords(),))

    def test_vendor_categories_include_global_ones(self):
        self.assertEqual(
            queries_for(VENDOR_A, ResourceKind.CATEGORY),
            (ByOwner("vendor-a"), ByOwnerAndFlag(ADMIN_OWNER, "is_global", True)),
        )

    def test_vendor_owner_field_follows_collection(self):
        self.assertEqual(queries_for(VENDOR_A, ResourceKind.FEEDBACK), (ByOwner("vendor-a", "vendor_id"),))
        self.assertEqual(queries_for(VENDOR_A, ResourceKind.VENDOR), (ByOwner("vendor-a", "id"),))

    def test_variant_filters(self):
        self.assertEqual(AllRecords().to_filter(), {})
        self.assertEqual(ByOwner("v1").to_filter(), {"owner_id": "v1"})
        self.assertEqual(
            ByOwnerAndFlag("admin", "is_global").to_filter(),
            {"owner_id": "admin", "is_global": True},
        )


class TestListVisible(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.store = InMemoryDocumentStore()
        self.store.seed("categories", id="own", name="Thali", owner_id="vendor-a", is_global=False, approval_state="pending")
        self.store.seed("categories", id="global", name="Drinks", owner_id=ADMIN_OWNER, is_global=True, approval_state="approved")
        self.store.seed("categories", id="other", name="Snacks", owner_id="vendor-b", is_global=False, approval_state="approved")

    async def test_vendor_gets_own_and_global_categories(self):
        records, warning = await list_visible(self.store, VENDOR_A, ResourceKind.CATEGORY, "categories")
        self.assertIsNone(warning)
        self.assertEqual(sorted(r["id"] for r in records), ["global", "own"])

    async def test_filters_narrow_every_variant(self):
        records, _ = await list_visible(
            self.store, VENDOR_A, ResourceKind.CATEGORY, "categories", {"approval_state": "approved"}
        )
        self.assertEqual([r["id"] for r in records], ["global"])

    async def test_store_failure_degrades_to_warning(self):
        self.store.fail_reads = True
        records, warning = await list_visible(self.store, ADMIN, ResourceKind.CATEGORY, "categories")
        self.assertEqual(records, [])
        self.assertEqual(warning, READ_DEGRADED_WARNING)

    async def test_fetch_records_merges_filters(self):
        records = await fetch_records(self.store, "categories", ByOwner("vendor-b"), {"approval_state": "approved"})
        self.assertEqual([r["id"] for r in records], ["other"])


if __name__ == "__main__":
    unittest.main()
