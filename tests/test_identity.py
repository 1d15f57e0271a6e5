"""
Unit tests for login resolution in policy.identity
"""
import unittest

from policy.errors import AccountNotApproved, InvalidCredential, NotFound
from policy.identity import IdentityResolver, ensure_session_valid, normalize_email
from policy.principal import MAIN_ADMIN_ID, Principal, Role
from fakes import FakeCredentialProvider, InMemoryDocumentStore


class TestIdentityResolver(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.store = InMemoryDocumentStore()
        self.credentials = FakeCredentialProvider()
        self.resolver = IdentityResolver(
            self.store, self.credentials,
            main_admin_email="Boss@FoodHub.in",
            main_admin_password="boss-secret",
            main_admin_name="Boss",
        )

    async def test_main_admin_skips_credential_store(self):
        principal = await self.resolver.resolve("  boss@foodhub.in ", "boss-secret")
        self.assertEqual(principal.id, MAIN_ADMIN_ID)
        self.assertEqual(principal.role, Role.MAIN_ADMIN)
        self.assertEqual(principal.name, "Boss")

    async def test_main_admin_with_wrong_secret_is_invalid(self):
        with self.assertRaises(InvalidCredential):
            await self.resolver.resolve("boss@foodhub.in", "guess")

    async def test_main_admin_disabled_without_configuration(self):
        resolver = IdentityResolver(self.store, self.credentials, main_admin_email="", main_admin_password="")
        with self.assertRaises(InvalidCredential):
            await resolver.resolve("", "")

    async def test_admin_login_repairs_credential_link(self):
        provider_id = self.credentials.add_account("ops@foodhub.in", "secret1")
        admin_id = self.store.seed("admins", email="ops@foodhub.in", name="Ops", credential_ref="stale")

        principal = await self.resolver.resolve("OPS@foodhub.in", "secret1")

        self.assertEqual(principal.role, Role.ADMIN)
        self.assertEqual(principal.id, admin_id)
        stored = self.store.raw("admins", admin_id)
        self.assertEqual(stored["credential_ref"], provider_id)
        self.assertIsNotNone(stored["last_login_at"])

    async def test_failed_repair_does_not_block_login(self):
        self.credentials.add_account("ops@foodhub.in", "secret1")
        admin_id = self.store.seed("admins", email="ops@foodhub.in", name="Ops", credential_ref=None)
        self.store.fail_writes = True

        principal = await self.resolver.resolve("ops@foodhub.in", "secret1")

        self.assertEqual(principal.id, admin_id)
        self.assertIsNone(self.store.raw("admins", admin_id)["credential_ref"])

    async def test_active_vendor_found_by_credential(self):
        provider_id = self.credentials.add_account("asha@spicehouse.in", "secret1")
        vendor_id = self.store.seed(
            "vendors", name="Asha", email="asha@spicehouse.in", lifecycle_state="active", credential_ref=provider_id
        )

        principal = await self.resolver.resolve("asha@spicehouse.in", "secret1")

        self.assertEqual(principal.role, Role.VENDOR)
        self.assertEqual(principal.id, provider_id)
        self.assertEqual(principal.vendor_record_id, vendor_id)

    async def test_vendor_found_by_email_gets_linked(self):
        provider_id = self.credentials.add_account("asha@spicehouse.in", "secret1")
        vendor_id = self.store.seed(
            "vendors", name="Asha", email="asha@spicehouse.in", lifecycle_state="active", credential_ref=None
        )

        await self.resolver.resolve("asha@spicehouse.in", "secret1")

        self.assertEqual(self.store.raw("vendors", vendor_id)["credential_ref"], provider_id)

    async def test_reregistered_vendor_wins_over_rejected_record(self):
        provider_id = self.credentials.add_account("asha@spicehouse.in", "secret1")
        self.store.seed(
            "vendors", name="Asha", email="asha@spicehouse.in", lifecycle_state="rejected", credential_ref=provider_id
        )
        vendor_id = self.store.seed(
            "vendors", name="Asha", email="asha@spicehouse.in", lifecycle_state="active", credential_ref=None
        )

        principal = await self.resolver.resolve("asha@spicehouse.in", "secret1")

        self.assertEqual(principal.vendor_record_id, vendor_id)
        self.assertEqual(self.store.raw("vendors", vendor_id)["credential_ref"], provider_id)

    async def test_pending_vendor_is_refused(self):
        provider_id = self.credentials.add_account("asha@spicehouse.in", "secret1")
        self.store.seed(
            "vendors", name="Asha", email="asha@spicehouse.in", lifecycle_state="pending", credential_ref=provider_id
        )
        with self.assertRaises(AccountNotApproved) as ctx:
            await self.resolver.resolve("asha@spicehouse.in", "secret1")
        self.assertIn("pending", ctx.exception.message)

    async def test_unregistered_account_is_not_found(self):
        self.credentials.add_account("stranger@foodhub.in", "secret1")
        with self.assertRaises(NotFound):
            await self.resolver.resolve("stranger@foodhub.in", "secret1")

    def test_normalize_email(self):
        self.assertEqual(normalize_email("  Chef@Example.COM "), "chef@example.com")
        self.assertEqual(normalize_email(None), "")


class TestEnsureSessionValid(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.store = InMemoryDocumentStore()

    async def test_existing_admin_passes(self):
        admin_id = self.store.seed("admins", email="ops@foodhub.in", name="Ops")
        await ensure_session_valid(self.store, Principal(id=admin_id, role=Role.ADMIN))

    async def test_deleted_admin_is_refused(self):
        with self.assertRaises(InvalidCredential):
            await ensure_session_valid(self.store, Principal(id="removed", role=Role.ADMIN))

    async def test_main_admin_and_customers_are_not_checked(self):
        self.store.fail_reads = True
        await ensure_session_valid(self.store, Principal(id=MAIN_ADMIN_ID, role=Role.MAIN_ADMIN))
        await ensure_session_valid(self.store, Principal(id="cust-1", role=Role.CUSTOMER))

    async def test_suspended_vendor_is_refused(self):
        vendor_id = self.store.seed("vendors", name="Asha", email="asha@spicehouse.in", lifecycle_state="suspended")
        with self.assertRaises(AccountNotApproved):
            await ensure_session_valid(self.store, Principal(id="cred-1", role=Role.VENDOR, vendor_record_id=vendor_id))


if __name__ == "__main__":
    unittest.main()
