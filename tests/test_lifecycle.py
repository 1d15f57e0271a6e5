"""
Unit tests for the vendor lifecycle state machine
"""
import unittest

from policy.authorization import Action
from policy.errors import (
    AccountNotApproved, AlreadyExists, InvalidTransition, PermissionDenied, ValidationFailed, WeakSecret
)
from policy.lifecycle import (
    EXISTING_CREDENTIAL_WARNING, MANUAL_LINK_WARNING, LifecycleState, VendorLifecycle,
    ensure_vendor_active, login_refusal, next_state, pick_vendor
)
from policy.principal import Principal, Role
from fakes import FakeCredentialProvider, InMemoryDocumentStore

ADMIN = Principal(id="adm-1", role=Role.ADMIN)

REGISTRATION = {
    "name": "Asha",
    "restaurant_name": "Spice House",
    "email": "asha@spicehouse.in",
    "phone": None,
}


class TestNextState(unittest.TestCase):

    def test_allowed_transitions(self):
        self.assertEqual(next_state(LifecycleState.PENDING, Action.APPROVE), LifecycleState.ACTIVE)
        self.assertEqual(next_state(LifecycleState.PENDING, Action.REJECT), LifecycleState.REJECTED)
        self.assertEqual(next_state(LifecycleState.ACTIVE, Action.SUSPEND), LifecycleState.SUSPENDED)
        self.assertEqual(next_state(LifecycleState.SUSPENDED, Action.REINSTATE), LifecycleState.ACTIVE)
        self.assertEqual(next_state(LifecycleState.ACTIVE, Action.DELETE), LifecycleState.DELETED)

    def test_terminal_states_do_not_move(self):
        for state in (LifecycleState.REJECTED, LifecycleState.DELETED):
            for action in (Action.APPROVE, Action.SUSPEND, Action.REINSTATE):
                with self.assertRaises(InvalidTransition):
                    next_state(state, action)

    def test_repeating_a_transition_is_a_no_op(self):
        self.assertEqual(next_state(LifecycleState.ACTIVE, Action.APPROVE), LifecycleState.ACTIVE)
        self.assertEqual(next_state(LifecycleState.SUSPENDED, Action.SUSPEND), LifecycleState.SUSPENDED)

    def test_suspending_a_pending_vendor_is_refused(self):
        with self.assertRaises(InvalidTransition) as ctx:
            next_state(LifecycleState.PENDING, Action.SUSPEND)
        self.assertIn("pending", ctx.exception.message)

    def test_non_lifecycle_action(self):
        with self.assertRaises(InvalidTransition):
            next_state(LifecycleState.ACTIVE, Action.READ)


class TestLoginHelpers(unittest.TestCase):

    def test_only_active_vendors_may_sign_in(self):
        self.assertIsNone(login_refusal({"lifecycle_state": "active"}))
        for state in ("pending", "suspended", "rejected", "deleted"):
            refusal = login_refusal({"lifecycle_state": state})
            self.assertIsInstance(refusal, AccountNotApproved)

    def test_suspended_message(self):
        self.assertIn("suspended", login_refusal({"lifecycle_state": "suspended"}).message)

    def test_pick_vendor_prefers_active_record(self):
        records = [{"id": "old", "lifecycle_state": "rejected"}, {"id": "new", "lifecycle_state": "active"}]
        self.assertEqual(pick_vendor(records)["id"], "new")
        self.assertEqual(pick_vendor(records[:1])["id"], "old")
        self.assertIsNone(pick_vendor([]))

    def test_pick_vendor_prefers_open_record_over_terminal(self):
        records = [{"id": "old", "lifecycle_state": "rejected"}, {"id": "new", "lifecycle_state": "pending"}]
        self.assertEqual(pick_vendor(records)["id"], "new")


class TestVendorLifecycle(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.store = InMemoryDocumentStore()
        self.credentials = FakeCredentialProvider()
        self.lifecycle = VendorLifecycle(self.store, self.credentials, min_password_length=6)

    async def test_register_stores_pending_vendor_with_credential(self):
        result = await self.lifecycle.register(dict(REGISTRATION), "secret1")
        self.assertTrue(result.changed)
        self.assertIsNone(result.warning)
        self.assertEqual(result.vendor["lifecycle_state"], "pending")
        self.assertEqual(result.vendor["credential_ref"], self.credentials.accounts["asha@spicehouse.in"][0])
        self.assertNotIn("password", result.vendor)

    async def test_short_password_writes_nothing(self):
        with self.assertRaises(ValidationFailed) as ctx:
            await self.lifecycle.register(dict(REGISTRATION), "abc")
        self.assertIn("at least 6", ctx.exception.message)
        self.assertEqual(self.store.collections["vendors"], {})
        self.assertEqual(self.credentials.accounts, {})

    async def test_weak_secret_from_provider_writes_nothing(self):
        async def refuse(email, secret, metadata=None):
            raise WeakSecret("Password is too weak. Please register again with a stronger password.")
        self.credentials.create_credential = refuse

        with self.assertRaises(WeakSecret):
            await self.lifecycle.register(dict(REGISTRATION), "secret1")
        self.assertEqual(self.store.collections["vendors"], {})

    async def test_open_registration_blocks_same_email(self):
        await self.lifecycle.register(dict(REGISTRATION), "secret1")
        with self.assertRaises(AlreadyExists):
            await self.lifecycle.register(dict(REGISTRATION), "secret2")

    async def test_rejected_vendor_may_register_again(self):
        provider_id = self.credentials.add_account("asha@spicehouse.in", "secret1")
        self.store.seed("vendors", **REGISTRATION, lifecycle_state="rejected", credential_ref=provider_id)
        result = await self.lifecycle.register(dict(REGISTRATION), "secret1")
        self.assertEqual(result.vendor["lifecycle_state"], "pending")
        self.assertIsNone(result.vendor["credential_ref"])
        self.assertEqual(result.warning, EXISTING_CREDENTIAL_WARNING)

    async def test_approve_stamps_timestamp(self):
        vendor_id = self.store.seed("vendors", **REGISTRATION, lifecycle_state="pending", credential_ref="cred-1")
        result = await self.lifecycle.approve(ADMIN, vendor_id)
        self.assertTrue(result.changed)
        self.assertIsNone(result.warning)
        stored = self.store.raw("vendors", vendor_id)
        self.assertEqual(stored["lifecycle_state"], "active")
        self.assertIsNotNone(stored["approved_at"])

    async def test_approve_without_credential_warns(self):
        vendor_id = self.store.seed("vendors", **REGISTRATION, lifecycle_state="pending", credential_ref=None)
        result = await self.lifecycle.approve(ADMIN, vendor_id)
        self.assertEqual(result.warning, MANUAL_LINK_WARNING)
        self.assertEqual(self.store.raw("vendors", vendor_id)["lifecycle_state"], "active")

    async def test_repeated_approve_changes_nothing(self):
        vendor_id = self.store.seed("vendors", **REGISTRATION, lifecycle_state="active", credential_ref="cred-1")
        result = await self.lifecycle.approve(ADMIN, vendor_id)
        self.assertFalse(result.changed)
        self.assertNotIn("approved_at", self.store.raw("vendors", vendor_id))

    async def test_vendor_cannot_transition_itself(self):
        vendor_id = self.store.seed("vendors", **REGISTRATION, lifecycle_state="suspended", credential_ref="cred-1")
        vendor = Principal(id="cred-1", role=Role.VENDOR, vendor_record_id=vendor_id)
        with self.assertRaises(PermissionDenied):
            await self.lifecycle.reinstate(vendor, vendor_id)
        self.assertEqual(self.store.raw("vendors", vendor_id)["lifecycle_state"], "suspended")

    async def test_deleted_vendor_cannot_be_reinstated(self):
        vendor_id = self.store.seed("vendors", **REGISTRATION, lifecycle_state="deleted")
        with self.assertRaises(InvalidTransition):
            await self.lifecycle.reinstate(ADMIN, vendor_id)


class TestEnsureVendorActive(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.store = InMemoryDocumentStore()

    async def test_admins_are_not_checked(self):
        self.store.fail_reads = True
        await ensure_vendor_active(self.store, ADMIN)

    async def test_suspended_vendor_is_refused(self):
        vendor_id = self.store.seed("vendors", **REGISTRATION, lifecycle_state="suspended")
        principal = Principal(id="cred-1", role=Role.VENDOR, vendor_record_id=vendor_id)
        with self.assertRaises(AccountNotApproved):
            await ensure_vendor_active(self.store, principal)

    async def test_missing_vendor_record_is_refused(self):
        principal = Principal(id="cred-1", role=Role.VENDOR, vendor_record_id="gone")
        with self.assertRaises(AccountNotApproved):
            await ensure_vendor_active(self.store, principal)


if __name__ == "__main__":
    unittest.main()
