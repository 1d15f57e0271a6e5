"""
End-to-end scenarios through the FastAPI app with in-memory services
"""
import unittest
from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from dependencies.services import get_blob_store, get_credentials, get_identity_resolver, get_store
from main import app
from policy.identity import IdentityResolver
from policy.principal import ADMIN_OWNER, Principal, Role
from routers.auth.helpers import auth_helpers
from store import READ_DEGRADED_WARNING
from fakes import FakeBlobStore, FakeCredentialProvider, InMemoryDocumentStore

MAIN_ADMIN_EMAIL = "boss@foodhub.in"
MAIN_ADMIN_PASSWORD = "boss-secret"


class ApiTestCase(unittest.TestCase):

    def setUp(self):
        self.store = InMemoryDocumentStore()
        self.credentials = FakeCredentialProvider()
        self.blob_store = FakeBlobStore()

        app.dependency_overrides[get_store] = lambda: self.store
        app.dependency_overrides[get_credentials] = lambda: self.credentials
        app.dependency_overrides[get_blob_store] = lambda: self.blob_store
        app.dependency_overrides[get_identity_resolver] = lambda: IdentityResolver(
            self.store, self.credentials, MAIN_ADMIN_EMAIL, MAIN_ADMIN_PASSWORD, "Boss"
        )

        self._secret_key = auth_helpers.secret_key
        auth_helpers.secret_key = "test-secret"
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()
        auth_helpers.secret_key = self._secret_key

    def headers_for(self, principal):
        return {"Authorization": f"Bearer {auth_helpers.create_access_token(principal)}"}

    def login(self, email, password):
        return self.client.post("/auth/login", json={"email": email, "password": password})

    def main_admin_headers(self):
        response = self.login(MAIN_ADMIN_EMAIL, MAIN_ADMIN_PASSWORD)
        self.assertEqual(response.status_code, 200)
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    def seed_vendor(self, name, state="active"):
        vendor_id = self.store.seed(
            "vendors", name=name, restaurant_name=f"{name} Kitchen", email=f"{name.lower()}@kitchen.in",
            lifecycle_state=state, credential_ref=f"cred-{name.lower()}"
        )
        principal = Principal(id=f"cred-{name.lower()}", role=Role.VENDOR, vendor_record_id=vendor_id)
        return vendor_id, self.headers_for(principal)


class TestVendorOnboarding(ApiTestCase):

    def register(self):
        return self.client.post("/auth/register", json={
            "name": "Asha",
            "restaurant_name": "Spice House",
            "email": "Asha@SpiceHouse.in",
            "password": "secret1",
            "confirm_password": "secret1",
        })

    def test_register_approve_then_login(self):
        response = self.register()
        self.assertEqual(response.status_code, 201)
        vendor = response.json()["vendor"]
        self.assertEqual(vendor["lifecycle_state"], "pending")
        self.assertEqual(vendor["email"], "asha@spicehouse.in")
        self.assertTrue(vendor["has_credential"])
        self.assertNotIn("credential_ref", vendor)

        response = self.login("asha@spicehouse.in", "secret1")
        self.assertEqual(response.status_code, 403)
        self.assertIn("pending", response.json()["detail"])

        admin = self.main_admin_headers()
        response = self.client.post(f"/vendors/{vendor['id']}/approve", headers=admin)
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["changed"])
        self.assertIsNone(response.json()["warning"])

        response = self.login("asha@spicehouse.in", "secret1")
        self.assertEqual(response.status_code, 200)
        user = response.json()["user"]
        self.assertEqual(user["role"], "vendor")
        self.assertEqual(user["vendor_record_id"], vendor["id"])

    def test_repeated_approve_is_a_no_op(self):
        vendor_id = self.register().json()["vendor"]["id"]
        admin = self.main_admin_headers()
        self.client.post(f"/vendors/{vendor_id}/approve", headers=admin)

        response = self.client.post(f"/vendors/{vendor_id}/approve", headers=admin)
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()["changed"])
        self.assertEqual(response.json()["message"], "Vendor is already active")

    def test_rejected_vendor_registers_again_and_signs_in(self):
        first = self.register().json()["vendor"]
        admin = self.main_admin_headers()
        self.assertEqual(self.client.post(f"/vendors/{first['id']}/reject", headers=admin).status_code, 200)

        response = self.register()
        self.assertEqual(response.status_code, 201)
        second = response.json()["vendor"]
        self.assertFalse(second["has_credential"])
        self.assertEqual(self.client.post(f"/vendors/{second['id']}/approve", headers=admin).status_code, 200)

        response = self.login("asha@spicehouse.in", "secret1")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["user"]["vendor_record_id"], second["id"])

    def test_mismatched_passwords_are_rejected(self):
        response = self.client.post("/auth/register", json={
            "name": "Asha", "restaurant_name": "Spice House", "email": "asha@spicehouse.in",
            "password": "secret1", "confirm_password": "secret2",
        })
        self.assertEqual(response.status_code, 422)
        self.assertEqual(self.store.collections["vendors"], {})

    def test_suspension_ends_existing_sessions(self):
        vendor_id, vendor = self.seed_vendor("Ravi")
        self.assertEqual(self.client.get("/vendors/me", headers=vendor).status_code, 200)

        response = self.client.post(f"/vendors/{vendor_id}/suspend", headers=self.main_admin_headers())
        self.assertEqual(response.status_code, 200)

        response = self.client.get("/vendors/me", headers=vendor)
        self.assertEqual(response.status_code, 403)
        self.assertIn("suspended", response.json()["detail"])

        self.credentials.accounts["ravi@kitchen.in"] = ("cred-ravi", "secret1")
        self.assertEqual(self.login("ravi@kitchen.in", "secret1").status_code, 403)

    def test_vendor_cannot_approve_itself(self):
        vendor_id, _ = self.seed_vendor("Ravi", state="suspended")
        _, other = self.seed_vendor("Meena")
        response = self.client.post(f"/vendors/{vendor_id}/reinstate", headers=other)
        self.assertEqual(response.status_code, 403)
        self.assertEqual(self.store.raw("vendors", vendor_id)["lifecycle_state"], "suspended")

    def test_invalid_transition_is_a_conflict(self):
        vendor_id, _ = self.seed_vendor("Ravi", state="rejected")
        response = self.client.post(f"/vendors/{vendor_id}/approve", headers=self.main_admin_headers())
        self.assertEqual(response.status_code, 409)

    def test_vendor_list_degrades_when_store_is_down(self):
        admin = self.main_admin_headers()
        self.store.fail_reads = True
        response = self.client.get("/vendors/", headers=admin)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["vendors"], [])
        self.assertEqual(response.json()["warning"], READ_DEGRADED_WARNING)


class TestCatalogOwnership(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.vendor_a_id, self.vendor_a = self.seed_vendor("Ravi")
        self.vendor_b_id, self.vendor_b = self.seed_vendor("Meena")
        self.category_id = self.store.seed(
            "categories", name="Main Course", owner_id=ADMIN_OWNER, parent_id=None, food_type="both",
            is_global=True, approval_state="approved", is_active=True
        )

    def seed_product(self, owner_id, name, approval_state="approved"):
        return self.store.seed(
            "products", owner_id=owner_id, category_id=self.category_id, name=name, original_price=200.0,
            selling_price=180.0, discount=20.0, status="available", approval_state=approval_state,
            offer={"kind": "none"}, priority=0, food_type="veg"
        )

    def test_vendor_cannot_delete_another_vendors_product(self):
        product_id = self.seed_product(self.vendor_b_id, "Litti Chokha")

        response = self.client.delete(f"/products/{product_id}", headers=self.vendor_a)
        self.assertEqual(response.status_code, 403)
        self.assertIsNotNone(self.store.raw("products", product_id))

        response = self.client.delete(f"/products/{product_id}", headers=self.vendor_b)
        self.assertEqual(response.status_code, 200)
        self.assertIsNone(self.store.raw("products", product_id))

    def test_vendor_lists_only_own_products(self):
        self.seed_product(self.vendor_a_id, "Paneer Tikka")
        self.seed_product(self.vendor_b_id, "Litti Chokha")

        response = self.client.get("/products/", headers=self.vendor_a)
        self.assertEqual(response.status_code, 200)
        self.assertEqual([p["name"] for p in response.json()["products"]], ["Paneer Tikka"])

    def test_vendor_creates_product_under_global_category(self):
        response = self.client.post("/products/", headers=self.vendor_a, json={
            "category_id": self.category_id,
            "name": "Dal Makhani",
            "original_price": 220,
            "selling_price": 199,
            "offer": {"kind": "bogo"},
        })
        self.assertEqual(response.status_code, 201)
        product = response.json()
        self.assertEqual(product["owner_id"], self.vendor_a_id)
        self.assertEqual(product["discount"], 21.0)
        self.assertEqual(product["offer"]["description"], "Buy 1 Get 1 Free!")

    def test_vendor_category_waits_for_approval(self):
        response = self.client.post("/categories/", headers=self.vendor_a, json={"name": "Thali"})
        self.assertEqual(response.status_code, 201)
        category = response.json()
        self.assertEqual(category["approval_state"], "pending")
        self.assertFalse(category["is_global"])

        ids = [c["id"] for c in self.client.get("/categories/", headers=self.vendor_b).json()["categories"]]
        self.assertNotIn(category["id"], ids)

        response = self.client.post(f"/categories/{category['id']}/approve", headers=self.main_admin_headers())
        self.assertEqual(response.json()["approval_state"], "approved")

    def test_customer_sees_only_approved_products(self):
        self.seed_product(self.vendor_a_id, "Paneer Tikka")
        self.seed_product(self.vendor_a_id, "Secret Special", approval_state="pending")
        customer = self.headers_for(Principal(id="cust-1", role=Role.CUSTOMER))

        response = self.client.get("/products/", headers=customer)
        self.assertEqual(response.status_code, 200)
        self.assertEqual([p["name"] for p in response.json()["products"]], ["Paneer Tikka"])

        response = self.client.post("/coupons/", headers=customer, json={})
        self.assertEqual(response.status_code, 403)

    def test_coupon_with_inverted_window_writes_nothing(self):
        now = datetime.now(timezone.utc)
        response = self.client.post("/coupons/", headers=self.vendor_a, json={
            "code": "late10",
            "discount_type": "percentage",
            "discount_value": 10,
            "active_from": (now + timedelta(days=2)).isoformat(),
            "expires_at": (now + timedelta(days=1)).isoformat(),
        })
        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.store.collections["coupons"], {})

    def test_coupon_code_is_unique_and_uppercased(self):
        now = datetime.now(timezone.utc)
        payload = {
            "code": "fresh20",
            "discount_type": "fixed",
            "discount_value": 20,
            "active_from": now.isoformat(),
            "expires_at": (now + timedelta(days=5)).isoformat(),
        }
        response = self.client.post("/coupons/", headers=self.vendor_a, json=payload)
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["code"], "FRESH20")

        response = self.client.post("/coupons/", headers=self.vendor_b, json=payload)
        self.assertEqual(response.status_code, 409)

    def test_null_on_required_coupon_field_is_rejected(self):
        now = datetime.now(timezone.utc)
        coupon_id = self.store.seed(
            "coupons", code="FRESH20", owner_id=self.vendor_a_id, discount_type="fixed", discount_value=20.0,
            min_order_value=0.0, active_from=now, expires_at=now + timedelta(days=5), is_active=True, used_count=0
        )
        response = self.client.put(f"/coupons/{coupon_id}", headers=self.vendor_a, json={"expires_at": None})
        self.assertEqual(response.status_code, 422)
        self.assertIsNotNone(self.store.raw("coupons", coupon_id)["expires_at"])

    def test_null_on_required_product_field_is_rejected(self):
        product_id = self.seed_product(self.vendor_a_id, "Paneer Tikka")
        response = self.client.put(f"/products/{product_id}", headers=self.vendor_a, json={"name": None})
        self.assertEqual(response.status_code, 422)
        self.assertEqual(self.store.raw("products", product_id)["name"], "Paneer Tikka")

        response = self.client.put(f"/products/{product_id}", headers=self.vendor_a, json={"description": None})
        self.assertEqual(response.status_code, 200)

    def test_original_price_below_selling_price_is_rejected(self):
        product_id = self.seed_product(self.vendor_a_id, "Paneer Tikka")
        response = self.client.put(f"/products/{product_id}", headers=self.vendor_a, json={"original_price": 150})
        self.assertEqual(response.status_code, 400)
        stored = self.store.raw("products", product_id)
        self.assertEqual(stored["original_price"], 200.0)
        self.assertEqual(stored["selling_price"], 180.0)

        response = self.client.put(f"/products/{product_id}", headers=self.vendor_a, json={"original_price": 190})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["discount"], 10.0)

    def test_write_failure_surfaces_as_unavailable(self):
        self.store.fail_writes = True
        response = self.client.post("/categories/", headers=self.main_admin_headers(), json={"name": "Desserts"})
        self.assertEqual(response.status_code, 503)


class TestAdminAccounts(ApiTestCase):

    def test_only_main_admin_manages_admins(self):
        main_admin = self.main_admin_headers()
        response = self.client.post("/admin/admins", headers=main_admin, json={
            "email": "Ops@FoodHub.in", "name": "Ops", "password": "secret1",
        })
        self.assertEqual(response.status_code, 201)

        response = self.login("ops@foodhub.in", "secret1")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["user"]["role"], "admin")
        admin = {"Authorization": f"Bearer {response.json()['access_token']}"}

        self.assertEqual(self.client.get("/admin/admins", headers=admin).status_code, 403)
        self.assertEqual(self.client.get("/vendors/", headers=admin).status_code, 200)

    def test_deleted_admin_loses_access(self):
        main_admin = self.main_admin_headers()
        admin_id = self.client.post("/admin/admins", headers=main_admin, json={
            "email": "ops@foodhub.in", "name": "Ops", "password": "secret1",
        }).json()["id"]
        token = self.login("ops@foodhub.in", "secret1").json()["access_token"]
        admin = {"Authorization": f"Bearer {token}"}
        self.assertEqual(self.client.get("/vendors/", headers=admin).status_code, 200)

        response = self.client.delete(f"/admin/admins/{admin_id}", headers=main_admin)
        self.assertEqual(response.status_code, 200)

        response = self.client.get("/vendors/", headers=admin)
        self.assertEqual(response.status_code, 401)

    def test_requests_without_token_are_rejected(self):
        self.assertIn(self.client.get("/vendors/").status_code, (401, 403))

    def test_forged_token_is_rejected(self):
        response = self.client.get("/auth/me", headers={"Authorization": "Bearer not-a-token"})
        self.assertEqual(response.status_code, 401)


if __name__ == "__main__":
    unittest.main()
