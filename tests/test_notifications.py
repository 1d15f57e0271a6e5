"""
Unit tests for vendor account notices
"""
import unittest

from fastapi import BackgroundTasks

from utils.notifications import get_vendor_state_email, get_vendor_state_sms, notify_vendor_state, send_email, send_sms


class TestVendorNotices(unittest.TestCase):

    def setUp(self):
        self.vendor = {
            "name": "Asha",
            "restaurant_name": "Spice House",
            "email": "asha@spicehouse.in",
            "phone": "+919000000001",
            "lifecycle_state": "active",
        }

    def test_approval_email(self):
        subject, body = get_vendor_state_email(self.vendor)
        self.assertEqual(subject, "Your Vendor Account is Approved - Spice House")
        self.assertIn("Hello Asha", body)
        self.assertIn("Active", body)

    def test_suspension_sms(self):
        sms = get_vendor_state_sms({**self.vendor, "lifecycle_state": "suspended"})
        self.assertTrue(sms.startswith("Spice House has been suspended"))
        self.assertTrue(sms.endswith("FoodHub Team"))

    def test_notices_are_queued_for_email_and_phone(self):
        tasks = BackgroundTasks()
        notify_vendor_state(tasks, self.vendor)
        self.assertEqual([t.func for t in tasks.tasks], [send_email, send_sms])

    def test_no_phone_means_email_only(self):
        tasks = BackgroundTasks()
        notify_vendor_state(tasks, {**self.vendor, "phone": None})
        self.assertEqual([t.func for t in tasks.tasks], [send_email])


if __name__ == "__main__":
    unittest.main()
