"""
Unit tests for order filters, customer summaries and dashboard stats
"""
import unittest
from datetime import date, datetime, timezone

from routers.orders.helpers import category_counts, customer_tier, filter_orders, order_stats, summarize_customers


def order(order_id, owner_id, day, amount, phone="9000000001", items=None, status="delivered"):
    return {
        "id": order_id,
        "owner_id": owner_id,
        "status": status,
        "order_date": datetime(2026, 10, day, 13, 30, tzinfo=timezone.utc),
        "total_amount": amount,
        "customer": {"receiver_name": "Ravi", "receiver_phone": phone, "city": "Patna"},
        "items": items or [],
    }


class TestOrderHelpers(unittest.TestCase):

    def setUp(self):
        self.orders = [
            order("o1", "vendor-a", 19, 600.0, items=[{"category_name": "Thali", "quantity": 2}]),
            order("o2", "admin", 18, 450.0, items=[{"category_name": "Drinks", "quantity": 3}]),
            order("o3", None, 18, 300.0, phone="9000000002", status="placed",
                  items=[{"category_name": "Thali", "quantity": 1}]),
        ]

    def test_filter_by_vendor(self):
        self.assertEqual([o["id"] for o in filter_orders(self.orders, vendor_id="vendor-a")], ["o1"])

    def test_admin_filter_includes_unowned_orders(self):
        self.assertEqual([o["id"] for o in filter_orders(self.orders, vendor_id="admin")], ["o2", "o3"])

    def test_filter_by_date_and_category(self):
        filtered = filter_orders(self.orders, order_date=date(2026, 10, 18), category_name="Thali")
        self.assertEqual([o["id"] for o in filtered], ["o3"])

    def test_category_counts_sum_quantities(self):
        self.assertEqual(
            category_counts(self.orders),
            [{"name": "Thali", "quantity": 3}, {"name": "Drinks", "quantity": 3}]
        )

    def test_customer_tiers(self):
        self.assertEqual(customer_tier(12000), "vip")
        self.assertEqual(customer_tier(5000), "regular")
        self.assertEqual(customer_tier(1000), "new")
        self.assertEqual(customer_tier(999.99), "basic")

    def test_customers_grouped_by_phone(self):
        customers = summarize_customers(self.orders)
        self.assertEqual(len(customers), 2)

        ravi = next(c for c in customers if c["phone"] == "9000000001")
        self.assertEqual(ravi["total_orders"], 2)
        self.assertEqual(ravi["total_spent"], 1050.0)
        self.assertEqual(ravi["avg_order_value"], 525.0)
        self.assertEqual(ravi["tier"], "new")
        self.assertEqual(ravi["addresses"], ["Patna"])
        self.assertEqual(ravi["first_order_date"].day, 18)
        self.assertEqual(customers[0]["phone"], "9000000001")

    def test_order_stats(self):
        stats = order_stats(self.orders, today=date(2026, 10, 19), days=3)
        self.assertEqual(stats["total_orders"], 3)
        self.assertEqual(stats["completed_orders"], 2)
        self.assertEqual(stats["total_revenue"], 1350.0)
        self.assertEqual(stats["avg_order_value"], 450.0)
        self.assertEqual(
            [(d["day"].day, d["revenue"], d["orders"]) for d in stats["revenue_by_day"]],
            [(17, 0, 0), (18, 750.0, 2), (19, 600.0, 1)]
        )

    def test_stats_without_orders(self):
        self.assertEqual(order_stats([], today=date(2026, 10, 19))["avg_order_value"], 0.0)


if __name__ == "__main__":
    unittest.main()
