"""
Order filters and the customer summaries the dashboard derives from orders.
Customers are not stored; they are grouped from orders by receiver phone.
"""
from collections import Counter
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional
from policy.principal import ADMIN_OWNER

ADMIN_ORDERS = "admin"

# (minimum total spent, tier)
CUSTOMER_TIERS = (
    (10000, "vip"),
    (5000, "regular"),
    (1000, "new"),
    (0, "basic"),
)


def is_admin_order(order: Dict[str, Any]) -> bool:
    return not order.get("owner_id") or order.get("owner_id") == ADMIN_OWNER


def filter_orders(
    orders: Iterable[Dict[str, Any]],
    vendor_id: Optional[str] = None,
    order_date: Optional[date] = None,
    category_name: Optional[str] = None,
) -> List[Dict[str, Any]]:
    filtered = []
    for order in orders:
        if vendor_id == ADMIN_ORDERS and not is_admin_order(order):
            continue
        if vendor_id and vendor_id != ADMIN_ORDERS and order.get("owner_id") != vendor_id:
            continue
        if order_date and _as_date(order.get("order_date")) != order_date:
            continue
        if category_name and not any(i.get("category_name") == category_name for i in order.get("items") or []):
            continue
        filtered.append(order)
    return filtered


def _as_date(value) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return None


def category_counts(orders: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Units sold per item category name"""
    counts = Counter()
    for order in orders:
        for item in order.get("items") or []:
            if item.get("category_name"):
                counts[item["category_name"]] += int(item.get("quantity") or 0)
    return [{"name": name, "quantity": quantity} for name, quantity in counts.most_common()]


def customer_tier(total_spent: float) -> str:
    for minimum, tier in CUSTOMER_TIERS:
        if total_spent >= minimum:
            return tier
    return "basic"


def _address(customer: Dict[str, Any]) -> str:
    parts = [customer.get("building_name"), customer.get("full_address"), customer.get("city")]
    return ", ".join(p for p in parts if p)


def summarize_customers(orders: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    summaries: Dict[str, Dict[str, Any]] = {}

    for order in orders:
        customer = order.get("customer") or {}
        key = customer.get("receiver_phone") or customer.get("email") or order.get("customer_id")
        if not key:
            continue

        order_date = order.get("order_date")
        summary = summaries.get(key)
        if summary is None:
            summary = summaries[key] = {
                "id": key,
                "name": customer.get("receiver_name"),
                "phone": customer.get("receiver_phone"),
                "email": customer.get("email"),
                "total_orders": 0,
                "total_spent": 0.0,
                "first_order_date": order_date,
                "last_order_date": order_date,
                "addresses": [],
            }

        summary["total_orders"] += 1
        summary["total_spent"] += float(order.get("total_amount") or 0)
        if order_date < summary["first_order_date"]:
            summary["first_order_date"] = order_date
        if order_date > summary["last_order_date"]:
            summary["last_order_date"] = order_date

        address = _address(customer)
        if address and address not in summary["addresses"]:
            summary["addresses"].append(address)

    result = []
    for summary in summaries.values():
        summary["total_spent"] = round(summary["total_spent"], 2)
        summary["avg_order_value"] = round(summary["total_spent"] / summary["total_orders"], 2)
        summary["tier"] = customer_tier(summary["total_spent"])
        result.append(summary)

    result.sort(key=lambda s: s["last_order_date"], reverse=True)
    return result


def order_stats(orders: List[Dict[str, Any]], today: date, days: int = 7) -> Dict[str, Any]:
    """Dashboard totals plus revenue for each of the last `days` days, oldest first"""
    total_revenue = sum(float(o.get("total_amount") or 0) for o in orders)
    total_orders = len(orders)

    revenue_by_day = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        day_orders = [o for o in orders if _as_date(o.get("order_date")) == day]
        revenue_by_day.append({
            "day": day,
            "revenue": round(sum(float(o.get("total_amount") or 0) for o in day_orders), 2),
            "orders": len(day_orders),
        })

    return {
        "total_orders": total_orders,
        "completed_orders": sum(1 for o in orders if o.get("status") == "delivered"),
        "total_revenue": round(total_revenue, 2),
        "avg_order_value": round(total_revenue / total_orders, 2) if total_orders else 0.0,
        "revenue_by_day": revenue_by_day,
    }
