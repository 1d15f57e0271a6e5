from pydantic import BaseModel
from typing import Optional, List, Dict, Any
from datetime import date, datetime


class OrderResponse(BaseModel):
    id: str
    owner_id: Optional[str] = None
    customer_id: Optional[str] = None
    vendor_name: Optional[str] = None
    status: str
    order_date: datetime
    total_amount: float
    customer: Dict[str, Any] = {}
    items: List[Dict[str, Any]] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class CategoryCount(BaseModel):
    name: str
    quantity: int

class OrderListResponse(BaseModel):
    orders: List[OrderResponse]
    page: int
    limit: int
    total: int
    total_amount: float
    category_counts: List[CategoryCount] = []
    warning: Optional[str] = None


class CustomerSummary(BaseModel):
    id: str
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    total_orders: int
    total_spent: float
    avg_order_value: float
    first_order_date: datetime
    last_order_date: datetime
    addresses: List[str] = []
    tier: str

class CustomerListResponse(BaseModel):
    customers: List[CustomerSummary]
    page: int
    limit: int
    total: int
    warning: Optional[str] = None


class DailyRevenue(BaseModel):
    day: date
    revenue: float
    orders: int

class OrderStatsResponse(BaseModel):
    total_orders: int
    completed_orders: int
    total_revenue: float
    avg_order_value: float
    revenue_by_day: List[DailyRevenue]
    category_counts: List[CategoryCount] = []
    recent_orders: List[OrderResponse] = []
    warning: Optional[str] = None
