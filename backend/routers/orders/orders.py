from fastapi import APIRouter, Depends, HTTPException, status, Query
from dependencies.rbac import require_order_read, require_customer_read
from dependencies.services import get_store
from policy.authorization import Action, Resource, ResourceKind, enforce
from policy.errors import PolicyError
from policy.principal import Principal, is_administrative
from routers.auth.auth import get_current_user
from routers.orders.helpers import category_counts, filter_orders, order_stats, summarize_customers
from routers.orders.schemas import OrderResponse, OrderListResponse, OrderStatsResponse, CustomerSummary, CustomerListResponse
from store import DocumentStore, list_visible
from utils.response_helpers import matches_search, paginate, safe_model_validate, safe_model_validate_list, to_http_exception
from typing import Optional
from datetime import date, datetime, timezone
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.get("/", response_model=OrderListResponse)
async def list_orders(
    vendor_id: Optional[str] = Query(None, description="Admin only: a vendor id, or 'admin' for admin-fulfilled orders"),
    status_filter: Optional[str] = Query(None, alias="status"),
    order_date: Optional[date] = Query(None),
    category_name: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    _: bool = Depends(require_order_read)
):
    """Orders visible to the caller: everything for admins, their own orders for vendors"""
    try:
        filters = {"status": status_filter} if status_filter else None
        orders, warning = await list_visible(
            store, current_user, ResourceKind.ORDER, "orders", filters, order_by="order_date"
        )
        orders = filter_orders(
            orders,
            vendor_id=vendor_id if is_administrative(current_user) else None,
            order_date=order_date,
            category_name=category_name
        )

        return OrderListResponse(
            orders=safe_model_validate_list(OrderResponse, paginate(orders, page, limit)),
            page=page,
            limit=limit,
            total=len(orders),
            total_amount=round(sum(float(o.get("total_amount") or 0) for o in orders), 2),
            category_counts=category_counts(orders),
            warning=warning
        )

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error listing orders: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get orders"
        )


@router.get("/customers", response_model=CustomerListResponse)
async def list_customers(
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    _: bool = Depends(require_customer_read)
):
    """Admin only: customers derived from order history"""
    try:
        orders, warning = await list_visible(
            store, current_user, ResourceKind.ORDER, "orders", order_by="order_date"
        )
        customers = summarize_customers(orders)
        customers = [c for c in customers if matches_search(c, search, ("name", "phone", "email"))]

        return CustomerListResponse(
            customers=[CustomerSummary(**c) for c in paginate(customers, page, limit)],
            page=page,
            limit=limit,
            total=len(customers),
            warning=warning
        )

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error listing customers: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get customers"
        )


@router.get("/stats", response_model=OrderStatsResponse)
async def get_order_stats(
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    _: bool = Depends(require_order_read)
):
    """Revenue and order totals over the orders visible to the caller"""
    try:
        orders, warning = await list_visible(
            store, current_user, ResourceKind.ORDER, "orders", order_by="order_date"
        )
        stats = order_stats(orders, datetime.now(timezone.utc).date())

        return OrderStatsResponse(
            **stats,
            category_counts=category_counts(orders),
            recent_orders=safe_model_validate_list(OrderResponse, orders[:5]),
            warning=warning
        )

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error computing order stats: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get order statistics"
        )


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: str,
    current_user: Principal = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    _: bool = Depends(require_order_read)
):
    try:
        order = await store.get("orders", order_id)
        enforce(current_user, Action.READ, Resource(ResourceKind.ORDER, order))
        return safe_model_validate(OrderResponse, order)

    except PolicyError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error getting order: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get order"
        )
