"""
Document store over the Supabase Postgres database.

Collections are addressed by name and records travel as plain dicts, so the
policy layer never depends on ORM classes. Listing endpoints describe what
they want with a small query variant (AllRecords / ByOwner / ByOwnerAndFlag)
and go through one fetch function.
"""
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple
import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from models import AdminAccount, Vendor, Category, Product, Coupon, Order, Feedback, Notification, Slider
from policy.authorization import ResourceKind
from policy.errors import NotFound, StoreError
from policy.principal import ADMIN_OWNER, Principal, Role, is_administrative
from policy.visibility import filter_visible
from utils.response_helpers import record_to_dict

logger = logging.getLogger(__name__)

COLLECTIONS = {
    "admins": AdminAccount,
    "vendors": Vendor,
    "categories": Category,
    "products": Product,
    "coupons": Coupon,
    "orders": Order,
    "feedback": Feedback,
    "notifications": Notification,
    "sliders": Slider,
}

READ_DEGRADED_WARNING = "Some records could not be loaded because the database is unavailable. Please refresh."


class DocumentStore:
    """Async CRUD over named collections. Every method may raise StoreError."""

    async def find_one(self, collection: str, filter: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    async def find_many(
        self,
        collection: str,
        filter: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = True,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        raise NotImplementedError

    async def insert(self, collection: str, data: Mapping[str, Any]) -> str:
        raise NotImplementedError

    async def update(self, collection: str, record_id: str, patch: Mapping[str, Any]) -> None:
        raise NotImplementedError

    async def delete(self, collection: str, record_id: str) -> None:
        raise NotImplementedError

    async def get(self, collection: str, record_id: str) -> Dict[str, Any]:
        """find_one by id, raising NotFound when missing"""
        record = await self.find_one(collection, {"id": record_id})
        if record is None:
            raise NotFound(f"{collection.rstrip('s').capitalize()} not found")
        return record


class SqlDocumentStore(DocumentStore):
    """DocumentStore backed by an AsyncSession; one commit per write."""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _model(self, collection: str):
        try:
            return COLLECTIONS[collection]
        except KeyError:
            raise ValueError(f"Unknown collection: {collection}")

    def _criteria(self, model, filter: Optional[Mapping[str, Any]]):
        criteria = []
        for key, value in (filter or {}).items():
            column = getattr(model, key)
            if value is None:
                criteria.append(column.is_(None))
            elif isinstance(value, (list, tuple, set, frozenset)):
                criteria.append(column.in_(list(value)))
            else:
                criteria.append(column == value)
        return criteria

    async def find_one(self, collection, filter):
        model = self._model(collection)
        try:
            result = await self.session.execute(
                select(model).where(*self._criteria(model, filter)).limit(1)
            )
            obj = result.scalars().first()
        except SQLAlchemyError as e:
            logger.error(f"find_one on {collection} failed: {str(e)}")
            raise StoreError() from e
        return record_to_dict(obj) if obj is not None else None

    async def find_many(self, collection, filter=None, order_by=None, descending=True, limit=None):
        model = self._model(collection)
        query = select(model).where(*self._criteria(model, filter))
        if order_by:
            column = getattr(model, order_by)
            query = query.order_by(column.desc() if descending else column.asc())
        if limit:
            query = query.limit(limit)
        try:
            result = await self.session.execute(query)
            objects = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error(f"find_many on {collection} failed: {str(e)}")
            raise StoreError() from e
        return [record_to_dict(obj) for obj in objects]

    async def insert(self, collection, data):
        model = self._model(collection)
        obj = model(**dict(data))
        try:
            self.session.add(obj)
            await self.session.commit()
            await self.session.refresh(obj)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"insert into {collection} failed: {str(e)}")
            raise StoreError() from e
        return obj.id

    async def update(self, collection, record_id, patch):
        model = self._model(collection)
        try:
            obj = await self.session.get(model, record_id)
            if obj is None:
                raise NotFound(f"{collection.rstrip('s').capitalize()} not found")
            for field, value in patch.items():
                setattr(obj, field, value)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"update of {collection}/{record_id} failed: {str(e)}")
            raise StoreError() from e

    async def delete(self, collection, record_id):
        model = self._model(collection)
        try:
            obj = await self.session.get(model, record_id)
            if obj is None:
                raise NotFound(f"{collection.rstrip('s').capitalize()} not found")
            await self.session.delete(obj)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"delete of {collection}/{record_id} failed: {str(e)}")
            raise StoreError() from e


# =================
# QUERY VARIANTS
# =================

@dataclass(frozen=True)
class AllRecords:
    def to_filter(self) -> Dict[str, Any]:
        return {}


@dataclass(frozen=True)
class ByOwner:
    owner_id: str
    owner_field: str = "owner_id"

    def to_filter(self) -> Dict[str, Any]:
        return {self.owner_field: self.owner_id}


@dataclass(frozen=True)
class ByOwnerAndFlag:
    owner_id: str
    flag: str
    value: Any = True
    owner_field: str = "owner_id"

    def to_filter(self) -> Dict[str, Any]:
        return {self.owner_field: self.owner_id, self.flag: self.value}


# Field linking each collection's records to the vendor that owns them
OWNER_FIELDS = {
    ResourceKind.FEEDBACK: "vendor_id",
    ResourceKind.VENDOR: "id",
}


async def fetch_records(
    store: DocumentStore,
    collection: str,
    query,
    filters: Optional[Mapping[str, Any]] = None,
    order_by: Optional[str] = "created_at",
    descending: bool = True,
) -> List[Dict[str, Any]]:
    """Run a query variant, narrowed by optional equality filters"""
    criteria = query.to_filter()
    criteria.update(filters or {})
    return await store.find_many(collection, criteria, order_by=order_by, descending=descending)


def queries_for(principal: Principal, kind: ResourceKind) -> Tuple[Any, ...]:
    """Query variants that cover everything the principal could be allowed to read"""
    if is_administrative(principal):
        return (AllRecords(),)
    if principal.role == Role.VENDOR and principal.vendor_record_id:
        owner_field = OWNER_FIELDS.get(kind, "owner_id")
        own = ByOwner(principal.vendor_record_id, owner_field)
        if kind == ResourceKind.CATEGORY:
            return (own, ByOwnerAndFlag(ADMIN_OWNER, "is_global", True))
        if kind in (ResourceKind.PRODUCT, ResourceKind.COUPON, ResourceKind.ORDER,
                    ResourceKind.FEEDBACK, ResourceKind.VENDOR):
            return (own,)
    return (AllRecords(),)


def _merge(batches: Iterable[List[Dict[str, Any]]], order_by: Optional[str], descending: bool) -> List[Dict[str, Any]]:
    seen = set()
    merged = []
    for batch in batches:
        for record in batch:
            if record.get("id") in seen:
                continue
            seen.add(record.get("id"))
            merged.append(record)
    if order_by:
        merged.sort(key=lambda r: (r.get(order_by) is None, r.get(order_by) or 0), reverse=descending)
    return merged


async def list_visible(
    store: DocumentStore,
    principal: Principal,
    kind: ResourceKind,
    collection: str,
    filters: Optional[Mapping[str, Any]] = None,
    order_by: Optional[str] = "created_at",
    descending: bool = True,
) -> Tuple[List[Dict[str, Any]], Optional[str]]:
    """
    Records of a collection the principal may read.

    A StoreError degrades to an empty list plus a warning for the caller to show.
    """
    try:
        batches = []
        for query in queries_for(principal, kind):
            batches.append(await fetch_records(store, collection, query, filters, order_by, descending))
    except StoreError as e:
        logger.warning(f"Listing {collection} for {principal.id} degraded: {e.message}")
        return [], READ_DEGRADED_WARNING

    records = _merge(batches, order_by if len(batches) > 1 else None, descending)
    return filter_visible(principal, kind, records), None
