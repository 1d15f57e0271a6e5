from typing import Any, Iterable, List, Mapping

from .authorization import Action, Resource, ResourceKind, authorize
from .principal import Principal, is_administrative


def filter_visible(principal: Principal, kind: ResourceKind, records: Iterable[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
    """
    Subset of records the principal may read, in their original order.
    Applies the same rules as authorize(); administrators see everything.
    """
    if is_administrative(principal):
        return list(records)
    return [
        record for record in records
        if authorize(principal, Action.READ, Resource(kind, record))
    ]
