"""
Response helper utilities for converting store records and policy errors into API responses
"""
from typing import Any, Dict, List, Optional, Sequence
import uuid
from fastapi import HTTPException
from pydantic import BaseModel
from sqlalchemy import inspect as sa_inspect

from policy.errors import PolicyError


def convert_uuids_to_strings(obj: Any) -> Any:
    """
    Recursively convert UUID objects to strings in any data structure
    """
    if isinstance(obj, uuid.UUID):
        return str(obj)
    elif isinstance(obj, dict):
        return {key: convert_uuids_to_strings(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [convert_uuids_to_strings(item) for item in obj]
    else:
        return obj


def record_to_dict(obj) -> Dict[str, Any]:
    """Convert a mapped SQLAlchemy object to a plain record dict"""
    mapper = sa_inspect(obj).mapper
    return convert_uuids_to_strings({
        attr.key: getattr(obj, attr.key) for attr in mapper.column_attrs
    })


def safe_model_validate(model_class: BaseModel, data: Any) -> BaseModel:
    """
    Validate a record dict into a response model, dropping private keys
    """
    clean_data = convert_uuids_to_strings(dict(data))
    clean_data = {k: v for k, v in clean_data.items() if not k.startswith('_')}
    return model_class.model_validate(clean_data)


def safe_model_validate_list(model_class: BaseModel, data_list: List[Any]) -> List[BaseModel]:
    return [safe_model_validate(model_class, item) for item in data_list]


def paginate(records: Sequence[Any], page: int, limit: int) -> List[Any]:
    offset = (page - 1) * limit
    return list(records[offset:offset + limit])


def to_http_exception(error: PolicyError) -> HTTPException:
    """Surface a policy error verbatim with its own status code"""
    return HTTPException(status_code=error.status_code, detail=error.message)


def matches_search(record: Dict[str, Any], search: Optional[str], fields: Sequence[str]) -> bool:
    """Case-insensitive substring match over the given text fields"""
    if not search:
        return True
    needle = search.strip().lower()
    return any(needle in str(record.get(field) or "").lower() for field in fields)
