from typing import Any, Dict
from routers.vendors.schemas import VendorResponse
from utils.response_helpers import safe_model_validate

VENDOR_SEARCH_FIELDS = ("name", "restaurant_name", "email", "phone")


def vendor_to_response(vendor: Dict[str, Any]) -> VendorResponse:
    """Vendor record as returned by the API; the credential link is exposed only as a flag"""
    data = {k: v for k, v in vendor.items() if k != "credential_ref"}
    data["has_credential"] = bool(vendor.get("credential_ref"))
    return safe_model_validate(VendorResponse, data)
