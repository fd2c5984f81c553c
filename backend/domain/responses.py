"""
Response envelope helpers shared by all routers and the exception handlers.

- Success: { "success": true, "data": <payload>, "meta": {...} }
- Error: { "success": false, "error": { "code": "...", "message": "...", "details": {...} } }
"""
from typing import Any

from pydantic import BaseModel


def _dump(data: Any) -> Any:
    """Serialize pydantic models (or lists of them) to JSON-safe camelCase dicts."""
    if isinstance(data, BaseModel):
        return data.model_dump(by_alias=True, mode="json")
    if isinstance(data, list):
        return [_dump(item) for item in data]
    return data


def success_response(data: Any = None, meta: dict[str, Any] | None = None) -> dict[str, Any]:
    """
    Create a standardized success response.

    Args:
        data: The response payload (pydantic models are dumped by alias)
        meta: Optional metadata (pagination, timestamps, etc.)
    """
    response = {"success": True, "data": _dump(data)}
    if meta:
        response["meta"] = meta
    return response


def paginated_response(
    items: list[Any],
    limit: int,
    offset: int,
    total: int,
) -> dict[str, Any]:
    """
    Create a standardized offset-paginated response.

    Returns:
        dict: { "success": true, "data": <items>, "meta": { "limit", "offset", "total", "hasMore" } }
    """
    meta = {
        "limit": limit,
        "offset": offset,
        "total": total,
        "hasMore": (offset + limit) < total,
    }
    return success_response(data=items, meta=meta)


def error_response(code: str, message: str, details: Any = None) -> dict[str, Any]:
    """Create a standardized error body."""
    return {
        "success": False,
        "error": {
            "code": code,
            "message": message,
            "details": details,
        },
    }
