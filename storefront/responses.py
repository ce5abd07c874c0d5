# storefront/responses.py
from __future__ import annotations

import math
from typing import Any, Dict, List


def success_response(message: str, data: Any = None) -> Dict[str, Any]:
    out: Dict[str, Any] = {"success": True, "message": message}
    if data is not None:
        out["data"] = data
    return out


def paginated_response(message: str, rows: List[Any], page: int, limit: int, total: int) -> Dict[str, Any]:
    return {
        "success": True,
        "message": message,
        "data": rows,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "totalPages": math.ceil(total / limit) if limit else 0,
        },
    }


def error_body(message: str, errors: List[Dict[str, str]] | None = None) -> Dict[str, Any]:
    out: Dict[str, Any] = {"success": False, "message": message}
    if errors:
        out["errors"] = errors
    return out
