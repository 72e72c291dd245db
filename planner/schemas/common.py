from typing import Any, Optional


def ok(data: Any = None, message: Optional[str] = None) -> dict:
    """Success envelope shared by every route: ``{success, message, data}``."""
    return {"success": True, "message": message, "data": data}


def fail(message: str) -> dict:
    return {"success": False, "message": message, "data": None}
