from pydantic import BaseModel
from typing import Any, Generic, List, Optional, TypeVar

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Uniform envelope for every API response."""
    success: bool = True
    code: str = "SUCCESS"
    data: Optional[T] = None
    message: Optional[str] = None


class PagedResult(BaseModel, Generic[T]):
    items: List[T]
    total: int
    page: int
    page_size: int
    total_pages: int = 0


def ok(data: Any = None, message: Optional[str] = None, code: str = "SUCCESS") -> dict:
    return {"success": True, "code": code, "data": data, "message": message}
