from typing import Generic, List, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """Страница списка: {page, limit, total, data}."""
    page: int
    limit: int
    total: int
    data: List[T]


class MessageResponse(BaseModel):
    message: str
