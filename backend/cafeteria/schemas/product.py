from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from cafeteria.models import Product


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=150)
    description: str = ""
    price: Decimal = Field(..., ge=0)
    stock_quantity: int = Field(default=0, ge=0)


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=150)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0)
    stock_quantity: Optional[int] = Field(default=None, ge=0)


class StockAdjustment(BaseModel):
    quantity: int = Field(..., ge=1)


class ProductResponse(BaseModel):
    id: int
    name: str
    description: str
    price: float
    stock_quantity: int
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, p: Product) -> "ProductResponse":
        return cls(
            id=p.id,
            name=p.name,
            description=p.description or "",
            price=float(p.price),
            stock_quantity=p.stock_quantity,
            created_at=p.created_at.isoformat() if p.created_at else None,
        )


class ProductCreated(BaseModel):
    productId: int
