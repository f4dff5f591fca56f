from typing import Optional

from pydantic import BaseModel, Field

from cafeteria.models import OrderItem


class OrderItemCreate(BaseModel):
    order_id: int
    product_id: int
    quantity: int = Field(..., ge=1)


class OrderItemResponse(BaseModel):
    id: int
    order_id: int
    product_id: int
    quantity: int
    price_at_order_time: float
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, i: OrderItem) -> "OrderItemResponse":
        return cls(
            id=i.id,
            order_id=i.order_id,
            product_id=i.product_id,
            quantity=i.quantity,
            price_at_order_time=float(i.price_at_order_time),
            created_at=i.created_at.isoformat() if i.created_at else None,
        )


class OrderItemCreated(BaseModel):
    orderItemId: int
