from typing import List, Optional

from pydantic import BaseModel, Field

from cafeteria.models import Order, OrderItem, OrderStatus, Product


class OrderItemInput(BaseModel):
    product_id: int
    quantity: int = Field(..., ge=1)


class OrderCreate(BaseModel):
    table_id: int
    employee_id: int
    items: List[OrderItemInput] = Field(..., min_length=1, description="Хотя бы одна позиция")


class OrderUpdate(BaseModel):
    """Только статус: позиции через обновление заказа не меняются."""
    status: OrderStatus


class OrderCreated(BaseModel):
    orderId: int


class ProductSnapshot(BaseModel):
    """Товар в том виде, в каком он сейчас в каталоге (не на момент заказа)."""
    id: int
    name: str
    description: str
    price: float
    stock_quantity: int


class OrderItemDetail(BaseModel):
    id: int
    quantity: int
    price_at_order_time: float
    product: ProductSnapshot

    @classmethod
    def from_row(cls, item: OrderItem, product: Product) -> "OrderItemDetail":
        return cls(
            id=item.id,
            quantity=item.quantity,
            price_at_order_time=float(item.price_at_order_time),
            product=ProductSnapshot(
                id=product.id,
                name=product.name,
                description=product.description or "",
                price=float(product.price),
                stock_quantity=product.stock_quantity,
            ),
        )


class OrderResponse(BaseModel):
    id: int
    table_id: int
    employee_id: int
    status: str
    created_at: str
    items: List[OrderItemDetail] = []

    @classmethod
    def from_row(cls, order: Order, items: Optional[List[OrderItemDetail]] = None) -> "OrderResponse":
        return cls(
            id=order.id,
            table_id=order.table_id,
            employee_id=order.employee_id,
            status=order.status.value,
            created_at=order.created_at.isoformat() if order.created_at else "",
            items=items or [],
        )


class OrderPage(BaseModel):
    page: int
    limit: int
    total: int
    data: List[OrderResponse]
