from cafeteria.core.database import Base
from cafeteria.models.customer import Customer
from cafeteria.models.employee import Employee, EmployeeRole
from cafeteria.models.table import Table, TableStatus
from cafeteria.models.product import Product
from cafeteria.models.order import Order, OrderStatus
from cafeteria.models.order_item import OrderItem
from cafeteria.models.reservation import Reservation, ReservationStatus

__all__ = [
    "Base",
    "Customer",
    "Employee",
    "EmployeeRole",
    "Order",
    "OrderItem",
    "OrderStatus",
    "Product",
    "Reservation",
    "ReservationStatus",
    "Table",
    "TableStatus",
]
