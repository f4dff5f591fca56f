"""
RBAC: роль × ресурс.
Роли сотрудников хранятся в employees.role, клиент всегда получает роль customer.
"""
from enum import Enum
from typing import List, Optional


class Role(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    ATTENDANT = "attendant"
    OTHER = "other"
    CUSTOMER = "customer"


class Resource(str, Enum):
    """Ресурсы для проверки доступа."""
    RESERVATIONS = "RESERVATIONS"          # бронирования и проверка свободных столов
    ORDERS = "ORDERS"                      # заказы
    ORDER_ITEMS = "ORDER_ITEMS"            # позиции заказов напрямую
    PRODUCTS_READ = "PRODUCTS_READ"
    PRODUCTS_WRITE = "PRODUCTS_WRITE"      # создание/изменение/удаление и остатки
    TABLES_READ = "TABLES_READ"
    TABLES_WRITE = "TABLES_WRITE"
    CUSTOMERS_READ = "CUSTOMERS_READ"      # список клиентов (клиент видит только себя)
    CUSTOMERS_DELETE = "CUSTOMERS_DELETE"
    EMPLOYEES_READ = "EMPLOYEES_READ"
    EMPLOYEES_WRITE = "EMPLOYEES_WRITE"
    DASHBOARD = "DASHBOARD"
    DASHBOARD_DETAILED = "DASHBOARD_DETAILED"


STAFF_ROLES = [Role.ADMIN, Role.MANAGER, Role.ATTENDANT, Role.OTHER]
ALL_ROLES = STAFF_ROLES + [Role.CUSTOMER]

# Ресурс → роли, которым разрешён доступ
RESOURCE_ROLES = {
    Resource.RESERVATIONS: [Role.ADMIN, Role.MANAGER, Role.ATTENDANT, Role.CUSTOMER],
    Resource.ORDERS: ALL_ROLES,
    Resource.ORDER_ITEMS: STAFF_ROLES,
    Resource.PRODUCTS_READ: ALL_ROLES,
    Resource.PRODUCTS_WRITE: [Role.ADMIN, Role.MANAGER],
    Resource.TABLES_READ: ALL_ROLES,
    Resource.TABLES_WRITE: [Role.ADMIN, Role.MANAGER],
    Resource.CUSTOMERS_READ: ALL_ROLES,
    Resource.CUSTOMERS_DELETE: [Role.ADMIN, Role.MANAGER],
    Resource.EMPLOYEES_READ: [Role.ADMIN, Role.MANAGER],
    Resource.EMPLOYEES_WRITE: [Role.ADMIN],
    Resource.DASHBOARD: [Role.ADMIN, Role.MANAGER, Role.ATTENDANT],
    Resource.DASHBOARD_DETAILED: [Role.ADMIN, Role.MANAGER],
}


def parse_role(role: str) -> Optional[Role]:
    try:
        return Role(role)
    except ValueError:
        return None


def roles_for(resource: Resource) -> List[Role]:
    return list(RESOURCE_ROLES.get(resource, []))


def is_customer(role: str) -> bool:
    return role == Role.CUSTOMER.value
