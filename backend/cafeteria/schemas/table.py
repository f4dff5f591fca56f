from typing import Optional

from pydantic import BaseModel, Field

from cafeteria.models import Table, TableStatus


class TableCreate(BaseModel):
    table_number: int = Field(..., ge=1)
    capacity: int = Field(default=4, ge=1)
    status: TableStatus = TableStatus.AVAILABLE


class TableUpdate(BaseModel):
    table_number: Optional[int] = Field(default=None, ge=1)
    capacity: Optional[int] = Field(default=None, ge=1)
    status: Optional[TableStatus] = None


class TableResponse(BaseModel):
    id: int
    table_number: int
    capacity: int
    status: str
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, t: Table) -> "TableResponse":
        return cls(
            id=t.id,
            table_number=t.table_number,
            capacity=t.capacity,
            status=t.status.value,
            created_at=t.created_at.isoformat() if t.created_at else None,
        )


class TableCreated(BaseModel):
    tableId: int
