from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, field_validator

from cafeteria.core.datetime_utils import DATETIME_FORMAT, format_datetime
from cafeteria.models import Reservation, ReservationStatus, Table


def _parse_api_datetime(value: Any) -> Any:
    if isinstance(value, str):
        try:
            return datetime.strptime(value, DATETIME_FORMAT)
        except ValueError:
            raise ValueError("must be a valid date in the format: yyyy-MM-dd HH:mm:ss")
    return value


class ReservationCreate(BaseModel):
    table_id: int
    customer_id: int
    start_time: datetime
    end_time: datetime
    status: ReservationStatus = ReservationStatus.ACTIVE

    parse_times = field_validator("start_time", "end_time", mode="before")(_parse_api_datetime)


class ReservationUpdate(BaseModel):
    """Частичное обновление: применяются только переданные поля."""
    table_id: Optional[int] = None
    customer_id: Optional[int] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    status: Optional[ReservationStatus] = None

    parse_times = field_validator("start_time", "end_time", mode="before")(_parse_api_datetime)

    def changes(self) -> dict:
        return {k: v for k, v in self.model_dump(exclude_unset=True).items() if v is not None}


class ReservationResponse(BaseModel):
    id: int
    table_id: int
    customer_id: int
    start_time: str
    end_time: str
    status: str
    created_at: Optional[str] = None
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None

    @classmethod
    def from_row(
        cls,
        r: Reservation,
        customer_name: Optional[str] = None,
        customer_email: Optional[str] = None,
    ) -> "ReservationResponse":
        return cls(
            id=r.id,
            table_id=r.table_id,
            customer_id=r.customer_id,
            start_time=format_datetime(r.start_time),
            end_time=format_datetime(r.end_time),
            status=r.status.value,
            created_at=r.created_at.isoformat() if r.created_at else None,
            customer_name=customer_name,
            customer_email=customer_email,
        )


class ReservationPage(BaseModel):
    page: int
    limit: int
    total: int
    records: List[ReservationResponse]


class ReservationCreated(BaseModel):
    reservationId: int


class AvailableTable(BaseModel):
    id: int
    table_number: int
    capacity: int
    status: str

    @classmethod
    def from_row(cls, t: Table) -> "AvailableTable":
        return cls(id=t.id, table_number=t.table_number, capacity=t.capacity, status=t.status.value)


class AvailabilityResponse(BaseModel):
    available_tables: List[AvailableTable]
