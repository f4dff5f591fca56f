"""Столы кафе. Статус: административный, бронирование его не читает и не меняет."""
import enum
from datetime import datetime
from sqlalchemy import Integer, Enum, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cafeteria.core.database import Base


class TableStatus(str, enum.Enum):
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"


class Table(Base):
    __tablename__ = "tables"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    table_number: Mapped[int] = mapped_column(Integer, unique=True, nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, default=4, nullable=False)
    status: Mapped[TableStatus] = mapped_column(
        Enum(TableStatus, values_callable=lambda e: [m.value for m in e]),
        default=TableStatus.AVAILABLE,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    reservations = relationship("Reservation", back_populates="table", passive_deletes=True)
