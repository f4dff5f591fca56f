from typing import Optional

from pydantic import BaseModel, Field

from cafeteria.models import Customer


class CustomerCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: str = Field(..., min_length=3, max_length=100, pattern=r"^[^@\s]+@[^@\s]+$")
    phone: str = Field(default="", max_length=20)
    password: str = Field(..., min_length=6, max_length=72)


class CustomerUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    email: Optional[str] = Field(default=None, min_length=3, max_length=100, pattern=r"^[^@\s]+@[^@\s]+$")
    phone: Optional[str] = Field(default=None, max_length=20)


class CustomerResponse(BaseModel):
    id: int
    name: str
    email: str
    phone: str = ""
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, c: Customer) -> "CustomerResponse":
        return cls(
            id=c.id,
            name=c.name,
            email=c.email,
            phone=c.phone or "",
            created_at=c.created_at.isoformat() if c.created_at else None,
        )


class CustomerCreated(BaseModel):
    customerId: int
