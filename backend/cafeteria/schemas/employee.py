from typing import Optional

from pydantic import BaseModel, Field

from cafeteria.models import Employee, EmployeeRole


class EmployeeResponse(BaseModel):
    id: int
    name: str
    email: str
    role: str
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, e: Employee) -> "EmployeeResponse":
        return cls(
            id=e.id,
            name=e.name,
            email=e.email,
            role=e.role.value,
            created_at=e.created_at.isoformat() if e.created_at else None,
        )


class EmployeeCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: str = Field(..., min_length=3, max_length=100, pattern=r"^[^@\s]+@[^@\s]+$")
    role: EmployeeRole = EmployeeRole.ATTENDANT
    password: str = Field(..., min_length=6, max_length=72)


class EmployeeUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    email: Optional[str] = Field(default=None, min_length=3, max_length=100, pattern=r"^[^@\s]+@[^@\s]+$")
    role: Optional[EmployeeRole] = None


class EmployeeCreated(BaseModel):
    employeeId: int


class PasswordChange(BaseModel):
    old_password: str = ""
    new_password: str = Field(..., min_length=6, max_length=72)
