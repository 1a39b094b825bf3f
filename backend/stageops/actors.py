# Overview: Explicit actor credential passed into every gateway call.

from __future__ import annotations

from dataclasses import dataclass

from .models import Department, Employee


@dataclass(frozen=True)
class Actor:
    """
    Who is calling, and on behalf of which department.

    Built by the transport layer (or a test) and handed to a gateway; the
    core never reads role state from anywhere else.
    """
    employee_id: int
    name: str
    department: Department

    @classmethod
    def from_employee(cls, employee: Employee) -> "Actor":
        return cls(
            employee_id=employee.id,
            name=employee.full_name,
            department=employee.department,
        )

    def to_dict(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "name": self.name,
            "department": self.department.value,
        }
