from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z
from .enums import Department, enum_column_type


class Employee(db.Model):
    """
    A person who can act on orders.

    Suppliers are employees in the supplier department; an order is bound
    to exactly one of them.
    """
    __tablename__ = "employees"
    __table_args__ = (
        db.Index("ix_employees_department_active", "department", "is_active"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    full_name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=True, unique=True)
    phone = db.Column(db.String(64), nullable=True)
    department = db.Column(enum_column_type(Department, "department"), nullable=False, index=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    version_id = db.Column(db.Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Employee id={self.id} name={self.full_name!r} department={self.department.value}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "full_name": self.full_name,
            "email": self.email,
            "phone": self.phone,
            "department": self.department.value,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
        }
