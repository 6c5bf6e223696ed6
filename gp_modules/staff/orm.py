"""
SQLAlchemy ORM persistence model for the Staff module.

Maps the ``User`` DTO to the ``users`` table.  Role is stored as
String(50); money as Numeric(38, 9).
"""

from decimal import Decimal

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from gp_kernel.db.base import VersionedBase


class UserModel(VersionedBase):
    """A department member."""

    __tablename__ = "users"

    __table_args__ = (
        Index("idx_user_role", "role"),
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    role: Mapped[str] = mapped_column(String(50), nullable=False)
    daily_rate: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    daily_wage: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    level: Mapped[str] = mapped_column(String(50), nullable=False, default="junior")

    def to_dto(self):
        from gp_kernel.domain.actor import Role
        from gp_modules.staff.models import User

        return User(
            id=self.id,
            name=self.name,
            role=Role(self.role),
            daily_rate=self.daily_rate,
            daily_wage=self.daily_wage,
            level=self.level,
            version=self.version,
        )

    @classmethod
    def from_dto(cls, dto) -> "UserModel":
        return cls(
            id=dto.id,
            name=dto.name,
            role=dto.role.value,
            daily_rate=dto.daily_rate,
            daily_wage=dto.daily_wage,
            level=dto.level,
            version=dto.version,
        )

    def __repr__(self) -> str:
        return f"<UserModel {self.name} [{self.role}]>"
