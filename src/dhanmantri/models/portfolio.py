"""Portfolio models."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, ClassVar, Optional

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:  # pragma: no cover
    from .user import User


class SipInvestment(SQLModel, table=True):
    """A systematic investment plan into a single mutual fund scheme."""

    __tablename__: ClassVar[str] = "sip_investment"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    scheme_code: str = Field(nullable=False, index=True, max_length=32)
    scheme_name: str = Field(nullable=False, max_length=255)
    monthly_amount: float = Field(nullable=False)
    start_date: date = Field(nullable=False)
    installments: int = Field(default=12, nullable=False)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    user: "User" = Relationship(
        sa_relationship=relationship("User", back_populates="sip_investments")
    )
