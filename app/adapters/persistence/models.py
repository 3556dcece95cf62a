"""SQLAlchemy ORM models — maps to PostgreSQL tables."""

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.adapters.persistence.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class SalesRepresentativeModel(Base):
    __tablename__ = "sales_representatives"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    role: Mapped[str] = mapped_column(String(30), nullable=False, default="sales")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    email_notifications: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    assignments: Mapped[list["CompanyAssignmentModel"]] = relationship(
        back_populates="sales_representative"
    )

    __table_args__ = (Index("idx_sales_reps_role_active", "role", "is_active"),)


class CompanyModel(Base):
    __tablename__ = "companies"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    industry: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    assignment: Mapped["CompanyAssignmentModel | None"] = relationship(
        back_populates="company", uselist=False
    )


class CompanyAssignmentModel(Base):
    __tablename__ = "company_sales_users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    company_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("companies.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    sales_representative_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("sales_representatives.id"), nullable=False
    )
    sequence: Mapped[int] = mapped_column(Integer, unique=True, nullable=False)
    method: Mapped[str] = mapped_column(String(20), nullable=False, default="rotation")
    assigned_by: Mapped[str | None] = mapped_column(String(36), nullable=True)
    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    company: Mapped["CompanyModel"] = relationship(back_populates="assignment")
    sales_representative: Mapped["SalesRepresentativeModel"] = relationship(
        back_populates="assignments"
    )

    __table_args__ = (Index("idx_assignments_sales_rep", "sales_representative_id"),)


class RotationCursorModel(Base):
    __tablename__ = "rotation_cursors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    rr_key: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    last_representative_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    sequence: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )
