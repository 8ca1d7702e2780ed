from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Integer, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class Restaurant(Base):
    __tablename__ = "restaurants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    theme_color: Mapped[str] = mapped_column(String(32), nullable=False, default="rose")
    # period covered by the stored hours, tips and salary of its employees
    time_frame: Mapped[str] = mapped_column(String(16), nullable=False, default="week")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    employees: Mapped[list["Employee"]] = relationship(back_populates="restaurant", cascade="all, delete-orphan")


class Employee(Base):
    __tablename__ = "employees"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    restaurant_id: Mapped[int] = mapped_column(ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    role: Mapped[str] = mapped_column(String(3), nullable=False, default="FOH")
    hourly_wage: Mapped[float] = mapped_column(Float, nullable=False, default=15.0)
    hours_worked: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    overtime_hours: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    tips: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    salary: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    city_state_zip: Mapped[str | None] = mapped_column(String(255), nullable=True)
    ssn: Mapped[str | None] = mapped_column(String(11), nullable=True)
    dependents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    filing_status: Mapped[str] = mapped_column(String(32), nullable=False, default="single")
    multiple_jobs: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    dependent_amount_usd: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    other_income: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    deductions: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    restaurant: Mapped[Restaurant] = relationship(back_populates="employees")

    @property
    def ssn_last4(self) -> str:
        return (self.ssn or "")[-4:]
