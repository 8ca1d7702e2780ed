"""Pydantic schemas for API request/response models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

RoleName = Literal["FOH", "BOH"]
FilingStatusName = Literal["single", "married_joint", "head_household"]
TimeFrameName = Literal["day", "week", "biweekly", "month", "year"]


class RestaurantCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    location: str = ""
    theme_color: str = "rose"
    time_frame: TimeFrameName = "week"


class RestaurantResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    location: str
    theme_color: str
    time_frame: str


class EmployeeUpdate(BaseModel):
    """Partial update; negative hours, wages and amounts are rejected here rather than in the engine."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    role: RoleName | None = None
    hourly_wage: float | None = Field(default=None, ge=0)
    hours_worked: float | None = Field(default=None, ge=0)
    overtime_hours: float | None = Field(default=None, ge=0)
    tips: float | None = Field(default=None, ge=0)
    salary: float | None = Field(default=None, ge=0)
    is_active: bool | None = None

    address: str | None = None
    city_state_zip: str | None = None
    ssn: str | None = None
    dependents: int | None = Field(default=None, ge=0)

    filing_status: FilingStatusName | None = None
    multiple_jobs: bool | None = None
    dependent_amount_usd: float | None = Field(default=None, ge=0)
    other_income: float | None = Field(default=None, ge=0)
    deductions: float | None = Field(default=None, ge=0)


class EmployeeCreate(EmployeeUpdate):
    name: str = Field(min_length=1, max_length=200)
    role: RoleName = "FOH"
    hourly_wage: float = Field(default=15.0, ge=0)
    filing_status: FilingStatusName = "single"


class EmployeeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    restaurant_id: int
    name: str
    role: str
    hourly_wage: float
    hours_worked: float
    overtime_hours: float
    tips: float
    salary: float
    is_active: bool
    address: str | None = None
    city_state_zip: str | None = None
    ssn_last4: str = ""
    dependents: int
    filing_status: str
    multiple_jobs: bool
    dependent_amount_usd: float
    other_income: float
    deductions: float


class TimeFrameUpdate(BaseModel):
    time_frame: TimeFrameName


class ErrorResponse(BaseModel):
    detail: str
