from __future__ import annotations

import logging
import os

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from restaurant_payroll.database import create_session_factory, get_db, reset_demo_roster, seed_demo_restaurants
from restaurant_payroll.models import Employee, Restaurant
from restaurant_payroll.reports.rollups import aggregate, restaurant_tax_rollup
from restaurant_payroll.reports.summary import role_summary
from restaurant_payroll.schemas import (
    EmployeeCreate,
    EmployeeResponse,
    EmployeeUpdate,
    ErrorResponse,
    RestaurantCreate,
    RestaurantResponse,
    TimeFrameUpdate,
)
from restaurant_payroll.services.errors import InvalidInputError, TaxConfigError
from restaurant_payroll.services.payroll import calculate_employee_taxes, dependent_credit
from restaurant_payroll.services.tax_tables import DEFAULT_TAX_YEAR, get_tax_tables
from restaurant_payroll.services.timeframes import pay_frequency_for, rescale_employees
from restaurant_payroll.services.wages import compute_gross_pay

logger = logging.getLogger(__name__)


def create_app(database_url: str | None = None, tax_year: int | None = None, seed_demo: bool | None = None) -> FastAPI:
    app = FastAPI(title="Restaurant Payroll")
    session_factory = create_session_factory(database_url or os.getenv("DATABASE_URL", "sqlite:///./payroll.db"))
    app.state.session_factory = session_factory
    app.state.tax_year = tax_year or int(os.getenv("PAYROLL_TAX_YEAR", DEFAULT_TAX_YEAR))

    if seed_demo is None:
        seed_demo = os.getenv("PAYROLL_SEED_DEMO", "false").lower() == "true"
    if seed_demo:
        with session_factory() as db:
            seed_demo_restaurants(db)

    def db_dependency():
        yield from get_db(session_factory)

    def tax_tables():
        return get_tax_tables(app.state.tax_year)

    def get_restaurant(db: Session, restaurant_id: int) -> Restaurant:
        restaurant = db.get(Restaurant, restaurant_id)
        if not restaurant:
            raise HTTPException(status_code=404, detail="Restaurant not found")
        return restaurant

    def get_employee(db: Session, restaurant: Restaurant, employee_id: int) -> Employee:
        emp = db.get(Employee, employee_id)
        if not emp or emp.restaurant_id != restaurant.id:
            raise HTTPException(status_code=404, detail="Employee not found")
        return emp

    def list_employees(db: Session, restaurant: Restaurant) -> list[Employee]:
        return db.query(Employee).filter(Employee.restaurant_id == restaurant.id).order_by(Employee.name.asc()).all()

    def apply_fields(emp: Employee, payload: EmployeeUpdate, partial: bool = True) -> None:
        columns = Employee.__table__.c
        values = {
            k: v for k, v in payload.model_dump(exclude_unset=partial).items() if v is not None or columns[k].nullable
        }
        if "dependents" in values and "dependent_amount_usd" not in values:
            values["dependent_amount_usd"] = dependent_credit(values["dependents"])
        for k, v in values.items():
            setattr(emp, k, v)

    @app.exception_handler(InvalidInputError)
    async def invalid_input_handler(request: Request, exc: InvalidInputError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(TaxConfigError)
    async def tax_config_handler(request: Request, exc: TaxConfigError):
        logger.error("Tax configuration error on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"detail": "Internal server error. Please contact support if this persists."})

    @app.get("/health")
    def health():
        return {"status": "ok", "tax_year": app.state.tax_year}

    @app.get("/restaurants", response_model=list[RestaurantResponse])
    def restaurants(db: Session = Depends(db_dependency)):
        return db.query(Restaurant).order_by(Restaurant.name.asc()).all()

    @app.post("/restaurants", response_model=RestaurantResponse, status_code=201)
    def create_restaurant(payload: RestaurantCreate, db: Session = Depends(db_dependency)):
        restaurant = Restaurant(**payload.model_dump())
        db.add(restaurant)
        db.commit()
        return restaurant

    @app.get("/restaurants/{restaurant_id}", response_model=RestaurantResponse, responses={404: {"model": ErrorResponse}})
    def restaurant_detail(restaurant_id: int, db: Session = Depends(db_dependency)):
        return get_restaurant(db, restaurant_id)

    @app.get("/restaurants/{restaurant_id}/employees", response_model=list[EmployeeResponse])
    def employees(restaurant_id: int, include_inactive: bool = True, db: Session = Depends(db_dependency)):
        restaurant = get_restaurant(db, restaurant_id)
        rows = list_employees(db, restaurant)
        return rows if include_inactive else [e for e in rows if e.is_active]

    @app.post("/restaurants/{restaurant_id}/employees", response_model=EmployeeResponse, status_code=201)
    def create_employee(restaurant_id: int, payload: EmployeeCreate, db: Session = Depends(db_dependency)):
        restaurant = get_restaurant(db, restaurant_id)
        emp = Employee(restaurant_id=restaurant.id)
        apply_fields(emp, payload, partial=False)
        db.add(emp)
        db.commit()
        logger.info("Added employee %s to restaurant %s", emp.id, restaurant.id)
        return emp

    @app.put("/restaurants/{restaurant_id}/employees/{employee_id}", response_model=EmployeeResponse)
    def update_employee(restaurant_id: int, employee_id: int, payload: EmployeeUpdate, db: Session = Depends(db_dependency)):
        emp = get_employee(db, get_restaurant(db, restaurant_id), employee_id)
        apply_fields(emp, payload)
        db.commit()
        return emp

    @app.post("/restaurants/{restaurant_id}/employees/{employee_id}/toggle-active", response_model=EmployeeResponse)
    def toggle_active(restaurant_id: int, employee_id: int, db: Session = Depends(db_dependency)):
        emp = get_employee(db, get_restaurant(db, restaurant_id), employee_id)
        emp.is_active = not emp.is_active
        db.commit()
        return emp

    @app.delete("/restaurants/{restaurant_id}/employees/{employee_id}", status_code=204)
    def delete_employee(restaurant_id: int, employee_id: int, db: Session = Depends(db_dependency)):
        emp = get_employee(db, get_restaurant(db, restaurant_id), employee_id)
        db.delete(emp)
        db.commit()

    @app.post("/restaurants/{restaurant_id}/employees/reset", response_model=list[EmployeeResponse])
    def reset_employees(restaurant_id: int, db: Session = Depends(db_dependency)):
        restaurant = get_restaurant(db, restaurant_id)
        reset_demo_roster(db, restaurant)
        return list_employees(db, restaurant)

    @app.get("/restaurants/{restaurant_id}/payroll")
    def payroll(restaurant_id: int, db: Session = Depends(db_dependency)):
        restaurant = get_restaurant(db, restaurant_id)
        rows = list_employees(db, restaurant)
        return {
            "restaurant_id": restaurant.id,
            "time_frame": restaurant.time_frame,
            "employees": [
                {"employee_id": e.id, "name": e.name, "role": e.role, **compute_gross_pay(e).to_dict()}
                for e in rows
                if e.is_active
            ],
            "totals": aggregate(rows, restaurant.time_frame).to_dict(),
            "by_role": role_summary(rows),
        }

    @app.put("/restaurants/{restaurant_id}/time-frame", response_model=RestaurantResponse)
    def change_time_frame(restaurant_id: int, payload: TimeFrameUpdate, db: Session = Depends(db_dependency)):
        restaurant = get_restaurant(db, restaurant_id)
        rescale_employees(list_employees(db, restaurant), restaurant.time_frame, payload.time_frame)
        restaurant.time_frame = payload.time_frame
        db.commit()
        return restaurant

    @app.get("/restaurants/{restaurant_id}/employees/{employee_id}/taxes", responses={400: {"model": ErrorResponse}})
    def employee_taxes(
        restaurant_id: int,
        employee_id: int,
        frequency: str | None = None,
        include_futa: bool = False,
        db: Session = Depends(db_dependency),
    ):
        restaurant = get_restaurant(db, restaurant_id)
        emp = get_employee(db, restaurant, employee_id)
        frequency = frequency or pay_frequency_for(restaurant.time_frame)
        return {
            "employee_id": emp.id,
            "name": emp.name,
            "tax_year": app.state.tax_year,
            **calculate_employee_taxes(emp, frequency, include_futa, tax_tables()),
        }

    @app.get("/restaurants/{restaurant_id}/taxes", responses={400: {"model": ErrorResponse}})
    def restaurant_taxes(
        restaurant_id: int,
        frequency: str | None = None,
        include_futa: bool = False,
        db: Session = Depends(db_dependency),
    ):
        restaurant = get_restaurant(db, restaurant_id)
        frequency = frequency or pay_frequency_for(restaurant.time_frame)
        rollup = restaurant_tax_rollup(db, restaurant.id, frequency, include_futa, tax_tables())
        return {"restaurant_id": restaurant.id, "tax_year": app.state.tax_year, **rollup.to_dict()}

    return app
