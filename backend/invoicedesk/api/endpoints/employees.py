"""
Employee endpoints
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from invoicedesk.db.session import get_db
from invoicedesk.models.department import Department
from invoicedesk.models.employee import Employee
from invoicedesk.schemas.employee import EmployeeCreate, EmployeeResponse, EmployeeUpdate

_log = logging.getLogger(__name__)

router = APIRouter()


def _get_employee_or_404(db: Session, employee_id: int) -> Employee:
    employee = db.query(Employee).filter(Employee.id == employee_id).first()
    if not employee:
        raise HTTPException(status_code=404, detail="Employee not found")
    return employee


def _check_department(db: Session, department_id: Optional[int]) -> None:
    if department_id is None:
        return
    if not db.query(Department).filter(Department.id == department_id).first():
        raise HTTPException(status_code=400, detail="Department does not exist")


def _ensure_unique_email(db: Session, email: str, exclude_id: int = None) -> None:
    query = db.query(Employee).filter(Employee.email == email)
    if exclude_id is not None:
        query = query.filter(Employee.id != exclude_id)
    if query.first():
        raise HTTPException(status_code=409, detail="Employee email already exists")


@router.get("/", response_model=List[EmployeeResponse])
def list_employees(department_id: Optional[int] = None, db: Session = Depends(get_db)):
    query = db.query(Employee)
    if department_id is not None:
        query = query.filter(Employee.department_id == department_id)
    return query.order_by(Employee.last_name, Employee.first_name).all()


@router.post("/", response_model=EmployeeResponse, status_code=201)
def create_employee(payload: EmployeeCreate, db: Session = Depends(get_db)):
    _check_department(db, payload.department_id)
    _ensure_unique_email(db, payload.email)
    employee = Employee(**payload.model_dump())
    db.add(employee)
    db.commit()
    db.refresh(employee)
    _log.info(f"Created employee {employee.id}")
    return employee


@router.get("/{employee_id}", response_model=EmployeeResponse)
def get_employee(employee_id: int, db: Session = Depends(get_db)):
    return _get_employee_or_404(db, employee_id)


@router.put("/{employee_id}", response_model=EmployeeResponse)
def update_employee(employee_id: int, payload: EmployeeUpdate, db: Session = Depends(get_db)):
    employee = _get_employee_or_404(db, employee_id)
    changes = payload.model_dump(exclude_unset=True)
    if "department_id" in changes:
        _check_department(db, changes["department_id"])
    if changes.get("email"):
        _ensure_unique_email(db, changes["email"], exclude_id=employee_id)
    for field, value in changes.items():
        setattr(employee, field, value)
    db.commit()
    db.refresh(employee)
    return employee


@router.delete("/{employee_id}")
def delete_employee(employee_id: int, db: Session = Depends(get_db)):
    employee = _get_employee_or_404(db, employee_id)
    db.delete(employee)
    db.commit()
    return {"message": "Employee deleted successfully"}
