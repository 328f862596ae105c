"""
Department endpoints
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from invoicedesk.db.session import get_db
from invoicedesk.models.department import Department
from invoicedesk.schemas.department import DepartmentCreate, DepartmentResponse, DepartmentUpdate

_log = logging.getLogger(__name__)

router = APIRouter()


def _get_department_or_404(db: Session, department_id: int) -> Department:
    department = db.query(Department).filter(Department.id == department_id).first()
    if not department:
        raise HTTPException(status_code=404, detail="Department not found")
    return department


def _ensure_unique_name(db: Session, name: str, exclude_id: int = None) -> None:
    query = db.query(Department).filter(Department.name == name)
    if exclude_id is not None:
        query = query.filter(Department.id != exclude_id)
    if query.first():
        raise HTTPException(status_code=409, detail="Department name already exists")


@router.get("/", response_model=List[DepartmentResponse])
def list_departments(db: Session = Depends(get_db)):
    return db.query(Department).order_by(Department.name).all()


@router.post("/", response_model=DepartmentResponse, status_code=201)
def create_department(payload: DepartmentCreate, db: Session = Depends(get_db)):
    _ensure_unique_name(db, payload.name)
    department = Department(**payload.model_dump())
    db.add(department)
    db.commit()
    db.refresh(department)
    _log.info(f"Created department {department.id} ({department.name})")
    return department


@router.get("/{department_id}", response_model=DepartmentResponse)
def get_department(department_id: int, db: Session = Depends(get_db)):
    return _get_department_or_404(db, department_id)


@router.put("/{department_id}", response_model=DepartmentResponse)
def update_department(department_id: int, payload: DepartmentUpdate, db: Session = Depends(get_db)):
    department = _get_department_or_404(db, department_id)
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("name"):
        _ensure_unique_name(db, changes["name"], exclude_id=department_id)
    for field, value in changes.items():
        setattr(department, field, value)
    db.commit()
    db.refresh(department)
    return department


@router.delete("/{department_id}")
def delete_department(department_id: int, db: Session = Depends(get_db)):
    department = _get_department_or_404(db, department_id)
    if department.employees:
        raise HTTPException(status_code=409, detail="Department still has employees")
    db.delete(department)
    db.commit()
    return {"message": "Department deleted successfully"}
