"""
Department database model
"""
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.orm import relationship

from invoicedesk.db.base import Base


class Department(Base):
    """Department model"""

    __tablename__ = "departments"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, unique=True)
    description = Column(Text)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    # Relationships
    employees = relationship("Employee", back_populates="department")

    @property
    def employee_count(self) -> int:
        return len(self.employees)
