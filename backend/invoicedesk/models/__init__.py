from invoicedesk.models.department import Department
from invoicedesk.models.document import Document, DocumentInfo, ProcessingLogEntry, ProcessingStatus
from invoicedesk.models.employee import Employee

__all__ = [
    "Department",
    "Document",
    "DocumentInfo",
    "Employee",
    "ProcessingLogEntry",
    "ProcessingStatus",
]
