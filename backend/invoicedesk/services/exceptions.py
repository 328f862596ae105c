"""
Exceptions raised by the document processing services.
"""


class ProcessingError(Exception):
    """Base exception for all document processing errors"""
    pass


class InvalidInputError(ProcessingError):
    """Raised when the document identifier is missing"""
    pass


class UrlResolutionError(ProcessingError):
    """Raised when a stored file reference cannot be turned into a URL"""
    pass


class ExtractionError(ProcessingError):
    """Raised when the extraction service returns no data"""
    pass


class DateFormatError(ProcessingError):
    """Raised when extracted date text cannot be parsed"""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Invalid date format: {value}")


class PersistenceError(ProcessingError):
    """Raised when a database write fails"""
    pass
