"""
File storage service

Files live under UPLOAD_DIR and are referenced by a relative path such as
"<document_id>/invoice.pdf". The API serves that directory, so a reference
maps to a public URL under PUBLIC_BASE_URL + FILES_PATH.
"""
import logging
import re
import shutil
from pathlib import Path
from typing import BinaryIO, Optional
from urllib.parse import quote

from invoicedesk.core.config import settings
from invoicedesk.services.exceptions import UrlResolutionError

_log = logging.getLogger(__name__)


class StorageService:
    """Local file storage with public URL resolution"""

    def __init__(self, root: str, public_base_url: str, files_path: str = "/files"):
        self.root = Path(root).resolve()
        self.public_base_url = public_base_url.rstrip("/")
        self.files_path = "/" + files_path.strip("/")

    def save(self, document_id: str, filename: str, fileobj: BinaryIO) -> str:
        """
        Store a file for a document and return its reference

        An existing file is never overwritten: a numeric suffix is added to
        the name until it is free, e.g. invoice.pdf, invoice-1.pdf.
        """
        name = Path(self._safe_name(filename))
        folder = self.root / document_id
        folder.mkdir(parents=True, exist_ok=True)

        candidate = name.name
        counter = 0
        while True:
            try:
                buffer = open(folder / candidate, "xb")
                break
            except FileExistsError:
                counter += 1
                candidate = f"{name.stem}-{counter}{name.suffix}"

        ref = f"{document_id}/{candidate}"
        with buffer:
            shutil.copyfileobj(fileobj, buffer)
        _log.info(f"Stored file {ref}")
        return ref

    def public_url(self, ref: str) -> str:
        """
        Resolve a file reference to a fetchable URL

        Raises:
            UrlResolutionError: If the reference is invalid or the file is missing
        """
        path = self._path(ref)
        if not path.is_file():
            raise UrlResolutionError(f"Failed to get document URL: {ref} not found")
        return f"{self.public_base_url}{self.files_path}/{quote(ref)}"

    def file_size(self, ref: str) -> int:
        """Size of a stored file in bytes, read from file metadata only"""
        path = self._path(ref)
        try:
            return path.stat().st_size
        except FileNotFoundError as e:
            raise UrlResolutionError(f"Failed to get document info: {ref} not found") from e

    def delete(self, ref: str) -> None:
        path = self._path(ref)
        path.unlink(missing_ok=True)
        # drop the per-document folder once empty
        if path.parent != self.root and path.parent.is_dir() and not any(path.parent.iterdir()):
            path.parent.rmdir()

    def _path(self, ref: Optional[str]) -> Path:
        if not ref or not ref.strip():
            raise UrlResolutionError("Failed to get document URL: empty file reference")
        path = (self.root / ref).resolve()
        if self.root not in path.parents:
            raise UrlResolutionError(f"Failed to get document URL: invalid file reference {ref}")
        return path

    @staticmethod
    def _safe_name(filename: str) -> str:
        name = Path(filename or "").name
        name = re.sub(r"[^A-Za-z0-9._-]+", "_", name).strip("._")
        return name or "document.pdf"


def get_storage() -> StorageService:
    """Storage service configured from settings"""
    return StorageService(settings.UPLOAD_DIR, settings.PUBLIC_BASE_URL, settings.FILES_PATH)
