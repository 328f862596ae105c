import io

import pytest

from invoicedesk.services.exceptions import UrlResolutionError


def test_save_and_resolve(storage):
    ref = storage.save("doc-1", "My Invoice (1).pdf", io.BytesIO(b"%PDF-1.4"))

    assert ref == "doc-1/My_Invoice_1_.pdf"
    assert storage.public_url(ref) == "http://testserver/files/doc-1/My_Invoice_1_.pdf"
    assert storage.file_size(ref) == 8


@pytest.mark.parametrize("ref", ["", "   ", "doc-1/missing.pdf", "../outside.pdf"])
def test_public_url_unresolvable(storage, ref):
    with pytest.raises(UrlResolutionError):
        storage.public_url(ref)


def test_delete_removes_file_and_empty_folder(storage):
    ref = storage.save("doc-1", "invoice.pdf", io.BytesIO(b"%PDF-1.4"))

    storage.delete(ref)

    with pytest.raises(UrlResolutionError):
        storage.public_url(ref)
    assert not (storage.root / "doc-1").exists()


def test_save_same_name_keeps_both_files(storage):
    first = storage.save("doc-1", "a b.pdf", io.BytesIO(b"first"))
    second = storage.save("doc-1", "a_b.pdf", io.BytesIO(b"second!"))

    assert first == "doc-1/a_b.pdf"
    assert second == "doc-1/a_b-1.pdf"
    assert storage.file_size(first) == 5
    assert storage.file_size(second) == 7
