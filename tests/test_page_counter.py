import pypdf
import pytest

from readgate.models import Material
from readgate.utils.page_counter import PageCounter


@pytest.mark.parametrize("size, file_type, expected", [
    (10, "text/plain", 1),
    (5 * 1024 * 1024, "application/vnd.ms-powerpoint", 1),
    (0, "application/pdf", 1),
    (75 * 1024, "application/pdf", 1),
    (75 * 1024 + 1, "application/pdf", 2),
    (100 * 1024 * 1024, "application/pdf", 50),
])
def test_estimate_pages(size, file_type, expected):
    assert PageCounter.estimate_pages(size, file_type) == expected


def test_explicit_page_count_wins():
    material = Material(title="Slides", file_type="application/pdf", file_size=10 * 1024 * 1024, page_count=7)
    assert PageCounter.count_pages(material) == 7


def test_reads_real_pdf(tmp_path):
    writer = pypdf.PdfWriter()
    for _ in range(3):
        writer.add_blank_page(width=612, height=792)
    path = tmp_path / "notes.pdf"
    with open(path, "wb") as f:
        writer.write(f)

    material = Material(title="Notes", file_path=str(path), file_type="application/pdf", file_size=path.stat().st_size)
    assert PageCounter.count_pages(material) == 3


def test_unreadable_pdf_falls_back_to_estimate(tmp_path):
    path = tmp_path / "broken.pdf"
    path.write_bytes(b"not a pdf")
    material = Material(title="Broken", file_path=str(path), file_type="application/pdf", file_size=200 * 1024)
    assert PageCounter.count_pages(material) == 3
