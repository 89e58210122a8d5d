"""Turn PDF pages into rows of positioned text fragments."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Iterable, Sequence

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from fx_ghana.errors import ParseError
from fx_ghana.ingestion.models import TextFragment, TextRow
from fx_ghana.utils.logger import get_logger

LOGGER = get_logger(__name__)

# Raised by pypdf while walking malformed page objects or content streams.
_PAGE_MODEL_ERRORS = (PyPdfError, KeyError, TypeError, ValueError, AttributeError)


def flatten_row(row: TextRow) -> str:
    """Concatenate a row's fragments in order without adding separators."""

    return "".join(fragment.text for fragment in row.fragments)


def group_rows(fragments: Iterable[TextFragment], tolerance: float = 1.0) -> list[TextRow]:
    """Group fragments whose baselines lie within ``tolerance`` of each other.

    Rows are returned top to bottom (PDF ``y`` grows upwards); fragments inside
    a row keep left-to-right order, ties resolved by emission order.
    """

    ordered = sorted(fragments, key=lambda fragment: -fragment.y)
    buckets: list[list[TextFragment]] = []
    for fragment in ordered:
        if buckets and abs(buckets[-1][0].y - fragment.y) <= tolerance:
            buckets[-1].append(fragment)
        else:
            buckets.append([fragment])
    return [
        TextRow(y=bucket[0].y, fragments=tuple(sorted(bucket, key=lambda f: f.x)))
        for bucket in buckets
    ]


def separate_cells(row: TextRow) -> TextRow:
    """Pad a fragment with a trailing space when the next one starts further right.

    Table cells are emitted as separate fragments without whitespace between
    them; fragments that already touch whitespace are left alone.
    """

    fragments = list(row.fragments)
    for index, (current, following) in enumerate(zip(fragments, fragments[1:])):
        if following.x <= current.x:
            continue
        if current.text[-1:].isspace() or following.text[:1].isspace():
            continue
        fragments[index] = replace(current, text=current.text + " ")
    return replace(row, fragments=tuple(fragments))


class PDFRowReader:
    """Read a PDF into rows using ``pypdf``'s text visitor."""

    def __init__(self, row_tolerance: float = 1.0) -> None:
        self.row_tolerance = row_tolerance

    def read_pages(self, pdf_path: str | Path) -> list[list[TextRow]]:
        """Return the rows of each page, pages in ascending order.

        Any failure to open the file or walk its page model is raised as
        :class:`ParseError`.
        """

        path = Path(pdf_path)
        try:
            reader = PdfReader(path)
            return [self._page_rows(page) for page in reader.pages]
        except (OSError, *_PAGE_MODEL_ERRORS) as exc:
            raise ParseError(str(path), f"{type(exc).__name__}: {exc}") from exc

    def read_rows(self, pdf_path: str | Path) -> list[TextRow]:
        return [row for page in self.read_pages(pdf_path) for row in page]

    def read_lines(self, pdf_path: str | Path) -> list[str]:
        """Return every row of the document flattened to a string."""

        lines = [flatten_row(row) for row in self.read_rows(pdf_path)]
        LOGGER.info("Read %s text rows from %s", len(lines), pdf_path)
        return lines

    def _page_rows(self, page) -> list[TextRow]:
        fragments: list[TextFragment] = []

        def _visit(text: str, cm: Sequence[float], tm: Sequence[float], *_args) -> None:
            cleaned = text.replace("\r", "").replace("\n", "")
            if not cleaned:
                return
            # Text-space origin mapped through the current transformation matrix.
            x = tm[4] * cm[0] + tm[5] * cm[2] + cm[4]
            y = tm[4] * cm[1] + tm[5] * cm[3] + cm[5]
            fragments.append(TextFragment(text=cleaned, x=x, y=y))

        page.extract_text(visitor_text=_visit)
        return [separate_cells(row) for row in group_rows(fragments, self.row_tolerance)]


__all__ = ["PDFRowReader", "flatten_row", "group_rows", "separate_cells"]
