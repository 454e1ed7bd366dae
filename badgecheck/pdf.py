"""Page-by-page text layer recovery from PDF files.

The container is read with pypdf. The content streams of each page are
decoded with badgecheck.filters and tokenized with badgecheck.content.
"""

import io
import logging
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any

from pypdf import PageObject, PdfReader
from pypdf.errors import PyPdfError
from pypdf.generic import ArrayObject, DictionaryObject, StreamObject

from badgecheck.content import DEFAULT_KERNING_GAP, tokenize_text_stream
from badgecheck.errors import FilterError, UnreadablePdf
from badgecheck.filters import decode_stream

log = logging.getLogger(__name__)

_TEXT_OBJECT_RE = re.compile(r'(?<![A-Za-z])BT(?![A-Za-z])')


@dataclass
class RawStream:
    """Declared filter chain and undecoded payload of one stream object."""

    payload: bytes
    filters: list[str] = field(default_factory=list)
    is_image: bool = False


@dataclass
class PageText:
    """Lines recovered from the text layer of one page."""

    number: int                    # 1-based
    lines: list[str] = field(default_factory=list)

    @property
    def text_chars(self) -> int:
        return sum(len(line) for line in self.lines)


@dataclass
class PdfTextExtraction:
    """Lines recovered from a document's text layer, page by page."""

    pages: list[PageText] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    objects_read: int = 0
    objects_skipped: int = 0

    @property
    def lines(self) -> list[str]:
        return [line for page in self.pages for line in page.lines]

    @property
    def text_chars(self) -> int:
        return sum(page.text_chars for page in self.pages)

    def sparse_pages(self, min_chars: int) -> list[int]:
        """Numbers of the pages whose text layer holds fewer than ``min_chars`` characters."""
        return [page.number for page in self.pages if page.text_chars < min_chars]


def filter_names(value: Any) -> list[str]:
    """Read a ``/Filter`` entry (a name or an array of names) as bare filter names."""
    if value is None:
        return []
    value = value.get_object()
    items = value if isinstance(value, ArrayObject) else [value]
    return [str(item.get_object()).lstrip('/') for item in items]


def _raw_stream(stream: StreamObject) -> RawStream:
    return RawStream(
        payload=stream._data,
        filters=filter_names(stream.get('/Filter')),
        is_image=stream.get('/Subtype') == '/Image',
    )


def _resolve(value: Any) -> Any:
    return None if value is None else value.get_object()


def page_streams(page: PageObject) -> Iterator[RawStream]:
    """Yield the content streams of a page, then its XObjects.

    Form XObjects may carry text of their own; image XObjects are yielded
    flagged so that they can be skipped.
    """
    contents = _resolve(page.get('/Contents'))
    items = contents if isinstance(contents, ArrayObject) else [contents]
    for item in items:
        stream = _resolve(item)
        if isinstance(stream, StreamObject):
            yield _raw_stream(stream)

    resources = _resolve(page.get('/Resources'))
    if not isinstance(resources, DictionaryObject):
        return
    xobjects = _resolve(resources.get('/XObject'))
    if not isinstance(xobjects, DictionaryObject):
        return
    for ref in xobjects.values():
        stream = _resolve(ref)
        if isinstance(stream, StreamObject):
            yield _raw_stream(stream)


def read_pages(data: bytes) -> list[PageObject]:
    """Open a PDF held in memory and return its pages.

    Raises:
        UnreadablePdf: If pypdf cannot read the file structure.
    """
    try:
        reader = PdfReader(io.BytesIO(data))
        return list(reader.pages)
    except PyPdfError as exc:
        raise UnreadablePdf(f"not a readable PDF: {exc}") from exc


def assemble_page(
    extraction: PdfTextExtraction,
    number: int,
    streams: Iterable[RawStream],
    kerning_gap: float = DEFAULT_KERNING_GAP,
) -> PageText:
    """Collect the text lines of one page's streams, in drawing order.

    Image streams are skipped. A stream whose filter chain fails is
    abandoned as a whole, a warning is recorded on ``extraction`` and the
    next stream is processed.

    Args:
        extraction: Document-level result; receives the page and its counters.
        number: 1-based page number.
        streams: Streams of the page in drawing order.
        kerning_gap: Word-boundary gap for TJ arrays.

    Returns:
        The PageText appended to ``extraction``.
    """
    page = PageText(number=number)

    for stream in streams:
        if stream.is_image:
            log.debug("Page %d: image stream skipped", number)
            continue

        try:
            decoded = decode_stream(stream.payload, stream.filters)
        except FilterError as exc:
            extraction.objects_skipped += 1
            extraction.warnings.append(
                f"Could not decode a section of page {number} ({exc}); section skipped."
            )
            log.warning("Page %d: stream skipped: %s", number, exc)
            continue

        text = decoded.decode('latin-1')
        if not _TEXT_OBJECT_RE.search(text):
            continue
        extraction.objects_read += 1
        page.lines.extend(tokenize_text_stream(text, kerning_gap))

    extraction.pages.append(page)
    return page


def extract_pdf_lines(data: bytes, kerning_gap: float = DEFAULT_KERNING_GAP) -> PdfTextExtraction:
    """Read a PDF file and return the text layer of each of its pages.

    Raises:
        UnreadablePdf: If the file structure cannot be read.
    """
    extraction = PdfTextExtraction()
    for number, page in enumerate(read_pages(data), start=1):
        assemble_page(extraction, number, page_streams(page), kerning_gap)

    log.debug(
        "%d pages, %d lines from %d text streams (%d skipped)",
        len(extraction.pages), len(extraction.lines),
        extraction.objects_read, extraction.objects_skipped,
    )
    return extraction
