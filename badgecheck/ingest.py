"""Turn order and production files into person entries.

Each file is parsed on its own: PDF text layer (or OCR for the pages without
one), then single-column detection, then field extraction. Files are
parsed concurrently and a failing file only produces an empty, flagged
document.
"""

import asyncio
import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional

from badgecheck import ParsedDocument, PersonEntry
from badgecheck.classify import CasingClassifier
from badgecheck.config import Config
from badgecheck.errors import BadgeCheckError, NoUsableData, OcrUnavailable, UnsupportedDocument
from badgecheck.extract import NameFieldExtractor
from badgecheck.merge import detect_single_column_format, merge_single_column, single_column_entries
from badgecheck.ocr import OcrBackend, recognize_pages
from badgecheck.pdf import extract_pdf_lines
from badgecheck.reader import normalize_whitespace, read_rows, rows_to_lines

log = logging.getLogger(__name__)

PDF_SUFFIXES = ('.pdf',)
TEXT_SUFFIXES = ('.csv', '.tsv', '.txt')

CANCELLED_WARNING = "parsing cancelled or timed out; document ignored"

# Designer sign-off blocks printed at the bottom of proof sheets
_SIGNATURE_RE = re.compile(r'\b(?:cartouche|graphiste|graphic designer|mise en page)\b', re.IGNORECASE)


def _is_content_line(line: str) -> bool:
    return bool(line.strip()) and not _SIGNATURE_RE.search(line)


def drop_signature_lines(lines: Iterable[str]) -> list[str]:
    """Remove empty lines and designer sign-off lines."""
    return [line for line in lines if _is_content_line(line)]


def dedupe_entries(entries: Iterable[PersonEntry]) -> list[PersonEntry]:
    """Keep the first entry of each identity hash, preserving order."""
    seen: dict[str, PersonEntry] = {}
    for entry in entries:
        seen.setdefault(entry.identity_hash, entry)
    return list(seen.values())


def _with_pages(entries: Iterable[PersonEntry], pages: Sequence[Optional[int]]) -> list[PersonEntry]:
    """Set the page of each entry from the page of the line it was read on."""
    return [
        replace(entry, page=pages[entry.line - 1]) if entry.line else entry
        for entry in entries
    ]


def parse_lines(
    lines: Sequence[str],
    source: str,
    config: Config,
    doc: Optional[ParsedDocument] = None,
    pages: Optional[Sequence[int]] = None,
) -> ParsedDocument:
    """Run single-column detection and field extraction over text lines.

    Args:
        lines: Text lines of one document.
        source: Document identifier.
        config: Run configuration (vocabulary, interest keywords).
        doc: Document to fill; a new one is created if omitted.
        pages: Page number of each line, when the document has pages.

    Returns:
        The filled ParsedDocument.
    """
    doc = doc or ParsedDocument(source=source)
    numbered = [
        (line, page)
        for line, page in zip(lines, pages if pages is not None else [None] * len(lines))
        if _is_content_line(line)
    ]
    lines = [line for line, _ in numbered]
    doc.line_count = len(lines)
    doc.log.append(f"{len(lines)} text lines")

    classifier = CasingClassifier(interest_keywords=config.interest_keywords)
    extractor = NameFieldExtractor(vocabulary=config.vocabulary, classifier=classifier)

    values = [
        (line, page)
        for line, page in numbered
        if not extractor.is_boilerplate(line) and not config.vocabulary.is_column_label(line)
    ]
    fmt = detect_single_column_format([line for line, _ in values], classifier)
    if fmt is not None:
        entries = single_column_entries([line for line, _ in values], fmt, source, config.vocabulary)
        doc.single_column_format = fmt
        doc.entries = _with_pages(entries, [page for _, page in values])
        doc.log.append(f"single-column document ({fmt.value}): {len(doc.entries)} values")
        log.info("%s: single-column document (%s), %d values", source, fmt.value, len(doc.entries))
        return doc

    outcome = extractor.extract(lines, source)
    doc.entries = dedupe_entries(_with_pages(outcome.entries, [page for _, page in numbered]))
    doc.warnings.extend(outcome.warnings)
    if outcome.header_index is not None:
        doc.log.append(f"header found at line {outcome.header_index + 1}")
    removed = len(outcome.entries) - len(doc.entries)
    if removed:
        doc.log.append(f"{removed} duplicate entries removed")
    doc.log.append(f"{len(doc.entries)} entries extracted")
    log.info("%s: %d entries extracted", source, len(doc.entries))
    return doc


def _page_list(numbers: Sequence[int]) -> str:
    return ', '.join(str(number) for number in numbers)


async def parse_pdf_bytes(
    data: bytes,
    source: str,
    config: Optional[Config] = None,
    ocr: Optional[OcrBackend] = None,
) -> ParsedDocument:
    """Parse a PDF held in memory.

    Pages whose text layer is (nearly) empty are sent to OCR and their
    recognized lines take the place of the text layer, in page order. When
    OCR cannot be used, such pages are ignored with a warning as long as
    the rest of the document has a text layer.

    Args:
        data: Raw PDF bytes.
        source: Document identifier.
        config: Run configuration (defaults if omitted).
        ocr: OCR backend used for pages without a text layer.

    Returns:
        ParsedDocument with entries, warnings and log.

    Raises:
        UnreadablePdf: If the file structure cannot be read.
        OcrUnavailable: If no page has a text layer and OCR cannot be performed.
    """
    config = config or Config()
    doc = ParsedDocument(source=source)

    extraction = await asyncio.to_thread(extract_pdf_lines, data, config.kerning_gap)
    doc.warnings.extend(extraction.warnings)
    doc.log.append(
        f"{len(extraction.pages)} pages, {extraction.objects_read} text objects read, "
        f"{extraction.objects_skipped} skipped"
    )
    page_lines = {page.number: page.lines for page in extraction.pages}

    sparse = extraction.sparse_pages(config.ocr_min_chars)
    if sparse:
        log.info("%s: no usable text layer on page(s) %s, running OCR", source, _page_list(sparse))
        doc.log.append(f"no usable text layer on page(s) {_page_list(sparse)}, OCR fallback")
        try:
            recognized = await recognize_pages(data, ocr, sparse)
        except OcrUnavailable as exc:
            if len(sparse) == len(extraction.pages):
                raise
            warning = f"OCR unavailable, page(s) {_page_list(sparse)} ignored: {exc}"
            doc.warnings.append(warning)
            log.warning("%s: %s", source, warning)
        else:
            for number, result in recognized.pages.items():
                page_lines[number] = [normalize_whitespace(line) for line in result.text.splitlines()]
            doc.ocr_confidence = recognized.confidence
            if recognized.confidence is not None:
                doc.log.append(f"average OCR confidence {recognized.confidence:.2f}")
                log.info("%s: average OCR confidence %.2f", source, recognized.confidence)

    lines: list[str] = []
    pages: list[int] = []
    for number in sorted(page_lines):
        lines.extend(page_lines[number])
        pages.extend([number] * len(page_lines[number]))
    return parse_lines(lines, source, config, doc, pages)


def parse_rows(rows: Sequence[Sequence[str]], source: str, config: Optional[Config] = None) -> ParsedDocument:
    """Parse the rows of a spreadsheet export."""
    config = config or Config()
    return parse_lines(rows_to_lines([list(row) for row in rows]), source, config)


async def parse_file(
    path: str | Path,
    config: Optional[Config] = None,
    ocr: Optional[OcrBackend] = None,
) -> ParsedDocument:
    """Parse one file according to its suffix.

    Raises:
        UnsupportedDocument: If the suffix is not a PDF or delimited text.
        OSError: If the file cannot be read.
        OcrUnavailable: If OCR is required but cannot be performed.
    """
    config = config or Config()
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix in PDF_SUFFIXES:
        data = await asyncio.to_thread(path.read_bytes)
        return await parse_pdf_bytes(data, path.name, config, ocr)
    if suffix in TEXT_SUFFIXES:
        rows = await asyncio.to_thread(read_rows, path)
        return parse_rows(rows, path.name, config)
    raise UnsupportedDocument(f"unsupported file type: {path.name}")


def failed_document(source: str, error: str, warning: Optional[str] = None) -> ParsedDocument:
    """An empty document flagged with a hard error."""
    return ParsedDocument(source=source, warnings=[warning or error], error=error)


async def _parse_with_timeout(
    path: Path,
    config: Config,
    ocr: Optional[OcrBackend],
    timeout: Optional[float],
) -> ParsedDocument:
    if timeout is None:
        return await parse_file(path, config, ocr)
    return await asyncio.wait_for(parse_file(path, config, ocr), timeout)


async def ingest_documents(
    sources: Sequence[str | Path],
    config: Optional[Config] = None,
    ocr: Optional[OcrBackend] = None,
    timeout: Optional[float] = None,
) -> list[ParsedDocument]:
    """Parse several files concurrently.

    Documents are returned in the order of ``sources``. A file that fails,
    times out or is cancelled is returned as an empty document carrying a
    warning and an ``error``; its partial entries are discarded.

    Args:
        sources: File paths.
        config: Run configuration (defaults if omitted).
        ocr: OCR backend for files without a text layer.
        timeout: Per-file time limit in seconds.

    Returns:
        One ParsedDocument per source.
    """
    config = config or Config()
    paths = [Path(source) for source in sources]
    outcomes = await asyncio.gather(
        *(_parse_with_timeout(path, config, ocr, timeout) for path in paths),
        return_exceptions=True,
    )

    documents: list[ParsedDocument] = []
    for path, outcome in zip(paths, outcomes):
        if isinstance(outcome, ParsedDocument):
            documents.append(outcome)
        elif isinstance(outcome, (asyncio.CancelledError, asyncio.TimeoutError)):
            log.warning("%s: %s", path.name, CANCELLED_WARNING)
            documents.append(failed_document(path.name, CANCELLED_WARNING))
        elif isinstance(outcome, OcrUnavailable):
            log.warning("%s: %s", path.name, outcome)
            documents.append(failed_document(
                path.name, str(outcome), f"OCR unavailable, document ignored: {outcome}",
            ))
        elif isinstance(outcome, (BadgeCheckError, OSError, ValueError)):
            log.warning("%s: %s", path.name, outcome)
            documents.append(failed_document(path.name, str(outcome)))
        elif isinstance(outcome, Exception):
            log.error("%s: unexpected error while parsing", path.name, exc_info=outcome)
            documents.append(failed_document(path.name, f"unexpected error: {outcome}"))
        else:
            raise outcome
    return documents


def collect_entries(documents: Sequence[ParsedDocument]) -> list[PersonEntry]:
    """Entries of one logical list once all its documents are parsed.

    Standard documents contribute their (already de-duplicated) entries in
    document order; single-column documents are merged by line position
    and appended.
    """
    standard = [
        entry
        for doc in documents
        if doc.single_column_format is None
        for entry in doc.entries
    ]
    merged = dedupe_entries(merge_single_column(documents))
    return standard + merged


@dataclass
class IngestedList:
    """All documents of one side (order or produced) and their entries."""

    documents: list[ParsedDocument] = field(default_factory=list)
    entries: list[PersonEntry] = field(default_factory=list)

    @property
    def warnings(self) -> list[str]:
        return [f"{doc.source}: {warning}" for doc in self.documents for warning in doc.warnings]

    @property
    def errors(self) -> list[str]:
        return [f"{doc.source}: {doc.error}" for doc in self.documents if doc.error]


async def ingest_list(
    sources: Sequence[str | Path],
    config: Optional[Config] = None,
    ocr: Optional[OcrBackend] = None,
    timeout: Optional[float] = None,
    require_entries: bool = False,
) -> IngestedList:
    """Parse every file of one list and collect its entries.

    Raises:
        NoUsableData: If ``require_entries`` is set and no entry was found.
    """
    documents = await ingest_documents(sources, config, ocr, timeout)
    entries = collect_entries(documents)
    if require_entries and not entries:
        raise NoUsableData(f"no entries found in {', '.join(doc.source for doc in documents)}")
    return IngestedList(documents=documents, entries=entries)
