"""Delimited text reader (CSV/TSV exports) with encoding detection."""

import csv
import io
import logging
import re
from pathlib import Path

log = logging.getLogger(__name__)

# Matches any sequence of whitespace (including Unicode whitespace like U+2006)
_WHITESPACE_RE = re.compile(r'\s+')

_CANDIDATE_DELIMITERS = ';,\t'


def detect_encoding(path: Path) -> str:
    """Detect file encoding by checking for BOM bytes.

    Args:
        path: Path to the delimited file.

    Returns:
        Encoding string suitable for open().
    """
    with open(path, 'rb') as f:
        bom = f.read(2)
    if bom == b'\xff\xfe':
        return 'utf-16-le'
    if bom == b'\xfe\xff':
        return 'utf-16-be'
    return 'utf-8-sig'


def normalize_whitespace(value: str) -> str:
    """Collapse any run of whitespace into one space and strip the ends."""
    return _WHITESPACE_RE.sub(' ', value).strip()


def detect_delimiter(sample: str, suffix: str = '') -> str:
    """Pick the column delimiter of a delimited export.

    ``.tsv`` files are tab separated; otherwise the csv sniffer chooses among
    semicolon, comma and tab, falling back to a comma.
    """
    if suffix.lower() == '.tsv':
        return '\t'
    try:
        return csv.Sniffer().sniff(sample, delimiters=_CANDIDATE_DELIMITERS).delimiter
    except csv.Error:
        return ','


def _read_text(path: Path, encoding: str) -> str:
    with open(path, 'r', encoding=encoding, newline='') as f:
        return f.read()


def read_rows(path: str | Path) -> list[list[str]]:
    """Read the non-empty rows of a delimited file.

    Handles UTF-16 (with BOM) and UTF-8 encoded files automatically; a
    file that is not valid UTF-8 is read as cp1252 (Windows Excel exports).
    Cells are whitespace-normalized and trailing empty cells dropped.

    Args:
        path: Path to the file.

    Returns:
        Rows of cells, without fully empty rows.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    path = Path(path)
    encoding = detect_encoding(path)

    try:
        content = _read_text(path, encoding)
    except UnicodeDecodeError:
        if encoding != 'utf-8-sig':
            raise
        log.info("%s is not valid UTF-8, reading it as cp1252", path)
        content = _read_text(path, 'cp1252')

    # Strip BOM if present
    content = content.lstrip('\ufeff')
    delimiter = detect_delimiter(content[:4096], path.suffix)

    rows: list[list[str]] = []
    for row in csv.reader(io.StringIO(content), delimiter=delimiter):
        cells = [normalize_whitespace(cell) for cell in row]
        while cells and not cells[-1]:
            cells.pop()
        if any(cells):
            rows.append(cells)

    log.info("%d rows read from %s", len(rows), path)
    return rows


def rows_to_lines(rows: list[list[str]]) -> list[str]:
    """Join each row with tabs so the line-based extractor sees real columns."""
    return ['\t'.join(row) for row in rows]
