"""Shared test fixtures."""

import zlib
from collections.abc import Callable, Sequence

import pytest

from badgecheck import PersonEntry


def _escape(text: str) -> str:
    return text.replace('\\', '\\\\').replace('(', '\\(').replace(')', '\\)')


def build_text_stream(*lines: str) -> bytes:
    """Content stream drawing each line with its own ``Td`` move."""
    ops = ['BT', '/F1 12 Tf']
    for index, line in enumerate(lines):
        y = 800 - 14 * index
        ops.append(f'72 {y} Td ({_escape(line)}) Tj')
    ops.append('ET')
    return '\n'.join(ops).encode('latin-1')


def _stream_object(dictionary: str, payload: bytes) -> bytes:
    header = f'<< {dictionary} /Length {len(payload)} >>\nstream\n'.encode('latin-1')
    return header + payload + b'\nendstream'


def build_paged_pdf(*pages: Sequence[tuple[str, bytes]]) -> bytes:
    """Assemble a PDF file with one page per argument.

    Each page is a sequence of (dictionary body, payload) stream pairs.
    Streams declaring ``/Subtype /Image`` become image XObjects of the page,
    the others its content streams, in order.
    """
    bodies: list[bytes] = [b'<< /Type /Catalog /Pages 2 0 R >>', b'']
    kids: list[int] = []
    for streams in pages:
        bodies.append(b'')
        page_number = len(bodies)
        contents: list[int] = []
        images: list[int] = []
        for dictionary, payload in streams:
            bodies.append(_stream_object(dictionary, payload))
            (images if '/Image' in dictionary else contents).append(len(bodies))
        refs = ' '.join(f'{number} 0 R' for number in contents)
        xobjects = ' '.join(f'/Im{index} {number} 0 R' for index, number in enumerate(images))
        bodies[page_number - 1] = (
            f'<< /Type /Page /Parent 2 0 R /MediaBox [0 0 595 842] '
            f'/Contents [{refs}] /Resources << /XObject << {xobjects} >> >> >>'
        ).encode('latin-1')
        kids.append(page_number)
    bodies[1] = (
        f"<< /Type /Pages /Kids [{' '.join(f'{number} 0 R' for number in kids)}] /Count {len(kids)} >>"
    ).encode('latin-1')

    out = bytearray(b'%PDF-1.4\n')
    offsets: list[int] = []
    for number, body in enumerate(bodies, start=1):
        offsets.append(len(out))
        out += f'{number} 0 obj\n'.encode('latin-1') + body + b'\nendobj\n'
    xref = len(out)
    out += f'xref\n0 {len(bodies) + 1}\n0000000000 65535 f \n'.encode('latin-1')
    for offset in offsets:
        out += f'{offset:010d} 00000 n \n'.encode('latin-1')
    out += f'trailer\n<< /Size {len(bodies) + 1} /Root 1 0 R >>\nstartxref\n{xref}\n%%EOF\n'.encode('latin-1')
    return bytes(out)


def build_pdf(*streams: tuple[str, bytes]) -> bytes:
    """Assemble a one-page PDF file from (dictionary body, payload) pairs."""
    return build_paged_pdf(streams)


@pytest.fixture
def text_stream() -> Callable[..., bytes]:
    """Factory for uncompressed content streams."""
    return build_text_stream


@pytest.fixture
def make_pdf() -> Callable[..., bytes]:
    """Factory for in-memory PDF files."""
    return build_pdf


@pytest.fixture
def make_paged_pdf() -> Callable[..., bytes]:
    """Factory for in-memory multi-page PDF files."""
    return build_paged_pdf


@pytest.fixture
def flate_pdf() -> Callable[..., bytes]:
    """Factory for a one-page PDF whose text layer is FlateDecode-compressed."""
    def factory(*lines: str) -> bytes:
        return build_pdf(('/Filter /FlateDecode', zlib.compress(build_text_stream(*lines))))
    return factory


@pytest.fixture
def entry() -> Callable[..., PersonEntry]:
    """Factory for PersonEntry objects with defaults."""
    def factory(first_name: str = 'Marie', last_name: str = 'DUPONT', **kwargs) -> PersonEntry:
        kwargs.setdefault('source', 'test.pdf')
        return PersonEntry.create(first_name, last_name, **kwargs)
    return factory
