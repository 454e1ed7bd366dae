"""Stream filter chain: decode the raw payload of a document object."""

import base64
import logging
import zlib
from collections.abc import Callable, Sequence

from badgecheck.errors import MalformedFilterData, UnsupportedFilter

log = logging.getLogger(__name__)

_WHITESPACE = b' \t\n\r\x0c\x00'
_HEX_DIGITS = frozenset(b'0123456789abcdefABCDEF')


def flate_decode(data: bytes) -> bytes:
    """Inflate a zlib/deflate payload.

    Trailing bytes after the end of the compressed stream are ignored, a
    truncated stream is an error.

    Args:
        data: Compressed payload.

    Returns:
        Inflated bytes.

    Raises:
        MalformedFilterData: If the payload is not a complete deflate stream.
    """
    decompressor = zlib.decompressobj()
    try:
        out = decompressor.decompress(data)
    except zlib.error as exc:
        raise MalformedFilterData(f"FlateDecode: {exc}") from exc
    if not decompressor.eof:
        raise MalformedFilterData("FlateDecode: truncated stream")
    return out


def ascii_hex_decode(data: bytes) -> bytes:
    """Decode an ASCII-hex payload.

    Whitespace is ignored, ``>`` ends the data and an odd trailing digit
    is padded with ``0``.

    Args:
        data: Hex-encoded payload.

    Returns:
        Decoded bytes.

    Raises:
        MalformedFilterData: On any non-hex character.
    """
    digits = bytearray()
    for byte in data:
        if byte == ord('>'):
            break
        if byte in _WHITESPACE:
            continue
        if byte not in _HEX_DIGITS:
            raise MalformedFilterData(f"ASCIIHexDecode: invalid character {chr(byte)!r}")
        digits.append(byte)
    if len(digits) % 2:
        digits.append(ord('0'))
    return bytes.fromhex(digits.decode('ascii'))


def ascii85_decode(data: bytes) -> bytes:
    """Decode an ASCII base-85 payload.

    ``z`` stands for four zero bytes, ``~>`` ends the data and a final
    group of n characters is padded with ``u`` and yields n-1 bytes.

    Args:
        data: Base-85 payload, optionally wrapped in ``<~`` / ``~>``.

    Returns:
        Decoded bytes.

    Raises:
        MalformedFilterData: On characters outside ``!``..``u`` or overflow.
    """
    body = data.strip(_WHITESPACE)
    if body.startswith(b'<~'):
        body = body[2:]
    end = body.find(b'~>')
    if end >= 0:
        body = body[:end]
    try:
        return base64.a85decode(body, adobe=False, ignorechars=_WHITESPACE)
    except ValueError as exc:
        raise MalformedFilterData(f"ASCII85Decode: {exc}") from exc


FILTERS: dict[str, Callable[[bytes], bytes]] = {
    'FlateDecode': flate_decode,
    'Fl': flate_decode,
    'ASCIIHexDecode': ascii_hex_decode,
    'AHx': ascii_hex_decode,
    'ASCII85Decode': ascii85_decode,
    'A85': ascii85_decode,
}


def decode_stream(data: bytes, filters: Sequence[str]) -> bytes:
    """Apply a filter chain to a raw payload, strictly in declared order.

    Args:
        data: Raw payload bytes.
        filters: Filter names, e.g. ``['ASCII85Decode', 'FlateDecode']``.

    Returns:
        Decoded bytes (``data`` unchanged for an empty chain).

    Raises:
        UnsupportedFilter: If a filter is not known.
        MalformedFilterData: If a filter fails on its input.
    """
    for name in filters:
        decoder = FILTERS.get(name)
        if decoder is None:
            raise UnsupportedFilter(name)
        data = decoder(data)
        log.debug("Applied %s: %d bytes", name, len(data))
    return data
