"""Recover the drawn text of a decoded content stream, one candidate line per text block."""

import logging
import re

log = logging.getLogger(__name__)

# Numeric adjustment (thousandths of a text space unit) above which a gap
# inside a TJ array is read as a word boundary.
DEFAULT_KERNING_GAP = 80.0

SHOW_OPERATORS = frozenset({'Tj', 'TJ'})
NEXT_LINE_SHOW_OPERATORS = frozenset({"'", '"'})
FLUSH_OPERATORS = frozenset({'T*', 'Td', 'TD', 'Tm', 'BT', 'ET'})

_ESCAPES = {
    'n': '\n',
    'r': '\r',
    't': '\t',
    'b': '\b',
    'f': '\f',
    '(': '(',
    ')': ')',
    '\\': '\\',
}
_DELIMITERS = frozenset('()<>[]{}/%')
_WHITESPACE = frozenset(' \t\r\n\x0c\x00')
_NUMBER_RE = re.compile(r'[+-]?(?:\d+\.?\d*|\.\d+)')
_SPACES_RE = re.compile(r'\s+')


def read_string_literal(content: str, start: int) -> tuple[str, int]:
    """Decode a parenthesized string literal.

    Args:
        content: Latin-1 view of the content stream.
        start: Index of the opening ``(``.

    Returns:
        (decoded value, index just past the closing parenthesis)
    """
    index = start + 1
    depth = 1
    chars: list[str] = []
    length = len(content)

    while index < length:
        char = content[index]

        if char == '\\':
            index += 1
            if index >= length:
                break
            nxt = content[index]
            if '0' <= nxt <= '7':
                digits = nxt
                index += 1
                while len(digits) < 3 and index < length and '0' <= content[index] <= '7':
                    digits += content[index]
                    index += 1
                chars.append(chr(int(digits, 8) & 0xFF))
                continue
            if nxt in '\r\n':
                # line continuation
                index += 1
                if nxt == '\r' and index < length and content[index] == '\n':
                    index += 1
                continue
            chars.append(_ESCAPES.get(nxt, nxt))
            index += 1
            continue

        if char == '(':
            depth += 1
        elif char == ')':
            depth -= 1
            if depth == 0:
                return ''.join(chars), index + 1
        chars.append(char)
        index += 1

    return ''.join(chars), length


def read_string_array(
    content: str,
    start: int,
    kerning_gap: float = DEFAULT_KERNING_GAP,
) -> tuple[str, int]:
    """Decode a ``[...]`` array of strings and positioning adjustments.

    Justified text often encodes inter-word space as a numeric gap rather
    than a space character; a gap wider than ``kerning_gap`` inserts one
    space before the next string piece.

    Args:
        content: Latin-1 view of the content stream.
        start: Index of the opening ``[``.
        kerning_gap: Magnitude above which a gap is a word boundary.

    Returns:
        (concatenated text, index just past the closing bracket)
    """
    index = start + 1
    result = ''
    pending_space = False
    length = len(content)

    while index < length:
        char = content[index]

        if char == '(':
            if pending_space and result and not result.endswith(' '):
                result += ' '
            pending_space = False
            value, index = read_string_literal(content, index)
            result += value
            continue

        if char == ']':
            return result, index + 1

        match = _NUMBER_RE.match(content, index)
        if match:
            if abs(float(match.group())) > kerning_gap:
                pending_space = True
            index = match.end()
            continue

        index += 1

    return result, length


def _read_operator(content: str, start: int) -> tuple[str, int]:
    """Read a run of regular characters (operator, number or name body)."""
    index = start
    length = len(content)
    while index < length and content[index] not in _WHITESPACE and content[index] not in _DELIMITERS:
        index += 1
    return content[start:index], index


def tokenize_text_stream(content: str, kerning_gap: float = DEFAULT_KERNING_GAP) -> list[str]:
    """Turn a content stream into candidate text lines.

    Positioning and text-object operators end the current line; string
    operands are attached to the line their show operator draws on. Strings
    given to any other operator (marked-content properties such as
    /ActualText, for instance) are discarded.

    Args:
        content: Latin-1 view of a decoded content stream.
        kerning_gap: Forwarded to :func:`read_string_array`.

    Returns:
        Non-empty, whitespace-collapsed lines in drawing order.
    """
    lines: list[str] = []
    current: list[str] = []
    operand: list[str] = []

    def flush() -> None:
        text = _SPACES_RE.sub(' ', ''.join(current)).strip()
        if text:
            lines.append(text)
        current.clear()

    index = 0
    length = len(content)
    while index < length:
        char = content[index]

        if char == '(':
            value, index = read_string_literal(content, index)
            operand.append(value)
            continue

        if char == '[':
            value, index = read_string_array(content, index, kerning_gap)
            operand.append(value)
            continue

        if char == '%':
            end = content.find('\n', index)
            index = length if end < 0 else end + 1
            continue

        if char in _WHITESPACE or char in _DELIMITERS:
            index += 1
            continue

        token, index = _read_operator(content, index)
        if token in NEXT_LINE_SHOW_OPERATORS:
            flush()
            current.extend(operand)
            operand.clear()
        elif token in SHOW_OPERATORS:
            current.extend(operand)
            operand.clear()
        elif token in FLUSH_OPERATORS:
            operand.clear()
            flush()
        elif not _NUMBER_RE.fullmatch(token):
            # operands of any other operator (marked content, fonts...) are not drawn
            operand.clear()

    flush()
    return lines
