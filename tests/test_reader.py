"""Tests for badgecheck.reader module."""

from badgecheck.reader import (
    detect_delimiter,
    detect_encoding,
    normalize_whitespace,
    read_rows,
    rows_to_lines,
)


class TestDetectEncoding:
    """Tests for encoding detection."""

    def test_utf16le_bom(self, tmp_path):
        f = tmp_path / 'test.csv'
        f.write_bytes('Prénom;Nom\n'.encode('utf-16'))
        assert detect_encoding(f) in ('utf-16-le', 'utf-16-be')

    def test_utf8_fallback(self, tmp_path):
        f = tmp_path / 'test.csv'
        f.write_text('hello', encoding='utf-8')
        assert detect_encoding(f) == 'utf-8-sig'


class TestNormalizeWhitespace:
    """Tests for whitespace normalization."""

    def test_strips_leading_trailing(self):
        assert normalize_whitespace('  hello  ') == 'hello'

    def test_collapses_multiple_spaces(self):
        assert normalize_whitespace('  Jean  Pierre ') == 'Jean Pierre'

    def test_handles_tabs_and_newlines(self):
        assert normalize_whitespace('a\t\nb') == 'a b'

    def test_unicode_whitespace(self):
        # U+2006 = Six-Per-Em Space
        assert normalize_whitespace('a\u2006b') == 'a b'

    def test_empty_string(self):
        assert normalize_whitespace('') == ''


class TestDetectDelimiter:
    """Tests for delimiter sniffing."""

    def test_semicolon(self):
        assert detect_delimiter('Prénom;Nom\nMarie;DUPONT\n') == ';'

    def test_comma(self):
        assert detect_delimiter('Prénom,Nom\nMarie,DUPONT\n') == ','

    def test_tsv_suffix(self):
        assert detect_delimiter('Prénom;Nom', '.tsv') == '\t'

    def test_single_column_falls_back_to_comma(self):
        assert detect_delimiter('Marie\nSophie\n') == ','


class TestReadRows:
    """Tests for reading delimited files."""

    def test_utf8_bom_semicolon(self, tmp_path):
        f = tmp_path / 'order.csv'
        f.write_text('Prénom;Nom;Passion\nMarie;DUPONT;Golf\n;;\nJean;MARTIN;\n', encoding='utf-8-sig')
        assert read_rows(f) == [
            ['Prénom', 'Nom', 'Passion'],
            ['Marie', 'DUPONT', 'Golf'],
            ['Jean', 'MARTIN'],
        ]

    def test_utf16(self, tmp_path):
        f = tmp_path / 'order.csv'
        f.write_bytes('Prénom;Nom\r\nChloé;LE  GOFF\r\n'.encode('utf-16'))
        assert read_rows(f) == [['Prénom', 'Nom'], ['Chloé', 'LE GOFF']]

    def test_cp1252_export(self, tmp_path):
        f = tmp_path / 'order.csv'
        f.write_bytes('Prénom;Nom;Passion\nHélène;LEFÈVRE;Pétanque\n'.encode('cp1252'))
        assert read_rows(f) == [['Prénom', 'Nom', 'Passion'], ['Hélène', 'LEFÈVRE', 'Pétanque']]

    def test_tsv(self, tmp_path):
        f = tmp_path / 'order.tsv'
        f.write_text('Prénom\tNom\nMarie\tDUPONT\n', encoding='utf-8')
        assert read_rows(f) == [['Prénom', 'Nom'], ['Marie', 'DUPONT']]

    def test_rows_to_lines(self):
        assert rows_to_lines([['Marie', 'DUPONT'], ['Golf']]) == ['Marie\tDUPONT', 'Golf']
