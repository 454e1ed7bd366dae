"""Tests for badgecheck.merge module."""

from badgecheck import ParsedDocument, SingleColumnFormat
from badgecheck.merge import detect_single_column_format, merge_single_column, single_column_entries

FIRST_NAMES = ['Marie', 'Sophie', 'Julie', 'Lucie', 'Chloé']
LAST_NAMES = ['DUPONT', 'MARTIN', 'BERNARD', 'PETIT', 'DURAND']
INTERESTS = ['Golf et randonnée', 'Lecture', 'Voyage en Asie', 'Cuisine italienne']


def _single_column_doc(lines: list[str], fmt: SingleColumnFormat, source: str) -> ParsedDocument:
    return ParsedDocument(
        source=source,
        entries=single_column_entries(lines, fmt, source),
        single_column_format=fmt,
    )


class TestDetectSingleColumnFormat:
    """Tests for single-column detection."""

    def test_first_names(self):
        assert detect_single_column_format(FIRST_NAMES) is SingleColumnFormat.FIRST_NAMES

    def test_last_names(self):
        assert detect_single_column_format(LAST_NAMES) is SingleColumnFormat.LAST_NAMES

    def test_interests(self):
        assert detect_single_column_format(INTERESTS) is SingleColumnFormat.INTERESTS

    def test_full_name_list_is_not_single_column(self):
        lines = ['Marie DUPONT', 'Jean MARTIN', 'Sophie PETIT', 'Paul BERNARD']
        assert detect_single_column_format(lines) is None

    def test_table_rows_are_not_interests(self):
        lines = ['Marie\tDUPONT\tGolf', 'Jean\tMARTIN\tTennis', 'Lucie\tPETIT\tYoga']
        assert detect_single_column_format(lines) is None

    def test_isolated_names_alternating(self):
        lines = ['Marie', 'DUPONT', 'Sophie', 'MARTIN']
        assert detect_single_column_format(lines) is None

    def test_empty(self):
        assert detect_single_column_format(['', '  ']) is None


class TestSingleColumnEntries:
    """Tests for wrapping single-column lines."""

    def test_keeps_line_numbers(self):
        entries = single_column_entries(['Marie', '', 'Sophie'], SingleColumnFormat.FIRST_NAMES, 'p.pdf')
        assert [(e.first_name, e.last_name, e.line) for e in entries] == [
            ('Marie', '', 1),
            ('Sophie', '', 3),
        ]

    def test_interest_column(self):
        entries = single_column_entries(['Golf'], SingleColumnFormat.INTERESTS, 'i.pdf')
        assert entries[0].interest == 'Golf'
        assert entries[0].first_name == ''

    def test_column_titles_are_dropped(self):
        lines = ['Prénom', 'Marie', 'Sophie']
        entries = single_column_entries(lines, SingleColumnFormat.FIRST_NAMES, 'p.csv')
        assert [e.first_name for e in entries] == ['Marie', 'Sophie']


class TestMergeSingleColumn:
    """Tests for merging parallel single-column documents."""

    def test_first_and_last_names_are_zipped(self):
        docs = [
            _single_column_doc(FIRST_NAMES, SingleColumnFormat.FIRST_NAMES, 'prenoms.pdf'),
            _single_column_doc(LAST_NAMES, SingleColumnFormat.LAST_NAMES, 'noms.pdf'),
        ]
        merged = merge_single_column(docs)
        assert len(merged) == 5
        assert [e.full_name for e in merged] == [
            'Marie DUPONT', 'Sophie MARTIN', 'Julie BERNARD', 'Lucie PETIT', 'Chloé DURAND',
        ]
        assert all(e.interest is None for e in merged)

    def test_three_columns(self):
        docs = [
            _single_column_doc(['Marie', 'Sophie'], SingleColumnFormat.FIRST_NAMES, 'a.pdf'),
            _single_column_doc(['DUPONT', 'MARTIN'], SingleColumnFormat.LAST_NAMES, 'b.pdf'),
            _single_column_doc(['Golf', 'Yoga'], SingleColumnFormat.INTERESTS, 'c.pdf'),
        ]
        merged = merge_single_column(docs)
        assert [(e.first_name, e.last_name, e.interest) for e in merged] == [
            ('Marie', 'DUPONT', 'Golf'),
            ('Sophie', 'MARTIN', 'Yoga'),
        ]

    def test_shorter_column_leaves_attribute_empty(self):
        docs = [
            _single_column_doc(['Marie', 'Sophie', 'Julie'], SingleColumnFormat.FIRST_NAMES, 'a.pdf'),
            _single_column_doc(['DUPONT'], SingleColumnFormat.LAST_NAMES, 'b.pdf'),
        ]
        merged = merge_single_column(docs)
        assert [(e.first_name, e.last_name) for e in merged] == [
            ('Marie', 'DUPONT'),
            ('Sophie', ''),
            ('Julie', ''),
        ]

    def test_standard_documents_are_ignored(self, entry):
        docs = [ParsedDocument(source='std.pdf', entries=[entry()])]
        assert merge_single_column(docs) == []

    def test_no_documents(self):
        assert merge_single_column([]) == []
