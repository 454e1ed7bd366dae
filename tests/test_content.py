"""Tests for badgecheck.content module."""

from badgecheck.content import read_string_array, read_string_literal, tokenize_text_stream


class TestReadStringLiteral:
    """Tests for parenthesized string literals."""

    def test_escaped_parentheses(self):
        assert read_string_literal(r'(a\(b\)c) Tj', 0) == ('a(b)c', 9)

    def test_octal_escape(self):
        value, _ = read_string_literal(r'(\351t\351)', 0)
        assert value == 'été'

    def test_nested_parentheses(self):
        value, _ = read_string_literal('(a (b) c)', 0)
        assert value == 'a (b) c'

    def test_line_continuation(self):
        value, _ = read_string_literal('(ab\\\ncd)', 0)
        assert value == 'abcd'

    def test_unterminated(self):
        assert read_string_literal('(abc', 0) == ('abc', 4)


class TestReadStringArray:
    """Tests for TJ arrays."""

    def test_wide_gap_inserts_space(self):
        value, _ = read_string_array('[(Ma) -20 (rie) -250 (DUPONT)]', 0)
        assert value == 'Marie DUPONT'

    def test_small_gaps_are_kerning(self):
        value, _ = read_string_array('[(D) 12 (U) -30 (PONT)]', 0)
        assert value == 'DUPONT'

    def test_custom_gap(self):
        value, _ = read_string_array('[(A) -50 (B)]', 0, kerning_gap=40)
        assert value == 'A B'

    def test_no_double_space(self):
        value, _ = read_string_array('[(Marie ) -300 (DUPONT)]', 0)
        assert value == 'Marie DUPONT'


class TestTokenizeTextStream:
    """Tests for line recovery from content streams."""

    def test_td_separates_lines(self):
        content = 'BT /F1 12 Tf 72 700 Td (Marie DUPONT) Tj 0 -14 Td (Jean MARTIN) Tj ET'
        assert tokenize_text_stream(content) == ['Marie DUPONT', 'Jean MARTIN']

    def test_show_operators_on_one_line_are_joined(self):
        content = 'BT (Marie) Tj ( ) Tj (DUPONT) Tj ET'
        assert tokenize_text_stream(content) == ['Marie DUPONT']

    def test_tj_array(self):
        content = 'BT [(Sophie) -300 (MARTIN)] TJ ET'
        assert tokenize_text_stream(content) == ['Sophie MARTIN']

    def test_next_line_operator(self):
        content = "BT (Line one) Tj (Line two) ' ET"
        assert tokenize_text_stream(content) == ['Line one', 'Line two']

    def test_t_star(self):
        content = 'BT (A b) Tj T* (C d) Tj ET'
        assert tokenize_text_stream(content) == ['A b', 'C d']

    def test_comments_are_skipped(self):
        content = 'BT % (hidden) Tj\n(Shown) Tj ET'
        assert tokenize_text_stream(content) == ['Shown']

    def test_separate_text_objects(self):
        content = 'BT (Marie) Tj ET BT (DUPONT) Tj ET'
        assert tokenize_text_stream(content) == ['Marie', 'DUPONT']

    def test_whitespace_collapsed(self):
        content = 'BT (  Marie    DUPONT  ) Tj ET'
        assert tokenize_text_stream(content) == ['Marie DUPONT']

    def test_graphics_only(self):
        assert tokenize_text_stream('q 1 0 0 1 0 0 cm 0 0 100 100 re f Q') == []

    def test_marked_content_strings_are_not_drawn(self):
        content = 'BT 72 700 Td /Span <</ActualText (Dr)>> BDC (Jean) Tj EMC ET'
        assert tokenize_text_stream(content) == ['Jean']

    def test_string_without_show_operator_is_dropped(self):
        content = '/Figure <</Alt (Logo)>> BDC EMC BT 72 700 Td (Marie DUPONT) Tj ET (stray)'
        assert tokenize_text_stream(content) == ['Marie DUPONT']
