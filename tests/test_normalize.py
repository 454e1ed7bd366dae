"""Tests for badgecheck.normalize module."""

import pytest

from badgecheck.normalize import (
    comparison_form,
    header_tokens,
    identity_hash,
    normalize_header,
    normalize_name,
    normalize_token,
    strip_accents,
)


class TestStripAccents:
    """Tests for diacritic removal."""

    def test_french_accents(self):
        assert strip_accents('Hélène Çédric Noël') == 'Helene Cedric Noel'

    def test_plain_text_unchanged(self):
        assert strip_accents('DUPONT') == 'DUPONT'


class TestComparisonForm:
    """Tests for the canonical comparison form."""

    @pytest.mark.parametrize('raw, expected', [
        ('  Jean-Pierre  ', 'jean pierre'),
        ("D'Artagnan", 'd artagnan'),
        ('LE   GOFF', 'le goff'),
        ('Hélène', 'helene'),
        ('', ''),
    ])
    def test_defaults(self, raw, expected):
        assert comparison_form(raw) == expected

    def test_accents_kept_when_requested(self):
        assert comparison_form('Hélène', remove_accents=False) != comparison_form('Helene', remove_accents=False)

    def test_normalize_name_strips_accents(self):
        assert normalize_name('Chloé') == normalize_name('CHLOE')


class TestIdentityHash:
    """Tests for the de-duplication key."""

    def test_equivalent_spellings_share_a_hash(self):
        assert identity_hash('Jean-Pierre', 'Dupont') == identity_hash('jean pierre', 'DUPONT')

    def test_interest_is_part_of_the_key(self):
        assert identity_hash('Marie', 'DUPONT', 'Golf') != identity_hash('Marie', 'DUPONT')

    def test_format(self):
        assert identity_hash('Marie', 'DUPONT', 'Golf') == 'marie|dupont|golf'


class TestHeaders:
    """Tests for header normalization."""

    def test_normalize_header(self):
        assert normalize_header('Prénom / Nom') == 'prenom_nom'

    def test_normalize_token(self):
        assert normalize_token('Bon de commande') == 'bondecommande'

    def test_header_tokens(self):
        assert header_tokens('  Nom de famille ') == ['nom', 'de', 'famille']
