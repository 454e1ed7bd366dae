"""Tests for the checkbadges command line."""

import csv
import json

import pytest

import checkbadges
from badgecheck.config import Config


def _write(path, text):
    path.write_text(text, encoding='utf-8')
    return path


def _report_statuses(path) -> list[str]:
    with open(path, encoding='utf-8-sig', newline='') as f:
        return [row['Status'] for row in csv.DictReader(f, delimiter=';')]


@pytest.fixture
def order_csv(tmp_path):
    return _write(tmp_path / 'order.csv', 'Prénom;Nom\nMarie;DUPONT\nJean;Dupont\nMarie;Curie\n')


@pytest.fixture
def produced_csv(tmp_path):
    return _write(tmp_path / 'badges.csv', 'Prénom;Nom\nMarie;DUPONT\nJean;Dupond\nCurie;Marie\nAna;Silva\n')


class TestMain:
    """End-to-end runs of the CLI."""

    def test_csv_report(self, tmp_path, order_csv, produced_csv):
        output = tmp_path / 'report.csv'
        code = checkbadges.main([
            '--order', str(order_csv), '--produced', str(produced_csv), '--output', str(output),
        ])
        assert code == 0
        assert _report_statuses(output) == ['match', 'typo', 'inversion', 'extra']

    def test_html_and_summary(self, tmp_path, order_csv, produced_csv, capsys):
        output = tmp_path / 'report.csv'
        checkbadges.main([
            '--order', str(order_csv), '--produced', str(produced_csv),
            '--output', str(output), '--html', '--summary',
        ])
        assert output.with_suffix('.html').exists()
        assert 'Badge check: order.csv' in capsys.readouterr().out

    def test_threshold_override(self, tmp_path, order_csv, produced_csv):
        output = tmp_path / 'report.csv'
        checkbadges.main([
            '--order', str(order_csv), '--produced', str(produced_csv), '--output', str(output),
            '--last-name-threshold', '0.85',
        ])
        assert _report_statuses(output)[1] == 'match'

    def test_config_file(self, tmp_path, order_csv, produced_csv):
        config = _write(tmp_path / 'config.json', json.dumps({'thresholds': {'last_name': 0.85}}))
        output = tmp_path / 'report.csv'
        checkbadges.main([
            '--order', str(order_csv), '--produced', str(produced_csv), '--output', str(output),
            '--config', str(config),
        ])
        assert _report_statuses(output)[1] == 'match'

    def test_empty_order_list(self, tmp_path, produced_csv):
        order = _write(tmp_path / 'order.csv', 'Total;0\n')
        output = tmp_path / 'report.csv'
        code = checkbadges.main([
            '--order', str(order), '--produced', str(produced_csv), '--output', str(output),
        ])
        assert code == 1
        assert not output.exists()

    def test_invalid_threshold(self, tmp_path, order_csv, produced_csv):
        with pytest.raises(SystemExit):
            checkbadges.main([
                '--order', str(order_csv), '--produced', str(produced_csv),
                '--output', str(tmp_path / 'r.csv'), '--first-name-threshold', '1.5',
            ])

    def test_missing_config_file(self, tmp_path, order_csv, produced_csv):
        with pytest.raises(SystemExit):
            checkbadges.main([
                '--order', str(order_csv), '--produced', str(produced_csv),
                '--output', str(tmp_path / 'r.csv'), '--config', str(tmp_path / 'nope.json'),
            ])


class TestApplyOverrides:
    """Tests for command-line overrides."""

    def test_strict_accents(self):
        args = checkbadges.build_parser().parse_args([
            '--order', 'a.pdf', '--produced', 'b.pdf', '--output', 'r.csv', '--strict-accents',
        ])
        config = checkbadges.apply_overrides(Config(), args)
        assert config.strip_accents is False

    def test_untouched_defaults(self):
        args = checkbadges.build_parser().parse_args([
            '--order', 'a.pdf', '--produced', 'b.pdf', '--output', 'r.csv',
        ])
        assert checkbadges.apply_overrides(Config(), args) == Config()
