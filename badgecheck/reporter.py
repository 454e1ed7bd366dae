"""Report generation for reconciliation results (CSV, HTML, summary)."""

import csv
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader

from badgecheck import MatchResult, MatchStatus, ParsedDocument, PersonEntry

log = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent / 'templates'

CSV_COLUMNS = [
    'Status',
    'Score',
    'Order_FirstName',
    'Order_LastName',
    'Order_Interest',
    'Order_Source',
    'Order_Page',
    'Order_Line',
    'Produced_FirstName',
    'Produced_LastName',
    'Produced_Interest',
    'Produced_Source',
    'Produced_Page',
    'Produced_Line',
    'Suggestion',
    'Reasons',
]


def _entry_fields(prefix: str, entry: Optional[PersonEntry]) -> dict:
    return {
        f'{prefix}_FirstName': entry.first_name if entry else '',
        f'{prefix}_LastName': entry.last_name if entry else '',
        f'{prefix}_Interest': (entry.interest or '') if entry else '',
        f'{prefix}_Source': entry.source if entry else '',
        f'{prefix}_Page': str(entry.page) if entry and entry.page is not None else '',
        f'{prefix}_Line': str(entry.line) if entry and entry.line is not None else '',
    }


def _result_to_row(result: MatchResult) -> dict:
    """Convert a MatchResult to a flat dict for CSV/HTML output."""
    row = {
        'Status': result.status.value,
        'Score': f'{result.score:.4f}',
    }
    row.update(_entry_fields('Order', result.order_entry))
    row.update(_entry_fields('Produced', result.produced_entry))
    row['Suggestion'] = result.suggestion or ''
    row['Reasons'] = ', '.join(result.reasons)
    # Used by the HTML template for row colouring only
    row['_status'] = result.status.value
    return row


def write_csv_report(results: list[MatchResult], output_path: Path) -> None:
    """Write results as a CSV report.

    Uses UTF-8 with BOM (utf-8-sig) and semicolon delimiter so that the file
    opens cleanly in a French-locale spreadsheet.

    Args:
        results: Reconciliation results.
        output_path: Path for the output CSV file.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', newline='', encoding='utf-8-sig') as f:
        writer = csv.DictWriter(
            f, fieldnames=CSV_COLUMNS, delimiter=';', extrasaction='ignore',
        )
        writer.writeheader()
        for result in results:
            writer.writerow(_result_to_row(result))

    log.info("CSV report written: %s (%d rows)", output_path, len(results))


def compute_stats(results: Sequence[MatchResult]) -> dict:
    """Count results per status."""
    stats = {status.value: 0 for status in MatchStatus}
    for result in results:
        stats[result.status.value] += 1
    stats['total'] = len(results)
    stats['order_total'] = sum(1 for r in results if r.order_entry is not None)
    stats['produced_total'] = sum(1 for r in results if r.produced_entry is not None)
    stats['issues_total'] = len(results) - stats[MatchStatus.MATCH.value]
    return stats


def write_html_report(
    results: list[MatchResult],
    output_path: Path,
    title: str = '',
    documents: Sequence[ParsedDocument] = (),
) -> None:
    """Write results as an HTML report using Jinja2.

    Args:
        results: Reconciliation results.
        output_path: Path for the output HTML file.
        title: Report title (usually the order file name).
        documents: Parsed documents, listed with their warnings.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=True,
    )
    template = env.get_template('report.html')

    html = template.render(
        title=title,
        rows=[_result_to_row(r) for r in results],
        stats=compute_stats(results),
        columns=CSV_COLUMNS,
        documents=documents,
    )

    output_path.write_text(html, encoding='utf-8')
    log.info("HTML report written: %s", output_path)


def print_summary(
    results: list[MatchResult],
    title: str = '',
    documents: Sequence[ParsedDocument] = (),
) -> None:
    """Print a summary of the results to stdout.

    Args:
        results: Reconciliation results.
        title: Report title.
        documents: Parsed documents whose warnings are listed.
    """
    stats = compute_stats(results)

    print(f"\n=== Badge check: {title} ===")
    print(f"Order entries:            {stats['order_total']:>5}")
    print(f"Matches:                  {stats['match']:>5}")
    print(f"Typos:                    {stats['typo']:>5}")
    print(f"Inversions:               {stats['inversion']:>5}")
    print(f"Duplicates:               {stats['duplicate']:>5}")
    print(f"Missing:                  {stats['missing']:>5}")
    print(f"Extra badges:             {stats['extra']:>5}")
    print("---")
    print(f"Issues total:             {stats['issues_total']:>5}")

    warnings = [(doc.source, w) for doc in documents for w in doc.warnings]
    if warnings:
        print("Warnings:")
        for source, warning in warnings:
            print(f"  - {source}: {warning}")
    print()
