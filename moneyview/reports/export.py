"""CSV export for reports and ledgers."""

import csv
import io
from collections.abc import Sequence
from zoneinfo import ZoneInfo

from moneyview.core.dates import to_local
from moneyview.ledger.schemas import LedgerEntry
from moneyview.reports.schemas import DailyReport, Report


def rows_to_csv(columns: Sequence[tuple[str, str]], rows: Sequence[dict]) -> bytes:
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow([header for header, _ in columns])
    for row in rows:
        writer.writerow([row.get(key, "") for _, key in columns])
    return output.getvalue().encode("utf-8")


def ledger_to_csv(entries: Sequence[LedgerEntry], tz: ZoneInfo) -> bytes:
    columns = [
        ("Date", "date"),
        ("Description", "description"),
        ("Credit", "credit"),
        ("Debit", "debit"),
        ("Balance", "balance"),
        ("Transaction ID", "transaction_id"),
    ]
    rows = [
        {
            "date": to_local(entry.date, tz).isoformat(),
            "description": entry.description,
            "credit": f"{entry.credit:.2f}",
            "debit": f"{entry.debit:.2f}",
            "balance": f"{entry.balance:.2f}",
            "transaction_id": entry.transaction_id,
        }
        for entry in entries
    ]
    return rows_to_csv(columns, rows)


def report_to_csv(report: Report, tz: ZoneInfo) -> bytes:
    """Daily breakdown of a report, or its transactions for a daily report.

    Timestamps are written in the business timezone so they line up with
    the day buckets.
    """
    if isinstance(report, DailyReport):
        columns = [
            ("Date", "date"),
            ("Customer", "customer"),
            ("Type", "type"),
            ("Amount", "amount"),
            ("Payment Method", "method"),
            ("Description", "description"),
        ]
        rows = [
            {
                "date": to_local(t.date, tz).isoformat(),
                "customer": t.customer_name,
                "type": t.type.value,
                "amount": f"{t.amount:.2f}",
                "method": t.payment_method.value if t.payment_method else "",
                "description": t.description or "",
            }
            for t in report.transactions
        ]
        return rows_to_csv(columns, rows)

    columns = [("Date", "date"), ("Credits", "credits"), ("Debits", "debits"), ("Net", "net")]
    rows = [
        {
            "date": day.date,
            "credits": f"{day.credits:.2f}",
            "debits": f"{day.debits:.2f}",
            "net": f"{day.net:.2f}",
        }
        for day in report.daily_breakdown
    ]
    return rows_to_csv(columns, rows)
