from __future__ import annotations

import io
from collections.abc import Sequence
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch, mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from moneyview.business.models import BusinessProfile
from moneyview.config import Settings
from moneyview.core.dates import to_local
from moneyview.core.money import format_money
from moneyview.customers.models import Customer
from moneyview.ledger.schemas import LedgerEntry
from moneyview.reports.schemas import DailyReport, PeriodReport, Report

Column = tuple[str, str]  # (header, row key)

LEDGER_COLUMNS: list[Column] = [
    ("Date", "date"),
    ("Description", "description"),
    ("Credit", "credit"),
    ("Debit", "debit"),
    ("Balance", "balance"),
]

DAILY_BREAKDOWN_COLUMNS: list[Column] = [
    ("Date", "date"),
    ("Credits", "credits"),
    ("Debits", "debits"),
    ("Net", "net"),
]

TRANSACTION_COLUMNS: list[Column] = [
    ("Time", "time"),
    ("Customer", "customer"),
    ("Type", "type"),
    ("Method", "method"),
    ("Amount", "amount"),
]


def _build_doc(buffer):
    return SimpleDocTemplate(
        buffer, pagesize=A4,
        leftMargin=14 * mm, rightMargin=14 * mm,
        topMargin=0.75 * inch, bottomMargin=0.75 * inch,
    )


def _header_style():
    styles = getSampleStyleSheet()
    return ParagraphStyle(
        "BusinessName", parent=styles["Title"], fontSize=22, alignment=0,
        textColor=colors.HexColor("#282c34"),
    )


def _table(data: list[list[str]], header_color: str, striped: bool) -> Table:
    t = Table(data, repeatRows=1, hAlign="LEFT")
    style = [
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor(header_color)),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#e2e8f0")),
        ("TOPPADDING", (0, 0), (-1, -1), 4),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
    ]
    if striped:
        style.append(
            ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#f1f5f9")])
        )
    t.setStyle(TableStyle(style))
    return t


def _elements(
    title: str,
    summary_rows: Sequence[tuple[str, str]],
    table_rows: Sequence[dict[str, str]],
    columns: Sequence[Column],
    profile: BusinessProfile | None,
    settings: Settings,
) -> list:
    styles = getSampleStyleSheet()
    elements: list = []

    business_name = profile.business_name if profile else settings.default_business_name
    elements.append(Paragraph(business_name, _header_style()))
    if profile and profile.address:
        elements.append(Paragraph(profile.address, styles["Normal"]))
    if profile and profile.phone:
        elements.append(Paragraph(f"Phone: {profile.phone}", styles["Normal"]))
    elements.append(Spacer(1, 16))

    elements.append(Paragraph(title, styles["Heading2"]))
    summary = [["Summary", "Amount"]] + [[label, value] for label, value in summary_rows]
    elements.append(_table(summary, "#6464ff", striped=True))
    elements.append(Spacer(1, 16))

    elements.append(Paragraph("Detailed Transactions", styles["Heading3"]))
    if table_rows:
        detail = [[header for header, _ in columns]]
        detail += [[row.get(key, "") for _, key in columns] for row in table_rows]
        elements.append(_table(detail, "#282c34", striped=False))
    else:
        elements.append(Paragraph("No transactions in this period.", styles["Normal"]))

    return elements


def generate_report_pdf(
    title: str,
    summary_rows: Sequence[tuple[str, str]],
    table_rows: Sequence[dict[str, str]],
    columns: Sequence[Column],
    profile: BusinessProfile | None,
    settings: Settings,
    generated_at: datetime | None = None,
) -> bytes:
    """Render a summary table plus a detail table under the business header.

    Built twice: the first pass only counts pages so the footer can read
    "Page i of n".
    """
    generated_at = generated_at or datetime.now(timezone.utc)
    stamp = generated_at.strftime("%Y-%m-%d %H:%M")

    def render(total_pages: int | None) -> tuple[bytes, int]:
        buffer = io.BytesIO()
        doc = _build_doc(buffer)
        pages = []

        def footer(canvas, _doc):
            pages.append(canvas.getPageNumber())
            text = f"Generated by {settings.default_business_name} on {stamp}"
            if total_pages:
                text += f" - Page {canvas.getPageNumber()} of {total_pages}"
            canvas.saveState()
            canvas.setFont("Helvetica", 8)
            canvas.setFillColor(colors.HexColor("#969696"))
            canvas.drawString(14 * mm, 10 * mm, text)
            canvas.restoreState()

        doc.build(
            _elements(title, summary_rows, table_rows, columns, profile, settings),
            onFirstPage=footer,
            onLaterPages=footer,
        )
        return buffer.getvalue(), len(pages)

    _, page_count = render(None)
    pdf_bytes, _ = render(page_count)
    return pdf_bytes


# ---------------------------------------------------------------------------
# Row builders
# ---------------------------------------------------------------------------


def report_summary_rows(report: Report, symbol: str) -> list[tuple[str, str]]:
    return [
        ("Total Credits", format_money(report.total_credits, symbol)),
        ("Total Debits", format_money(report.total_debits, symbol)),
        ("Net Amount", format_money(report.net_amount, symbol)),
        ("Transactions", str(report.transaction_count)),
    ]


def daily_breakdown_rows(report: Report, symbol: str) -> list[dict[str, str]]:
    return [
        {
            "date": day.date,
            "credits": format_money(day.credits, symbol),
            "debits": format_money(day.debits, symbol),
            "net": format_money(day.net, symbol),
        }
        for day in report.daily_breakdown
    ]


def ledger_rows(
    entries: Sequence[LedgerEntry], symbol: str, tz: ZoneInfo
) -> list[dict[str, str]]:
    return [
        {
            "date": to_local(entry.date, tz).strftime("%Y-%m-%d"),
            "description": entry.description,
            "credit": format_money(entry.credit, symbol) if entry.credit else "-",
            "debit": format_money(entry.debit, symbol) if entry.debit else "-",
            "balance": format_money(entry.balance, symbol),
        }
        for entry in entries
    ]


def generate_period_report_pdf(
    report: PeriodReport, profile: BusinessProfile | None, settings: Settings
) -> bytes:
    symbol = settings.currency_symbol
    return generate_report_pdf(
        f"Report: {report.label} {report.year}",
        report_summary_rows(report, symbol),
        daily_breakdown_rows(report, symbol),
        DAILY_BREAKDOWN_COLUMNS,
        profile,
        settings,
    )


def generate_daily_report_pdf(
    report: DailyReport, profile: BusinessProfile | None, settings: Settings
) -> bytes:
    symbol = settings.currency_symbol
    tz = ZoneInfo(settings.business_timezone)
    rows = [
        {
            "time": to_local(t.date, tz).strftime("%H:%M"),
            "customer": t.customer_name,
            "type": t.type.value.title(),
            "method": t.payment_method.value.replace("_", " ").title() if t.payment_method else "",
            "amount": format_money(t.amount, symbol),
        }
        for t in report.transactions
    ]
    return generate_report_pdf(
        f"Daily Report: {report.date.isoformat()}",
        report_summary_rows(report, symbol),
        rows,
        TRANSACTION_COLUMNS,
        profile,
        settings,
    )


def generate_ledger_pdf(
    customer: Customer,
    entries: Sequence[LedgerEntry],
    profile: BusinessProfile | None,
    settings: Settings,
) -> bytes:
    symbol = settings.currency_symbol
    balance = customer.current_balance
    if balance > 0:
        balance_label = "Receivable (Dr)"
    elif balance < 0:
        balance_label = "Payable (Cr)"
    else:
        balance_label = "Settled"
    summary = [
        ("Customer", customer.name),
        ("Phone", customer.phone),
        ("Opening Balance", format_money(customer.opening_balance, symbol)),
        (balance_label, format_money(abs(balance), symbol)),
    ]
    return generate_report_pdf(
        f"Ledger: {customer.name}",
        summary,
        ledger_rows(entries, symbol, ZoneInfo(settings.business_timezone)),
        LEDGER_COLUMNS,
        profile,
        settings,
    )
