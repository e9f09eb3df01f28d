"""Export the financial report as an Excel workbook or a PDF."""

from decimal import Decimal
from io import BytesIO
from typing import Mapping

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle


__all__ = [
    "generate_financial_report_workbook",
    "generate_financial_report_pdf",
]


HEADER_FILL = PatternFill(start_color="305496", end_color="305496", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True)
TOTAL_FILL = PatternFill(start_color="F2F2F2", end_color="F2F2F2", fill_type="solid")
CURRENCY_NUMBER_FORMAT = "#,##0.00"
PERCENT_NUMBER_FORMAT = "0.00"


def _to_decimal(value) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _auto_size_columns(worksheet) -> None:
    """Adjust column widths to fit their content nicely."""

    for column_cells in worksheet.columns:
        column_letter = get_column_letter(column_cells[0].column)
        max_length = 0
        for cell in column_cells:
            if cell.value is None:
                continue
            max_length = max(max_length, len(str(cell.value)))
        worksheet.column_dimensions[column_letter].width = min(max_length + 2, 45)


def _format_currency(value) -> str:
    return f"{_to_decimal(value):,.2f}"


def _format_percent(value) -> str:
    return f"{_to_decimal(value):.2f}%"


def _period_label(report: Mapping) -> str:
    period = report.get("period") or {}
    start = period.get("start") or "the beginning"
    end = period.get("end") or "today"
    return f"Period: {start} to {end}"


def _style_header(worksheet) -> None:
    for cell in worksheet[worksheet.max_row]:
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = Alignment(horizontal="center", vertical="center")


def generate_financial_report_workbook(report: Mapping, currency: str = "INR") -> bytes:
    """Return an Excel workbook for a report built by ``analytics.financial_report``."""

    workbook = Workbook()
    worksheet = workbook.active
    worksheet.title = "Financial Report"

    worksheet["A1"] = "Financial Report"
    worksheet["A1"].font = Font(size=14, bold=True)
    worksheet["A2"] = _period_label(report)
    worksheet["A2"].font = Font(italic=True)
    worksheet.append([])

    worksheet.append(["Summary", f"Amount ({currency})"])
    _style_header(worksheet)
    for label, key in (("Revenue", "revenue"), ("Expenses", "expenses"), ("Net Profit", "net_profit")):
        worksheet.append([label, float(_to_decimal(report.get(key)))])
        worksheet.cell(row=worksheet.max_row, column=2).number_format = CURRENCY_NUMBER_FORMAT
    worksheet.append(["Profit Margin (%)", float(_to_decimal(report.get("profit_margin")))])
    worksheet.cell(row=worksheet.max_row, column=2).number_format = PERCENT_NUMBER_FORMAT
    for cell in worksheet[worksheet.max_row]:
        cell.font = Font(bold=True)
        cell.fill = TOTAL_FILL

    worksheet.append([])
    worksheet.append(["Top Clients", "Revenue", "Invoices", "Average Invoice"])
    _style_header(worksheet)
    for entry in report.get("top_clients") or []:
        worksheet.append([
            entry.get("client_name"),
            float(_to_decimal(entry.get("revenue"))),
            entry.get("invoice_count", 0),
            float(_to_decimal(entry.get("avg_invoice_amount"))),
        ])
        row = worksheet[worksheet.max_row]
        row[1].number_format = CURRENCY_NUMBER_FORMAT
        row[3].number_format = CURRENCY_NUMBER_FORMAT

    worksheet.append([])
    worksheet.append(["Top Expense Categories", "Amount", "Expenses", "Share (%)"])
    _style_header(worksheet)
    for entry in report.get("top_expense_categories") or []:
        worksheet.append([
            entry.get("category"),
            float(_to_decimal(entry.get("amount"))),
            entry.get("count", 0),
            float(_to_decimal(entry.get("percentage"))),
        ])
        row = worksheet[worksheet.max_row]
        row[1].number_format = CURRENCY_NUMBER_FORMAT
        row[3].number_format = PERCENT_NUMBER_FORMAT

    stats = report.get("invoice_stats") or {}
    worksheet.append([])
    worksheet.append(["Invoice Statistics", "Count"])
    _style_header(worksheet)
    for label, key in (("Total", "total"), ("Paid", "paid"), ("Pending", "pending"), ("Overdue", "overdue")):
        worksheet.append([label, stats.get(key, 0)])
        worksheet.cell(row=worksheet.max_row, column=2).alignment = Alignment(horizontal="right")

    _auto_size_columns(worksheet)

    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def _section_table(rows: list[list[str]], col_widths: list[float]) -> Table:
    table = Table(rows, colWidths=col_widths, repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#305496")),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("ALIGN", (1, 1), (-1, -1), "RIGHT"),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.HexColor("#CCCCCC")),
        ("BOTTOMPADDING", (0, 0), (-1, 0), 6),
        ("TOPPADDING", (0, 0), (-1, 0), 6),
        ("TOPPADDING", (0, 1), (-1, -1), 4),
        ("BOTTOMPADDING", (0, 1), (-1, -1), 4),
    ]))
    return table


def generate_financial_report_pdf(report: Mapping, currency: str = "INR") -> bytes:
    """Return a PDF version of the financial report."""

    buffer = BytesIO()
    document = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=20 * mm,
        rightMargin=20 * mm,
        topMargin=20 * mm,
        bottomMargin=20 * mm,
        title="Financial Report",
    )

    styles = getSampleStyleSheet()
    story = [
        Paragraph("Financial Report", styles["Title"]),
        Spacer(1, 6 * mm),
        Paragraph(_period_label(report), styles["Normal"]),
        Spacer(1, 6 * mm),
    ]

    summary = [
        ["Summary", f"Amount ({currency})"],
        ["Revenue", _format_currency(report.get("revenue"))],
        ["Expenses", _format_currency(report.get("expenses"))],
        ["Net Profit", _format_currency(report.get("net_profit"))],
        ["Profit Margin", _format_percent(report.get("profit_margin"))],
    ]
    summary_table = _section_table(summary, [100 * mm, 60 * mm])
    summary_table.setStyle(TableStyle([
        ("BACKGROUND", (0, 3), (-1, 3), colors.HexColor("#D9E1F2")),
        ("FONTNAME", (0, 3), (-1, 3), "Helvetica-Bold"),
    ]))
    story.extend([summary_table, Spacer(1, 8 * mm)])

    clients = [["Top Clients", "Revenue", "Invoices", "Average Invoice"]]
    for entry in report.get("top_clients") or []:
        clients.append([
            str(entry.get("client_name") or ""),
            _format_currency(entry.get("revenue")),
            str(entry.get("invoice_count", 0)),
            _format_currency(entry.get("avg_invoice_amount")),
        ])
    story.extend([_section_table(clients, [70 * mm, 35 * mm, 20 * mm, 35 * mm]), Spacer(1, 8 * mm)])

    categories = [["Top Expense Categories", "Amount", "Expenses", "Share"]]
    for entry in report.get("top_expense_categories") or []:
        categories.append([
            str(entry.get("category") or ""),
            _format_currency(entry.get("amount")),
            str(entry.get("count", 0)),
            _format_percent(entry.get("percentage")),
        ])
    story.extend([_section_table(categories, [70 * mm, 35 * mm, 20 * mm, 35 * mm]), Spacer(1, 8 * mm)])

    stats = report.get("invoice_stats") or {}
    invoice_rows = [["Invoice Statistics", "Count"]] + [
        [label, str(stats.get(key, 0))]
        for label, key in (("Total", "total"), ("Paid", "paid"), ("Pending", "pending"), ("Overdue", "overdue"))
    ]
    story.append(_section_table(invoice_rows, [100 * mm, 60 * mm]))

    document.build(story)
    pdf = buffer.getvalue()
    buffer.close()
    return pdf
