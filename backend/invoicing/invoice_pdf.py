"""Utilities for generating PDF invoices."""

import logging
import re
from decimal import Decimal
from io import BytesIO
from typing import IO, Optional

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.platypus import (Image, Paragraph, SimpleDocTemplate, Spacer,
                                Table, TableStyle)
from xml.sax.saxutils import escape

from .models import Invoice, UserSettings

logger = logging.getLogger(__name__)

FONT_REGULAR = 'Helvetica'
FONT_BOLD = 'Helvetica-Bold'
FONT_ITALIC = 'Helvetica-Oblique'

_UNSAFE_FILENAME_CHARS = re.compile(r'[^A-Za-z0-9_-]')


def invoice_pdf_filename(invoice_number: str) -> str:
    """``Invoice_{id}.pdf`` with every character outside ``[A-Za-z0-9_-]`` replaced by ``_``."""
    return f"Invoice_{_UNSAFE_FILENAME_CHARS.sub('_', invoice_number or '')}.pdf"


def _build_image_flowable(image_field, width, height, **image_kwargs):
    """Return a ReportLab Image flowable for the provided Django ImageField."""
    if not image_field:
        return ''

    image_path = getattr(image_field, 'path', None)
    if image_path:
        try:
            return Image(image_path, width=width, height=height, **image_kwargs)
        except OSError:
            logger.warning("Could not read logo from %s, trying storage backend", image_path)

    # Fallback to loading the bytes through Django's storage backend.
    try:
        image_field.open()
        try:
            image_bytes = image_field.read()
        finally:
            image_field.close()
    except OSError:
        logger.exception("Could not load company logo for invoice PDF")
        return ''
    if image_bytes:
        return Image(ImageReader(BytesIO(image_bytes)), width=width, height=height, **image_kwargs)
    return ''


def _money(currency: str, value) -> str:
    return f"{currency} {Decimal(str(value or 0)):,.2f}"


def _text(value) -> str:
    return escape(str(value or ''))


def _format_rate(value) -> str:
    rate = Decimal(str(value or 0)).normalize()
    return format(rate, 'f')


def generate_invoice_pdf(invoice: Invoice, settings: Optional[UserSettings] = None) -> IO[bytes]:
    """Generate the PDF document for ``invoice`` using the owner's settings."""

    buffer = BytesIO()
    settings = settings or UserSettings.load(invoice.created_by)
    currency = settings.currency or 'INR'

    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=20 * mm,
        rightMargin=20 * mm,
        topMargin=20 * mm,
        bottomMargin=20 * mm,
        title=f"Invoice {invoice.invoice_number}",
        author=settings.company_name or settings.profile_name or "BizLedger",
    )

    styles = getSampleStyleSheet()
    styles.add(ParagraphStyle(name='InvoiceTitle', fontSize=24, leading=28, fontName=FONT_BOLD))
    styles.add(ParagraphStyle(name='InvoiceInfo', fontSize=10, fontName=FONT_REGULAR, alignment=TA_RIGHT))
    styles.add(ParagraphStyle(name='BlockTitle', fontSize=12, leading=16, fontName=FONT_BOLD))
    styles.add(ParagraphStyle(name='BlockName', fontSize=10, leading=14, fontName=FONT_REGULAR))
    styles.add(ParagraphStyle(name='BlockLine', fontSize=9, leading=12, fontName=FONT_REGULAR))
    styles.add(ParagraphStyle(name='TableHead', fontSize=10, fontName=FONT_BOLD, alignment=TA_CENTER, textColor=colors.white))
    styles.add(ParagraphStyle(name='TableCell', fontSize=9, fontName=FONT_REGULAR))
    styles.add(ParagraphStyle(name='TableCellCenter', fontSize=9, fontName=FONT_REGULAR, alignment=TA_CENTER))
    styles.add(ParagraphStyle(name='TableCellRight', fontSize=9, fontName=FONT_REGULAR, alignment=TA_RIGHT))
    styles.add(ParagraphStyle(name='TotalLabel', fontSize=10, fontName=FONT_REGULAR, alignment=TA_RIGHT))
    styles.add(ParagraphStyle(name='TotalValue', fontSize=10, fontName=FONT_REGULAR, alignment=TA_RIGHT))
    styles.add(ParagraphStyle(name='GrandTotal', fontSize=12, fontName=FONT_BOLD, alignment=TA_RIGHT))
    styles.add(ParagraphStyle(name='BankLabel', fontSize=9, fontName=FONT_BOLD))
    styles.add(ParagraphStyle(name='Footer', fontSize=8, fontName=FONT_ITALIC))

    elements = []

    # --- 1. Header: title on the left, number and dates on the right ---
    invoice_info = Table(
        [
            [Paragraph(f"Invoice: {_text(invoice.invoice_number)}", styles['InvoiceInfo'])],
            [Paragraph(f"Date: {invoice.date_issued.strftime('%d %b, %Y')}", styles['InvoiceInfo'])],
            [Paragraph(f"Due: {invoice.due_date.strftime('%d %b, %Y')}", styles['InvoiceInfo'])],
        ],
        colWidths=[70 * mm],
    )
    logo = _build_image_flowable(settings.company_logo, width=40 * mm, height=20 * mm, hAlign='LEFT')
    title_cell = [logo, Paragraph('INVOICE', styles['InvoiceTitle'])] if logo else Paragraph('INVOICE', styles['InvoiceTitle'])
    header_table = Table([[title_cell, invoice_info]], colWidths=[100 * mm, 70 * mm])
    header_table.setStyle(TableStyle([('VALIGN', (0, 0), (-1, -1), 'TOP')]))
    elements.append(header_table)
    elements.append(Spacer(1, 10 * mm))

    # --- 2. From / Billed to ---
    from_rows = [
        [Paragraph('FROM:', styles['BlockTitle'])],
        [Paragraph(_text(settings.company_name or settings.profile_name or 'Your Company'), styles['BlockName'])],
    ]
    if settings.profile_address:
        from_rows.append([Paragraph(_text(settings.profile_address).replace('\n', '<br/>'), styles['BlockLine'])])
    if settings.profile_gstin:
        from_rows.append([Paragraph(f"GSTIN: {_text(settings.profile_gstin)}", styles['BlockLine'])])
    if settings.profile_phone:
        from_rows.append([Paragraph(f"Phone: {_text(settings.profile_phone)}", styles['BlockLine'])])
    if settings.profile_email:
        from_rows.append([Paragraph(f"Email: {_text(settings.profile_email)}", styles['BlockLine'])])

    client = invoice.client
    to_rows = [
        [Paragraph('BILLED TO:', styles['BlockTitle'])],
        [Paragraph(_text(invoice.client_name or client.name), styles['BlockName'])],
    ]
    client_address = invoice.client_address or client.address
    if client_address:
        to_rows.append([Paragraph(_text(client_address).replace('\n', '<br/>'), styles['BlockLine'])])
    client_email = invoice.client_email or client.email
    if client_email:
        to_rows.append([Paragraph(f"Email: {_text(client_email)}", styles['BlockLine'])])
    if client.phone:
        to_rows.append([Paragraph(f"Phone: {_text(client.phone)}", styles['BlockLine'])])

    block_style = TableStyle([
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ('LEFTPADDING', (0, 0), (-1, -1), 0),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 1),
    ])
    from_table = Table(from_rows, colWidths=[85 * mm])
    from_table.setStyle(block_style)
    to_table = Table(to_rows, colWidths=[85 * mm])
    to_table.setStyle(block_style)
    parties = Table([[from_table, to_table]], colWidths=[85 * mm, 85 * mm])
    parties.setStyle(TableStyle([('VALIGN', (0, 0), (-1, -1), 'TOP')]))
    elements.append(parties)
    elements.append(Spacer(1, 10 * mm))

    # --- 3. Items Table ---
    data = [[
        Paragraph('Description', styles['TableHead']),
        Paragraph('Qty', styles['TableHead']),
        Paragraph('Unit Cost', styles['TableHead']),
        Paragraph('Amount', styles['TableHead']),
    ]]
    for item in invoice.items or []:
        data.append([
            Paragraph(_text(item.get('description')), styles['TableCell']),
            Paragraph(_text(item.get('quantity')), styles['TableCellCenter']),
            Paragraph(_money(currency, item.get('rate')), styles['TableCellRight']),
            Paragraph(_money(currency, item.get('amount')), styles['TableCellRight']),
        ])

    items_table = Table(data, colWidths=[90 * mm, 20 * mm, 30 * mm, 30 * mm], repeatRows=1)
    items_table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#34495E')),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('LINEBELOW', (0, 0), (-1, 0), 1, colors.black),
        ('LINEBELOW', (0, -1), (-1, -1), 1, colors.HexColor('#CCCCCC')),
        ('TOPPADDING', (0, 0), (-1, 0), 3 * mm),
        ('BOTTOMPADDING', (0, 0), (-1, 0), 3 * mm),
        ('TOPPADDING', (0, 1), (-1, -1), 2 * mm),
        ('BOTTOMPADDING', (0, 1), (-1, -1), 2 * mm),
    ]))
    elements.append(items_table)
    elements.append(Spacer(1, 8 * mm))

    # --- 4. Totals Section ---
    totals_data = [
        [Paragraph('Subtotal:', styles['TotalLabel']), Paragraph(_money(currency, invoice.subtotal), styles['TotalValue'])],
        [Paragraph(f'Tax ({_format_rate(invoice.tax_rate)}%):', styles['TotalLabel']), Paragraph(_money(currency, invoice.tax), styles['TotalValue'])],
        [Paragraph('TOTAL:', styles['GrandTotal']), Paragraph(_money(currency, invoice.amount), styles['GrandTotal'])],
    ]
    totals_table = Table(totals_data, colWidths=[40 * mm, 40 * mm])
    totals_table.setStyle(TableStyle([
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('LEFTPADDING', (0, 0), (-1, -1), 0),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 1),
        ('LINEABOVE', (0, 2), (1, 2), 1, colors.black),
        ('TOPPADDING', (0, 2), (1, 2), 3),
    ]))
    wrapper_table = Table([[totals_table]], colWidths=[170 * mm], style=[('ALIGN', (0, 0), (-1, -1), 'RIGHT')])
    elements.append(wrapper_table)
    elements.append(Spacer(1, 12 * mm))

    # --- 5. Bank details ---
    bank_rows = [
        ('Account Name:', settings.bank_account_name or settings.profile_name or 'Your Name'),
        ('Account Type:', settings.account_type or 'Current Account'),
        ('Account Number:', settings.bank_account),
        ('Bank Name:', settings.bank_name),
        ('Branch Name:', settings.bank_branch),
        ('IFSC Code:', settings.bank_ifsc),
        ('SWIFT Code:', settings.bank_swift),
    ]
    elements.append(Paragraph('BANK ACCOUNT DETAILS', styles['BlockTitle']))
    elements.append(Spacer(1, 2 * mm))
    bank_table = Table(
        [[Paragraph(label, styles['BankLabel']), Paragraph(_text(value), styles['BlockLine'])] for label, value in bank_rows],
        colWidths=[40 * mm, 130 * mm],
        hAlign='LEFT',
    )
    bank_table.setStyle(TableStyle([
        ('LEFTPADDING', (0, 0), (-1, -1), 0),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 1),
    ]))
    elements.append(bank_table)

    if invoice.notes:
        elements.append(Spacer(1, 8 * mm))
        elements.append(Paragraph('Notes', styles['BlockTitle']))
        elements.append(Paragraph(_text(invoice.notes).replace('\n', '<br/>'), styles['BlockLine']))

    # --- 6. Footer ---
    elements.append(Spacer(1, 15 * mm))
    elements.append(Paragraph("Thank you for your business!", styles['Footer']))

    doc.build(elements)
    buffer.seek(0)
    return buffer
