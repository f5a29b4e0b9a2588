import csv
from io import StringIO, BytesIO
from datetime import date

from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib import colors
from reportlab.lib.units import inch

from ..config import settings
from ..i18n import Language, t
from .currency import format_money
from .quotes import Quote, QuoteLine

# Core PDF fonts only cover WinAnsi; map the few symbols quotes use outside it
PDF_REPLACEMENTS = {
    "→": "->",
}


def pdf_text(text: str) -> str:
    for symbol, replacement in PDF_REPLACEMENTS.items():
        text = text.replace(symbol, replacement)
    return text


def _line_amount(line: QuoteLine, currency: str) -> str:
    if line.included:
        return line.note or "included"
    return f"{line.sign}{format_money(line.amount)} {currency}"


def _summary_rows(quote: Quote) -> list[list[str]]:
    rows = []
    if quote.vat.include_vat:
        rows.append(["Subtotal", f"{format_money(quote.vat.subtotal)} {quote.currency}"])
        rows.append([f"VAT {quote.vat.rate_percent:g}%", f"+{format_money(quote.vat.vat_amount)} {quote.currency}"])
    rows.append([quote.total_label, f"{quote.total_sign}{format_money(quote.vat.total)} {quote.currency}"])
    return rows


def pdf_rows(quote: Quote) -> list[list[str]]:
    """Table rows for the PDF export, header first."""
    data = [["Item", "Amount"]]
    for line in quote.lines:
        label = f"{line.label} ({line.note})" if line.note and not line.included else line.label
        data.append([label, _line_amount(line, quote.currency)])
    data.extend(_summary_rows(quote))
    return [[pdf_text(cell) for cell in row] for row in data]


def generate_csv_quote(quote: Quote, lang: Language | str = Language.EN) -> str:
    """Generates a CSV export of a quote in the given language. Amounts keep two decimals."""
    output = StringIO()
    writer = csv.writer(output)

    # Header
    writer.writerow([
        t(lang, "Item", "البند"),
        t(lang, "Note", "ملاحظة"),
        t(lang, "Amount", "المبلغ"),
        t(lang, "Currency", "العملة"),
    ])

    # Data
    for line in quote.lines:
        amount = "" if line.included else f"{line.sign}{line.amount:.2f}"
        writer.writerow([line.label, line.note, amount, quote.currency])

    if quote.vat.include_vat:
        vat_label = f"{t(lang, 'VAT', 'ضريبة القيمة المضافة')} {quote.vat.rate_percent:g}{t(lang, '%', '٪')}"
        writer.writerow([t(lang, "Subtotal", "المجموع الفرعي"), "", f"{quote.vat.subtotal:.2f}", quote.currency])
        writer.writerow([vat_label, "", f"{quote.vat.vat_amount:.2f}", quote.currency])
    writer.writerow([quote.total_label, "", f"{quote.vat.total:.2f}", quote.currency])
    for note in quote.footnotes:
        writer.writerow([note, "", "", ""])

    return output.getvalue()


def generate_pdf_quote(quote: Quote, issued_on: date | None = None) -> bytes:
    """Generates a one-page PDF of a quote using ReportLab."""
    buffer = BytesIO()
    doc = SimpleDocTemplate(buffer, rightMargin=0.5*inch, leftMargin=0.5*inch, topMargin=0.5*inch, bottomMargin=0.5*inch)
    styles = getSampleStyleSheet()
    elements = []

    # Title
    elements.append(Paragraph(pdf_text(f"{settings.APP_NAME}: {quote.title}"), styles['h1']))

    # Subtitle with issue date
    issued_on = issued_on or date.today()
    elements.append(Paragraph(f"Issued: {issued_on.isoformat()}", styles['h2']))
    elements.append(Spacer(1, 0.25*inch))

    # Create Table
    table = Table(pdf_rows(quote), colWidths=[4.5*inch, 2*inch])
    style = TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor("#132ef5")),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('ALIGN', (1, 0), (1, -1), 'RIGHT'),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTNAME', (0, -1), (-1, -1), 'Helvetica-Bold'),
        ('BOTTOMPADDING', (0, 0), (-1, 0), 12),
        ('GRID', (0,0), (-1,-1), 0.5, colors.grey)
    ])
    table.setStyle(style)
    elements.append(table)

    elements.append(Spacer(1, 0.2*inch))
    for note in quote.footnotes:
        elements.append(Paragraph(pdf_text(note), styles['Normal']))

    doc.build(elements)
    return buffer.getvalue()
