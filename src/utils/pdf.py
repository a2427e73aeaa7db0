# renders a quotation into a fixed-layout A4 PDF
from __future__ import annotations

import os
from datetime import datetime
from typing import List, Optional

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from db.models import Quotation
from utils import config
from utils.logger import get_logger
from utils.pure import format_currency

_logger = get_logger(__name__)

TABLE_COLUMNS = ["Item", "Description", "Qty", "Unit Price", "Total"]
COLUMN_WIDTHS = [30, 80, 15, 28, 29]
COLUMN_ALIGNS = ["L", "L", "C", "R", "R"]
LEFT = 14
RIGHT = 196
ROW_HEIGHT = 7


def _latin1(text: str) -> str:
    # core PDF fonts only cover latin-1
    return str(text).encode("latin-1", "replace").decode("latin-1")


def _fit(pdf: FPDF, text: str, width: float) -> str:
    text = _latin1(text)
    if pdf.get_string_width(text) <= width - 2:
        return text
    while text and pdf.get_string_width(text + "...") > width - 2:
        text = text[:-1]
    return text + "..."


def _right(pdf: FPDF, x: float, y: float, text: str) -> None:
    text = _latin1(text)
    pdf.text(x - pdf.get_string_width(text), y, text)


def quotation_filename(quote: Quotation) -> str:
    return f"Quotation_{quote.number}.pdf"


def _display_date(iso: str) -> str:
    try:
        return datetime.fromisoformat(iso).strftime("%m/%d/%Y")
    except ValueError:
        return iso


def _header(pdf: FPDF, quote: Quotation) -> None:
    pdf.set_font("helvetica", size=22)
    pdf.set_text_color(40)
    pdf.text(LEFT, 20, _latin1(config.COMPANY_NAME))

    pdf.set_font("helvetica", size=10)
    pdf.set_text_color(100)
    pdf.text(LEFT, 26, _latin1(config.COMPANY_TAGLINE))
    pdf.text(LEFT, 31, _latin1(f"Phone: {config.COMPANY_PHONE}"))
    pdf.text(LEFT, 36, _latin1(f"Email: {config.COMPANY_EMAIL}"))

    pdf.set_font("helvetica", size=16)
    pdf.set_text_color(0)
    pdf.text(140, 20, "QUOTATION")
    pdf.set_font("helvetica", size=10)
    pdf.text(140, 28, _latin1(f"Ref No: {quote.number}"))
    pdf.text(140, 33, f"Date: {_display_date(quote.date)}")


def _bill_to(pdf: FPDF, quote: Quotation) -> None:
    c = quote.customer
    pdf.set_font("helvetica", size=12)
    pdf.text(LEFT, 50, "Bill To:")
    pdf.set_font("helvetica", size=10)
    lines: List[str] = [c.name, c.company, c.address, c.phone]
    for i, line in enumerate(lines):
        pdf.text(LEFT, 56 + i * 5, _latin1(line or ""))


def _table_head(pdf: FPDF, y: float) -> None:
    pdf.set_xy(LEFT, y)
    pdf.set_font("helvetica", style="B", size=10)
    pdf.set_fill_color(66)
    pdf.set_text_color(255)
    for title, width, align in zip(TABLE_COLUMNS, COLUMN_WIDTHS, COLUMN_ALIGNS):
        pdf.cell(width, ROW_HEIGHT + 1, title, align=align, fill=True)
    pdf.ln(ROW_HEIGHT + 1)

    pdf.set_font("helvetica", size=9)
    pdf.set_text_color(0)
    pdf.set_fill_color(245)


def _items_table(pdf: FPDF, quote: Quotation) -> None:
    _table_head(pdf, 80)
    for n, item in enumerate(quote.items):
        # every page the table spills onto gets its own heading row
        if pdf.will_page_break(ROW_HEIGHT):
            pdf.add_page()
            _table_head(pdf, 20)
        p = item.product
        values = [
            p.code,
            p.name,
            str(item.qty),
            format_currency(p.selling_price),
            format_currency(item.line_total),
        ]
        pdf.set_x(LEFT)
        for value, width, align in zip(values, COLUMN_WIDTHS, COLUMN_ALIGNS):
            pdf.cell(
                width,
                ROW_HEIGHT,
                _fit(pdf, value, width),
                align=align,
                fill=n % 2 == 1,
                new_x=XPos.RIGHT,
                new_y=YPos.TOP,
            )
        pdf.ln(ROW_HEIGHT)


def _totals(pdf: FPDF, quote: Quotation) -> float:
    y = pdf.get_y() + 10
    if y > 230:
        pdf.add_page()
        y = 20

    pdf.set_font("helvetica", size=10)
    pdf.text(140, y, "Subtotal:")
    _right(pdf, RIGHT - 6, y, format_currency(quote.subtotal))

    if quote.discount > 0:
        pdf.text(140, y + 6, "Discount:")
        _right(pdf, RIGHT - 6, y + 6, "- " + format_currency(quote.discount))

    pdf.text(140, y + 12, "Delivery Fee:")
    _right(pdf, RIGHT - 6, y + 12, format_currency(quote.delivery_fee))

    pdf.set_font("helvetica", style="B", size=12)
    pdf.text(140, y + 20, "Grand Total:")
    _right(pdf, RIGHT - 6, y + 20, format_currency(quote.grand_total))
    return y


def _terms(pdf: FPDF, y: float) -> None:
    pdf.set_font("helvetica", size=10)
    pdf.text(LEFT, y + 35, "Notes:")
    pdf.set_font("helvetica", size=9)
    pdf.set_text_color(100)
    for i, line in enumerate(config.QUOTATION_TERMS):
        pdf.text(LEFT, y + 41 + i * 5, _latin1(line))


def render_quotation_pdf(quote: Quotation, compress: bool = True) -> bytes:
    """
    Lay out the quotation and return the PDF bytes.
    compress=False leaves page content streams readable as plain text.
    """
    pdf = FPDF(unit="mm", format="A4")
    pdf.set_compression(compress)
    pdf.set_title(f"Quotation {quote.number}")
    pdf.set_author(config.COMPANY_NAME)
    pdf.add_page()

    _header(pdf, quote)
    _bill_to(pdf, quote)
    _items_table(pdf, quote)
    y = _totals(pdf, quote)
    _terms(pdf, y)

    return bytes(pdf.output())


def export_quotation_pdf(quote: Quotation, directory: Optional[str] = None) -> str:
    """Write Quotation_<number>.pdf into directory and return its path."""
    directory = directory or config.EXPORT_DIR
    os.makedirs(directory, exist_ok=True)
    path = os.path.join(directory, quotation_filename(quote))
    with open(path, "wb") as f:
        f.write(render_quotation_pdf(quote))
    _logger.info(f"Exported quotation {quote.number} to {path}")
    return path
