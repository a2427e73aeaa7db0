import os
import tempfile
import unittest
from datetime import datetime

from db import crud
from db.database import MemoryStore
from db.models import CartItem, CustomerDetails, Product
from utils import config
from utils.pdf import (
    TABLE_COLUMNS,
    export_quotation_pdf,
    quotation_filename,
    render_quotation_pdf,
)
from utils.pure import format_currency, generate_markdown_table, parse_amount


def sample_quote(n_items: int = 2, **customer):
    items = [
        CartItem(
            Product(
                id=f"p{i}",
                code=f"CODE-{i}",
                name=f"Conference Table Size {i} with a very long descriptive name",
                category="Conference Table",
                original_price=1000.0,
                selling_price=1100.0,
            ),
            qty=i + 1,
        )
        for i in range(n_items)
    ]
    details = dict(
        name="José Rizal",
        email="jose@example.com",
        phone="+63 900 000 0000",
        address="Calamba, Laguna",
    )
    details.update(customer)
    return crud.build_quotation(
        items, CustomerDetails(**details), datetime(2025, 6, 19, 9, 0)
    )


class PdfTestCase(unittest.TestCase):
    def test_filename_uses_number(self):
        quote = sample_quote()
        self.assertEqual(quotation_filename(quote), f"Quotation_{quote.number}.pdf")

    def test_render_produces_pdf(self):
        data = render_quotation_pdf(sample_quote())
        self.assertTrue(data.startswith(b"%PDF"))
        self.assertGreater(len(data), 500)

    def test_render_long_quote_without_company(self):
        quote = sample_quote(n_items=40, company="")
        self.assertTrue(render_quotation_pdf(quote).startswith(b"%PDF"))

    def test_layout_text(self):
        quote = sample_quote()
        data = render_quotation_pdf(quote, compress=False)
        self.assertIn(f"(Ref No: {quote.number})".encode(), data)
        for title in TABLE_COLUMNS:
            self.assertIn(f"({title})".encode(), data)
        for line in config.QUOTATION_TERMS:
            self.assertIn(f"({line})".encode("latin-1"), data)
        self.assertIn(b"(Grand Total:)", data)

    def test_heading_row_repeats_after_page_break(self):
        short = render_quotation_pdf(sample_quote(n_items=2), compress=False)
        self.assertEqual(short.count(b"(Unit Price)"), 1)

        # 40 rows do not fit under the bill-to block of an A4 page
        long = render_quotation_pdf(sample_quote(n_items=40), compress=False)
        self.assertEqual(long.count(b"(Unit Price)"), 2)

    def test_export_writes_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            out_dir = os.path.join(tmp, "exports")
            quote = sample_quote()
            path = export_quotation_pdf(quote, out_dir)
            self.assertEqual(path, os.path.join(out_dir, quotation_filename(quote)))
            with open(path, "rb") as f:
                self.assertEqual(f.read(4), b"%PDF")


class PdfDiscountTestCase(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.store = MemoryStore()
        await crud.init_store(self.store)
        prod = await crud.get_product(self.store, "obra-ct-001")
        await crud.add_to_cart(self.store, prod)
        self.quote = await crud.checkout(self.store, sample_quote().customer)

    async def test_discount_line_only_when_positive(self):
        data = render_quotation_pdf(self.quote, compress=False)
        self.assertNotIn(b"(Discount:)", data)

        updated = await crud.update_quotation(
            self.store, self.quote.id, discount=400.0, delivery_fee=100.0
        )
        data = render_quotation_pdf(updated, compress=False)
        self.assertIn(b"(Discount:)", data)
        self.assertIn(f"(- {format_currency(400.0)})".encode(), data)


class PureHelpersTestCase(unittest.TestCase):
    def test_format_currency(self):
        self.assertEqual(format_currency(2000), "P 2,000.00")
        self.assertEqual(format_currency(0.5), "P 0.50")
        self.assertEqual(format_currency(None), "")

    def test_parse_amount(self):
        self.assertEqual(parse_amount("1,200.50"), 1200.5)
        self.assertIsNone(parse_amount(""))
        self.assertIsNone(parse_amount("abc"))

    def test_markdown_table(self):
        md = generate_markdown_table(["A", "B"], [[1, "x|y"]], ["l", "r"])
        self.assertEqual(md.splitlines()[1], "| :--- | ---: |")
        self.assertIn("x\\|y", md)
        self.assertEqual(generate_markdown_table(["A"], []), "")
        with self.assertRaises(ValueError):
            generate_markdown_table(["A", "B"], [[1, 2]], ["l"])
