import json
import random
import unittest
from dataclasses import replace
from datetime import datetime, timedelta

from db import crud
from db.database import CART_KEY, PRODUCTS_KEY, QUOTATIONS_KEY, MemoryStore
from db.models import CartItem, CustomerDetails, Product

CUSTOMER = CustomerDetails(
    name="Maria Santos",
    email="maria@example.com",
    phone="+63 900 111 2222",
    address="12 Ayala Ave, Makati",
    company="Santos Trading",
)


def make_product(pid: str, price: float, **kwargs) -> Product:
    return Product(
        id=pid,
        code=kwargs.pop("code", pid.upper()),
        name=kwargs.pop("name", f"Product {pid}"),
        category=kwargs.pop("category", "Other"),
        original_price=kwargs.pop("original_price", price),
        selling_price=price,
        **kwargs,
    )


class CrudTestCase(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.store = MemoryStore()
        await crud.init_store(self.store)

    # ---------- Seeding ----------

    async def test_init_store_seeds_once(self):
        products = await crud.list_products(self.store)
        self.assertGreaterEqual(len(products), 6)
        self.assertTrue(all(p.is_locked for p in products))
        self.assertEqual(await crud.list_quotations(self.store), [])

        # a second init must not overwrite edits
        await crud.set_selling_price(self.store, "obra-et-001", 1.0)
        await crud.init_store(self.store)
        prod = await crud.get_product(self.store, "obra-et-001")
        self.assertEqual(prod.selling_price, 1.0)

    async def test_collections_are_json_documents(self):
        raw = await self.store.get(PRODUCTS_KEY)
        self.assertIsInstance(json.loads(raw), list)
        self.assertEqual(json.loads(await self.store.get(QUOTATIONS_KEY)), [])

    # ---------- Products ----------

    async def test_derive_selling_price(self):
        self.assertEqual(crud.derive_selling_price(1000), 1100.0)
        self.assertEqual(crud.derive_selling_price(18500), 20350.0)
        self.assertEqual(crud.derive_selling_price(999), 1099.0)
        self.assertEqual(crud.derive_selling_price(0), 0.0)

    async def test_search_products(self):
        res = await crud.search_products(self.store, "  CHAIR ")
        self.assertTrue(res)
        self.assertTrue(all("chair" in p.name.lower() for p in res))

        by_code = await crud.search_products(self.store, "et-1800")
        self.assertEqual([p.id for p in by_code], ["obra-et-001"])

        sofas = await crud.search_products(self.store, "", "Sofa")
        self.assertEqual({p.category for p in sofas}, {"Sofa"})

        everything = await crud.search_products(self.store, "", "All")
        self.assertEqual(len(everything), len(await crud.list_products(self.store)))

        self.assertEqual(await crud.search_products(self.store, "no-such-thing"), [])

    async def test_save_new_and_replace_product(self):
        prod = replace(crud.new_product(), name="Visitor Chair", code="VC-1")
        self.assertFalse(prod.is_locked)
        self.assertTrue(prod.is_active)
        self.assertEqual(prod.category, "Other")

        await crud.save_product(self.store, prod)
        self.assertEqual(await crud.get_product(self.store, prod.id), prod)

        changed = replace(
            prod,
            name="Visitor Chair Black",
            selling_price=2500.0,
            images=("https://img.example.com/a.jpg",),
        )
        await crud.save_product(self.store, changed)
        stored = await crud.get_product(self.store, prod.id)
        self.assertEqual(stored.name, "Visitor Chair Black")
        self.assertEqual(stored.selling_price, 2500.0)
        self.assertEqual(stored.primary_image, "https://img.example.com/a.jpg")

    async def test_locked_product_keeps_catalog_fields(self):
        locked = await crud.get_product(self.store, "obra-et-001")
        self.assertTrue(locked.description)
        attempt = replace(
            locked,
            name="Renamed",
            code="XX-0",
            category="Sofa",
            dimensions="1x1",
            description="changed",
            selling_price=19999.0,
            images=("https://img.example.com/desk.jpg",),
        )
        saved = await crud.save_product(self.store, attempt)

        stored = await crud.get_product(self.store, "obra-et-001")
        self.assertEqual(saved, stored)
        self.assertEqual(stored.name, locked.name)
        self.assertEqual(stored.code, locked.code)
        self.assertEqual(stored.category, locked.category)
        self.assertEqual(stored.dimensions, locked.dimensions)
        self.assertEqual(stored.description, locked.description)
        self.assertTrue(stored.is_locked)
        # price and images are still editable
        self.assertEqual(stored.selling_price, 19999.0)
        self.assertEqual(stored.images, ("https://img.example.com/desk.jpg",))

    async def test_save_product_validation(self):
        with self.assertRaises(ValueError):
            await crud.save_product(self.store, replace(crud.new_product(), name=" "))
        with self.assertRaises(ValueError):
            await crud.save_product(
                self.store, make_product("neg", -1.0, original_price=0.0)
            )
        with self.assertRaises(ValueError):
            await crud.save_product(
                self.store, make_product("cat", 10.0, category="Spaceships")
            )
        self.assertIsNone(await crud.get_product(self.store, "neg"))

    async def test_delete_product(self):
        await crud.save_product(self.store, make_product("temp", 100.0))
        self.assertTrue(await crud.delete_product(self.store, "temp"))
        self.assertIsNone(await crud.get_product(self.store, "temp"))

        # locked and missing products are refused
        self.assertFalse(await crud.delete_product(self.store, "obra-et-001"))
        self.assertIsNotNone(await crud.get_product(self.store, "obra-et-001"))
        self.assertFalse(await crud.delete_product(self.store, "missing"))

    async def test_set_selling_price(self):
        self.assertTrue(await crud.set_selling_price(self.store, "obra-ot-001", 7000))
        self.assertEqual(
            (await crud.get_product(self.store, "obra-ot-001")).selling_price, 7000.0
        )
        self.assertFalse(await crud.set_selling_price(self.store, "missing", 1))
        with self.assertRaises(ValueError):
            await crud.set_selling_price(self.store, "obra-ot-001", -5)

    async def test_bulk_actions(self):
        ids = ["obra-et-001", "obra-ot-001"]
        self.assertEqual(await crud.bulk_set_active(self.store, ids, False), 2)
        for pid in ids:
            self.assertFalse((await crud.get_product(self.store, pid)).is_active)
        untouched = await crud.get_product(self.store, "obra-ct-001")
        self.assertTrue(untouched.is_active)

        self.assertEqual(await crud.bulk_set_category(self.store, ids, "Sofa"), 2)
        for pid in ids:
            self.assertEqual((await crud.get_product(self.store, pid)).category, "Sofa")

        self.assertEqual(await crud.bulk_set_active(self.store, [], True), 0)
        with self.assertRaises(ValueError):
            await crud.bulk_set_category(self.store, ids, "")

    # ---------- Cart ----------

    async def test_add_twice_merges(self):
        prod = await crud.get_product(self.store, "obra-oc-001")
        await crud.add_to_cart(self.store, prod)
        await crud.add_to_cart(self.store, prod)
        items = await crud.list_cart(self.store)
        self.assertEqual(len(items), 1)
        self.assertEqual(items[0].pid, prod.id)
        self.assertEqual(items[0].qty, 2)
        self.assertIsNotNone(await self.store.get(CART_KEY))

    async def test_inactive_product_not_added(self):
        sofa = await crud.get_product(self.store, "obra-sf-001")
        self.assertFalse(sofa.is_active)
        await crud.add_to_cart(self.store, sofa)
        self.assertEqual(await crud.list_cart(self.store), [])

    async def test_cart_qty_remove_clear(self):
        a = await crud.get_product(self.store, "obra-et-001")
        b = await crud.get_product(self.store, "obra-mp-001")
        await crud.add_to_cart(self.store, a)
        await crud.add_to_cart(self.store, b)

        await crud.update_cart_qty(self.store, b.id, 50)
        qty = {i.pid: i.qty for i in await crud.list_cart(self.store)}
        self.assertEqual(qty, {a.id: 1, b.id: 50})

        with self.assertRaises(ValueError):
            await crud.update_cart_qty(self.store, b.id, 0)

        # unknown ids are silent no-ops
        await crud.update_cart_qty(self.store, "missing", 3)
        await crud.remove_from_cart(self.store, "missing")
        self.assertEqual(len(await crud.list_cart(self.store)), 2)

        await crud.remove_from_cart(self.store, a.id)
        self.assertEqual([i.pid for i in await crud.list_cart(self.store)], [b.id])

        await crud.clear_cart(self.store)
        self.assertEqual(await crud.list_cart(self.store), [])

    async def test_cart_keeps_snapshot(self):
        prod = await crud.get_product(self.store, "obra-fc-001")
        await crud.add_to_cart(self.store, prod)
        await crud.set_selling_price(self.store, prod.id, 1.0)
        item = (await crud.list_cart(self.store))[0]
        self.assertEqual(item.product.selling_price, prod.selling_price)

    # ---------- Quotations ----------

    async def test_build_quotation_totals(self):
        items = [
            CartItem(make_product("a", 1000.0), 1),
            CartItem(make_product("b", 500.0), 2),
            CartItem(make_product("c", 12.5), 3),
        ]
        when = datetime(2025, 3, 4, 10, 30)
        quote = crud.build_quotation(items, CUSTOMER, when, random.Random(7))

        self.assertEqual(quote.subtotal, 2037.5)
        self.assertEqual(quote.grand_total, quote.subtotal)
        self.assertEqual(quote.delivery_fee, 0.0)
        self.assertEqual(quote.discount, 0.0)
        self.assertEqual(quote.status, "Draft")
        self.assertEqual(quote.date, when.isoformat())
        self.assertRegex(quote.number, r"^Q-2025-\d{4}$")
        self.assertTrue(1000 <= int(quote.number[-4:]) <= 9999)

    async def test_quotation_date_defaults_to_utc(self):
        quote = crud.build_quotation([CartItem(make_product("a", 10.0), 1)], CUSTOMER)
        stamp = datetime.fromisoformat(quote.date)
        self.assertEqual(stamp.utcoffset(), timedelta(0))
        self.assertTrue(quote.number.startswith(f"Q-{stamp.year}-"))

    async def test_build_quotation_rejects_bad_input(self):
        items = [CartItem(make_product("a", 10.0), 1)]
        with self.assertRaises(ValueError):
            crud.build_quotation([], CUSTOMER)
        with self.assertRaises(ValueError):
            crud.build_quotation(items, replace(CUSTOMER, email=""))
        # company is optional
        quote = crud.build_quotation(items, replace(CUSTOMER, company=""))
        self.assertEqual(quote.subtotal, 10.0)

    async def test_end_to_end_checkout(self):
        a = await crud.save_product(self.store, make_product("a", 1000.0))
        b = await crud.save_product(self.store, make_product("b", 500.0))
        await crud.add_to_cart(self.store, a)
        await crud.add_to_cart(self.store, b)
        await crud.add_to_cart(self.store, b)
        self.assertEqual(crud.cart_subtotal(await crud.list_cart(self.store)), 2000.0)
        self.assertEqual(crud.cart_count(await crud.list_cart(self.store)), 3)

        quote = await crud.checkout(self.store, CUSTOMER)
        self.assertEqual(len(quote.items), 2)
        self.assertEqual(quote.grand_total, 2000.0)
        self.assertEqual(await crud.list_cart(self.store), [])

        stored = await crud.list_quotations(self.store)
        self.assertEqual(stored, [quote])
        self.assertEqual(await crud.get_quotation(self.store, quote.id), quote)
        self.assertIsNone(await crud.get_quotation(self.store, "missing"))

    async def test_checkout_empty_cart_refused(self):
        with self.assertRaises(ValueError):
            await crud.checkout(self.store, CUSTOMER)
        self.assertEqual(await crud.list_quotations(self.store), [])

    async def test_quotation_snapshot_survives_product_edits(self):
        prod = await crud.get_product(self.store, "obra-ct-001")
        await crud.add_to_cart(self.store, prod)
        quote = await crud.checkout(self.store, CUSTOMER)

        await crud.set_selling_price(self.store, prod.id, 1.0)
        await crud.save_product(
            self.store, replace(prod, description="changed", selling_price=2.0)
        )

        stored = await crud.get_quotation(self.store, quote.id)
        self.assertEqual(stored.items[0].product, prod)
        self.assertEqual(stored.subtotal, prod.selling_price)

    async def test_update_quotation(self):
        prod = await crud.save_product(self.store, make_product("a", 1000.0))
        await crud.add_to_cart(self.store, prod)
        quote = await crud.checkout(self.store, CUSTOMER)

        updated = await crud.update_quotation(
            self.store, quote.id, status="Sent", delivery_fee=150.0, discount=50.0
        )
        self.assertEqual(updated.status, "Sent")
        self.assertEqual(updated.grand_total, 1100.0)
        self.assertEqual(updated.items, quote.items)

        # only provided fields change
        updated = await crud.update_quotation(self.store, quote.id, discount=0)
        self.assertEqual(updated.status, "Sent")
        self.assertEqual(updated.delivery_fee, 150.0)
        self.assertEqual(updated.grand_total, 1150.0)

        # a discount larger than the total never goes negative
        updated = await crud.update_quotation(self.store, quote.id, discount=5000)
        self.assertEqual(updated.grand_total, 0.0)

        with self.assertRaises(ValueError):
            await crud.update_quotation(self.store, quote.id, status="Paid")
        with self.assertRaises(ValueError):
            await crud.update_quotation(self.store, quote.id, delivery_fee=-1)
        self.assertIsNone(await crud.update_quotation(self.store, "missing"))

    # ---------- Admin auth ----------

    async def test_login_with_defaults_and_logout(self):
        self.assertFalse(await crud.is_authenticated(self.store))
        self.assertFalse(await crud.login(self.store, "admin", "wrong"))
        self.assertFalse(await crud.is_authenticated(self.store))

        self.assertTrue(await crud.login(self.store, "admin", "adminadmin"))
        self.assertTrue(await crud.is_authenticated(self.store))

        await crud.logout(self.store)
        self.assertFalse(await crud.is_authenticated(self.store))

    async def test_stored_credentials_replace_defaults(self):
        await crud.set_admin_credentials(self.store, "owner", "s3cret")
        self.assertFalse(await crud.login(self.store, "admin", "adminadmin"))
        self.assertTrue(await crud.login(self.store, "owner", "s3cret"))
        with self.assertRaises(ValueError):
            await crud.set_admin_credentials(self.store, "", "x")
