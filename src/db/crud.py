# src/db/crud.py
from __future__ import annotations

import json
import math
import os.path
import random
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional

from db import models
from db.database import (
    ADMIN_AUTH_KEY,
    ADMIN_PASS_KEY,
    ADMIN_USER_KEY,
    CART_KEY,
    PRODUCTS_KEY,
    QUOTATIONS_KEY,
    KeyValueStore,
)
from utils import config
from utils.logger import get_logger

_logger = get_logger(__name__)

SEED_PATH = os.path.join(os.path.dirname(__file__), "seed-products.json")


async def _read_json(store: KeyValueStore, key: str, default: Any) -> Any:
    raw = await store.get(key)
    if raw is None:
        return default
    return json.loads(raw)


async def _write_json(store: KeyValueStore, key: str, value: Any) -> None:
    await store.set(key, json.dumps(value))


async def init_store(store: KeyValueStore) -> None:
    """Seed the product list and an empty quotation list if they are missing."""
    if await store.get(PRODUCTS_KEY) is None:
        with open(SEED_PATH, "r", encoding="utf-8") as f:
            seed = json.load(f)
        _logger.info(f"Seeding catalog with {len(seed)} products...")
        await _write_json(store, PRODUCTS_KEY, seed)
    if await store.get(QUOTATIONS_KEY) is None:
        await _write_json(store, QUOTATIONS_KEY, [])


# ---------------------------
# Products
# ---------------------------


def derive_selling_price(original_price: float) -> float:
    """Selling price suggested for a base price (rounded up to a whole unit)."""
    # round first so 1000 * 1.1 does not ceil to 1101
    return float(math.ceil(round(original_price * config.MARKUP, 2)))


def new_product() -> models.Product:
    """A blank, unlocked, active product for the editor."""
    return models.Product(
        id=str(uuid.uuid4()),
        code="",
        name="",
        category="Other",
        original_price=0.0,
        selling_price=0.0,
    )


async def list_products(store: KeyValueStore) -> List[models.Product]:
    rows = await _read_json(store, PRODUCTS_KEY, [])
    return [models.Product.from_dict(row) for row in rows]


async def save_all_products(
    store: KeyValueStore, products: Iterable[models.Product]
) -> None:
    await _write_json(store, PRODUCTS_KEY, [p.to_dict() for p in products])


async def get_product(store: KeyValueStore, pid: str) -> Optional[models.Product]:
    """Fetch a product by id."""
    for p in await list_products(store):
        if p.id == pid:
            return p
    return None


async def search_products(
    store: KeyValueStore, query: str = "", category: str = "All"
) -> List[models.Product]:
    """
    Case-insensitive substring search over name and code.
    category "All" (or empty) disables the category filter.
    Inactive products are included; they are shown but not orderable.
    """
    needle = (query or "").strip().lower()
    results = []
    for p in await list_products(store):
        if needle and needle not in p.name.lower() and needle not in p.code.lower():
            continue
        if category and category != "All" and p.category != category:
            continue
        results.append(p)
    return results


def validate_product(product: models.Product) -> None:
    """Raise ValueError describing the first problem with a product record."""
    if not product.name.strip():
        raise ValueError("Product name is required.")
    if product.original_price < 0 or product.selling_price < 0:
        raise ValueError("Prices cannot be negative.")
    if product.category not in models.PRODUCT_CATEGORIES:
        raise ValueError(f"Unknown category: {product.category}")


async def save_product(
    store: KeyValueStore, product: models.Product
) -> models.Product:
    """
    Insert or fully replace a product record and return what was stored.
    Locked records keep their stored id, name, code, category, dimensions
    and description whatever the input says.
    """
    products = await list_products(store)
    for i, existing in enumerate(products):
        if existing.id != product.id:
            continue
        if existing.is_locked:
            product = replace(
                product,
                name=existing.name,
                code=existing.code,
                category=existing.category,
                dimensions=existing.dimensions,
                description=existing.description,
                is_locked=True,
            )
        validate_product(product)
        products[i] = product
        break
    else:
        validate_product(product)
        products.append(product)

    await save_all_products(store, products)
    return product


async def delete_product(store: KeyValueStore, pid: str) -> bool:
    """Delete an unlocked product. Return False if missing or locked."""
    products = await list_products(store)
    target = next((p for p in products if p.id == pid), None)
    if target is None:
        return False
    if target.is_locked:
        _logger.warning(f"Refused to delete locked product {target.code}")
        return False
    await save_all_products(store, [p for p in products if p.id != pid])
    _logger.info(f"Deleted product {pid}")
    return True


async def set_selling_price(store: KeyValueStore, pid: str, price: float) -> bool:
    """Inline price edit. Return True if a product was updated."""
    if price < 0:
        raise ValueError("Price cannot be negative.")
    products = await list_products(store)
    for i, p in enumerate(products):
        if p.id == pid:
            products[i] = replace(p, selling_price=float(price))
            await save_all_products(store, products)
            return True
    return False


async def bulk_set_active(
    store: KeyValueStore, pids: Iterable[str], is_active: bool
) -> int:
    """Set visibility for every selected product; return how many matched."""
    selected = set(pids)
    if not selected:
        return 0
    products = await list_products(store)
    count = 0
    for i, p in enumerate(products):
        if p.id in selected:
            products[i] = replace(p, is_active=is_active)
            count += 1
    await save_all_products(store, products)
    return count


async def bulk_set_category(
    store: KeyValueStore, pids: Iterable[str], category: str
) -> int:
    """Move every selected product to category; return how many matched."""
    if category not in models.PRODUCT_CATEGORIES:
        raise ValueError(f"Unknown category: {category}")
    selected = set(pids)
    if not selected:
        return 0
    products = await list_products(store)
    count = 0
    for i, p in enumerate(products):
        if p.id in selected:
            products[i] = replace(p, category=category)
            count += 1
    await save_all_products(store, products)
    return count


# ---------------------------
# Cart Management
# ---------------------------


async def list_cart(store: KeyValueStore) -> List[models.CartItem]:
    rows = await _read_json(store, CART_KEY, [])
    return [models.CartItem.from_dict(row) for row in rows]


async def _save_cart(store: KeyValueStore, items: Iterable[models.CartItem]) -> None:
    await _write_json(store, CART_KEY, [i.to_dict() for i in items])


async def add_to_cart(store: KeyValueStore, product: models.Product) -> None:
    """
    Add one unit of product. If it is already in the cart the quantity is
    incremented instead. Inactive products are not orderable and are ignored.
    """
    if not product.is_active:
        _logger.warning(f"Ignored add to cart for inactive product {product.id}")
        return
    items = await list_cart(store)
    for i, item in enumerate(items):
        if item.pid == product.id:
            items[i] = replace(item, qty=item.qty + 1)
            break
    else:
        items.append(models.CartItem(product=product, qty=1))
    await _save_cart(store, items)


async def update_cart_qty(store: KeyValueStore, pid: str, qty: int) -> None:
    """Set the quantity of a cart item. Unknown ids are ignored; no upper bound."""
    if qty < 1:
        raise ValueError("Quantity must be at least 1.")
    items = await list_cart(store)
    if not any(item.pid == pid for item in items):
        return
    await _save_cart(
        store, [replace(i, qty=qty) if i.pid == pid else i for i in items]
    )


async def remove_from_cart(store: KeyValueStore, pid: str) -> None:
    """Remove a single product from the cart."""
    items = await list_cart(store)
    await _save_cart(store, [i for i in items if i.pid != pid])


async def clear_cart(store: KeyValueStore) -> None:
    await _save_cart(store, [])


def cart_subtotal(items: Iterable[models.CartItem]) -> float:
    return round(sum(item.line_total for item in items), 2)


def cart_count(items: Iterable[models.CartItem]) -> int:
    return sum(item.qty for item in items)


# ---------------------------
# Quotations
# ---------------------------


def generate_quote_number(when: datetime, rng: Optional[random.Random] = None) -> str:
    """Year plus a random 4 digit suffix; collisions are possible."""
    rng = rng or random
    return f"Q-{when.year}-{rng.randint(1000, 9999)}"


def compute_grand_total(subtotal: float, delivery_fee: float, discount: float) -> float:
    return round(max(subtotal + delivery_fee - discount, 0.0), 2)


def build_quotation(
    items: Iterable[models.CartItem],
    customer: models.CustomerDetails,
    when: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
) -> models.Quotation:
    """
    Build a Draft quotation from a cart snapshot. Fees and discount start at
    zero so the grand total equals the subtotal.
    """
    items = tuple(items)
    if not items:
        raise ValueError("Cart is empty.")
    missing = customer.missing_fields()
    if missing:
        raise ValueError(f"Missing customer details: {', '.join(missing)}")

    when = when or datetime.now(timezone.utc)
    subtotal = cart_subtotal(items)
    return models.Quotation(
        id=str(uuid.uuid4()),
        number=generate_quote_number(when, rng),
        date=when.isoformat(),
        customer=customer,
        items=items,
        subtotal=subtotal,
        delivery_fee=0.0,
        discount=0.0,
        grand_total=subtotal,
        status="Draft",
    )


async def list_quotations(store: KeyValueStore) -> List[models.Quotation]:
    rows = await _read_json(store, QUOTATIONS_KEY, [])
    return [models.Quotation.from_dict(row) for row in rows]


async def _save_quotations(
    store: KeyValueStore, quotes: Iterable[models.Quotation]
) -> None:
    await _write_json(store, QUOTATIONS_KEY, [q.to_dict() for q in quotes])


async def get_quotation(store: KeyValueStore, qid: str) -> Optional[models.Quotation]:
    for q in await list_quotations(store):
        if q.id == qid:
            return q
    return None


async def checkout(
    store: KeyValueStore,
    customer: models.CustomerDetails,
    when: Optional[datetime] = None,
) -> models.Quotation:
    """
    Turn the current cart into a stored quotation and empty the cart.
    Returns the created quotation.
    """
    items = await list_cart(store)
    quote = build_quotation(items, customer, when)

    quotes = await list_quotations(store)
    quotes.append(quote)
    await _save_quotations(store, quotes)
    await clear_cart(store)

    _logger.info(
        f"Quotation {quote.number} created for {customer.name} "
        f"({len(quote.items)} items, total {quote.grand_total:.2f})"
    )
    return quote


async def update_quotation(
    store: KeyValueStore,
    qid: str,
    status: Optional[str] = None,
    delivery_fee: Optional[float] = None,
    discount: Optional[float] = None,
) -> Optional[models.Quotation]:
    """
    Update status and/or fees (only provided fields) and recompute the grand
    total. The item snapshot is never touched. Return None if qid is unknown.
    """
    if status is not None and status not in models.QUOTATION_STATUSES:
        raise ValueError(f"Unknown quotation status: {status}")
    if (delivery_fee is not None and delivery_fee < 0) or (
        discount is not None and discount < 0
    ):
        raise ValueError("Delivery fee and discount cannot be negative.")

    quotes = await list_quotations(store)
    for i, q in enumerate(quotes):
        if q.id != qid:
            continue
        fee = q.delivery_fee if delivery_fee is None else float(delivery_fee)
        disc = q.discount if discount is None else float(discount)
        updated = replace(
            q,
            status=status or q.status,
            delivery_fee=fee,
            discount=disc,
            grand_total=compute_grand_total(q.subtotal, fee, disc),
        )
        quotes[i] = updated
        await _save_quotations(store, quotes)
        return updated
    return None


# ---------------------------
# Admin Auth
# ---------------------------


async def login(store: KeyValueStore, username: str, password: str) -> bool:
    """Compare against stored (or default) credentials; set the flag on success."""
    stored_user = await store.get(ADMIN_USER_KEY) or config.DEFAULT_ADMIN_USER
    stored_pass = await store.get(ADMIN_PASS_KEY) or config.DEFAULT_ADMIN_PASS
    if username == stored_user and password == stored_pass:
        await _write_json(store, ADMIN_AUTH_KEY, True)
        return True
    _logger.warning(f"Failed admin login for '{username}'")
    return False


async def logout(store: KeyValueStore) -> None:
    await store.remove(ADMIN_AUTH_KEY)


async def is_authenticated(store: KeyValueStore) -> bool:
    return bool(await _read_json(store, ADMIN_AUTH_KEY, False))


async def set_admin_credentials(
    store: KeyValueStore, username: str, password: str
) -> None:
    if not username or not password:
        raise ValueError("Username and password cannot be empty.")
    await store.set(ADMIN_USER_KEY, username)
    await store.set(ADMIN_PASS_KEY, password)
