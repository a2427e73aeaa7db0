# provide dataclass models

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, List, Literal, Tuple

QuotationStatus = Literal["Draft", "Sent", "Approved", "Rejected"]

QUOTATION_STATUSES: Tuple[str, ...] = ("Draft", "Sent", "Approved", "Rejected")

PRODUCT_CATEGORIES: Tuple[str, ...] = (
    "Executive Table",
    "Office Table",
    "Conference Table",
    "Reception Desk",
    "Filing Cabinet",
    "Mobile Pedestal",
    "Office Chair",
    "Gang Chair",
    "Sofa",
    "Home Furniture",
    "Other",
)


def _pick(cls, data: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only keys that are fields of cls, so older records still load."""
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in data.items() if k in names}


@dataclass(frozen=True)
class Product:
    id: str
    code: str
    name: str
    category: str
    original_price: float
    selling_price: float
    images: Tuple[str, ...] = ()
    is_locked: bool = False  # seeded record; only prices, status and images change
    is_active: bool = True  # inactive products are listed but not orderable
    dimensions: str = ""
    description: str = ""

    @property
    def primary_image(self) -> str | None:
        return self.images[0] if self.images else None

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["images"] = list(self.images)
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Product":
        d = _pick(cls, data)
        d["images"] = tuple(d.get("images") or ())
        return cls(**d)


@dataclass(frozen=True)
class CartItem:
    product: Product  # snapshot taken when the item was added
    qty: int = 1

    @property
    def pid(self) -> str:
        return self.product.id

    @property
    def line_total(self) -> float:
        return self.product.selling_price * self.qty

    def to_dict(self) -> Dict[str, Any]:
        return {"product": self.product.to_dict(), "qty": self.qty}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CartItem":
        return cls(product=Product.from_dict(data["product"]), qty=int(data["qty"]))


@dataclass(frozen=True)
class CustomerDetails:
    name: str
    email: str
    phone: str
    address: str
    company: str = ""

    REQUIRED = ("name", "email", "phone", "address")

    def missing_fields(self) -> List[str]:
        return [f for f in self.REQUIRED if not str(getattr(self, f)).strip()]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CustomerDetails":
        return cls(**_pick(cls, data))


@dataclass(frozen=True)
class Quotation:
    id: str
    number: str
    date: str  # ISO-8601 timestamp, UTC
    customer: CustomerDetails
    items: Tuple[CartItem, ...]
    subtotal: float
    delivery_fee: float = 0.0
    discount: float = 0.0
    grand_total: float = 0.0
    status: QuotationStatus = "Draft"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "number": self.number,
            "date": self.date,
            "customer": self.customer.to_dict(),
            "items": [item.to_dict() for item in self.items],
            "subtotal": self.subtotal,
            "delivery_fee": self.delivery_fee,
            "discount": self.discount,
            "grand_total": self.grand_total,
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Quotation":
        d = _pick(cls, data)
        d["customer"] = CustomerDetails.from_dict(d["customer"])
        d["items"] = tuple(CartItem.from_dict(i) for i in d.get("items") or ())
        return cls(**d)
