"""Plaid product vocabulary and product-list helpers"""

import re
from typing import Iterable, List, Optional

VALID_PRODUCTS = frozenset({
    "auth",
    "transactions",
    "identity",
    "assets",
    "investments",
    "liabilities",
    "income",
    "payment_initiation",
    "transfer",
    "signal",
    "credit_details",
})

PREFERRED_PRODUCTS = ["transactions", "auth", "identity", "liabilities", "investments"]

# Subset retried when Plaid says products are not enabled for the client
MINIMAL_PRODUCTS = ["transactions", "auth"]

DEFAULT_PRODUCT = "transactions"

_BRACKETED = re.compile(r"\[([^\]]+)\]")


def sanitize_products(products: Optional[Iterable[object]]) -> List[str]:
    """
    Normalize a caller-supplied product list.

    None means the preferred list. Entries are trimmed and lower-cased,
    unknown names dropped and duplicates removed (first occurrence wins).
    An empty result becomes the single default product.
    """
    if products is None:
        products = PREFERRED_PRODUCTS

    cleaned: List[str] = []
    for raw in products:
        name = str(raw).strip().lower()
        if name in VALID_PRODUCTS and name not in cleaned:
            cleaned.append(name)

    return cleaned or [DEFAULT_PRODUCT]


def parse_invalid_products(message: Optional[str]) -> List[str]:
    """
    Extract product names listed in brackets in a Plaid error message.

    Example:
        'not authorized to access the following products: ["Income", assets]' -> ["income", "assets"]
    """
    match = _BRACKETED.search(message or "")
    if not match:
        return []
    names = (p.strip().strip("\"'").strip().lower() for p in match.group(1).split(","))
    return [n for n in names if n]


def minimal_products(products: List[str]) -> List[str]:
    reduced = [p for p in MINIMAL_PRODUCTS if p in products]
    return reduced or [DEFAULT_PRODUCT]
