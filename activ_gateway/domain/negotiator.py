"""Link token creation with adaptive product negotiation"""

import logging
from typing import Any, Awaitable, Dict, Iterable, Optional, Protocol

from activ_gateway.domain.exceptions import PlaidAPIError, RejectionKind
from activ_gateway.domain.models import LinkRequestTemplate, LinkSession
from activ_gateway.domain.products import (
    DEFAULT_PRODUCT,
    minimal_products,
    parse_invalid_products,
    sanitize_products,
)

LINK_TOKEN_PATH = "/link/token/create"


class PlaidPoster(Protocol):
    def post(self, path: str, body: Dict[str, Any]) -> Awaitable[Dict[str, Any]]:
        ...


def _session(data: Dict[str, Any], products: list, attempts: int) -> LinkSession:
    return LinkSession(
        link_token=data.get("link_token", ""),
        expiration=data.get("expiration"),
        products_used=list(products),
        attempts=attempts,
    )


async def negotiate(
    client: PlaidPoster,
    template: LinkRequestTemplate,
    desired_products: Optional[Iterable[object]] = None,
    max_attempts: int = 4,
) -> LinkSession:
    """
    Create a Link token, shrinking the product list until Plaid accepts it.

    Strategy:
    - INVALID_PRODUCT: drop the products named in the "[a, b]" part of the
      message and retry (an unparseable message retries the same list)
    - PRODUCTS_NOT_ENABLED / PRODUCTS_NOT_SUPPORTED: retry with transactions/auth only
    - any other error is raised immediately
    - after max_attempts, or once nothing is left, one final request with
      just the default product; its outcome is returned or raised as-is

    Returns:
        LinkSession with the product list that actually succeeded
    """
    products = sanitize_products(desired_products)
    attempts = 0

    while products and attempts < max_attempts:
        attempts += 1
        try:
            data = await client.post(LINK_TOKEN_PATH, template.to_request(products))
            return _session(data, products, attempts)

        except PlaidAPIError as e:
            kind = e.kind
            if kind is RejectionKind.OTHER:
                raise

            logging.warning(
                f"Link token rejected: {e.code}",
                extra={"user_id": template.user_id, "products": products, "attempt": attempts},
            )

            if kind is RejectionKind.INVALID_PRODUCT:
                bad = set(parse_invalid_products(e.message))
                products = [p for p in products if p not in bad]
            else:
                products = minimal_products(products)

    # Last resort
    attempts += 1
    fallback = [DEFAULT_PRODUCT]
    data = await client.post(LINK_TOKEN_PATH, template.to_request(fallback))
    return _session(data, fallback, attempts)
