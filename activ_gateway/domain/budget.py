"""50/30/20 budget split - Needs / Wants / Savings classification of transactions"""

import re
from typing import Any, Dict, List, Optional, Pattern, Tuple

from activ_gateway.domain.kpis import money, outflow_sign, to_number
from activ_gateway.domain.models import BudgetSplit

BUDGET_TARGETS = {"needs": 50, "wants": 30, "savings": 20}

NEEDS_KEYWORDS = (
    "rent", "mortgage", "utilities", "electric", "water", "gas station", "fuel",
    "insurance", "groceries", "grocery", "supermarket", "pharmacy", "medical",
    "healthcare", "doctor", "hospital", "telecommunication", "phone", "internet",
    "childcare", "tuition", "transportation", "public transit", "loan payments",
)

WANTS_KEYWORDS = (
    "restaurant", "restaurants", "food and drink", "coffee", "fast food", "bar", "entertainment",
    "recreation", "travel", "airlines", "hotel", "lodging", "shops", "shopping",
    "general merchandise", "clothing", "subscription", "streaming", "gym",
    "personal care", "amazon", "uber eats", "doordash",
)

SAVINGS_KEYWORDS = (
    "savings", "transfer out", "investment", "brokerage", "retirement", "401k",
    "ira", "vanguard", "fidelity", "robinhood",
)


def _keyword_pattern(keywords: Tuple[str, ...]) -> Pattern[str]:
    return re.compile(r"\b(?:" + "|".join(re.escape(k) for k in keywords) + r")\b")


# First match wins, in this order
_BUCKETS = (
    ("needs", _keyword_pattern(NEEDS_KEYWORDS)),
    ("wants", _keyword_pattern(WANTS_KEYWORDS)),
    ("savings", _keyword_pattern(SAVINGS_KEYWORDS)),
)


def _search_text(txn: Dict[str, Any]) -> str:
    parts: List[str] = [txn.get("merchant_name") or "", txn.get("name") or ""]
    parts.extend(str(c) for c in txn.get("category") or [])
    pfc = txn.get("personal_finance_category") or {}
    parts.extend(str(v).replace("_", " ") for v in (pfc.get("primary"), pfc.get("detailed")) if v)
    return " ".join(parts).lower()


def classify_transaction(txn: Dict[str, Any]) -> Optional[str]:
    """Bucket name for a transaction, or None when no keyword matches"""
    text = _search_text(txn)
    for bucket, pattern in _BUCKETS:
        if pattern.search(text):
            return bucket
    return None


def compute_budget_split(transactions: Optional[Dict[str, Any]]) -> BudgetSplit:
    """
    Sum outflows per bucket and express each as a share of the classified
    total. The total defaults to 1 so an unmatched window reports 0%.

    Inflows (payroll, refunds, credits) are not spend and are left out,
    using the same sign convention detection as the cash flow KPIs.
    """
    items = (transactions or {}).get("transactions") or []
    sign = outflow_sign([to_number(t.get("amount")) for t in items])

    sums = {"needs": 0.0, "wants": 0.0, "savings": 0.0}
    unclassified = 0.0
    for txn in items:
        amount = to_number(txn.get("amount")) * sign
        if amount <= 0:
            continue
        bucket = classify_transaction(txn)
        if bucket is None:
            unclassified += amount
        else:
            sums[bucket] += amount

    classified = sum(sums.values()) or 1

    return BudgetSplit(
        needs=money(sums["needs"]),
        wants=money(sums["wants"]),
        savings=money(sums["savings"]),
        needs_pct=money(sums["needs"] / classified * 100),
        wants_pct=money(sums["wants"] / classified * 100),
        savings_pct=money(sums["savings"] / classified * 100),
        unclassified=money(unclassified),
    )
