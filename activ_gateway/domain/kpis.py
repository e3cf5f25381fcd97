"""KPI engine - derives net worth, cash flow and runway from raw Plaid payloads"""

import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional, Tuple

from activ_gateway.domain.models import AccountSnapshot, KPIReport

DEFAULT_MONTHLY_SPEND = 2000.0
DEFAULT_SAVINGS_RATE = 0.20

Payload = Optional[Dict[str, Any]]


def to_number(value: Any) -> float:
    """Numeric value of a JSON field; anything non-numeric counts as 0"""
    if isinstance(value, bool) or value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def money(value: Any) -> float:
    """Round to cents, halves away from zero"""
    amount = Decimal(repr(to_number(value)))
    return float(amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def total(values: Iterable[Any]) -> float:
    return sum((to_number(v) for v in values), 0.0)


def _coalesce(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


def _balance(account: Dict[str, Any]) -> Any:
    balances = account.get("balances") or {}
    return _coalesce(balances.get("available"), balances.get("current"), 0)


def _list(payload: Payload, key: str) -> Optional[List[Dict[str, Any]]]:
    if not payload:
        return None
    items = payload.get(key)
    return items if isinstance(items, list) else None


def compute_cash(accounts: List[Dict[str, Any]]) -> Tuple[float, float, float, float]:
    """
    Split depository balances into checking / savings / other.

    Uses the available balance when reported, else current, else 0.

    Returns: (checking, savings, cash_other, total_cash)
    """
    depository = [a for a in accounts if a.get("type") == "depository"]

    checking = money(total(_balance(a) for a in depository if a.get("subtype") == "checking"))
    savings = money(total(_balance(a) for a in depository if a.get("subtype") == "savings"))
    cash_other = money(total(
        _balance(a) for a in depository if a.get("subtype") not in ("checking", "savings")
    ))

    return checking, savings, cash_other, money(checking + savings + cash_other)


def compute_liabilities(liabilities: Payload) -> float:
    """Outstanding credit card, student loan, mortgage and auto loan balances"""
    if not liabilities or not liabilities.get("liabilities"):
        return 0.0

    groups = liabilities["liabilities"]
    credit = total(_coalesce((x.get("balance") or {}).get("current"), 0) for x in groups.get("credit") or [])
    student = total(_coalesce(x.get("outstanding_balance"), 0) for x in groups.get("student") or [])
    mortgage = total(_coalesce(x.get("principal_balance"), 0) for x in groups.get("mortgage") or [])
    auto = total(_coalesce(x.get("outstanding_balance"), 0) for x in groups.get("auto") or [])

    return money(credit + student + mortgage + auto)


def _holding_value(holding: Dict[str, Any], securities: Dict[Any, Dict[str, Any]]) -> float:
    institution_value = holding.get("institution_value")
    if isinstance(institution_value, (int, float)) and not isinstance(institution_value, bool):
        return float(institution_value)

    security = securities.get(holding.get("security_id")) or {}
    price = _coalesce(security.get("close_price"), security.get("price")) or 0
    return to_number(holding.get("quantity")) * to_number(price)


def compute_investments(holdings: Payload) -> float:
    """
    Total holdings value.

    institution_value wins whenever it is numeric; otherwise the holding is
    valued as quantity x security close price (or price).
    """
    items = _list(holdings, "holdings")
    securities = _list(holdings, "securities")
    if items is None or securities is None:
        return 0.0

    by_id = {s.get("security_id"): s for s in securities}
    return money(total(_holding_value(h, by_id) for h in items))


def sign_convention_inverted(income: float, spend: float, raw_total: float) -> bool:
    """
    Whether an institution reports credits as positive amounts.

    Plaid reports outflows as positive amounts, but not every institution
    follows that; when income looks smaller than spend while the signed
    total is negative, the amounts are read the other way round.
    """
    return income < spend and raw_total < 0


def outflow_sign(amounts: List[float]) -> float:
    """1.0 when outflows are positive (Plaid's convention), -1.0 when the window reads inverted"""
    income = money(total(-a for a in amounts if a < 0))
    spend = money(total(a for a in amounts if a > 0))
    return -1.0 if sign_convention_inverted(income, spend, total(amounts)) else 1.0


def compute_cash_flow(transactions: List[Dict[str, Any]]) -> Tuple[float, float]:
    """
    Income and spend over the transaction window.

    Returns: (income, spend), both non-negative
    """
    amounts = [to_number(t.get("amount")) for t in transactions]
    sign = outflow_sign(amounts)
    flows = [a * sign for a in amounts]

    income = money(total(-f for f in flows if f < 0))
    spend = money(total(f for f in flows if f > 0))

    return income, spend


def runway(total_cash: float, monthly_spend: float) -> float:
    """Months of spend covered by cash; 0 when there is no spend to cover"""
    if not monthly_spend:
        return 0.0
    return money(total_cash / monthly_spend)


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def normalize_account(account: Dict[str, Any]) -> AccountSnapshot:
    balances = account.get("balances") or {}
    return AccountSnapshot(
        account_id=account.get("account_id"),
        name=account.get("name") or account.get("official_name") or "Account",
        mask=account.get("mask") or "",
        type=account.get("type"),
        subtype=account.get("subtype"),
        available=balances.get("available"),
        current=balances.get("current"),
        currency=balances.get("iso_currency_code") or balances.get("unofficial_currency_code") or "USD",
    )


def compute_kpi_report(
    accounts: Payload = None,
    liabilities: Payload = None,
    holdings: Payload = None,
    transactions: Payload = None,
) -> KPIReport:
    """
    Main entry point: build the KPI report from whatever data was fetched.

    Each argument is the raw Plaid response (accounts/balance, liabilities,
    investments/holdings, transactions) or None when that fetch failed.
    Never raises; missing inputs fall back to defaults:
    - no accounts: all cash figures 0
    - no transactions: monthly spend 2000, savings rate 0.20, net cash flow 0
    """
    account_list = _list(accounts, "accounts") or []
    checking, savings, cash_other, total_cash = compute_cash(account_list)

    total_liabilities = compute_liabilities(liabilities)
    total_investments = compute_investments(holdings)

    income30 = spend30 = net_cash_flow = 0.0
    txn_list = _list(transactions, "transactions")
    if txn_list is not None:
        income30, spend30 = compute_cash_flow(txn_list)
        net_cash_flow = money(income30 - spend30)
        monthly_spend = spend30 or DEFAULT_MONTHLY_SPEND
        savings_rate = clamp01(net_cash_flow / income30) if income30 else 0.0
    else:
        monthly_spend = DEFAULT_MONTHLY_SPEND
        savings_rate = DEFAULT_SAVINGS_RATE

    runway_months = runway(total_cash, monthly_spend)
    net_worth = money(total_cash + total_investments - total_liabilities)

    return KPIReport(
        net_worth=net_worth,
        total_cash=total_cash,
        checking=checking,
        savings=savings,
        cash_other=cash_other,
        total_investments=total_investments,
        total_liabilities=total_liabilities,
        income30=income30,
        spend30=spend30,
        net_cash_flow=net_cash_flow,
        monthly_spend=money(monthly_spend),
        savings_rate=money(savings_rate),
        runway_months=runway_months,
        accounts=[normalize_account(a) for a in account_list],
    )
