"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class LinkRequestTemplate:
    """Per-call fields of a /link/token/create request, minus the products"""

    user_id: str
    client_name: str
    language: str
    country_codes: Tuple[str, ...]
    redirect_uri: Optional[str] = None
    webhook: Optional[str] = None

    def to_request(self, products: List[str]) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "user": {"client_user_id": self.user_id},
            "client_name": self.client_name,
            "language": self.language,
            "country_codes": list(self.country_codes),
            "products": list(products),
        }
        if self.redirect_uri:
            body["redirect_uri"] = self.redirect_uri
        if self.webhook:
            body["webhook"] = self.webhook
        return body


@dataclass
class LinkSession:
    """Link token granted by Plaid and the products it was granted for"""

    link_token: str
    expiration: Optional[str]
    products_used: List[str]
    attempts: int = 1


@dataclass
class FinancialSnapshot:
    """Raw Plaid payloads for one user; None means the fetch failed"""

    accounts: Optional[Dict[str, Any]] = None
    liabilities: Optional[Dict[str, Any]] = None
    holdings: Optional[Dict[str, Any]] = None
    transactions: Optional[Dict[str, Any]] = None


@dataclass
class AccountSnapshot:
    """Normalized account with its balances"""

    account_id: Optional[str]
    name: str
    mask: str
    type: Optional[str]
    subtype: Optional[str]
    available: Optional[float]
    current: Optional[float]
    currency: str


@dataclass
class KPIReport:
    """Derived KPIs; every figure is rounded to cents"""

    net_worth: float = 0.0
    total_cash: float = 0.0
    checking: float = 0.0
    savings: float = 0.0
    cash_other: float = 0.0
    total_investments: float = 0.0
    total_liabilities: float = 0.0
    income30: float = 0.0
    spend30: float = 0.0
    net_cash_flow: float = 0.0
    monthly_spend: float = 0.0
    savings_rate: float = 0.0
    runway_months: float = 0.0
    accounts: List[AccountSnapshot] = field(default_factory=list)

    def kpis(self) -> Dict[str, float]:
        """KPI figures keyed the way the app expects them"""
        return {
            "netWorth": self.net_worth,
            "totalCash": self.total_cash,
            "checking": self.checking,
            "savings": self.savings,
            "cashOther": self.cash_other,
            "totalInvestments": self.total_investments,
            "totalLiabilities": self.total_liabilities,
            "income30": self.income30,
            "spend30": self.spend30,
            "netCashFlow": self.net_cash_flow,
            "monthlySpend": self.monthly_spend,
            "savingsRate": self.savings_rate,
            "runwayMonths": self.runway_months,
        }

    def account_dicts(self) -> List[Dict[str, Any]]:
        return [asdict(a) for a in self.accounts]


@dataclass
class BudgetSplit:
    """Needs / Wants / Savings totals and their share of the classified spend"""

    needs: float = 0.0
    wants: float = 0.0
    savings: float = 0.0
    needs_pct: float = 0.0
    wants_pct: float = 0.0
    savings_pct: float = 0.0
    unclassified: float = 0.0
