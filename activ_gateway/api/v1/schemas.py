"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional

DEFAULT_USER_ID = "default"


class UserRequest(BaseModel):
    """Body carrying the app user id (as userId or user_id)"""

    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(None, alias="userId", description="User identifier")

    @property
    def resolved_user_id(self) -> str:
        return self.user_id or DEFAULT_USER_ID


class LinkTokenRequest(UserRequest):
    """Request body for POST /plaid/link_token/create"""

    products: Optional[List[Any]] = Field(None, description="Desired Plaid products")


class LinkTokenResponse(BaseModel):
    link_token: str
    expiration: Optional[str] = None
    userId: str
    products_used: List[str]


class ExchangeRequest(UserRequest):
    public_token: Optional[str] = None


class ExchangeResponse(BaseModel):
    item_id: Optional[str] = None
    stored_for_user: str


class SyncRequest(UserRequest):
    cursor: Optional[str] = None


class OkResponse(BaseModel):
    ok: bool = True
    message: Optional[str] = None


class AccountSchema(BaseModel):
    account_id: Optional[str] = None
    name: str
    mask: str
    type: Optional[str] = None
    subtype: Optional[str] = None
    available: Optional[float] = None
    current: Optional[float] = None
    currency: str


class KPISchema(BaseModel):
    netWorth: float
    totalCash: float
    checking: float
    savings: float
    cashOther: float
    totalInvestments: float
    totalLiabilities: float
    income30: float
    spend30: float
    netCashFlow: float
    monthlySpend: float
    savingsRate: float
    runwayMonths: float


class BudgetSchema(BaseModel):
    needs: float
    wants: float
    savings: float
    needsPct: float
    wantsPct: float
    savingsPct: float
    unclassified: float
    targets: Dict[str, int]


class SummaryResponse(BaseModel):
    """Response for GET /summary; only `linked` is set when no item is linked"""

    linked: bool
    userId: Optional[str] = None
    accounts: Optional[List[AccountSchema]] = None
    kpis: Optional[KPISchema] = None
    budget: Optional[BudgetSchema] = None


class ChatRequest(UserRequest):
    message: Optional[str] = None


class ChatResponse(BaseModel):
    reply: str
    providers: Dict[str, bool]
