"""GET /summary and GET /budget - KPI dashboard endpoints"""

import logging
from fastapi import APIRouter, Depends, Request

from activ_gateway.api.v1.schemas import (
    AccountSchema,
    BudgetSchema,
    KPISchema,
    SummaryResponse,
)
from activ_gateway.api.dependencies import (
    get_credential_store,
    get_plaid_client,
    get_request_id,
    get_user_id,
    require_access_token,
)
from activ_gateway.domain.budget import BUDGET_TARGETS, compute_budget_split
from activ_gateway.domain.exceptions import GatewayError
from activ_gateway.domain.kpis import compute_kpi_report
from activ_gateway.domain.models import BudgetSplit
from activ_gateway.infrastructure.clients.plaid import PlaidClient, SUMMARY_LOOKBACK_DAYS
from activ_gateway.infrastructure.token_store import CredentialStore
from activ_gateway.utils.date_utils import lookback_window

router = APIRouter()


def budget_schema(split: BudgetSplit) -> BudgetSchema:
    return BudgetSchema(
        needs=split.needs,
        wants=split.wants,
        savings=split.savings,
        needsPct=split.needs_pct,
        wantsPct=split.wants_pct,
        savingsPct=split.savings_pct,
        unclassified=split.unclassified,
        targets=BUDGET_TARGETS,
    )


async def build_summary(user_id: str, store: CredentialStore, plaid: PlaidClient) -> SummaryResponse:
    """
    Fetch the user's data and derive the KPI summary.

    Any of the four Plaid fetches may fail independently; the KPIs fall
    back to their defaults for the missing part.
    """
    access_token = store.get(user_id)
    if not access_token:
        return SummaryResponse(linked=False)

    snapshot = await plaid.fetch_snapshot(access_token)
    report = compute_kpi_report(
        snapshot.accounts,
        snapshot.liabilities,
        snapshot.holdings,
        snapshot.transactions,
    )

    return SummaryResponse(
        linked=True,
        userId=user_id,
        accounts=[AccountSchema(**a) for a in report.account_dicts()],
        kpis=KPISchema(**report.kpis()),
        budget=budget_schema(compute_budget_split(snapshot.transactions)),
    )


@router.get("/summary", response_model=SummaryResponse, response_model_exclude_unset=True)
async def get_summary(
    request: Request,
    user_id: str = Depends(get_user_id),
    store: CredentialStore = Depends(get_credential_store),
    plaid: PlaidClient = Depends(get_plaid_client),
):
    """
    Net worth, cash, liabilities, investments and 30-day cash flow KPIs.

    Returns:
        {"linked": false} when the user has no linked item
    """
    try:
        return await build_summary(user_id, store, plaid)
    except Exception as e:
        logging.error(f"Summary error: {e}", extra={"request_id": get_request_id(request), "user_id": user_id})
        raise GatewayError("SUMMARY_ERROR", 500) from e


@router.get("/budget", response_model=BudgetSchema)
async def get_budget(
    token: str = Depends(require_access_token),
    plaid: PlaidClient = Depends(get_plaid_client),
):
    """50/30/20 split of the last 30 days of transactions"""
    start, end = lookback_window(SUMMARY_LOOKBACK_DAYS)
    transactions = await plaid.get_transactions(token, start, end)
    return budget_schema(compute_budget_split(transactions))
