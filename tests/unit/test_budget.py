"""Unit tests for the 50/30/20 budget split"""

from typing import Any, Dict

from activ_gateway.domain.budget import classify_transaction, compute_budget_split


def test_classify_by_category_and_merchant():
    assert classify_transaction({"category": ["Shops", "Supermarkets and Groceries"]}) == "needs"
    assert classify_transaction({"personal_finance_category": {"primary": "FOOD_AND_DRINK"}}) == "wants"
    assert classify_transaction({"merchant_name": "Vanguard", "name": "VANGUARD BUY"}) == "savings"
    assert classify_transaction({"name": "Payroll", "category": ["Transfer", "Payroll"]}) is None


def test_keywords_match_whole_words_only():
    # "bar" must not match "barber", "rent" must not match "current"
    assert classify_transaction({"name": "Joe's Barber"}) is None
    assert classify_transaction({"name": "Current Account Fee"}) is None
    assert classify_transaction({"name": "Corner Bar"}) == "wants"


def test_needs_take_precedence_over_wants():
    # "Shops" is a wants keyword, groceries a needs keyword
    assert classify_transaction({"category": ["Shops", "Groceries"]}) == "needs"


def test_budget_split(transactions_payload: Dict[str, Any]):
    split = compute_budget_split(transactions_payload)

    assert split.needs == 2050  # rent + groceries
    assert split.wants == 50  # cinema; the shop refund is an inflow
    assert split.savings == 0
    assert split.unclassified == 0  # payroll is an inflow
    assert split.needs_pct == 97.62
    assert split.wants_pct == 2.38
    assert split.savings_pct == 0


def test_refunds_and_credits_are_not_spend():
    txns = {
        "transactions": [
            {"name": "Target", "amount": 80, "category": ["Shops"]},
            {"name": "Target Refund", "amount": -30, "category": ["Shops"]},
            {"name": "Utilities Credit", "amount": -15, "category": ["Utilities"]},
        ]
    }

    split = compute_budget_split(txns)

    assert split.wants == 80
    assert split.needs == 0
    assert split.wants_pct == 100


def test_budget_split_without_data():
    split = compute_budget_split(None)

    assert split.needs == split.wants == split.savings == 0
    assert split.needs_pct == split.wants_pct == split.savings_pct == 0


def test_budget_split_with_nothing_classified():
    split = compute_budget_split({"transactions": [{"name": "Mystery", "amount": 12}]})

    assert split.needs_pct == 0
    assert split.unclassified == 12
