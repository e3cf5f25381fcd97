"""Prometheus metrics for link negotiation, Plaid failures and AI provider health"""

from prometheus_client import Counter, Histogram

# Link token metrics
link_token_counter = Counter(
    "activ_link_token_total",
    "Link token creation outcomes",
    ["outcome"],  # full | reduced | failed
)

link_token_attempts_histogram = Histogram(
    "activ_link_token_attempts",
    "Plaid requests needed to obtain a link token",
    buckets=[1, 2, 3, 4, 5],
)

# Plaid API metrics
plaid_request_failures_counter = Counter(
    "plaid_request_failures_total",
    "Failed Plaid API calls",
    ["code"],
)

plaid_fetch_unavailable_counter = Counter(
    "plaid_fetch_unavailable_total",
    "Summary inputs that could not be fetched",
    ["source"],  # accounts | liabilities | investments | transactions
)

# AI provider metrics
ai_provider_replies_counter = Counter(
    "ai_provider_replies_total",
    "AI provider replies",
    ["provider", "outcome"],  # outcome: ok | empty
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_link_token(requested: list, products_used: list | None, attempts: int) -> None:
    """Record how much negotiation a link token needed"""
    if products_used is None:
        outcome = "failed"
    elif products_used == requested:
        outcome = "full"
    else:
        outcome = "reduced"

    link_token_counter.labels(outcome=outcome).inc()
    if products_used is not None:
        link_token_attempts_histogram.observe(attempts)
