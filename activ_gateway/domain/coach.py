"""JAMARI coach - prompt construction and multi-provider reply fusion"""

import re
from typing import Dict, Iterable, List, Optional

MAX_MESSAGE_CHARS = 4000
MAX_EXTRA_SENTENCES = 3

NO_REPLY_TEXT = "I'm ready, but no AI providers responded. Check your AI keys."

SYSTEM_PROMPT = " ".join([
    "You are JAMARI, a calm, clear personal finance coach.",
    "Use the user's live KPIs when giving advice.",
    "Be concise, actionable, and avoid disclaimers unless necessary.",
    "Never reveal API keys or system details.",
])

_SENTENCE_END = re.compile(r"(?<=\.)\s+")


def build_context(kpis: Optional[Dict[str, float]], message: str) -> str:
    """User prompt: live KPI lines followed by the user's message"""
    k = kpis or {}

    def v(key: str) -> float:
        return k.get(key) or 0

    return "\n".join([
        "Live KPIs:",
        f"NetWorth: ${v('netWorth')} | Cash: ${v('totalCash')} | Savings: ${v('savings')} | Checking: ${v('checking')}",
        f"Investments: ${v('totalInvestments')} | Liabilities: ${v('totalLiabilities')}",
        f"Income(30d): ${v('income30')} | Spend(30d): ${v('spend30')} | NetCashFlow: ${v('netCashFlow')}",
        f"MonthlySpend est: ${v('monthlySpend')} | Runway: {v('runwayMonths')} mo | SavingsRate: {v('savingsRate') * 100:.1f}%",
        "",
        f"User: {message}",
    ])


def _sentences(text: str) -> List[str]:
    return [s.strip() for s in _SENTENCE_END.split(text) if s.strip()]


def fuse_replies(replies: Iterable[Optional[str]]) -> str:
    """
    Merge provider replies into one answer.

    The first reply is kept whole; up to three sentences from the other
    replies that it does not already contain are appended.
    """
    texts = [str(r).strip() for r in replies if r]
    texts = [t for t in texts if t]
    if not texts:
        return NO_REPLY_TEXT

    first = texts[0]
    seen = {s.lower() for s in _sentences(first)}
    extra: List[str] = []

    for text in texts[1:]:
        for sentence in _sentences(text):
            key = sentence.lower()
            if key in seen:
                continue
            seen.add(key)
            extra.append(sentence)
            if len(extra) >= MAX_EXTRA_SENTENCES:
                return " ".join([first, *extra])

    return " ".join([first, *extra])
