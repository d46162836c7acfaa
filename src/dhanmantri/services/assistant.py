"""Rule-based finance assistant.

Messages are matched against a fixed, ordered list of keyword predicates; the
first predicate that matches decides the reply. Anything unmatched is tried as
a transaction ("spent 250 on food yesterday") before giving up with a canned
apology. There is no grammar and no ambiguity resolution beyond first match.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Callable, Iterable, Optional

from ..constants.categories import ASSISTANT_EXPENSE_KEYWORDS, ASSISTANT_INCOME_KEYWORDS
from ..domain.repositories import TransactionRepository
from ..logging_config import get_logger
from ..models.transaction import Transaction
from .ledger_service import (
    compute_summary,
    expense_total_between,
    month_bounds,
    previous_month,
    top_categories,
    totals_by_category,
)

logger = get_logger("assistant")

WELCOME_MESSAGE = (
    "Hi! I'm your financial assistant. I can help you track expenses, analyze your "
    "spending, and provide budget recommendations. Try asking me things like:\n"
    "- How much did I spend this month?\n"
    "- What's my biggest expense category?\n"
    "- How can I save money?\n"
    "- What's my current balance?"
)

HELP_MESSAGE = (
    "I can help you with:\n"
    '- Adding transactions (e.g., "Add expense {sym}20 for food")\n'
    "- Checking your balance (\"What's my current balance?\")\n"
    '- Analyzing spending ("How much did I spend this month?")\n'
    '- Getting budget recommendations ("How can I save money?")\n'
    "- Understanding spending patterns (\"What's my biggest expense?\")"
)

FALLBACK_MESSAGE = (
    "I'm not sure what you're asking. Try asking about your balance, expenses, or "
    "budget recommendations. Or say 'help' to see what I can do."
)

DATE_PICKER_MESSAGE = (
    "Pick a date in the date field below the chat. I'll use it for any transaction "
    "that doesn't mention its own date."
)

NOT_SIGNED_IN_MESSAGE = "You need to be logged in to add transactions."
UNPARSED_TRANSACTION_MESSAGE = "I couldn't understand the amount or category. Please try again."
ADD_FAILED_MESSAGE = "Sorry, I couldn't add the transaction. Please try again."
ERROR_MESSAGE = (
    "I'm sorry, but I encountered an error processing your request. Please try again."
)
NO_EXPENSES_MESSAGE = "You don't have any expenses recorded yet."

INCOME_MARKERS = ("earned", "received", "income")
ADD_MARKERS = ("add", "spent", "received", "earned")
RELATIVE_DAYS = (("today", 0), ("yesterday", -1), ("tomorrow", 1))
MONTH_NAMES = (
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
)

_NUMBER = r"\d[\d,]*(?:\.\d+)?"
_PREFIXED_AMOUNT = re.compile(rf"(?:[$₹]|\b(?:rs|inr)\.?)\s*({_NUMBER})")
_SUFFIXED_AMOUNT = re.compile(rf"({_NUMBER})\s*(?:rupees|rupee|dollars|dollar|bucks|rs|inr)\b")
_BARE_AMOUNT = re.compile(rf"(?<![\w.])({_NUMBER})")
_MONTH_DAY = re.compile(
    r"\b(" + "|".join(MONTH_NAMES) + r")\s+(\d{1,2})(?:st|nd|rd|th)?\b"
)
_ISO_DATE = re.compile(r"\b\d{4}-\d{2}-\d{2}\b")
_DESCRIPTION_MARKERS = (re.compile(r"\bfor\b", re.IGNORECASE), re.compile(r"\bon\b", re.IGNORECASE))

# Ordered predicates; the first that matches the lower-cased message wins.
_INTENTS: tuple[tuple[str, Callable[[str], bool]], ...] = (
    ("help", lambda text: "help" in text),
    ("add", lambda text: any(marker in text for marker in ADD_MARKERS)),
    ("balance", lambda text: "balance" in text),
    ("monthly_spending", lambda text: "spend" in text and "month" in text),
    ("top_expenses", lambda text: "biggest expense" in text or "top expense" in text),
    (
        "recommendations",
        lambda text: "save" in text or "budget" in text or "recommendation" in text,
    ),
    ("date", lambda text: "date" in text),
)


@dataclass(frozen=True)
class TransactionDraft:
    """Fields pulled out of a free-text command."""

    amount: float
    type: str
    category: str
    occurred_on: date
    description: str = ""

    @property
    def is_complete(self) -> bool:
        return self.amount > 0 and bool(self.category)


@dataclass(frozen=True)
class SpendingAnalysis:
    balance: float
    total_income: float
    total_expenses: float
    top_categories: list[tuple[str, float]]
    current_month_total: float
    last_month_total: float


@dataclass
class AssistantReply:
    intent: str
    text: str
    transaction: Optional[Transaction] = None
    draft: Optional[TransactionDraft] = None

    def as_dict(self) -> dict:
        payload = {"intent": self.intent, "reply": self.text, "transaction": None}
        if self.transaction is not None:
            payload["transaction"] = {
                "id": self.transaction.id,
                "amount": self.transaction.amount,
                "type": self.transaction.type,
                "category": self.transaction.category,
                "date": self.transaction.occurred_on.isoformat(),
                "description": self.transaction.description,
            }
        return payload


def classify_message(message: str) -> str:
    """Return the intent name for ``message`` (``fallback`` when nothing matches)."""

    text = message.lower()
    for intent, predicate in _INTENTS:
        if predicate(text):
            return intent
    return "fallback"


def _to_amount(raw: str) -> float:
    try:
        return float(raw.replace(",", ""))
    except ValueError:
        return 0.0


def extract_amount(text: str) -> float:
    """Return the first money-like amount in ``text`` or 0.

    Currency-marked amounts take precedence over bare numbers; day numbers of
    recognised date phrases are never read as amounts.
    """

    lowered = text.lower()
    marked = [m for m in (_PREFIXED_AMOUNT.search(lowered), _SUFFIXED_AMOUNT.search(lowered)) if m]
    if marked:
        first = min(marked, key=lambda m: m.start())
        return _to_amount(first.group(1))

    stripped = _ISO_DATE.sub(" ", _MONTH_DAY.sub(" ", lowered))
    bare = _BARE_AMOUNT.search(stripped)
    return _to_amount(bare.group(1)) if bare else 0.0


def extract_type(text: str) -> str:
    lowered = text.lower()
    return "income" if any(marker in lowered for marker in INCOME_MARKERS) else "expense"


def extract_category(text: str, txn_type: str) -> str:
    """Return the first category keyword for the type found in ``text``."""

    lowered = text.lower()
    keywords = ASSISTANT_INCOME_KEYWORDS if txn_type == "income" else ASSISTANT_EXPENSE_KEYWORDS
    for keyword in keywords:
        if re.search(rf"\b{keyword}", lowered):
            return keyword
    return ""


def extract_date(text: str, *, default: date, today: date) -> date:
    """Resolve relative day words, then ``<month> <day>`` phrases, over ``default``."""

    lowered = text.lower()
    resolved = default
    for term, offset in RELATIVE_DAYS:
        if term in lowered:
            resolved = today + timedelta(days=offset)
            break

    for match in _MONTH_DAY.finditer(lowered):
        month = MONTH_NAMES.index(match.group(1)) + 1
        try:
            resolved = date(today.year, month, int(match.group(2)))
        except ValueError:
            # e.g. "february 30": keep whatever was resolved so far
            continue
    return resolved


def extract_description(text: str) -> str:
    """Text after the first standalone ``for`` (or else ``on``)."""

    for marker in _DESCRIPTION_MARKERS:
        match = marker.search(text)
        if match:
            return text[match.end():].strip(" .,!?")
    return ""


def parse_transaction(text: str, *, default_date: date, today: date) -> TransactionDraft:
    """Extract a transaction draft from free text."""

    txn_type = extract_type(text)
    return TransactionDraft(
        amount=extract_amount(text),
        type=txn_type,
        category=extract_category(text, txn_type),
        occurred_on=extract_date(text, default=default_date, today=today),
        description=extract_description(text),
    )


def analyze_transactions(transactions: Iterable[Transaction], *, today: date) -> SpendingAnalysis:
    """Summaries used by the balance, spending and budget replies."""

    txs = list(transactions)
    summary = compute_summary(txs)
    current_start, current_end = month_bounds(today.year, today.month)
    last_start, last_end = month_bounds(*previous_month(today.year, today.month))
    return SpendingAnalysis(
        balance=summary["balance"],
        total_income=summary["income"],
        total_expenses=summary["expenses"],
        top_categories=top_categories(totals_by_category(txs, txn_type="expense"), limit=3),
        current_month_total=expense_total_between(txs, current_start, current_end),
        last_month_total=expense_total_between(txs, last_start, last_end),
    )


def _money(value: float, symbol: str) -> str:
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):.2f}"


def _plain_amount(value: float) -> str:
    return f"{value:.2f}".rstrip("0").rstrip(".")


def budget_recommendations(analysis: SpendingAnalysis, *, symbol: str = "₹") -> str:
    """50/30/20 allocation plus category, trend and deficit advice."""

    monthly_income = analysis.total_income / 12
    lines = [
        "Based on the 50/30/20 budgeting rule, here's how you should allocate your monthly income:",
        f"- Necessities (50%): {_money(monthly_income * 0.5, symbol)}",
        f"- Wants (30%): {_money(monthly_income * 0.3, symbol)}",
        f"- Savings (20%): {_money(monthly_income * 0.2, symbol)}",
    ]

    if analysis.top_categories:
        category, amount = analysis.top_categories[0]
        lines.append(
            f"\nYour highest spending category is {category} at {_money(amount, symbol)}. "
            "Consider setting a budget limit for this category."
        )

    if analysis.current_month_total > analysis.last_month_total:
        if analysis.last_month_total > 0:
            increase = (
                (analysis.current_month_total - analysis.last_month_total)
                / analysis.last_month_total
                * 100
            )
            lines.append(
                f"\nYour spending this month is {increase:.1f}% higher than last month. "
                "Try to identify non-essential expenses you can reduce."
            )
        else:
            lines.append(
                f"\nYou've spent {_money(analysis.current_month_total, symbol)} this month "
                "with nothing recorded last month. Keep an eye on new expenses."
            )

    if analysis.balance < 0:
        lines.extend(
            [
                "\nYour expenses exceed your income. Here are some tips to improve your financial health:",
                "- Review and cancel unnecessary subscriptions",
                "- Look for ways to reduce daily expenses",
                "- Consider additional income sources",
            ]
        )

    return "\n".join(lines)


@dataclass
class Assistant:
    """Answers chat messages for one signed-in user."""

    transactions: TransactionRepository
    currency_symbol: str = "₹"
    clock: Callable[[], date] = field(default=date.today)

    def reply(
        self,
        message: str,
        *,
        user_id: Optional[int],
        selected_date: Optional[date] = None,
    ) -> Optional[AssistantReply]:
        """Return the reply to ``message``; ``None`` for blank input."""

        if not message or not message.strip():
            return None

        today = self.clock()
        intent = classify_message(message)
        logger.info("Assistant message classified", extra={"intent": intent, "user_id": user_id})
        sym = self.currency_symbol

        if intent == "help":
            return AssistantReply(intent, HELP_MESSAGE.format(sym=sym))
        if intent == "add":
            draft = parse_transaction(message, default_date=selected_date or today, today=today)
            return self._add_transaction(intent, draft, user_id=user_id)
        if intent == "date":
            return AssistantReply(intent, DATE_PICKER_MESSAGE)
        if intent == "fallback":
            draft = parse_transaction(message, default_date=selected_date or today, today=today)
            if draft.is_complete:
                return self._add_transaction(intent, draft, user_id=user_id)
            return AssistantReply(intent, FALLBACK_MESSAGE, draft=draft)

        history = self.transactions.list_all(user_id=user_id) if user_id is not None else []
        analysis = analyze_transactions(history, today=today)

        if intent == "balance":
            text = (
                f"Your current balance is {_money(analysis.balance, sym)}\n\n"
                f"Total Income: {_money(analysis.total_income, sym)}\n"
                f"Total Expenses: {_money(analysis.total_expenses, sym)}"
            )
        elif intent == "monthly_spending":
            text = (
                f"This month's spending: {_money(analysis.current_month_total, sym)}\n"
                f"Last month's spending: {_money(analysis.last_month_total, sym)}"
            )
        elif intent == "top_expenses":
            if analysis.top_categories:
                text = "Your top expense categories are:\n" + "\n".join(
                    f"{index}. {category}: {_money(amount, sym)}"
                    for index, (category, amount) in enumerate(analysis.top_categories, start=1)
                )
            else:
                text = NO_EXPENSES_MESSAGE
        else:
            text = budget_recommendations(analysis, symbol=sym)
        return AssistantReply(intent, text)

    def _add_transaction(
        self, intent: str, draft: TransactionDraft, *, user_id: Optional[int]
    ) -> AssistantReply:
        if user_id is None:
            return AssistantReply(intent, NOT_SIGNED_IN_MESSAGE, draft=draft)
        if not draft.is_complete:
            return AssistantReply(intent, UNPARSED_TRANSACTION_MESSAGE, draft=draft)

        try:
            created = self.transactions.create(
                Transaction(
                    amount=draft.amount,
                    type=draft.type,
                    category=draft.category,
                    occurred_on=draft.occurred_on,
                    description=draft.description,
                    user_id=user_id,
                ),
                user_id=user_id,
            )
        except Exception:
            logger.exception("Assistant failed to add transaction", extra={"user_id": user_id})
            return AssistantReply(intent, ADD_FAILED_MESSAGE, draft=draft)

        details = f" ({draft.description})" if draft.description else ""
        text = (
            f"Added {draft.type}: {self.currency_symbol}{_plain_amount(draft.amount)} "
            f"for {draft.category}{details} on {draft.occurred_on.strftime('%b %d, %Y')}"
        )
        return AssistantReply(intent, text, transaction=created, draft=draft)
