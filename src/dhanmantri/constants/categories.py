"""
Category definitions shared by the transaction form and the assistant.
"""

# Transaction form dropdowns
INCOME_CATEGORIES = [
    "Salary",
    "Freelance",
    "Investment",
    "Tips",
]

EXPENSE_CATEGORIES = [
    "Food",
    "Transport",
    "Utilities",
    "Entertainment",
    "Shopping",
]

DEFAULT_CATEGORIES = {
    "income": INCOME_CATEGORIES,
    "expense": EXPENSE_CATEGORIES,
}

# Keywords the assistant looks for in free text, in priority order
ASSISTANT_EXPENSE_KEYWORDS = (
    "food",
    "transport",
    "utilities",
    "entertainment",
    "shopping",
    "groceries",
    "rent",
    "bills",
)

ASSISTANT_INCOME_KEYWORDS = (
    "salary",
    "freelance",
    "investment",
    "bonus",
    "gift",
)
