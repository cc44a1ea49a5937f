"""
Category Classifier

Two fixed keyword tables map free text to a canonical category label.
Matching is by lowercase substring, and table order matters: the first
category with any hit wins ("pizza delivery by uber" is Food, because Food
is checked before Transportation).
"""

import re
from typing import Mapping, Sequence

EXPENSE_CATEGORIES: Mapping[str, Sequence[str]] = {
    "Food": (
        "food", "restaurant", "dining", "lunch", "dinner", "breakfast",
        "pizza", "burger", "coffee", "groceries", "grocery", "snack", "meal",
    ),
    "Transportation": (
        "uber", "lyft", "taxi", "bus", "train", "subway", "gas", "fuel",
        "parking", "transport", "ride",
    ),
    "Shopping": (
        "amazon", "walmart", "target", "store", "mall", "clothes", "shoes",
        "shopping", "purchase",
    ),
    "Entertainment": (
        "movie", "netflix", "spotify", "game", "concert", "show",
        "entertainment", "fun",
    ),
    "Bills & Utilities": (
        "rent", "mortgage", "electricity", "water", "internet", "phone",
        "bill", "utility",
    ),
    "Healthcare": (
        "doctor", "hospital", "pharmacy", "medicine", "medical", "health",
        "dentist",
    ),
    "Education": (
        "school", "college", "university", "course", "class", "book",
        "education", "tuition",
    ),
    "Travel": (
        "hotel", "flight", "airbnb", "vacation", "trip", "travel", "holiday",
    ),
}
EXPENSE_FALLBACK = "Other"

INCOME_CATEGORIES: Mapping[str, Sequence[str]] = {
    "Salary": ("salary", "paycheck", "wage", "pay", "employment"),
    "Freelance": ("freelance", "contract", "gig", "project"),
    "Business": ("business", "sales", "revenue"),
    "Investment": ("investment", "dividend", "stock", "interest"),
    "Gift": ("gift", "present"),
    "Refund": ("refund", "return", "reimbursement"),
}
INCOME_FALLBACK = "Other Income"

# Spoken category names for filter / delete commands
CATEGORY_ALIASES: Mapping[str, str] = {
    "food": "Food",
    "transport": "Transportation",
    "transportation": "Transportation",
    "shopping": "Shopping",
    "entertainment": "Entertainment",
    "bills": "Bills & Utilities",
    "utilities": "Bills & Utilities",
    "rent": "Bills & Utilities",
    "health": "Healthcare",
    "healthcare": "Healthcare",
    "medical": "Healthcare",
    "education": "Education",
    "travel": "Travel",
    "salary": "Salary",
    "income": "Other Income",
}

FILLER_WORDS = frozenset({
    "for", "on", "a", "an", "the", "my", "this", "that", "and", "with",
})
DEFAULT_DESCRIPTION = "Voice command"
MAX_DESCRIPTION_LENGTH = 500
NUMBER_RE = re.compile(r"^\d+(\.\d+)?$")


def _classify(text: str, table: Mapping[str, Sequence[str]], fallback: str) -> str:
    lowered = text.lower()
    for category, keywords in table.items():
        if any(keyword in lowered for keyword in keywords):
            return category
    return fallback


def classify_expense(text: str) -> str:
    """Canonical expense category for free text, "Other" if nothing matches."""
    return _classify(text, EXPENSE_CATEGORIES, EXPENSE_FALLBACK)


def classify_income(text: str) -> str:
    """Canonical income category for free text, "Other Income" if nothing matches."""
    return _classify(text, INCOME_CATEGORIES, INCOME_FALLBACK)


def normalize_category(text: str) -> str:
    """
    Resolve a spoken category name to its canonical label.

    Unknown names pass through with their first letter capitalised
    ("groceries" -> "Groceries", "today's" -> "Today's").
    """
    cleaned = text.strip()
    alias = CATEGORY_ALIASES.get(cleaned.lower())
    if alias:
        return alias
    return cleaned[:1].upper() + cleaned[1:]


def clean_description(text: str) -> str:
    """Drop filler words, numbers and single letters from spoken text."""
    words = [
        word for word in text.lower().split(" ")
        if word not in FILLER_WORDS
        and not NUMBER_RE.match(word)
        and len(word) > 1
    ]
    description = " ".join(words)[:MAX_DESCRIPTION_LENGTH].rstrip()
    return description or DEFAULT_DESCRIPTION
