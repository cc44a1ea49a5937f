"""Tests for the category classifier and the ordered command table."""

import pytest
from decimal import Decimal

from fintracker.models import CommandType, VoiceCommand
from fintracker.voice import (
    COMMAND_TABLE,
    classify_expense,
    classify_income,
    clean_description,
    describe_command,
    interpret,
    normalize_category,
)
from fintracker.voice.recognizer import describe_recognition_error


class TestCategoryClassifier:
    """Tests for the keyword tables."""

    @pytest.mark.parametrize("text, expected", [
        ("groceries", "Food"),
        ("uber to work", "Transportation"),
        ("new shoes", "Shopping"),
        ("concert tickets", "Entertainment"),
        ("internet bill", "Bills & Utilities"),
        ("dentist", "Healthcare"),
        ("tuition", "Education"),
        ("hotel", "Travel"),
        ("something else", "Other"),
    ])
    def test_classify_expense(self, text, expected):
        """Test each expense category and the fallback."""
        assert classify_expense(text) == expected

    def test_first_category_wins(self):
        """Test that table order decides overlapping keywords."""
        assert classify_expense("pizza delivered by uber") == "Food"
        assert classify_expense("GROCERY run") == "Food"

    @pytest.mark.parametrize("text, expected", [
        ("monthly salary", "Salary"),
        ("freelance project", "Freelance"),
        ("sales", "Business"),
        ("dividend", "Investment"),
        ("birthday gift", "Gift"),
        ("tax refund", "Refund"),
        ("lottery", "Other Income"),
    ])
    def test_classify_income(self, text, expected):
        """Test each income category and the fallback."""
        assert classify_income(text) == expected

    def test_normalize_category(self):
        """Test aliases and pass-through capitalisation."""
        assert normalize_category("utilities") == "Bills & Utilities"
        assert normalize_category("transport") == "Transportation"
        assert normalize_category("income") == "Other Income"
        assert normalize_category("groceries") == "Groceries"
        assert normalize_category(" today's ") == "Today's"

    def test_clean_description(self):
        """Test filler words, numbers and single letters are dropped."""
        assert clean_description("on the groceries") == "groceries"
        assert clean_description("lunch with a friend") == "lunch friend"
        assert clean_description("25 x") == "Voice command"
        assert clean_description("Coffee Beans") == "coffee beans"

    def test_clean_description_is_capped(self):
        """Test that long descriptions fit the transaction model."""
        description = clean_description("lunch " * 120)
        assert len(description) <= 500
        assert description.startswith("lunch lunch")
        assert not description.endswith(" ")


class TestCommandTable:
    """Tests for interpret() and first-match-wins ordering."""

    def test_spent_on_groceries(self):
        """Test the basic expense phrase."""
        command = interpret("spent 25 on groceries")
        assert command.type == CommandType.ADD_EXPENSE
        assert command.amount == Decimal("25")
        assert command.category == "Food"
        assert command.description == "groceries"
        assert command.requires_security is False

    def test_transcript_is_lowercased_and_trimmed(self):
        """Test case and whitespace do not matter."""
        command = interpret("  I Spent 12.50 Dollars On Coffee  ")
        assert command.type == CommandType.ADD_EXPENSE
        assert command.amount == Decimal("12.50")
        assert command.category == "Food"

    def test_amount_rounded_to_cents(self):
        """Test that spoken amounts are rounded half up to two decimals."""
        assert interpret("spent 25.555 on lunch").amount == Decimal("25.56")
        assert interpret("received 10.004 from salary").amount == Decimal("10.00")

    def test_amount_rounding_to_zero_is_rejected(self):
        """Test that an amount below half a cent yields no command."""
        assert interpret("spent 0.001 on lunch") is None

    def test_bare_amount_for_thing(self):
        """Test the generic amount-for pattern."""
        command = interpret("50 for lunch")
        assert command.type == CommandType.ADD_EXPENSE
        assert command.amount == Decimal("50")
        assert command.category == "Food"

    def test_generic_expense_pattern_shadows_income(self):
        """Test 'received ... for ...' is claimed by the earlier expense entry."""
        command = interpret("received 500 for freelance project")
        assert command.type == CommandType.ADD_EXPENSE
        assert command.amount == Decimal("500")

    def test_income_with_from(self):
        """Test income phrasing that the expense entry does not match."""
        command = interpret("received 1000 from salary")
        assert command.type == CommandType.ADD_INCOME
        assert command.category == "Salary"

    def test_add_income_keyword(self):
        """Test the explicit income phrase."""
        command = interpret("add income 200 from dividend")
        assert command.type == CommandType.ADD_INCOME
        assert command.category == "Investment"

    def test_navigate(self):
        """Test the dashboard phrases."""
        assert interpret("go to dashboard").route == "/"
        assert interpret("take me to the dashboard").type == CommandType.NAVIGATE

    def test_show_all_transactions_scrolls(self):
        """Test that the scroll entry wins over the filter entry."""
        command = interpret("show all transactions")
        assert command.type == CommandType.SCROLL_TO
        assert command.element == "transactions"

    def test_show_todays_transactions_is_a_filter(self):
        """Test that the filter entry wins over the date filter."""
        command = interpret("show today's transactions")
        assert command.type == CommandType.FILTER
        assert command.category == "Today's"

    def test_what_did_i_spend_today(self):
        """Test the date filter phrase."""
        command = interpret("what did i spend today")
        assert command.type == CommandType.FILTER_DATE
        assert command.date == "today"

    def test_filter_by_category(self):
        """Test the filter phrases and normalisation."""
        assert interpret("show food expenses").category == "Food"
        assert interpret("filter by utilities").category == "Bills & Utilities"

    def test_balance(self):
        """Test the balance phrases."""
        for phrase in ("what is my current balance", "how much money do i have", "check balance"):
            assert interpret(phrase).type == CommandType.GET_BALANCE

    def test_delete_last_requires_security(self):
        """Test that delete-last is tagged for confirmation."""
        command = interpret("delete last transaction")
        assert command.type == CommandType.DELETE_LAST
        assert command.requires_security is True

    def test_delete_category_requires_security(self):
        """Test that delete-by-category is tagged and normalised."""
        command = interpret("delete all food expenses")
        assert command.type == CommandType.DELETE_CATEGORY
        assert command.category == "Food"
        assert command.requires_security is True

    def test_help_and_stop(self):
        """Test the help and stop phrases."""
        assert interpret("what can i say").type == CommandType.SHOW_HELP
        assert interpret("stop listening").type == CommandType.STOP_LISTENING

    def test_unknown(self):
        """Test that nonsense and empty text give None."""
        assert interpret("the weather is nice") is None
        assert interpret("   ") is None

    def test_zero_amount_is_not_a_command(self):
        """Test that an invalid amount does not fall through to later entries."""
        assert interpret("spent 0 on groceries") is None

    def test_only_delete_entries_are_destructive(self):
        """Test the security tagging across the whole table."""
        destructive = [d.type for d in COMMAND_TABLE if d.type.value.startswith("delete")]
        assert destructive == [CommandType.DELETE_LAST, CommandType.DELETE_CATEGORY]


class TestMessages:
    """Tests for response and error messages."""

    def test_describe_command(self):
        """Test the per-type messages."""
        expense = VoiceCommand(type=CommandType.ADD_EXPENSE, amount=Decimal("25.50"), category="Food")
        assert describe_command(expense) == "Adding $25.5 expense for Food"
        delete = VoiceCommand(type=CommandType.DELETE_CATEGORY, category="Food", requires_security=True)
        assert describe_command(delete) == "Please confirm to delete all Food expenses"
        scroll = VoiceCommand(type=CommandType.SCROLL_TO, element="transactions")
        assert describe_command(scroll) == "Executing: scroll_to"

    def test_recognition_errors(self):
        """Test the known and unknown error codes."""
        assert describe_recognition_error("no-speech") == "No speech detected. Please try again."
        assert describe_recognition_error("aborted") == "Error: aborted"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
