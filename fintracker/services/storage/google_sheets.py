"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is offered as a persistent backend because:
1. Users can view and edit their transactions directly in Sheets
2. No database setup required
3. Easy to export/migrate later

TRADEOFFS:
- Not suitable for high-volume data (we're fine for personal finance)
- No transactions (single-row writes only)
- Limited query capabilities (we filter in Python)

Transient API failures are retried here with exponential backoff. The
callers never retry; once these retries are exhausted the StorageError
reaches the user unchanged.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from fintracker.config import get_settings
from fintracker.models.transaction import (
    Transaction,
    TransactionCreate,
    TransactionType,
    TransactionUpdate,
)
from fintracker.services.storage.interface import (
    ConnectionError,
    NotFoundError,
    StorageError,
    TransactionStoreInterface,
)


# Column mappings for the Transactions sheet
TRANSACTION_COLUMNS = [
    "id",
    "user_id",
    "type",
    "amount",
    "category",
    "description",
    "date",
    "created_at",
]

_sheets_retry = retry(
    retry=retry_if_exception_type(ConnectionError),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    reraise=True,
)


def transaction_to_row(transaction: Transaction) -> list:
    """Convert a Transaction to a spreadsheet row."""
    return [
        str(transaction.id),
        transaction.user_id or "",
        transaction.type.value,
        str(transaction.amount),
        transaction.category,
        transaction.description or "",
        transaction.date.isoformat(),
        transaction.created_at.isoformat(),
    ]


def row_to_transaction(row: list) -> Transaction:
    """Convert a spreadsheet row to a Transaction."""
    # Handle missing trailing columns gracefully
    def safe_get(index: int, default: str = "") -> str:
        try:
            return row[index] if row[index] else default
        except IndexError:
            return default

    return Transaction(
        id=UUID(safe_get(0)),
        user_id=safe_get(1) or None,
        type=TransactionType(safe_get(2)),
        amount=Decimal(safe_get(3)),
        category=safe_get(4),
        description=safe_get(5) or None,
        date=date.fromisoformat(safe_get(6)),
        created_at=datetime.fromisoformat(safe_get(7)),
    )


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for connecting.
    """

    def __init__(self):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """Establish connection using service account credentials."""
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_transactions_sheet(self) -> gspread.Worksheet:
        """Get or create the Transactions worksheet."""
        if self._spreadsheet is None:
            try:
                self._spreadsheet = self.connect().open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )

        try:
            sheet = self._spreadsheet.worksheet(self._settings.transactions_sheet_name)
        except gspread.WorksheetNotFound:
            sheet = self._spreadsheet.add_worksheet(
                title=self._settings.transactions_sheet_name,
                rows=1000,
                cols=len(TRANSACTION_COLUMNS),
            )
            sheet.append_row(TRANSACTION_COLUMNS)
        return sheet


class GoogleSheetsTransactionStore(TransactionStoreInterface):
    """
    Google Sheets implementation of the transaction store.

    One transaction per row. Rows that fail validation are skipped on read.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _find_row(self, sheet: gspread.Worksheet, transaction_id: UUID) -> tuple[int, list]:
        """Return the 1-based sheet row index and values for an id."""
        for idx, row in enumerate(sheet.get_all_values()[1:], start=2):
            if row and row[0] == str(transaction_id):
                return idx, row
        raise NotFoundError(f"Transaction not found: {transaction_id}")

    @_sheets_retry
    async def list_transactions(self, user_id: str) -> list[Transaction]:
        try:
            rows = self._client.get_transactions_sheet().get_all_values()[1:]
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to list transactions: {e}")

        transactions = []
        for row in rows:
            if not row or not row[0] or (len(row) > 1 and row[1] != user_id):
                continue
            try:
                transactions.append(row_to_transaction(row))
            except (ValueError, IndexError):
                continue  # Skip malformed rows

        transactions.sort(key=lambda t: (t.date, t.created_at), reverse=True)
        return transactions

    @_sheets_retry
    async def create_transaction(
        self,
        user_id: str,
        data: TransactionCreate,
    ) -> Transaction:
        transaction = Transaction(user_id=user_id, **data.model_dump())
        try:
            sheet = self._client.get_transactions_sheet()
            sheet.append_row(transaction_to_row(transaction), value_input_option="RAW")
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to save transaction: {e}")
        return transaction

    @_sheets_retry
    async def update_transaction(
        self,
        transaction_id: UUID,
        data: TransactionUpdate,
    ) -> Transaction:
        try:
            sheet = self._client.get_transactions_sheet()
            idx, row = self._find_row(sheet, transaction_id)
            merged = row_to_transaction(row).model_dump()
            merged.update(data.model_dump(exclude_unset=True))
            updated = Transaction(**merged)
            new_row = transaction_to_row(updated)
            sheet.update(
                range_name=f"A{idx}:{chr(ord('A') + len(new_row) - 1)}{idx}",
                values=[new_row],
            )
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to update transaction: {e}")
        return updated

    @_sheets_retry
    async def delete_transaction(self, transaction_id: UUID) -> None:
        try:
            sheet = self._client.get_transactions_sheet()
            idx, _ = self._find_row(sheet, transaction_id)
            sheet.delete_rows(idx)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to delete transaction: {e}")
