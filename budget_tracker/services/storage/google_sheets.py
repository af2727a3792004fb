"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is used as the hosted backend because:
1. Non-technical users can view their data directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

Every document lives in one worksheet, one row per document:

    user_id | collection | doc_id | updated_at | payload_json

payload_json is the camelCase document, the same shape the in-memory
backend keeps, so nested trees (categories, items, transactions) stay
intact without a column per field.

TRADEOFFS:
- Not suitable for high-volume data (we're fine for personal use)
- No transactions; last write wins
- Limited query capabilities (we filter in Python)
"""

import json
from typing import Optional

import gspread
import structlog
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from budget_tracker.config import get_settings
from budget_tracker.models.account import AccountValue
from budget_tracker.models.budget import BudgetTemplate, MonthlyBudget
from budget_tracker.models.migrations import DocumentCollection
from budget_tracker.models.summary import YearlySummary
from budget_tracker.services.storage.documents import from_document, stamp, to_document
from budget_tracker.services.storage.interface import (
    BudgetStorageInterface,
    ConnectionError,
    NotFoundError,
    StorageError,
    budget_document_id,
    summary_document_id,
)


logger = structlog.get_logger()

DOCUMENT_COLUMNS = [
    "user_id",
    "collection",
    "doc_id",
    "updated_at",
    "payload_json",
]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.
    
    Handles authentication and provides retry logic for API calls.
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
        """
        Establish connection to Google Sheets.
        
        Uses service account credentials for authentication.
        """
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
    
    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet
    
    def get_documents_sheet(self) -> gspread.Worksheet:
        """Get or create the Documents worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.documents_sheet_name)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(
                title=self._settings.documents_sheet_name,
                rows=1000,
                cols=len(DOCUMENT_COLUMNS),
            )
            sheet.append_row(DOCUMENT_COLUMNS)
        return sheet


class GoogleSheetsBudgetStorage(BudgetStorageInterface):
    """
    Google Sheets implementation of budget document storage.
    
    Rows that fail to decode are skipped with a warning rather than
    failing a whole listing.
    """
    
    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()
    
    # ---- Row plumbing -------------------------------------------------------
    
    def _rows(self) -> list[list[str]]:
        """All rows, header excluded."""
        return self._client.get_documents_sheet().get_all_values()[1:]
    
    def _find_row(self, user_id: str, collection: DocumentCollection, doc_id: str):
        """(sheet row number, row) of a document, or (None, None)."""
        for idx, row in enumerate(self._rows(), start=2):  # Row 1 is the header
            if len(row) >= 3 and row[0] == user_id and row[1] == collection.value and row[2] == doc_id:
                return idx, row
        return None, None
    
    def _decode(self, collection: DocumentCollection, row: list[str]):
        payload = row[4] if len(row) > 4 else ""
        return from_document(collection, row[2], json.loads(payload) if payload else {})
    
    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _write(self, user_id: str, collection: DocumentCollection, model, doc_id: Optional[str] = None):
        stored = stamp(model, doc_id)
        new_row = [
            user_id,
            collection.value,
            stored.id,
            stored.updated_at.isoformat(),
            json.dumps(to_document(stored)),
        ]
        sheet = self._client.get_documents_sheet()
        idx, _ = self._find_row(user_id, collection, stored.id)
        if idx is None:
            sheet.append_row(new_row, value_input_option="RAW")
        else:
            sheet.update(
                range_name=f"A{idx}:E{idx}",
                values=[new_row],
                value_input_option="RAW",
            )
        logger.info(
            "document_stored",
            user_id=user_id,
            collection=collection.value,
            doc_id=stored.id,
        )
        return stored
    
    def _put(self, user_id: str, collection: DocumentCollection, model, doc_id: Optional[str] = None):
        try:
            return self._write(user_id, collection, model, doc_id)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to save {collection.value} document: {e}")
    
    def _get(self, user_id: str, collection: DocumentCollection, doc_id: str):
        try:
            _, row = self._find_row(user_id, collection, doc_id)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to get {collection.value} document: {e}")
        
        if row is None:
            raise NotFoundError(f"{collection.value}/{doc_id} not found for user {user_id}")
        return self._decode(collection, row)
    
    def _all(self, user_id: str, collection: DocumentCollection) -> list:
        try:
            rows = self._rows()
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to list {collection.value}: {e}")
        
        models = []
        for row in rows:
            if len(row) < 3 or row[0] != user_id or row[1] != collection.value:
                continue
            try:
                models.append(self._decode(collection, row))
            except Exception as e:
                logger.warning(
                    "malformed_document_skipped",
                    user_id=user_id,
                    collection=collection.value,
                    doc_id=row[2],
                    error=str(e),
                )
        return models
    
    def _delete(self, user_id: str, collection: DocumentCollection, doc_id: str) -> bool:
        try:
            idx, _ = self._find_row(user_id, collection, doc_id)
            if idx is None:
                return False
            self._client.get_documents_sheet().delete_rows(idx)
            return True
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to delete {collection.value} document: {e}")
    
    # ---- Monthly budgets ----------------------------------------------------
    
    async def fetch_monthly_budgets(
        self,
        user_id: str,
        year: Optional[int] = None,
    ) -> list[MonthlyBudget]:
        budgets = self._all(user_id, DocumentCollection.MONTHLY_BUDGETS)
        if year is not None:
            budgets = [b for b in budgets if b.year == year]
        return sorted(budgets, key=lambda b: (b.year, b.month))
    
    async def get_monthly_budget(self, user_id: str, year: int, month: int) -> MonthlyBudget:
        return self._get(user_id, DocumentCollection.MONTHLY_BUDGETS, budget_document_id(year, month))
    
    async def upsert_monthly_budget(self, user_id: str, budget: MonthlyBudget) -> MonthlyBudget:
        return self._put(
            user_id,
            DocumentCollection.MONTHLY_BUDGETS,
            budget,
            budget_document_id(budget.year, budget.month),
        )
    
    # ---- Yearly summaries ---------------------------------------------------
    
    async def get_yearly_summary(self, user_id: str, year: int) -> YearlySummary:
        return self._get(user_id, DocumentCollection.YEARLY_SUMMARIES, summary_document_id(year))
    
    async def upsert_yearly_summary(self, user_id: str, summary: YearlySummary) -> YearlySummary:
        return self._put(
            user_id,
            DocumentCollection.YEARLY_SUMMARIES,
            summary,
            summary_document_id(summary.year),
        )
    
    # ---- Accounts -----------------------------------------------------------
    
    async def fetch_accounts(self, user_id: str) -> list[AccountValue]:
        return self._all(user_id, DocumentCollection.ACCOUNTS)
    
    async def get_account(self, user_id: str, account_id: str) -> AccountValue:
        return self._get(user_id, DocumentCollection.ACCOUNTS, account_id)
    
    async def upsert_account(self, user_id: str, account: AccountValue) -> AccountValue:
        return self._put(user_id, DocumentCollection.ACCOUNTS, account)
    
    async def delete_account(self, user_id: str, account_id: str) -> bool:
        return self._delete(user_id, DocumentCollection.ACCOUNTS, account_id)
    
    # ---- Templates ----------------------------------------------------------
    
    async def fetch_templates(self, user_id: str) -> list[BudgetTemplate]:
        return self._all(user_id, DocumentCollection.TEMPLATES)
    
    async def get_template(self, user_id: str, template_id: str) -> BudgetTemplate:
        return self._get(user_id, DocumentCollection.TEMPLATES, template_id)
    
    async def upsert_template(self, user_id: str, template: BudgetTemplate) -> BudgetTemplate:
        return self._put(user_id, DocumentCollection.TEMPLATES, template)
    
    async def delete_template(self, user_id: str, template_id: str) -> bool:
        return self._delete(user_id, DocumentCollection.TEMPLATES, template_id)
