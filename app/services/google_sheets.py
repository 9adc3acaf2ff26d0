"""
Google Sheets Row Store
Reads and writes the Reservations sheet, one row per booking
"""
import json
import logging
from google.oauth2.service_account import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from app.config import settings
from app.errors import BookingNotFoundError, RowStoreError, StoreWriteError
from app.models.reservation import COL_BOOKING_ID

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
VALUE_INPUT_OPTION = "USER_ENTERED"
HEADER_ROW = 1


def column_letter(index: int) -> str:
    """Zero-based column index to A1 letters (0 -> A, 26 -> AA)"""
    letters = ""
    index += 1
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        letters = chr(65 + remainder) + letters
    return letters


class GoogleSheetsRowStore:
    """Row store over a Google Sheets tab, rows keyed by column name"""

    def __init__(self, service=None, spreadsheet_id: str | None = None, sheet_name: str | None = None):
        self.spreadsheet_id = spreadsheet_id or settings.google_sheets_id
        self.sheet_name = sheet_name or settings.sheet_name
        self.service = service
        if self.service is None:
            self._init_service()

    def _init_service(self):
        """Initialize Google Sheets API service"""
        if not settings.google_service_account_json:
            raise RowStoreError("GOOGLE_SERVICE_ACCOUNT_JSON not set")
        if not self.spreadsheet_id:
            raise RowStoreError("GOOGLE_SHEETS_ID not set")

        # Load credentials from file path or JSON string
        creds_source = settings.google_service_account_json
        try:
            with open(creds_source, 'r') as f:
                creds_dict = json.load(f)
        except (FileNotFoundError, OSError, json.JSONDecodeError):
            try:
                creds_dict = json.loads(creds_source)
            except json.JSONDecodeError as e:
                raise RowStoreError(f"Invalid service account credentials: {e}")

        credentials = Credentials.from_service_account_info(creds_dict, scopes=SCOPES)
        self.service = build('sheets', 'v4', credentials=credentials, cache_discovery=False)

    @property
    def _range(self) -> str:
        return f"{self.sheet_name}!{settings.sheet_range}"

    def _values(self):
        return self.service.spreadsheets().values()

    def _read_values(self) -> list[list[str]]:
        try:
            result = self._values().get(spreadsheetId=self.spreadsheet_id, range=self._range).execute()
        except HttpError as e:
            raise RowStoreError(f"Failed to read sheet: {e}")
        return result.get('values', [])

    def _read_table(self) -> tuple[list[str], list[dict]]:
        values = self._read_values()
        if not values:
            return [], []
        header = [str(col).strip() for col in values[0]]
        rows = []
        for raw in values[1:]:
            rows.append({col: str(raw[idx]) if idx < len(raw) and raw[idx] is not None else ""
                         for idx, col in enumerate(header)})
        return header, rows

    def header(self) -> list[str]:
        header, _ = self._read_table()
        return header

    def list_rows(self) -> list[dict]:
        """
        Get every data row in sheet order.

        Returns:
            List of dicts mapping column name to cell string; short rows
            are padded with empty strings.
        """
        _, rows = self._read_table()
        return rows

    def write_cells(self, booking_id: str, cells: dict) -> int:
        """
        Write several cells of one booking in a single batch update.

        Args:
            booking_id: Booking ID identifying the row
            cells: Mapping of column name to new cell value

        Returns:
            Number of cells written
        """
        if not cells:
            return 0

        header, rows = self._read_table()
        if COL_BOOKING_ID not in header:
            raise StoreWriteError(f"{COL_BOOKING_ID} column not found")

        booking_id = booking_id.strip()
        row_index = next((i for i, row in enumerate(rows) if row[COL_BOOKING_ID].strip() == booking_id), None)
        if row_index is None:
            raise BookingNotFoundError(booking_id)

        unknown = [col for col in cells if col not in header]
        if unknown:
            raise StoreWriteError(f"Unknown columns: {', '.join(unknown)}")

        sheet_row = row_index + HEADER_ROW + 1
        data = [
            {
                'range': f"{self.sheet_name}!{column_letter(header.index(col))}{sheet_row}",
                'values': [[value]],
            }
            for col, value in cells.items()
        ]

        try:
            self._values().batchUpdate(
                spreadsheetId=self.spreadsheet_id,
                body={'data': data, 'valueInputOption': VALUE_INPUT_OPTION},
            ).execute()
        except HttpError as e:
            raise StoreWriteError(f"Failed to update booking {booking_id}: {e}")

        logger.info("Updated %s cells for booking %s: %s", len(cells), booking_id, ", ".join(cells))
        return len(cells)

    def append_rows(self, rows: list[dict]) -> int:
        """Append rows after the last data row, mapped onto the header order"""
        if not rows:
            return 0
        header = self.header()
        if not header:
            raise StoreWriteError("Sheet has no header row")

        values = [[str(row.get(col, "")) for col in header] for row in rows]
        try:
            self._values().append(
                spreadsheetId=self.spreadsheet_id,
                range=f"{self.sheet_name}!A1",
                valueInputOption=VALUE_INPUT_OPTION,
                insertDataOption="INSERT_ROWS",
                body={'values': values},
            ).execute()
        except HttpError as e:
            raise StoreWriteError(f"Failed to append rows: {e}")

        logger.info("Appended %s rows to %s", len(values), self.sheet_name)
        return len(values)


# Global instance
_row_store = None


def get_row_store() -> GoogleSheetsRowStore:
    """Get or create row store instance"""
    global _row_store
    if _row_store is None:
        _row_store = GoogleSheetsRowStore()
    return _row_store
