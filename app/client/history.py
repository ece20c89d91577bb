import csv
import io
from decimal import Decimal
from typing import Optional

from app.client.api import CancelToken, SORT_FIELDS, WalletApiClient

CSV_HEADERS = ["ID", "Type", "Amount", "Balance", "Description", "Date"]


def export_filename(wallet_name: str) -> str:
    return f"{wallet_name}-transactions.csv"


def _fixed4(value) -> str:
    return f"{Decimal(str(value)):.4f}"


def transactions_to_csv(rows: list[dict]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for row in rows:
        writer.writerow(
            [
                row.get("id"),
                row.get("type"),
                _fixed4(row.get("amount", 0)),
                _fixed4(row.get("balance", 0)),
                row.get("description") or "",
                row.get("date"),
            ]
        )
    return buffer.getvalue()


class TransactionHistory:
    """Paged, sortable view over one wallet's history.

    Each ``load`` cancels the fetch that was still in flight, so a fast run of
    page or sort changes only ever applies the latest response.
    """

    def __init__(self, client: WalletApiClient, wallet_id: str, *, limit: int = 10):
        self.client = client
        self.wallet_id = wallet_id
        self.page = 1
        self.limit = limit
        self.sort_field = "date"
        self.sort_direction = "desc"
        self.rows: list[dict] = []
        self._pending: Optional[CancelToken] = None

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def toggle_sort(self, field: str) -> None:
        if field not in SORT_FIELDS:
            raise ValueError(f"Unsupported sort field: {field}")
        if self.sort_field == field:
            self.sort_direction = "asc" if self.sort_direction == "desc" else "desc"
        else:
            self.sort_field = field
            self.sort_direction = "desc"

    def set_limit(self, limit: int) -> None:
        self.limit = limit
        self.page = 1

    async def load(self) -> list[dict]:
        if self._pending is not None:
            self._pending.cancel()
        token = CancelToken()
        self._pending = token
        rows = await self.client.get_transactions(
            self.wallet_id,
            skip=self.skip,
            limit=self.limit,
            sort_field=self.sort_field,
            sort_direction=self.sort_direction,
            cancel_token=token,
        )
        if self._pending is token:
            self._pending = None
        self.rows = rows
        return rows

    async def export_csv(self) -> str:
        return transactions_to_csv(await self.client.get_all_transactions(self.wallet_id))
