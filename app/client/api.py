"""Async client for the wallet ledger API.

Mirrors what the web front end does: provisioning, transacting, paged history
with an in-page re-sort, full history for exports, and cancellation of reads
that a newer request has superseded.
"""
import asyncio
import logging
from contextlib import suppress
from datetime import datetime
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)

SORT_FIELDS = ("date", "amount", "type")


class WalletApiError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class RequestCancelled(Exception):
    """Raised when a read is abandoned through its CancelToken."""


class CancelToken:
    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()


def _server_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return ""
    if isinstance(data, dict):
        for key in ("message", "error", "detail"):
            value = data.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return ""


def describe_error(exc: Exception) -> str:
    if isinstance(exc, httpx.HTTPStatusError):
        response = exc.response
        detail = _server_message(response) or str(exc)
        return f"API Error: {response.status_code} - {response.reason_phrase}. {detail}"
    if isinstance(exc, httpx.RequestError):
        return f"Network Error: No response received. {exc}"
    return f"General Error: {exc}"


def _sort_key(field: str):
    if field == "amount":
        return lambda row: float(row.get("amount") or 0)
    if field == "type":
        return lambda row: str(row.get("type") or "")
    return lambda row: datetime.fromisoformat(str(row.get("date")).replace("Z", "+00:00"))


def sort_page(rows: list[dict], sort_field: str = "date", sort_direction: str = "desc") -> list[dict]:
    """Re-sort one fetched page; the server always returns newest first."""
    if sort_field not in SORT_FIELDS:
        raise ValueError(f"Unsupported sort field: {sort_field}")
    if sort_field == "date" and sort_direction == "desc":
        return rows
    return sorted(rows, key=_sort_key(sort_field), reverse=sort_direction != "asc")


class WalletApiClient:
    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 15,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    async def __aenter__(self) -> "WalletApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _send(
        self,
        name: str,
        method: str,
        path: str,
        *,
        params: Optional[dict] = None,
        json: Optional[dict] = None,
        cancel_token: Optional[CancelToken] = None,
    ) -> Any:
        if cancel_token is not None and cancel_token.cancelled:
            raise RequestCancelled(name)
        request = self._client.request(method, path, params=params, json=json)
        try:
            if cancel_token is None:
                response = await request
            else:
                response = await self._race(name, request, cancel_token)
            response.raise_for_status()
        except (httpx.HTTPStatusError, httpx.RequestError) as exc:
            message = describe_error(exc)
            logger.error("API Error - %s: %s", name, message)
            status_code = exc.response.status_code if isinstance(exc, httpx.HTTPStatusError) else None
            raise WalletApiError(message, status_code=status_code) from exc
        return response.json()

    @staticmethod
    async def _race(name: str, request, cancel_token: CancelToken) -> httpx.Response:
        task = asyncio.ensure_future(request)
        waiter = asyncio.ensure_future(cancel_token.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
        if task.done():
            return task.result()
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task
        raise RequestCancelled(name)

    async def setup_wallet(self, name: str, balance=None) -> dict:
        payload: dict = {"name": name}
        if balance is not None:
            payload["balance"] = balance
        return await self._send("setupWallet", "POST", "/setup", json=payload)

    async def transact(self, wallet_id: str, amount, description: Optional[str] = None) -> dict:
        payload: dict = {"amount": amount}
        if description:
            payload["description"] = description
        return await self._send("transact", "POST", f"/transact/{wallet_id}", json=payload)

    async def get_transactions(
        self,
        wallet_id: str,
        skip: int = 0,
        limit: int = 10,
        sort_field: str = "date",
        sort_direction: str = "desc",
        cancel_token: Optional[CancelToken] = None,
    ) -> list[dict]:
        data = await self._send(
            "getTransactions",
            "GET",
            "/transactions",
            params={"walletId": wallet_id, "skip": skip, "limit": limit},
            cancel_token=cancel_token,
        )
        return sort_page(list(data), sort_field, sort_direction)

    async def get_all_transactions(self, wallet_id: str) -> list[dict]:
        return await self._send("getAllTransactions", "GET", f"/transactions/all/{wallet_id}")

    async def get_wallet(self, wallet_id: str) -> dict:
        return await self._send("getWalletDetails", "GET", f"/wallet/{wallet_id}")
