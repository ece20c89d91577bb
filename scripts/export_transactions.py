#!/usr/bin/env python3
"""Export a wallet's full transaction history to CSV."""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

from app.client.api import WalletApiClient, WalletApiError
from app.client.history import export_filename, transactions_to_csv


async def export(base_url: str, wallet_id: str, out_dir: Path) -> Path:
    async with WalletApiClient(base_url) as client:
        wallet = await client.get_wallet(wallet_id)
        rows = await client.get_all_transactions(wallet_id)
    target = out_dir / export_filename(wallet["name"])
    target.write_text(transactions_to_csv(rows), encoding="utf-8")
    return target


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("wallet_id")
    parser.add_argument("--base-url", default="http://localhost:8000/api/v1")
    parser.add_argument("--out-dir", type=Path, default=Path("."))
    args = parser.parse_args()

    try:
        target = asyncio.run(export(args.base_url, args.wallet_id, args.out_dir))
    except WalletApiError as exc:
        print(f"ERROR: {exc.message}")
        raise SystemExit(1)
    print(f"Wrote {target}")


if __name__ == "__main__":
    main()
