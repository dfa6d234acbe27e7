"""
CSV export of normalized transactions.

Column order is fixed. The header row is a plain comma join; every data
field is double-quoted with embedded quotes doubled.
"""

import csv
import io
from datetime import date, datetime, timezone
from typing import Iterable, Optional

from wallet_explorer.models import Network, TokenTransfer, Transaction


CSV_HEADERS: tuple[str, ...] = (
    "Hash",
    "Network",
    "Method",
    "From",
    "To",
    "Value",
    "Token Transfers",
    "Status",
    "Gas Used",
    "Block Number",
    "Timestamp",
    "Explorer URL",
)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_token_transfer(transfer: TokenTransfer) -> str:
    return f"{transfer.value} {transfer.token_symbol} from {transfer.from_address} to {transfer.to_address}"


def format_token_transfers(transfers: Iterable[TokenTransfer]) -> str:
    return "; ".join(format_token_transfer(t) for t in transfers)


def format_timestamp(timestamp: Optional[datetime]) -> str:
    """UTC wall-clock time; naive datetimes are taken as UTC."""
    if timestamp is None:
        return ""
    if timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone(timezone.utc)
    return timestamp.strftime(TIMESTAMP_FORMAT)


def transaction_row(tx: Transaction, network: Network) -> list[str]:
    return [
        tx.hash,
        network.name,
        tx.method or "",
        tx.from_address,
        tx.to_address,
        f"{tx.value} {network.native_symbol}",
        format_token_transfers(tx.token_transfers),
        "Success" if tx.succeeded else "Failed",
        str(tx.gas_used),
        str(tx.block_number),
        format_timestamp(tx.timestamp),
        tx.explorer_url,
    ]


def generate_transaction_csv(transactions: Iterable[Transaction], network: Network) -> str:
    """Render transactions as CSV text (no trailing newline)."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for tx in transactions:
        writer.writerow(transaction_row(tx, network))

    rows = buffer.getvalue().rstrip("\n")
    header = ",".join(CSV_HEADERS)
    return f"{header}\n{rows}" if rows else header


def csv_filename(network: Network, today: Optional[date] = None) -> str:
    """transactions_<network name>_<YYYYMMDD>.csv"""
    today = today or datetime.now(timezone.utc).date()
    return f"transactions_{network.name.lower()}_{today.strftime('%Y%m%d')}.csv"
