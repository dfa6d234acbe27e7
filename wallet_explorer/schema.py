"""
Inbound payload schema for Blockscout v2 responses.

Each record kind is described by a table of FieldSpec entries: a dotted path
into the upstream JSON, a named default and a parser. decode() never raises;
a missing key, a null, a non-object along the path or a parser rejection all
resolve to the field's default.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from wallet_explorer.models import CONTRACT_CREATION, NATIVE_TOKEN
from wallet_explorer.units import DEFAULT_DECIMALS, parse_decimals, parse_int


_MISSING = object()


# ─────────────────────────────────────────────────────────────
# Parsers (raise TypeError/ValueError to select the default)
# ─────────────────────────────────────────────────────────────

def as_str(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    raise TypeError(f"expected string, got {type(value).__name__}")


def as_nonempty_str(value: Any) -> str:
    text = as_str(value)
    if not text:
        raise ValueError("empty string")
    return text


def as_int(value: Any) -> int:
    result = parse_int(value, None)
    if result is None:
        raise ValueError(f"not an integer: {value!r}")
    return result


def as_decimals(value: Any) -> int:
    return parse_decimals(value, DEFAULT_DECIMALS)


def as_timestamp(value: Any) -> datetime:
    """ISO-8601 string or unix seconds, normalized to aware UTC."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    text = as_nonempty_str(value).strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def as_record_list(value: Any) -> tuple[dict[str, Any], ...]:
    if not isinstance(value, list):
        raise TypeError(f"expected list, got {type(value).__name__}")
    return tuple(item for item in value if isinstance(item, dict))


# ─────────────────────────────────────────────────────────────
# Field specs
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class FieldSpec:
    """One decoded field: where it lives, what it defaults to, how it parses."""
    path: str
    default: Any = None
    parser: Optional[Callable[[Any], Any]] = None

    def resolve(self, record: Any) -> Any:
        current = record
        for key in self.path.split("."):
            if not isinstance(current, dict):
                return _MISSING
            current = current.get(key, _MISSING)
            if current is _MISSING or current is None:
                return _MISSING
        return current

    def decode(self, record: Any, default: Any = _MISSING) -> Any:
        fallback = self.default if default is _MISSING else default
        raw = self.resolve(record)
        if raw is _MISSING:
            return fallback
        if self.parser is None:
            return raw
        try:
            return self.parser(raw)
        except (TypeError, ValueError, OverflowError, OSError):
            return fallback


TRANSACTION_FIELDS: dict[str, FieldSpec] = {
    "hash": FieldSpec("hash", "", as_str),
    "from_address": FieldSpec("from.hash", "", as_str),
    "to_address": FieldSpec("to.hash", CONTRACT_CREATION, as_nonempty_str),
    "raw_value": FieldSpec("value", "0", as_nonempty_str),
    "timestamp": FieldSpec("timestamp", None, as_timestamp),
    "block_number": FieldSpec("block_number", 0, as_int),
    "gas_used": FieldSpec("gas_used", 0, as_int),
    "status": FieldSpec("status", "", as_str),
    "method": FieldSpec("method", "", as_str),
    "token_transfers": FieldSpec("token_transfers", (), as_record_list),
}

TOKEN_TRANSFER_FIELDS: dict[str, FieldSpec] = {
    "token_address": FieldSpec("token.address", "", as_str),
    "token_symbol": FieldSpec("token.symbol", "", as_str),
    "token_name": FieldSpec("token.name", "", as_str),
    "token_decimals": FieldSpec("token.decimals", DEFAULT_DECIMALS, as_decimals),
    "from_address": FieldSpec("from.hash", "", as_str),
    "to_address": FieldSpec("to.hash", "", as_str),
    "raw_value": FieldSpec("total.value", "0", as_nonempty_str),
}

INTERNAL_TRANSACTION_FIELDS: dict[str, FieldSpec] = {
    "from_address": FieldSpec("from.hash", "", as_str),
    "to_address": FieldSpec("to.hash", CONTRACT_CREATION, as_nonempty_str),
    "raw_value": FieldSpec("value", "0", as_nonempty_str),
    "call_type": FieldSpec("type", "call", as_nonempty_str),
}

# Name/symbol defaults depend on the network and are passed to decode()
TOKEN_BALANCE_FIELDS: dict[str, FieldSpec] = {
    "raw_value": FieldSpec("value", "0", as_nonempty_str),
    "token_address": FieldSpec("token.address", NATIVE_TOKEN, as_nonempty_str),
    "token_name": FieldSpec("token.name", "", as_nonempty_str),
    "token_symbol": FieldSpec("token.symbol", "", as_nonempty_str),
    "token_decimals": FieldSpec("token.decimals", DEFAULT_DECIMALS, as_decimals),
    "token_type": FieldSpec("token.type", NATIVE_TOKEN, as_nonempty_str),
}

# token_id has no default: records without one are dropped
NFT_FIELDS: dict[str, FieldSpec] = {
    "token_id": FieldSpec("token_id", None, as_nonempty_str),
    "name": FieldSpec("name", None, as_nonempty_str),
    "description": FieldSpec("description", "", as_str),
    "image_url": FieldSpec("image_url", None, as_nonempty_str),
    "collection_name": FieldSpec("collection.name", "Unknown Collection", as_nonempty_str),
    "collection_address": FieldSpec("token_address", "", as_str),
}


def decode(
    record: Any,
    fields: dict[str, FieldSpec],
    defaults: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """Decode one upstream record against a field table."""
    defaults = defaults or {}
    return {
        name: spec.decode(record, defaults.get(name, _MISSING))
        for name, spec in fields.items()
    }


def extract_items(payload: Any) -> list[dict[str, Any]]:
    """The `items` array of a listing response; anything else is empty."""
    if not isinstance(payload, dict):
        return []
    items = payload.get("items")
    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, dict)]


def extract_total_count(payload: Any, fallback: int) -> int:
    """`total_count` when present and positive, else fallback."""
    if not isinstance(payload, dict):
        return fallback
    total = parse_int(payload.get("total_count"), None)
    if total is None or total <= 0:
        return fallback
    return total
