"""
receipts.py - Engine Event Receipts

Every observable engine event is recorded as a receipt: lifecycle
transitions and selections from tiles, config loads from config_schema.py
and replay summaries from the CLI. Receipts are plain dicts so hosts can
ship them as JSONL.

Payload hashes are dual (SHA256:BLAKE3) and cover the event data only, so
two identical events hash alike whenever they happen.
"""

import hashlib
import json
from datetime import datetime, timezone
from typing import Any, Dict, IO, List, Union

import blake3

__all__ = [
    "dual_hash",
    "emit_receipt",
    "write_receipt_jsonl",
    "merkle",
    "RECEIPT_SCHEMA",
    "RECEIPT_TYPES",
]

# =============================================================================
# CONSTANTS
# =============================================================================

RECEIPT_SCHEMA = {
    "receipt_type": "str",
    "ts": "ISO8601",
    "tenant_id": "str",
    "payload_hash": "str (SHA256:BLAKE3)",
}

RECEIPT_TYPES = (
    "lifecycle_transition",   # glow/lifecycle.py, one per state change
    "tile_selected",          # glow/lifecycle.py, one per pending selection
    "config_loaded",          # config_schema.py
    "replay_summary",         # glow_cli.py replay
)

DEFAULT_TENANT = "default"
EMPTY_ROOT_SEED = b"empty"


def _canonical(data: Any) -> str:
    return json.dumps(data, sort_keys=True, default=str)


# =============================================================================
# HASHING
# =============================================================================

def dual_hash(data: Union[bytes, str]) -> str:
    """Return "sha256_hex:blake3_hex" for bytes or a UTF-8 string."""
    raw = data.encode() if isinstance(data, str) else data
    return f"{hashlib.sha256(raw).hexdigest()}:{blake3.blake3(raw).hexdigest()}"


def merkle(items: List[Any]) -> str:
    """
    Merkle root over JSON-serializable items, in dual_hash format.

    Levels with an odd count pair their last hash with itself. An empty
    list has a fixed root so replays with no receipts still summarize.
    """
    if not items:
        return dual_hash(EMPTY_ROOT_SEED)
    level = [dual_hash(_canonical(item)) for item in items]
    while len(level) > 1:
        if len(level) % 2:
            level.append(level[-1])
        level = [dual_hash(left + right) for left, right in zip(level[::2], level[1::2])]
    return level[0]


# =============================================================================
# EMISSION
# =============================================================================

def emit_receipt(receipt_type: str, data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Build a receipt for one engine event.

    Args:
        receipt_type: One of RECEIPT_TYPES
        data: Event fields; tenant_id defaults to 'default'

    Returns:
        dict: receipt_type, ts, tenant_id, payload_hash and the event fields

    Raises:
        ValueError: If receipt_type is not a known receipt type
    """
    if receipt_type not in RECEIPT_TYPES:
        raise ValueError(
            f"unknown receipt_type '{receipt_type}', expected one of {list(RECEIPT_TYPES)}")
    return {
        "receipt_type": receipt_type,
        "ts": datetime.now(timezone.utc).isoformat(),
        "tenant_id": data.get("tenant_id", DEFAULT_TENANT),
        "payload_hash": dual_hash(_canonical(data)),
        **data,
    }


def write_receipt_jsonl(receipt: Dict[str, Any], fh: IO[str]) -> None:
    """Append one receipt to an open text handle as a compact JSON line."""
    fh.write(json.dumps(receipt, separators=(",", ":"), default=str))
    fh.write("\n")
