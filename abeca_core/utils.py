"""
abeca_core.utils
----------------
Lightweight helpers for base64, hex, hashing and canonical JSON serialization.
Key identifiers depend on these encodings being byte-for-byte stable.
"""

from __future__ import annotations
import base64, binascii, hashlib, json, time
from typing import Any, Dict, Iterable
from .errors import KeyStoreIOError


def now_ts() -> str:
    # RFC3339 / ISO 8601 in UTC, second precision
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())

def b64e(b: bytes) -> str:
    return base64.b64encode(b).decode("ascii")

def b64d(s: str) -> bytes:
    return base64.b64decode(s.encode("ascii"), validate=True)

def hexe(b: bytes) -> str:
    return binascii.hexlify(b).decode("ascii")

def canonical_json(obj: Dict[str, Any]) -> bytes:
    # Deterministic, minimal JSON for hashing
    return json.dumps(obj, separators=(",", ":"), sort_keys=True, ensure_ascii=False).encode("utf-8")

def sha256(*chunks: bytes) -> bytes:
    h = hashlib.sha256()
    for c in chunks:
        h.update(c)
    return h.digest()

def be32(values: Iterable[int]) -> bytes:
    """Big-endian 4-byte encoding of each value, negatives as two's complement."""
    return b"".join((v & 0xFFFFFFFF).to_bytes(4, "big") for v in values)

def read_file(path: str) -> bytes:
    try:
        with open(path, "rb") as fh:
            return fh.read()
    except OSError as e:
        raise KeyStoreIOError(path, e) from e
