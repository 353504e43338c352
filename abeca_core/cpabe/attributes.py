"""
Attribute canonicalization and CP-ABE private-key identifiers.

Both the key store (when it derives a per-attribute-set key) and the
certificate lookup path compute identifiers through this module, so the
two sides agree byte for byte.
"""

from __future__ import annotations
from typing import List, Mapping, Sequence, Tuple
from abeca_core.utils import be32, sha256


def canonical_attributes(attrs: Mapping[str, str]) -> List[Tuple[str, str]]:
    """(name, value) pairs sorted by attribute name."""
    return sorted(attrs.items(), key=lambda kv: kv[0])


def attribute_id(name: str, value: str) -> int:
    """Signed 32-bit ID of one attribute, taken from SHA-256 of "name.value"."""
    digest = sha256(f"{name}.{value}".encode("utf-8"))
    return int.from_bytes(digest[:4], "big", signed=True)


def attribute_ids(attrs: Mapping[str, str]) -> List[int]:
    return [attribute_id(name, value) for name, value in canonical_attributes(attrs)]


def attribute_key_ski(params_bytes: bytes, ids: Sequence[int]) -> bytes:
    # sha256(params || BE32(id_0) || BE32(id_1) ...), order is significant
    return sha256(params_bytes, be32(ids))
