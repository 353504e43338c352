# abeca_core/attrmgr.py
"""
Attribute-manager encoding of certificate attributes.

Attributes travel in an X.509 extension as JSON, `{"attrs": {name: value}}`.
A bare `{name: value}` object is accepted on decode as well.
"""

from __future__ import annotations
import json
from typing import Dict, Mapping
from cryptography.x509 import ObjectIdentifier
from abeca_core.errors import AttributeParseError

ATTR_OID_STRING = "1.2.3.4.5.6.7.8.1"
ATTR_OID = ObjectIdentifier(ATTR_OID_STRING)


def encode_attributes(attrs: Mapping[str, str]) -> bytes:
    return json.dumps({"attrs": dict(attrs)}).encode("utf-8")


def decode_attributes(raw: bytes) -> Dict[str, str]:
    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise AttributeParseError(f"unmarshal Attributes error, {e}") from e
    if not isinstance(data, dict):
        raise AttributeParseError("unmarshal Attributes error, expected a JSON object")
    if isinstance(data.get("attrs"), dict):
        data = data["attrs"]
    for name, value in data.items():
        if not isinstance(value, str):
            raise AttributeParseError(f"unmarshal Attributes error, value of '{name}' is not a string")
    return dict(data)
