# abeca_core/cpabe/material.py
"""
Opaque CP-ABE key material as produced by an ABEEngine.

The engine owns the math; this module only fixes how the material is laid
out and serialized. Serialization is canonical JSON (sorted keys, base64
blobs), so the same material always yields the same bytes and therefore the
same SKI at generation time and at lookup time.
"""

from __future__ import annotations
import binascii, json
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple, Union
from abeca_core.errors import KeyParseError, SerializationError
from abeca_core.utils import b64d, b64e, canonical_json

KIND_PARAMS = "params"
KIND_MASTER = "master"
KIND_PRIVATE = "private"


@dataclass(frozen=True)
class Params:
    """Public parameters of one CP-ABE scheme instance."""
    material: bytes

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": KIND_PARAMS, "material": b64e(self.material)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Params":
        return cls(material=b64d(data["material"]))


@dataclass(frozen=True)
class MasterKey:
    params: Params
    secret: bytes

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": KIND_MASTER, "params": self.params.to_dict(), "secret": b64e(self.secret)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MasterKey":
        return cls(params=Params.from_dict(data["params"]), secret=b64d(data["secret"]))


@dataclass(frozen=True)
class AttributeKey:
    """A private key bound to an ordered attribute ID sequence."""
    params: Params
    secret: bytes
    attribute_ids: Tuple[int, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": KIND_PRIVATE,
            "params": self.params.to_dict(),
            "attribute_ids": [int(a) for a in self.attribute_ids],
            "secret": b64e(self.secret),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AttributeKey":
        return cls(
            params=Params.from_dict(data["params"]),
            secret=b64d(data["secret"]),
            attribute_ids=tuple(int(a) for a in data.get("attribute_ids", [])),
        )


Material = Union[Params, MasterKey, AttributeKey]

_KINDS = {KIND_PARAMS: Params, KIND_MASTER: MasterKey, KIND_PRIVATE: AttributeKey}


def encode(obj: Material) -> bytes:
    try:
        return canonical_json(obj.to_dict())
    except (TypeError, ValueError, AttributeError, binascii.Error) as e:
        raise SerializationError(f"Failed marshalling cpabe {type(obj).__name__} [{e}]") from e


def decode(raw: bytes) -> Material:
    try:
        data = json.loads(raw.decode("utf-8"))
        return _KINDS[data["kind"]].from_dict(data)
    except (UnicodeDecodeError, ValueError, TypeError, KeyError, AttributeError) as e:
        raise KeyParseError(f"Failed unmarshalling cpabe key material [{e}]") from e
