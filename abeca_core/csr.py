# abeca_core/csr.py

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

DEFAULT_ALGO = "ecdsa"
DEFAULT_SIZE = 256


@dataclass
class KeyRequest:
    """Requested algorithm and size of a key to generate."""
    algo: str = DEFAULT_ALGO
    size: int = DEFAULT_SIZE

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "KeyRequest":
        return cls(algo=str(data.get("algo", DEFAULT_ALGO)).lower(), size=int(data.get("size", DEFAULT_SIZE)))


@dataclass
class CertificateRequest:
    cn: str = ""
    hosts: List[str] = field(default_factory=list)
    key_request: Optional[KeyRequest] = None
