from __future__ import annotations
from typing import Sequence
from .material import AttributeKey, MasterKey, Params


class ABEEngine:
    """
    Contract for the external CP-ABE engine.

    The scheme's math (setup, per-attribute key generation, encryption)
    lives behind this interface; KeyStore providers call into it and wrap
    the returned material in CPABE* keys.
    """
    name: str = "base"

    def setup(self) -> MasterKey:
        raise NotImplementedError

    def keygen(self, master: MasterKey, attribute_ids: Sequence[int]) -> AttributeKey:
        raise NotImplementedError

    def encrypt(self, params: Params, plaintext: bytes, policy: str) -> bytes:
        raise NotImplementedError
