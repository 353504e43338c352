# abeca_core/cpabe/keys.py
"""
CP-ABE master keys, private keys and public parameters as Keys.

The set is closed: CPABEMasterKey, CPABEPrivateKey and CPABEParams are the
only implementations. All three are asymmetric; the two private variants
expose their embedded parameters as the public counterpart.
"""

from __future__ import annotations
from typing import Optional, Union
from asn1crypto import pem
from abeca_core.errors import CapabilityError
from abeca_core.keys import Key
from abeca_core.utils import sha256
from . import material
from .attributes import attribute_key_ski
from .material import AttributeKey, MasterKey, Params


class _CPABEKey(Key):
    def __init__(self, key):
        self.key = key

    def to_bytes(self) -> bytes:
        return material.encode(self.key)

    def ski(self) -> bytes:
        if self.key is None:
            return b""
        # SerializationError propagates, nothing partial is hashed
        return sha256(self.to_bytes())

    def symmetric(self) -> bool:
        return False

    def _params(self) -> Params:
        if self.key is None:
            raise CapabilityError(f"{type(self).__name__} is not set")
        return self.key.params


class CPABEMasterKey(_CPABEKey):
    key: Optional[MasterKey]

    def private(self) -> bool:
        return True

    def public_key(self) -> "CPABEParams":
        return CPABEParams(self._params())


class CPABEPrivateKey(_CPABEKey):
    key: Optional[AttributeKey]

    def private(self) -> bool:
        return True

    def public_key(self) -> "CPABEParams":
        return CPABEParams(self._params())

    @property
    def attribute_ids(self):
        return self.key.attribute_ids if self.key is not None else ()


class CPABEParams(_CPABEKey):
    key: Optional[Params]

    def private(self) -> bool:
        return False

    def public_key(self) -> "CPABEParams":
        return self


CPABEKey = Union[CPABEMasterKey, CPABEPrivateKey, CPABEParams]

_PEM_TYPES = {
    CPABEMasterKey: "CPABE MASTER KEY",
    CPABEPrivateKey: "CPABE PRIVATE KEY",
    CPABEParams: "CPABE PARAMS",
}


def wrap(obj: material.Material) -> CPABEKey:
    if isinstance(obj, MasterKey):
        return CPABEMasterKey(obj)
    if isinstance(obj, AttributeKey):
        return CPABEPrivateKey(obj)
    if isinstance(obj, Params):
        return CPABEParams(obj)
    raise CapabilityError(f"Not cpabe key material: {type(obj).__name__}")


def lookup_ski(key: CPABEKey) -> bytes:
    """
    Identifier a KeyStore files a CP-ABE key under.

    Master keys share the SKI of their params, so a certificate carrying
    only the params finds the master key. Private keys are filed under the
    params bytes plus their attribute IDs, which is what the certificate
    lookup recomputes from the attribute extension.
    """
    if isinstance(key, CPABEMasterKey):
        return key.public_key().ski()
    if isinstance(key, CPABEPrivateKey):
        return attribute_key_ski(key.public_key().to_bytes(), key.attribute_ids)
    return key.ski()


def cpabe_key_to_pem(key: CPABEKey) -> bytes:
    return pem.armor(_PEM_TYPES[type(key)], key.to_bytes())
