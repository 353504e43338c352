"""
abeca_core.keys
---------------
The Key contract shared by every piece of key material a KeyStore hands out,
plus the classical ECDSA / RSA implementations backed by `cryptography`.

- to_bytes(): canonical serialization (public material only for EC/RSA)
- ski(): subject key identifier, the SHA-256 lookup handle in a KeyStore
- symmetric() / private(): fixed metadata per key kind
- public_key(): the public counterpart of an asymmetric key

CP-ABE keys implement the same contract in abeca_core.cpabe.keys.
"""

from __future__ import annotations
from typing import Optional
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from .errors import CSPError, CapabilityError, SerializationError
from .utils import sha256


class Key:
    # Interface
    def to_bytes(self) -> bytes:
        raise NotImplementedError

    def ski(self) -> bytes:
        raise NotImplementedError

    def symmetric(self) -> bool:
        raise NotImplementedError

    def private(self) -> bool:
        raise NotImplementedError

    def public_key(self) -> "Key":
        raise NotImplementedError

    def __repr__(self) -> str:
        try:
            ski = self.ski()
        except CSPError:
            return f"<{type(self).__name__} ski=?>"
        return f"<{type(self).__name__} ski={ski.hex()[:16] if ski else '-'}>"

    def _material(self):
        if self.key is None:
            raise CapabilityError(f"{type(self).__name__} is not set")
        return self.key


# --------- ECDSA ----------
class ECDSAPublicKey(Key):
    def __init__(self, key: Optional[ec.EllipticCurvePublicKey]):
        self.key = key

    def to_bytes(self) -> bytes:
        if self.key is None:
            raise SerializationError(f"{type(self).__name__} is not set")
        return self.key.public_bytes(
            serialization.Encoding.DER, serialization.PublicFormat.SubjectPublicKeyInfo
        )

    def ski(self) -> bytes:
        if self.key is None:
            return b""
        point = self.key.public_bytes(
            serialization.Encoding.X962, serialization.PublicFormat.UncompressedPoint
        )
        return sha256(point)

    def symmetric(self) -> bool:
        return False

    def private(self) -> bool:
        return False

    def public_key(self) -> Key:
        return self


class ECDSAPrivateKey(Key):
    def __init__(self, key: Optional[ec.EllipticCurvePrivateKey]):
        self.key = key

    def to_bytes(self) -> bytes:
        raise CapabilityError("Not supported: ECDSA private keys are not exported")

    def ski(self) -> bytes:
        if self.key is None:
            return b""
        return ECDSAPublicKey(self.key.public_key()).ski()

    def symmetric(self) -> bool:
        return False

    def private(self) -> bool:
        return True

    def public_key(self) -> Key:
        return ECDSAPublicKey(self._material().public_key())


# --------- RSA ----------
class RSAPublicKey(Key):
    def __init__(self, key: Optional[rsa.RSAPublicKey]):
        self.key = key

    def to_bytes(self) -> bytes:
        if self.key is None:
            raise SerializationError(f"{type(self).__name__} is not set")
        return self.key.public_bytes(
            serialization.Encoding.DER, serialization.PublicFormat.SubjectPublicKeyInfo
        )

    def ski(self) -> bytes:
        if self.key is None:
            return b""
        der = self.key.public_bytes(serialization.Encoding.DER, serialization.PublicFormat.PKCS1)
        return sha256(der)

    def symmetric(self) -> bool:
        return False

    def private(self) -> bool:
        return False

    def public_key(self) -> Key:
        return self


class RSAPrivateKey(Key):
    def __init__(self, key: Optional[rsa.RSAPrivateKey]):
        self.key = key

    def to_bytes(self) -> bytes:
        raise CapabilityError("Not supported: RSA private keys are not exported")

    def ski(self) -> bytes:
        if self.key is None:
            return b""
        return RSAPublicKey(self.key.public_key()).ski()

    def symmetric(self) -> bool:
        return False

    def private(self) -> bool:
        return True

    def public_key(self) -> Key:
        return RSAPublicKey(self._material().public_key())


def wrap_public_key(pub) -> Key:
    """Wrap a `cryptography` public key object in the matching Key class."""
    if isinstance(pub, ec.EllipticCurvePublicKey):
        return ECDSAPublicKey(pub)
    if isinstance(pub, rsa.RSAPublicKey):
        return RSAPublicKey(pub)
    raise CapabilityError(f"Unsupported public key type: {type(pub).__name__}")
