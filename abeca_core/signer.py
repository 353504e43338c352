"""
abeca_core.signer
-----------------
Signers built on KeyStore keys.

- CryptoSigner: signs digests with a private key that never leaves the store
- LocalSigner: the CA signer, a CryptoSigner bound to the CA certificate,
  a signature hash and a SigningPolicy
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import timedelta
from typing import List, Optional
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from .errors import CSPError, SignerError
from .keys import Key


class CryptoSigner:
    def __init__(self, store, key: Key):
        if store is None:
            raise SignerError("keystore cannot be None")
        if key is None:
            raise SignerError("key cannot be None")
        if key.symmetric():
            raise SignerError("key must be asymmetric")
        if not key.private():
            raise SignerError("key must be private")
        try:
            pub = key.public_key()
        except CSPError as e:
            raise SignerError(f"failed getting public key [{e}]") from e
        if not isinstance(getattr(pub, "key", None), (ec.EllipticCurvePublicKey, rsa.RSAPublicKey)):
            raise SignerError(f"{type(key).__name__} cannot back an X.509 signer")
        self.store = store
        self.key = key
        self._public = pub.key

    def public(self):
        return self._public

    def sign(self, digest: bytes, algorithm: Optional[hashes.HashAlgorithm] = None) -> bytes:
        return self.store.sign(self.key, digest, algorithm or default_sig_algo(self))


def default_sig_algo(signer: CryptoSigner) -> hashes.HashAlgorithm:
    """Signature hash matched to the key strength."""
    pub = signer.public()
    if isinstance(pub, ec.EllipticCurvePublicKey):
        size = pub.curve.key_size
        if size <= 256:
            return hashes.SHA256()
        if size <= 384:
            return hashes.SHA384()
        return hashes.SHA512()
    if pub.key_size < 3072:
        return hashes.SHA256()
    if pub.key_size < 7680:
        return hashes.SHA384()
    return hashes.SHA512()


@dataclass
class SigningPolicy:
    expiry: timedelta = timedelta(hours=8760)
    usages: List[str] = field(
        default_factory=lambda: ["signing", "key encipherment", "server auth", "client auth"]
    )

    def valid(self) -> bool:
        return self.expiry > timedelta(0) and bool(self.usages)


class LocalSigner:
    def __init__(
        self,
        crypto_signer: CryptoSigner,
        ca_cert: x509.Certificate,
        sig_algo: hashes.HashAlgorithm,
        policy: Optional[SigningPolicy] = None,
    ):
        policy = policy or SigningPolicy()
        if not policy.valid():
            raise SignerError("invalid signing policy")
        self.crypto_signer = crypto_signer
        self.ca_cert = ca_cert
        self.sig_algo = sig_algo
        self.policy = policy

    def sign(self, tbs: bytes) -> bytes:
        """Hash `tbs` with the signer's algorithm and sign it with the CA key."""
        h = hashes.Hash(self.sig_algo)
        h.update(tbs)
        return self.crypto_signer.sign(h.finalize(), self.sig_algo)
