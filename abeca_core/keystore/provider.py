# abeca_core/keystore/provider.py
"""
Software KeyStore: key generation, import, lookup, signing and encryption.

ECDSA and RSA run on `cryptography`; CP-ABE operations go through the
ABEEngine the store was built with. Persistence is left to subclasses,
which implement store_key()/load_key() over their backend (memory, SQLite).
"""

from __future__ import annotations
from dataclasses import replace
from typing import Optional, Sequence, Tuple
from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa
from cryptography.hazmat.primitives.asymmetric.utils import Prehashed
from abeca_core.cpabe import material
from abeca_core.cpabe.engine import ABEEngine
from abeca_core.cpabe.keys import CPABEMasterKey, CPABEParams, CPABEPrivateKey, lookup_ski, wrap
from abeca_core.errors import (
    CapabilityError,
    InvalidKeyRequestError,
    KeyNotFoundError,
    KeyParseError,
    UnsupportedOperationError,
)
from abeca_core.keys import ECDSAPrivateKey, ECDSAPublicKey, Key, RSAPrivateKey, RSAPublicKey, wrap_public_key
from abeca_core.logger import get_logger
from abeca_core.utils import hexe
from . import opts as o

log = get_logger("ABECA.KeyStore")

_EC_CURVES = {
    o.ECDSAKeyGenOpts: ec.SECP256R1,
    o.ECDSAP256KeyGenOpts: ec.SECP256R1,
    o.ECDSAP384KeyGenOpts: ec.SECP384R1,
}

_RSA_BITS = {
    o.RSA2048KeyGenOpts: 2048,
    o.RSA3072KeyGenOpts: 3072,
    o.RSA4096KeyGenOpts: 4096,
}


class KeyStore:
    name: str = "base"

    def __init__(self, engine: Optional[ABEEngine] = None):
        self.engine = engine

    # ------------------------------------------------------------------
    # Backend interface
    # ------------------------------------------------------------------
    def store_key(self, ski: bytes, key: Key) -> None:
        raise NotImplementedError

    def load_key(self, ski: bytes) -> Optional[Key]:
        """Private key filed under ski if any, else the public key, else None."""
        raise NotImplementedError

    def close(self) -> None:
        return

    # ------------------------------------------------------------------
    # Key lifecycle
    # ------------------------------------------------------------------
    def key_gen(self, opts: o.KeyGenOpts) -> Key:
        if opts is None:
            raise InvalidKeyRequestError("Invalid Opts parameter. It must not be None.")

        if type(opts) in _EC_CURVES:
            k: Key = ECDSAPrivateKey(ec.generate_private_key(_EC_CURVES[type(opts)]()))
        elif type(opts) in _RSA_BITS:
            k = RSAPrivateKey(rsa.generate_private_key(public_exponent=65537, key_size=_RSA_BITS[type(opts)]))
        elif isinstance(opts, o.CPABEKeyGenOpts):
            k = CPABEMasterKey(self._engine().setup())
        else:
            raise UnsupportedOperationError(f"Unsupported 'KeyGenOpts' provided [{opts!r}]")

        log.info(f"[KEYGEN] algo={opts.algorithm} temporary={opts.temporary}")
        if not opts.temporary:
            self._put(k)
        return k

    def derive_cpabe_private_key(
        self, master: Key, attribute_ids: Sequence[int], temporary: bool = False
    ) -> CPABEPrivateKey:
        """Generate the private key for one attribute ID sequence (order kept)."""
        if not isinstance(master, CPABEMasterKey) or master.key is None:
            raise CapabilityError(f"cpabe private keys derive from a master key, got {type(master).__name__}")
        ids = tuple(attribute_ids)
        # file the key under the requested sequence, whatever order the engine keeps
        k = CPABEPrivateKey(replace(self._engine().keygen(master.key, list(ids)), attribute_ids=ids))
        log.info(f"[KEYGEN] algo=CPABEPrivateKey attributes={len(ids)} temporary={temporary}")
        if not temporary:
            self._put(k)
        return k

    def key_import(self, raw, opts: o.KeyImportOpts) -> Key:
        if raw is None:
            raise InvalidKeyRequestError("Invalid raw. It must not be None.")
        if opts is None:
            raise InvalidKeyRequestError("Invalid opts. It must not be None.")

        if isinstance(opts, o.X509PublicKeyImportOpts):
            if not isinstance(raw, x509.Certificate):
                raise InvalidKeyRequestError("Invalid raw material. Expected x509.Certificate.")
            k = wrap_public_key(raw.public_key())
        elif isinstance(opts, o.ECDSAPrivateKeyImportOpts):
            k = self._import_ecdsa_private(raw)
        elif isinstance(opts, o.PublicKeyImportOpts):
            k = self._import_public(raw)
        elif isinstance(opts, o.CPABEParamsImportOpts):
            obj = material.decode(_as_bytes(raw))
            if not isinstance(obj, material.Params):
                raise KeyParseError(f"Expected cpabe params, got {type(obj).__name__}")
            k = CPABEParams(obj)
        elif isinstance(opts, o.CPABEPrivateKeyImportOpts):
            obj = material.decode(_as_bytes(raw))
            if isinstance(obj, material.Params):
                raise KeyParseError("Expected a cpabe master or private key, got params")
            k = wrap(obj)
        else:
            raise UnsupportedOperationError(f"Unsupported 'KeyImportOpts' provided [{opts!r}]")

        if not opts.temporary:
            self._put(k)
        return k

    def get_key(self, ski: bytes) -> Key:
        if not ski:
            raise InvalidKeyRequestError("Invalid SKI. Cannot be of zero length.")
        k = self.load_key(ski)
        if k is None:
            raise KeyNotFoundError(f"Key with SKI '{hexe(ski)}' not found in {self.name} keystore", ski)
        return k

    # ------------------------------------------------------------------
    # Primitives
    # ------------------------------------------------------------------
    def sign(self, key: Key, digest: bytes, algorithm: hashes.HashAlgorithm) -> bytes:
        if isinstance(key, ECDSAPrivateKey):
            return key.key.sign(digest, ec.ECDSA(Prehashed(algorithm)))
        if isinstance(key, RSAPrivateKey):
            return key.key.sign(digest, padding.PKCS1v15(), Prehashed(algorithm))
        raise CapabilityError(f"Signing is not supported with {type(key).__name__}")

    def encrypt(self, key: Key, plaintext: bytes, policy: Optional[str] = None) -> bytes:
        if isinstance(key, (RSAPublicKey, RSAPrivateKey)):
            pub = key.public_key().key
            return pub.encrypt(
                plaintext,
                padding.OAEP(mgf=padding.MGF1(algorithm=hashes.SHA256()), algorithm=hashes.SHA256(), label=None),
            )
        if isinstance(key, (CPABEParams, CPABEMasterKey, CPABEPrivateKey)):
            if not policy:
                raise InvalidKeyRequestError("cpabe encryption requires an access policy")
            return self._engine().encrypt(key.public_key().key, plaintext, policy)
        raise UnsupportedOperationError(f"Encryption is not supported with {type(key).__name__}")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _engine(self) -> ABEEngine:
        if self.engine is None:
            raise UnsupportedOperationError(f"{self.name} keystore has no cpabe engine configured")
        return self.engine

    def _put(self, key: Key) -> None:
        if isinstance(key, (CPABEMasterKey, CPABEPrivateKey, CPABEParams)):
            ski = lookup_ski(key)
        else:
            ski = key.ski()
        self.store_key(ski, key)
        log.debug(f"[STORE] {type(key).__name__} ski={hexe(ski)}")

    @staticmethod
    def _import_ecdsa_private(raw) -> Key:
        try:
            priv = serialization.load_der_private_key(_as_bytes(raw), password=None)
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise KeyParseError(f"Failed converting to EC private key [{e}]") from e
        if not isinstance(priv, ec.EllipticCurvePrivateKey):
            raise KeyParseError(f"Expected an EC private key, got {type(priv).__name__}")
        return ECDSAPrivateKey(priv)

    @staticmethod
    def _import_public(raw) -> Key:
        if isinstance(raw, material.Params):
            return CPABEParams(raw)
        if isinstance(raw, Key):
            if raw.private():
                raise InvalidKeyRequestError(f"Expected a public key, got {type(raw).__name__}")
            return raw
        return wrap_public_key(raw)


def _as_bytes(raw) -> bytes:
    if not isinstance(raw, (bytes, bytearray)):
        raise InvalidKeyRequestError(f"Invalid raw material. Expected bytes, got {type(raw).__name__}.")
    return bytes(raw)


# ---------------------------------------------------------------------------
# Record codec shared by persistent providers
# ---------------------------------------------------------------------------
def encode_key_record(key: Key) -> Tuple[str, bytes]:
    """(kind, blob) for a key; private EC/RSA material as unencrypted PKCS#8."""
    if isinstance(key, (ECDSAPrivateKey, RSAPrivateKey)):
        kind = "ecdsa" if isinstance(key, ECDSAPrivateKey) else "rsa"
        return kind, key.key.private_bytes(
            serialization.Encoding.DER,
            serialization.PrivateFormat.PKCS8,
            serialization.NoEncryption(),
        )
    if isinstance(key, (ECDSAPublicKey, RSAPublicKey)):
        return ("ecdsa" if isinstance(key, ECDSAPublicKey) else "rsa"), key.to_bytes()
    return "cpabe", key.to_bytes()


def decode_key_record(kind: str, private: bool, blob: bytes) -> Key:
    if kind == "cpabe":
        return wrap(material.decode(blob))
    if private:
        priv = serialization.load_der_private_key(blob, password=None)
        return ECDSAPrivateKey(priv) if kind == "ecdsa" else RSAPrivateKey(priv)
    return wrap_public_key(serialization.load_der_public_key(blob))
