"""
abeca_core.csp
--------------
Key resolution for the CA on top of a KeyStore.

- Signer resolution: certificate -> public key SKI -> private key in the
  store, with a single fallback that imports the PEM key file instead
- Import of CP-ABE keys exported as PEM
- Key options for generating ECDSA / RSA keys from a KeyRequest
- CP-ABE lookups driven by certificate extensions (params, attributes)
- CP-ABE master key generation and params export
- TLS key pair loading backed by the store
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple
from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from .attrmgr import decode_attributes
from .certs import cpabe_extensions, parse_certificate_pem, pem_blocks
from .cpabe import attribute_ids, attribute_key_ski
from .cpabe.keys import CPABEMasterKey, CPABEParams, CPABEPrivateKey
from .csr import CertificateRequest, KeyRequest
from .errors import (
    CSPError,
    CertificateParseError,
    InvalidKeyRequestError,
    KeyGenerationError,
    KeyNotFoundError,
    KeyParseError,
    PEMBlockError,
    PrivateKeyNotFoundError,
    SignerError,
    UnsupportedOperationError,
)
from .keys import Key
from .keystore import KeyStore, opts
from .logger import get_logger
from .signer import CryptoSigner, LocalSigner, SigningPolicy, default_sig_algo
from .utils import hexe, read_file

log = get_logger("ABECA.CSP")


# ---------------------------------------------------------------------------
# Signer resolution
# ---------------------------------------------------------------------------
def key_store_backed_signer(
    ca_file: str, key_file: str, policy: Optional[SigningPolicy], store: KeyStore
) -> LocalSigner:
    """
    CA signer for ca_file whose key lives in the store, or failing that,
    in the PEM file key_file (imported into the store once).
    """
    ca_cert = _load_certificate(ca_file)
    try:
        _, crypto_signer = get_signer_from_cert(ca_cert, store)
    except CSPError as err:
        log.debug(f"No key found in keystore, attempting fallback: {err}")
        msg = f"Could not find the private key in keystore nor in keyfile '{key_file}'"
        try:
            key = import_key_from_pem(key_file, store, temporary=False)
        except UnsupportedOperationError as e:
            raise UnsupportedOperationError(f"{msg}: {e}") from e
        except CSPError as e:
            raise KeyNotFoundError(f"{msg}: {e}") from e
        try:
            crypto_signer = CryptoSigner(store, key)
        except SignerError as e:
            raise SignerError(f"Failed initializing CryptoSigner: {e}") from e

    try:
        return LocalSigner(crypto_signer, ca_cert, default_sig_algo(crypto_signer), policy)
    except SignerError as e:
        raise SignerError(f"Failed to create new signer: {e}") from e


def get_signer_from_cert(cert: x509.Certificate, store: KeyStore) -> Tuple[Key, CryptoSigner]:
    """Private key matching the certificate's public key, and a signer over it."""
    if store is None:
        raise SignerError("CSP was not initialized")
    try:
        cert_pub = store.key_import(cert, opts.X509PublicKeyImportOpts(temporary=True))
    except CSPError as e:
        raise SignerError(f"Failed to import certificate's public key: {e}") from e

    ski = cert_pub.ski()
    try:
        private_key = store.get_key(ski)
    except KeyNotFoundError as e:
        raise KeyNotFoundError(f"Could not find matching private key for SKI: {e}", ski) from e
    # the store hands back the public key when only that half is present
    if not private_key.private():
        raise PrivateKeyNotFoundError(
            f"The private key associated with the certificate with SKI '{hexe(ski)}' was not found", ski
        )
    try:
        signer = CryptoSigner(store, private_key)
    except SignerError as e:
        raise SignerError(f"Failed to load ski from keystore: {e}") from e
    return private_key, signer


def get_signer_from_cert_file(cert_file: str, store: KeyStore) -> Tuple[Key, CryptoSigner, x509.Certificate]:
    cert = _load_certificate(cert_file)
    key, signer = get_signer_from_cert(cert, store)
    return key, signer, cert


def import_key_from_pem(key_file: str, store: KeyStore, temporary: bool = False) -> Key:
    """Import the PEM private key in key_file into the store. ECDSA only."""
    data = read_file(key_file)
    try:
        priv = serialization.load_pem_private_key(data, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise KeyParseError(f"Failed parsing private key from {key_file}: {e}") from e

    if isinstance(priv, ec.EllipticCurvePrivateKey):
        der = priv.private_bytes(
            serialization.Encoding.DER, serialization.PrivateFormat.PKCS8, serialization.NoEncryption()
        )
        try:
            return store.key_import(der, opts.ECDSAPrivateKeyImportOpts(temporary=temporary))
        except CSPError as e:
            raise KeyParseError(f"Failed to import ECDSA private key for '{key_file}': {e}") from e
    if isinstance(priv, rsa.RSAPrivateKey):
        raise UnsupportedOperationError(
            f"Failed to import RSA key from {key_file}; RSA private key import is not supported"
        )
    raise KeyParseError(f"Failed to import key from {key_file}: invalid secret key type")


_CPABE_PEM_IMPORT = {
    "CPABE PARAMS": (CPABEParams, opts.CPABEParamsImportOpts),
    "CPABE MASTER KEY": (CPABEMasterKey, opts.CPABEPrivateKeyImportOpts),
    "CPABE PRIVATE KEY": (CPABEPrivateKey, opts.CPABEPrivateKeyImportOpts),
}


def import_cpabe_key_from_pem(data: bytes, store: KeyStore, temporary: bool = False) -> Key:
    """Import one PEM block written by cpabe_key_to_pem into the store."""
    blocks = pem_blocks(data)
    if len(blocks) != 1:
        raise KeyParseError(f"expected exactly one cpabe PEM block, found {len(blocks)}")
    block_type, der = blocks[0]
    if block_type not in _CPABE_PEM_IMPORT:
        raise KeyParseError(f"unsupported cpabe PEM block type '{block_type}'")
    cls, import_opts = _CPABE_PEM_IMPORT[block_type]
    k = store.key_import(der, import_opts(temporary=True))
    if not isinstance(k, cls):
        raise KeyParseError(f"PEM block '{block_type}' holds a {type(k).__name__}")
    if not temporary:
        k = store.key_import(der, import_opts(temporary=False))
    return k


# ---------------------------------------------------------------------------
# Key generation
# ---------------------------------------------------------------------------
_KEY_OPTS = {
    ("rsa", 2048): opts.RSA2048KeyGenOpts,
    ("rsa", 3072): opts.RSA3072KeyGenOpts,
    ("rsa", 4096): opts.RSA4096KeyGenOpts,
    ("ecdsa", 256): opts.ECDSAP256KeyGenOpts,
    ("ecdsa", 384): opts.ECDSAP384KeyGenOpts,
}


def get_key_opts(kr: Optional[KeyRequest], ephemeral: bool) -> opts.KeyGenOpts:
    if kr is None:
        return opts.ECDSAKeyGenOpts(temporary=ephemeral)
    log.debug(f"generate key from request: algo={kr.algo}, size={kr.size}")

    cls = _KEY_OPTS.get((kr.algo, kr.size))
    if cls is not None:
        return cls(temporary=ephemeral)
    if kr.algo == "rsa":
        raise InvalidKeyRequestError(f"Invalid RSA key size: {kr.size}")
    if kr.algo == "ecdsa":
        if kr.size == 521:
            # P-521 is not available in the keystore
            raise UnsupportedOperationError("Unsupported ECDSA key size: 521")
        raise InvalidKeyRequestError(f"Invalid ECDSA key size: {kr.size}")
    raise InvalidKeyRequestError(f"Invalid algorithm: {kr.algo}")


def key_request_generate(req: CertificateRequest, store: KeyStore) -> Tuple[Key, CryptoSigner]:
    log.info(f"generating key: {req.key_request}")
    key = store.key_gen(get_key_opts(req.key_request, False))
    try:
        signer = CryptoSigner(store, key)
    except SignerError as e:
        raise SignerError(f"Failed initializing CryptoSigner: {e}") from e
    return key, signer


def cpabe_master_key_generate(store: KeyStore) -> Tuple[Key, str]:
    """New CP-ABE master key plus its hex encoded params for certificate issuance."""
    try:
        k = store.key_gen(opts.CPABEKeyGenOpts(temporary=False))
    except CSPError as e:
        raise KeyGenerationError(f"keystore generate cpabe master key error, {e}") from e
    try:
        params = k.public_key()
    except CSPError as e:
        raise KeyGenerationError(f"get the cpabe params from master key error, {e}") from e
    try:
        params_bytes = params.to_bytes()
    except CSPError as e:
        raise KeyGenerationError(f"marshal cpabe params error, {e}") from e
    return k, params_bytes.hex()


# ---------------------------------------------------------------------------
# CP-ABE lookups
# ---------------------------------------------------------------------------
def key_store_backed_cpabe_master_key(cert_file: str, store: KeyStore) -> Optional[Key]:
    params = key_store_backed_cpabe_params(cert_file, store)
    if params is None:
        return None
    # master keys are filed under the SKI of their params
    return store.get_key(params.ski())


def key_store_backed_cpabe_private_key(cert_file: str, store: KeyStore) -> Optional[Key]:
    """
    CP-ABE private key for the attribute set carried by the certificate.

    Returns None, without touching the attributes, when the certificate
    has no params extension.
    """
    cert = _load_certificate(cert_file)
    params_bytes, attr_bytes = cpabe_extensions(cert)
    if params_bytes is None:
        log.warning(f"The certificate in [{cert_file}] does not support cpabe")
        return None

    attrs = decode_attributes(attr_bytes) if attr_bytes is not None else {}
    ski = attribute_key_ski(params_bytes, attribute_ids(attrs))
    log.debug(f"cpabe private key lookup: attributes={sorted(attrs)} ski={hexe(ski)}")
    return store.get_key(ski)


def key_store_backed_cpabe_params(cert_file: str, store: KeyStore) -> Optional[CPABEParams]:
    cert = _load_certificate(cert_file)
    params_bytes, _ = cpabe_extensions(cert)
    if params_bytes is None:
        log.warning(f"The certificate in [{cert_file}] does not support cpabe")
        return None
    try:
        return store.key_import(params_bytes, opts.CPABEParamsImportOpts(temporary=True))
    except KeyParseError as e:
        raise KeyParseError(f"import params error from '{cert_file}', {e}") from e


# ---------------------------------------------------------------------------
# TLS key pairs
# ---------------------------------------------------------------------------
@dataclass
class X509KeyPair:
    certificate: List[bytes] = field(default_factory=list)  # DER, leaf first
    private_key: Any = None  # CryptoSigner, or a cryptography key on fallback
    leaf: Optional[x509.Certificate] = None


def load_x509_key_pair(cert_file: str, key_file: str, store: KeyStore) -> X509KeyPair:
    """
    Certificate chain from cert_file with its private key from the store.

    When the store has no key and key_file is given, the key is read from
    key_file directly and must match the leaf certificate.
    """
    pair = X509KeyPair(certificate=_certificate_chain(read_file(cert_file), cert_file))
    pair.leaf = _parse_der(pair.certificate[0], cert_file)

    try:
        _, pair.private_key = get_signer_from_cert(pair.leaf, store)
    except CSPError as err:
        if not key_file:
            raise SignerError(f"Could not load TLS certificate with keystore: {err}") from err
        log.debug(f"Could not load TLS certificate with keystore: {err}")
        log.debug(f"Attempting fallback with certfile {cert_file} and keyfile {key_file}")
        try:
            pair.private_key = _load_matching_key(pair.leaf, key_file)
        except CSPError as e:
            raise KeyNotFoundError(
                f"Could not get the private key {key_file} that matches {cert_file}: {e}"
            ) from e
    return pair


def _certificate_chain(data: bytes, cert_file: str) -> List[bytes]:
    chain: List[bytes] = []
    skipped: List[str] = []
    for block_type, der in pem_blocks(data):
        if block_type == "CERTIFICATE":
            chain.append(der)
        else:
            skipped.append(block_type)

    if chain:
        return chain
    if not skipped:
        raise PEMBlockError(f"Failed to find PEM block in file {cert_file}")
    if len(skipped) == 1 and skipped[0].endswith("PRIVATE KEY"):
        raise PEMBlockError(
            f"Failed to find certificate PEM data in file {cert_file}, but did find a private key; "
            "PEM inputs may have been switched"
        )
    raise PEMBlockError(
        f'Failed to find "CERTIFICATE" PEM block in file {cert_file} after skipping PEM blocks '
        f"of the following types: {skipped}"
    )


def _load_matching_key(leaf: x509.Certificate, key_file: str):
    try:
        priv = serialization.load_pem_private_key(read_file(key_file), password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise KeyParseError(f"Failed parsing private key from {key_file}: {e}") from e
    spki = serialization.Encoding.DER, serialization.PublicFormat.SubjectPublicKeyInfo
    if priv.public_key().public_bytes(*spki) != leaf.public_key().public_bytes(*spki):
        raise KeyParseError("private key does not match public key")
    return priv


# ---------------------------------------------------------------------------
# Encryption
# ---------------------------------------------------------------------------
def encrypt_data(pk, data: bytes, store: KeyStore, policy: Optional[str] = None) -> bytes:
    """Encrypt data under a public key (RSA) or CP-ABE params plus a policy."""
    k = store.key_import(pk, opts.PublicKeyImportOpts(temporary=True))
    return store.encrypt(k, data, policy)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _load_certificate(cert_file: str) -> x509.Certificate:
    return parse_certificate_pem(read_file(cert_file), cert_file)


def _parse_der(der: bytes, source: str) -> x509.Certificate:
    try:
        return x509.load_der_x509_certificate(der)
    except ValueError as e:
        raise CertificateParseError(f"Failed to parse certificate from '{source}': {e}") from e
