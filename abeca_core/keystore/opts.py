# abeca_core/keystore/opts.py
"""
Option objects selecting what a KeyStore generates or imports.

`temporary=True` keeps the resulting key out of the store.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class KeyGenOpts:
    temporary: bool = False
    algorithm: ClassVar[str] = ""


class ECDSAKeyGenOpts(KeyGenOpts):
    algorithm = "ECDSA"  # P-256


class ECDSAP256KeyGenOpts(KeyGenOpts):
    algorithm = "ECDSAP256"


class ECDSAP384KeyGenOpts(KeyGenOpts):
    algorithm = "ECDSAP384"


class RSA2048KeyGenOpts(KeyGenOpts):
    algorithm = "RSA2048"


class RSA3072KeyGenOpts(KeyGenOpts):
    algorithm = "RSA3072"


class RSA4096KeyGenOpts(KeyGenOpts):
    algorithm = "RSA4096"


class CPABEKeyGenOpts(KeyGenOpts):
    algorithm = "CPABE"


@dataclass(frozen=True)
class KeyImportOpts:
    temporary: bool = False
    algorithm: ClassVar[str] = ""


class X509PublicKeyImportOpts(KeyImportOpts):
    """raw is a cryptography.x509.Certificate"""
    algorithm = "X509Certificate"


class ECDSAPrivateKeyImportOpts(KeyImportOpts):
    """raw is a DER encoded (PKCS#8 or SEC1) EC private key"""
    algorithm = "ECDSA"


class PublicKeyImportOpts(KeyImportOpts):
    """raw is a cryptography public key object, CP-ABE Params or a public Key"""
    algorithm = "PUBLIC"


class CPABEParamsImportOpts(KeyImportOpts):
    algorithm = "CPABEParams"


class CPABEPrivateKeyImportOpts(KeyImportOpts):
    """raw is a serialized CP-ABE master key or attribute private key"""
    algorithm = "CPABEPrivateKey"
