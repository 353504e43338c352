"""
abeca_core.certs
----------------
PEM / X.509 helpers: certificate parsing, PEM block iteration and the
CP-ABE extension lookup.
"""

from __future__ import annotations
from typing import List, Optional, Tuple
from asn1crypto import pem
from cryptography import x509
from .attrmgr import ATTR_OID
from .cpabe import PARAMS_OID
from .errors import CertificateParseError


def parse_certificate_pem(data: bytes, source: str = "<bytes>") -> x509.Certificate:
    """Parse the first certificate of a PEM document."""
    try:
        return x509.load_pem_x509_certificate(data.strip())
    except ValueError as e:
        raise CertificateParseError(f"Failed to parse certificate from '{source}': {e}") from e


def pem_blocks(data: bytes) -> List[Tuple[str, bytes]]:
    """(type, der) for every PEM block in data; empty when there is none."""
    if not pem.detect(data):
        return []
    try:
        return [(object_type, der) for object_type, _, der in pem.unarmor(data, multiple=True)]
    except ValueError:
        return []


def cpabe_extensions(cert: x509.Certificate) -> Tuple[Optional[bytes], Optional[bytes]]:
    """
    Raw (params, attributes) extension payloads of a certificate.

    Either element is None when the extension is absent.
    """
    params_bytes = attr_bytes = None
    for ext in cert.extensions:
        if ext.oid == PARAMS_OID:
            params_bytes = _raw_value(ext)
        elif ext.oid == ATTR_OID:
            attr_bytes = _raw_value(ext)
    return params_bytes, attr_bytes


def _raw_value(ext: x509.Extension) -> bytes:
    value = ext.value
    if isinstance(value, x509.UnrecognizedExtension):
        return value.value
    return value.public_bytes()
