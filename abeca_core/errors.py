"""
abeca_core.errors
-----------------
Exception hierarchy for key resolution, import and CP-ABE lookups.

Callers that only care about "something went wrong with the key material"
catch CSPError; the subclasses let them tell unsupported operations apart
from bad input, and a missing key apart from a broken one.
"""

from __future__ import annotations


class CSPError(Exception):
    pass


class KeyStoreIOError(CSPError):
    def __init__(self, path: str, cause: Exception):
        super().__init__(f"Could not read file '{path}': {cause}")
        self.path = path


class ParseError(CSPError):
    pass


class CertificateParseError(ParseError):
    pass


class KeyParseError(ParseError):
    pass


class AttributeParseError(ParseError):
    pass


class PEMBlockError(ParseError):
    pass


class SerializationError(CSPError):
    pass


class UnsupportedOperationError(CSPError):
    pass


class InvalidKeyRequestError(CSPError):
    pass


class KeyNotFoundError(CSPError):
    def __init__(self, message: str, ski: bytes = b""):
        super().__init__(message)
        self.ski = ski


class PrivateKeyNotFoundError(KeyNotFoundError):
    pass


class CapabilityError(CSPError):
    pass


class SignerError(CSPError):
    pass


class KeyGenerationError(CSPError):
    pass
