"""
ABECA Core Package
==================
Key resolution for a certificate authority issuing both classical
(ECDSA/RSA) and CP-ABE backed certificates.

Provides:
- A uniform Key contract and SKI derivation, CP-ABE keys included
- Pluggable KeyStore providers (SQLite default, in-memory)
- Signer resolution with PEM key file fallback
- CP-ABE key lookups driven by certificate extensions
"""

__version__ = "0.1.0"
