import datetime
import hashlib
import os

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.x509.oid import NameOID

from abeca_core.cpabe import ABEEngine, AttributeKey, MasterKey, Params
from abeca_core.keystore import InMemoryKeyStore
from abeca_core.utils import be32


class FakeABEEngine(ABEEngine):
    """Deterministic stand-in for the CP-ABE engine: no math, stable layout."""
    name = "fake"

    def __init__(self):
        self.keygen_calls = []

    def setup(self):
        return MasterKey(params=Params(material=os.urandom(32)), secret=os.urandom(32))

    def keygen(self, master, attribute_ids):
        ids = tuple(attribute_ids)
        self.keygen_calls.append(ids)
        secret = hashlib.sha256(master.secret + be32(ids)).digest()
        return AttributeKey(params=master.params, secret=secret, attribute_ids=ids)

    def encrypt(self, params, plaintext, policy):
        return b"cpabe|" + policy.encode() + b"|" + plaintext


@pytest.fixture
def engine():
    return FakeABEEngine()


@pytest.fixture
def store(engine):
    return InMemoryKeyStore(engine=engine)


@pytest.fixture(scope="session")
def rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def ec_key():
    return ec.generate_private_key(ec.SECP256R1())


def make_cert(priv, extensions=(), cn="abeca-test-ca"):
    """Self-signed certificate carrying raw (oid, bytes) extensions."""
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, cn)])
    now = datetime.datetime.now(datetime.timezone.utc)
    builder = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(priv.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(minutes=5))
        .not_valid_after(now + datetime.timedelta(days=1))
    )
    for oid, value in extensions:
        builder = builder.add_extension(x509.UnrecognizedExtension(oid, value), critical=False)
    return builder.sign(priv, hashes.SHA256())


def cert_pem(cert):
    return cert.public_bytes(serialization.Encoding.PEM)


def key_pem(priv):
    return priv.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.TraditionalOpenSSL,
        serialization.NoEncryption(),
    )


@pytest.fixture
def write(tmp_path):
    def _write(name, data):
        p = tmp_path / name
        p.write_bytes(data)
        return str(p)
    return _write
