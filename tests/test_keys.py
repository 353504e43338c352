# tests/test_keys.py

import hashlib

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from abeca_core.cpabe import (
    AttributeKey, CPABEMasterKey, CPABEParams, CPABEPrivateKey, MasterKey, Params,
    cpabe_key_to_pem, lookup_ski, attribute_key_ski,
)
from abeca_core.cpabe import material
from abeca_core.errors import CapabilityError, KeyParseError, SerializationError
from abeca_core.keys import ECDSAPrivateKey, ECDSAPublicKey, RSAPrivateKey, RSAPublicKey, wrap_public_key


PARAMS = Params(material=b"\x01params")
MASTER = MasterKey(params=PARAMS, secret=b"\x02master")
PRIV = AttributeKey(params=PARAMS, secret=b"\x03priv", attribute_ids=(7, -3))


def test_cpabe_variant_metadata():
    for cls, obj, private in [
        (CPABEMasterKey, MASTER, True),
        (CPABEPrivateKey, PRIV, True),
        (CPABEParams, PARAMS, False),
    ]:
        k = cls(obj)
        assert k.private() is private
        assert k.symmetric() is False


def test_public_counterparts():
    mk_pub = CPABEMasterKey(MASTER).public_key()
    pk_pub = CPABEPrivateKey(PRIV).public_key()
    params = CPABEParams(PARAMS)

    assert isinstance(mk_pub, CPABEParams) and mk_pub.key == PARAMS
    assert isinstance(pk_pub, CPABEParams) and pk_pub.key == PARAMS
    assert params.public_key() is params
    assert mk_pub.ski() == pk_pub.ski() == params.ski()


def test_ski_is_sha256_of_serialization():
    for k in (CPABEMasterKey(MASTER), CPABEPrivateKey(PRIV), CPABEParams(PARAMS)):
        raw = k.to_bytes()
        assert k.ski() == hashlib.sha256(raw).digest()
        assert len(k.ski()) == 32


def test_serialization_is_canonical():
    # same content, independently constructed -> same bytes
    a = CPABEParams(Params(material=b"\x01params"))
    b = CPABEParams(Params(material=bytes(bytearray(b"\x01params"))))
    assert a.to_bytes() == b.to_bytes()
    assert material.decode(a.to_bytes()) == PARAMS


def test_unset_keys_have_empty_ski():
    for cls in (CPABEMasterKey, CPABEPrivateKey, CPABEParams):
        assert cls(None).ski() == b""
    assert ECDSAPublicKey(None).ski() == b""
    assert RSAPrivateKey(None).ski() == b""


def test_unset_private_variant_has_no_public_key():
    with pytest.raises(CapabilityError):
        CPABEMasterKey(None).public_key()


def test_unset_classical_keys_raise_typed_errors():
    for cls in (ECDSAPublicKey, RSAPublicKey):
        with pytest.raises(SerializationError):
            cls(None).to_bytes()
    for cls in (ECDSAPrivateKey, RSAPrivateKey):
        with pytest.raises(CapabilityError):
            cls(None).public_key()


def test_serialization_failure_propagates_from_ski():
    broken = CPABEMasterKey(MasterKey(params=Params(material="not-bytes"), secret=b"s"))
    with pytest.raises(SerializationError):
        broken.to_bytes()
    with pytest.raises(SerializationError):
        broken.ski()
    assert repr(broken) == "<CPABEMasterKey ski=?>"


def test_repr_shows_ski_prefix(ec_key):
    k = ECDSAPrivateKey(ec_key)
    assert repr(k) == f"<ECDSAPrivateKey ski={k.ski().hex()[:16]}>"
    assert repr(CPABEParams(None)) == "<CPABEParams ski=->"


def test_params_ski_only_raises_on_real_serialization_error():
    # a well-formed params key must hash normally; only broken content fails
    assert CPABEParams(PARAMS).ski() == hashlib.sha256(CPABEParams(PARAMS).to_bytes()).digest()
    with pytest.raises(SerializationError):
        CPABEParams(Params(material=12345)).ski()


def test_decode_rejects_garbage():
    with pytest.raises(KeyParseError):
        material.decode(b"\xff\x00")
    with pytest.raises(KeyParseError):
        material.decode(b'{"kind":"nope"}')


def test_lookup_ski():
    assert lookup_ski(CPABEMasterKey(MASTER)) == CPABEParams(PARAMS).ski()
    assert lookup_ski(CPABEParams(PARAMS)) == CPABEParams(PARAMS).ski()
    expected = attribute_key_ski(CPABEParams(PARAMS).to_bytes(), [7, -3])
    assert lookup_ski(CPABEPrivateKey(PRIV)) == expected


def test_cpabe_pem_armor():
    out = cpabe_key_to_pem(CPABEMasterKey(MASTER))
    assert out.startswith(b"-----BEGIN CPABE MASTER KEY-----")
    assert cpabe_key_to_pem(CPABEParams(PARAMS)).startswith(b"-----BEGIN CPABE PARAMS-----")


def test_ecdsa_ski_and_counterpart(ec_key):
    k = ECDSAPrivateKey(ec_key)
    point = ec_key.public_key().public_bytes(
        serialization.Encoding.X962, serialization.PublicFormat.UncompressedPoint
    )
    assert k.ski() == hashlib.sha256(point).digest()
    assert k.private() and not k.symmetric()
    pub = k.public_key()
    assert isinstance(pub, ECDSAPublicKey) and not pub.private()
    assert pub.ski() == k.ski()
    with pytest.raises(CapabilityError):
        k.to_bytes()


def test_rsa_ski(rsa_key):
    k = RSAPrivateKey(rsa_key)
    der = rsa_key.public_key().public_bytes(serialization.Encoding.DER, serialization.PublicFormat.PKCS1)
    assert k.ski() == hashlib.sha256(der).digest()
    assert isinstance(k.public_key(), RSAPublicKey)


def test_wrap_public_key_rejects_unknown():
    assert isinstance(wrap_public_key(ec.generate_private_key(ec.SECP384R1()).public_key()), ECDSAPublicKey)
    with pytest.raises(CapabilityError):
        wrap_public_key(object())
