# tests/test_attributes.py

import hashlib
import json

import pytest

from abeca_core.attrmgr import decode_attributes, encode_attributes
from abeca_core.cpabe import attribute_id, attribute_ids, attribute_key_ski, canonical_attributes
from abeca_core.errors import AttributeParseError


def test_canonical_order_is_by_name():
    attrs = json.loads('{"role":"admin","dept":"eng"}')
    assert canonical_attributes(attrs) == [("dept", "eng"), ("role", "admin")]


def test_ids_independent_of_presentation_order():
    a = {"role": "admin", "dept": "eng", "site": "ber"}
    b = {"site": "ber", "dept": "eng", "role": "admin"}
    assert list(a) != list(b)
    assert attribute_ids(a) == attribute_ids(b)
    params = b"params-bytes"
    assert attribute_key_ski(params, attribute_ids(a)) == attribute_key_ski(params, attribute_ids(b))


def test_attribute_id_is_signed_32_bit():
    digest = hashlib.sha256(b"dept.eng").digest()
    assert attribute_id("dept", "eng") == int.from_bytes(digest[:4], "big", signed=True)
    for name in ("a", "b", "role", "hf.Type"):
        assert -(2 ** 31) <= attribute_id(name, "x") < 2 ** 31


def test_attribute_key_ski_layout():
    ids = [1, -1]
    expected = hashlib.sha256(b"P" + b"\x00\x00\x00\x01" + b"\xff\xff\xff\xff").digest()
    assert attribute_key_ski(b"P", ids) == expected
    # order is part of the identifier
    assert attribute_key_ski(b"P", [-1, 1]) != expected


def test_empty_attribute_set_hashes_params_only():
    assert attribute_key_ski(b"P", attribute_ids({})) == hashlib.sha256(b"P").digest()


def test_decode_wrapped_and_bare_maps():
    wrapped = encode_attributes({"role": "admin"})
    assert json.loads(wrapped) == {"attrs": {"role": "admin"}}
    assert decode_attributes(wrapped) == {"role": "admin"}
    assert decode_attributes(b'{"role":"admin","dept":"eng"}') == {"role": "admin", "dept": "eng"}


def test_decode_unwraps_attrs_next_to_extra_fields():
    raw = b'{"attrs":{"role":"admin","dept":"eng"},"version":"1"}'
    assert decode_attributes(raw) == {"role": "admin", "dept": "eng"}
    assert attribute_ids(decode_attributes(raw)) == attribute_ids({"dept": "eng", "role": "admin"})


@pytest.mark.parametrize("raw", [b"not json", b"[1, 2]", b'{"role": 5}'])
def test_decode_rejects_malformed(raw):
    with pytest.raises(AttributeParseError):
        decode_attributes(raw)
