# tests/test_signer.py

import json
import logging

import pytest
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec

from abeca_core.errors import SignerError
from abeca_core.keys import ECDSAPrivateKey, RSAPrivateKey
from abeca_core.logger import get_logger
from abeca_core.signer import CryptoSigner, default_sig_algo


@pytest.mark.parametrize("curve,algo", [
    (ec.SECP256R1, hashes.SHA256),
    (ec.SECP384R1, hashes.SHA384),
    (ec.SECP521R1, hashes.SHA512),
])
def test_default_sig_algo_ecdsa(store, curve, algo):
    signer = CryptoSigner(store, ECDSAPrivateKey(ec.generate_private_key(curve())))
    assert isinstance(default_sig_algo(signer), algo)


def test_default_sig_algo_rsa_and_sign(store, rsa_key):
    signer = CryptoSigner(store, RSAPrivateKey(rsa_key))
    assert isinstance(default_sig_algo(signer), hashes.SHA256)

    h = hashes.Hash(hashes.SHA256())
    h.update(b"data")
    sig = signer.sign(h.finalize())
    assert len(sig) == rsa_key.key_size // 8


def test_signer_requires_store_and_private_key(store, ec_key):
    with pytest.raises(SignerError):
        CryptoSigner(None, ECDSAPrivateKey(ec_key))
    with pytest.raises(SignerError):
        CryptoSigner(store, None)
    with pytest.raises(SignerError):
        CryptoSigner(store, ECDSAPrivateKey(ec_key).public_key())


def test_logger_writes_json_lines(tmp_path):
    out = tmp_path / "logs" / "abeca.log"
    log = get_logger("ABECA.Test.File", level=logging.DEBUG, to_file=str(out))
    log.debug("hello")
    for h in log.handlers:
        h.flush()
    line = out.read_text().strip().splitlines()[-1]
    rec = json.loads(line)
    assert rec["msg"] == "hello" and rec["level"] == "DEBUG" and rec["logger"] == "ABECA.Test.File"


def test_logger_level_from_env(monkeypatch):
    monkeypatch.setenv("ABECA_LOG_LEVEL", "warning")
    assert get_logger("ABECA.Test.Env").level == logging.WARNING
