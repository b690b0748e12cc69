"""
test/test_tx.py — Canonical JSON, signing primitives and policy messages

Run: pytest test/test_tx.py -v
  or: python test/test_tx.py

Test structure:
  1. Canonical JSON
  2. Crypto primitives (secp256k1 + SHA-256)
  3. Policy messages and sign documents
"""

import json
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from gnfd_core.canonical import canonicalize
from gnfd_core.crypto import (
    generate_keypair,
    private_key_from_hex,
    private_key_from_pem,
    private_key_to_pem,
    public_key_from_hex,
    public_key_to_hex,
    sha256_hex,
    sign_bytes,
    verify_signature,
)
from gnfd_core.permission import (
    bucket_grn,
    new_principal_with_account,
    new_principal_with_group_id,
    object_grn,
)
from gnfd_core.policy import PolicyBuilder, policy_to_chain
from gnfd_core.tx import MsgDeletePolicy, MsgPutPolicy, SignedTx, sign_doc


OPERATOR = "0x" + "11" * 20
GRANTEE = "0x" + "22" * 20


def _put_msg(**overrides) -> MsgPutPolicy:
    fields = dict(
        operator=OPERATOR,
        resource=bucket_grn("bkt"),
        principal=new_principal_with_account(GRANTEE),
        statements=policy_to_chain(PolicyBuilder().allow("get-object", "list-object").build()),
    )
    fields.update(overrides)
    return MsgPutPolicy(**fields)


# ==================================================================
# 1. Canonical JSON
# ==================================================================

def test_canonicalize_sorts_keys_and_compacts():
    assert canonicalize({"b": 1, "a": [True, None, "x"]}) == b'{"a":[true,null,"x"],"b":1}'
    assert canonicalize({"z": {"y": 1, "x": 2}}) == b'{"z":{"x":2,"y":1}}'
    print("  PASS: test_canonicalize_sorts_keys_and_compacts")


def test_canonicalize_unicode_passthrough():
    assert canonicalize({"memo": "héllo"}) == '{"memo":"héllo"}'.encode("utf-8")
    print("  PASS: test_canonicalize_unicode_passthrough")


def test_canonicalize_errors():
    for bad in (float("nan"), float("inf"), {"a": [float("-inf")]}):
        with pytest.raises(ValueError):
            canonicalize(bad)
    with pytest.raises(ValueError):
        canonicalize({"amount": 2**53 + 1})
    with pytest.raises(TypeError):
        canonicalize({1: "x"})
    with pytest.raises(TypeError):
        canonicalize({"when": datetime.now(timezone.utc)})
    with pytest.raises(TypeError):
        canonicalize(b"bytes")
    print("  PASS: test_canonicalize_errors")


# ==================================================================
# 2. Crypto primitives
# ==================================================================

def test_sign_verify():
    priv, pub = generate_keypair()
    sig = sign_bytes(priv, b"payload")
    assert verify_signature(pub, b"payload", sig)
    assert not verify_signature(pub, b"tampered", sig)
    assert not verify_signature(pub, b"payload", "00")
    assert not verify_signature(pub, b"payload", "not-hex")
    _, other = generate_keypair()
    assert not verify_signature(other, b"payload", sig)
    print("  PASS: test_sign_verify")


def test_key_serialization():
    priv, pub = generate_keypair()
    restored = private_key_from_pem(private_key_to_pem(priv))
    assert public_key_to_hex(restored.public_key()) == public_key_to_hex(pub)

    pub_hex = public_key_to_hex(pub)
    assert len(pub_hex) == 66 and pub_hex[:2] in ("02", "03")
    sig = sign_bytes(priv, b"x")
    assert verify_signature(public_key_from_hex(pub_hex), b"x", sig)
    print("  PASS: test_key_serialization")


def test_private_key_from_hex():
    hex_key = "0x" + "01" * 32
    a = private_key_from_hex(hex_key)
    b = private_key_from_hex("01" * 32)
    assert public_key_to_hex(a.public_key()) == public_key_to_hex(b.public_key())
    with pytest.raises(ValueError):
        private_key_from_hex("abcd")
    print("  PASS: test_private_key_from_hex")


def test_sha256():
    assert sha256_hex(b"") == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
    print("  PASS: test_sha256")


# ==================================================================
# 3. Messages and sign documents
# ==================================================================

def test_put_policy_msg_validation():
    msg = _put_msg()
    assert msg.type_url == "/greenfield.storage.MsgPutPolicy"
    with pytest.raises(ValidationError):
        _put_msg(operator="0x1")
    with pytest.raises(ValidationError):
        _put_msg(resource="bucket")
    with pytest.raises(ValidationError):
        _put_msg(statements=[])
    print("  PASS: test_put_policy_msg_validation")


def test_delete_policy_msg():
    msg = MsgDeletePolicy(
        operator=OPERATOR,
        resource=object_grn("bkt", "a/b.txt"),
        principal=new_principal_with_group_id(3),
    )
    assert msg.type_url == "/greenfield.storage.MsgDeletePolicy"
    print("  PASS: test_delete_policy_msg")


def test_sign_doc_shape():
    expires = datetime(2030, 1, 1, tzinfo=timezone.utc)
    doc = sign_doc(_put_msg(expiration_time=expires), "greenfield_1017-1", account_number=7, sequence=3)
    parsed = json.loads(doc)
    assert list(parsed) == ["account_number", "chain_id", "memo", "msgs", "sequence"]
    assert parsed["account_number"] == "7"
    assert parsed["sequence"] == "3"
    assert parsed["chain_id"] == "greenfield_1017-1"
    value = parsed["msgs"][0]["value"]
    assert parsed["msgs"][0]["type"] == "/greenfield.storage.MsgPutPolicy"
    assert value["principal"] == {"type": 1, "value": GRANTEE}
    assert value["statements"] == [{"effect": 1, "actions": [6, 8], "resources": []}]
    assert value["expiration_time"].startswith("2030-01-01T00:00:00")
    assert canonicalize(parsed) == doc
    print("  PASS: test_sign_doc_shape")


def test_sign_doc_is_deterministic():
    msg = _put_msg()
    assert sign_doc(msg, "c", 1, 1) == sign_doc(msg, "c", 1, 1)
    assert sign_doc(msg, "c", 1, 1) != sign_doc(msg, "c", 1, 2)
    print("  PASS: test_sign_doc_is_deterministic")


def test_sign_doc_rejects_bad_identity():
    with pytest.raises(ValueError):
        sign_doc(_put_msg(), "", 0, 0)
    with pytest.raises(ValueError):
        sign_doc(_put_msg(), "c", -1, 0)
    print("  PASS: test_sign_doc_rejects_bad_identity")


def test_signed_tx():
    priv, pub = generate_keypair()
    doc = sign_doc(_put_msg(), "c", 0, 0)
    tx = SignedTx(
        msg_type=MsgPutPolicy.type_url,
        sign_doc=doc.decode("utf-8"),
        signature=sign_bytes(priv, doc),
        public_key=public_key_to_hex(pub),
    )
    assert tx.digest() == sha256_hex(doc)
    assert verify_signature(public_key_from_hex(tx.public_key), tx.sign_doc.encode("utf-8"), tx.signature)
    with pytest.raises(ValidationError):
        SignedTx(msg_type="x", sign_doc="{}", signature="XYZ", public_key="00")
    print("  PASS: test_signed_tx")


def run_all():
    print("=" * 60)
    print("Transaction Test Suite")
    print("=" * 60)

    print("\n--- 1. Canonical JSON ---")
    test_canonicalize_sorts_keys_and_compacts()
    test_canonicalize_unicode_passthrough()
    test_canonicalize_errors()

    print("\n--- 2. Crypto Primitives ---")
    test_sign_verify()
    test_key_serialization()
    test_private_key_from_hex()
    test_sha256()

    print("\n--- 3. Messages ---")
    test_put_policy_msg_validation()
    test_delete_policy_msg()
    test_sign_doc_shape()
    test_sign_doc_is_deterministic()
    test_sign_doc_rejects_bad_identity()
    test_signed_tx()

    print("\n" + "=" * 60)
    print("ALL TESTS PASSED")
    print("=" * 60)


if __name__ == "__main__":
    run_all()
