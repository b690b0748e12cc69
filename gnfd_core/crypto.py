"""
gnfd_core/crypto.py — Local signing primitives.

Uses the `cryptography` library exclusively. No custom crypto.
- SHA-256 for digests
- ECDSA over secp256k1 (the chain's account key curve) for signatures

This is a concrete `sign(bytes) -> signature` for examples, tests and
simple scripts. Key derivation from mnemonics and keystore files is out
of scope.
"""

from __future__ import annotations

import hashlib

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec


def sha256_hex(data: bytes) -> str:
    """Compute SHA-256 hash and return as lowercase hex string."""
    return hashlib.sha256(data).hexdigest()


# ---------------------------------------------------------------------------
# Key management
# ---------------------------------------------------------------------------

def generate_keypair() -> tuple[ec.EllipticCurvePrivateKey, ec.EllipticCurvePublicKey]:
    """Generate a new secp256k1 keypair."""
    private_key = ec.generate_private_key(ec.SECP256K1())
    return private_key, private_key.public_key()


def private_key_from_hex(hex_key: str) -> ec.EllipticCurvePrivateKey:
    """Load a raw 32-byte private key given as hex (0x prefix optional)."""
    raw = hex_key[2:] if hex_key.startswith("0x") else hex_key
    if len(raw) != 64:
        raise ValueError("private key must be 32 bytes of hex")
    return ec.derive_private_key(int(raw, 16), ec.SECP256K1())


def private_key_to_pem(key: ec.EllipticCurvePrivateKey) -> bytes:
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


def private_key_from_pem(pem_data: bytes) -> ec.EllipticCurvePrivateKey:
    key = serialization.load_pem_private_key(pem_data, password=None)
    if not isinstance(key, ec.EllipticCurvePrivateKey) or key.curve.name != "secp256k1":
        raise TypeError("Not a secp256k1 private key")
    return key


def public_key_to_hex(key: ec.EllipticCurvePublicKey) -> str:
    """Compressed SEC1 point (33 bytes) as hex."""
    return key.public_bytes(
        encoding=serialization.Encoding.X962,
        format=serialization.PublicFormat.CompressedPoint,
    ).hex()


def public_key_from_hex(hex_key: str) -> ec.EllipticCurvePublicKey:
    return ec.EllipticCurvePublicKey.from_encoded_point(
        ec.SECP256K1(), bytes.fromhex(hex_key)
    )


# ---------------------------------------------------------------------------
# Signing and verification
# ---------------------------------------------------------------------------

def sign_bytes(private_key: ec.EllipticCurvePrivateKey, data: bytes) -> str:
    """Sign data with ECDSA/SHA-256. Returns hex-encoded DER signature."""
    return private_key.sign(data, ec.ECDSA(hashes.SHA256())).hex()


def verify_signature(
    public_key: ec.EllipticCurvePublicKey, data: bytes, signature_hex: str
) -> bool:
    """Returns True if the signature is valid, False otherwise."""
    try:
        public_key.verify(bytes.fromhex(signature_hex), data, ec.ECDSA(hashes.SHA256()))
        return True
    except (InvalidSignature, ValueError):
        return False
