"""
Session signature digest, recovery and verification.

A wallet opens a session by signing, as an EIP-191 personal message, the
32-byte digest

    keccak256(wallet[20] || nonce[32] || expiry[32] || chain_id[32])

where the integers are big-endian and ``nonce`` is the wallet's nonce *before*
the session is created. Binding the nonce makes each signature single-use;
binding the chain id stops replay across networks.
"""

from __future__ import annotations

from typing import Union

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_keys.exceptions import BadSignature
from eth_utils import ValidationError, keccak, to_canonical_address

from .address import normalize_wallet
from .errors import InvalidInput, InvalidSignatureFormat, SignatureMismatch

SignatureInput = Union[str, bytes]

SIGNATURE_LENGTH = 65
UINT256_MAX = 2**256 - 1

# secp256k1 group order
_SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
_VALID_V = {0, 1, 27, 28}


def _encode_uint256(name: str, value: int) -> bytes:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInput(f"{name} must be an integer")
    if value < 0 or value > UINT256_MAX:
        raise InvalidInput(f"{name} out of uint256 range: {value}")
    return value.to_bytes(32, "big")


def session_digest(wallet: str, nonce: int, expiry: int, chain_id: int) -> bytes:
    """Canonical digest a wallet signs to open a session."""
    packed = (
        to_canonical_address(normalize_wallet(wallet))
        + _encode_uint256("nonce", nonce)
        + _encode_uint256("expiry", expiry)
        + _encode_uint256("chain_id", chain_id)
    )
    return keccak(packed)


def decode_signature(signature: SignatureInput) -> bytes:
    """
    Parse a 65-byte ``r || s || v`` signature.

    Accepts raw bytes or a hex string (with or without ``0x``). Rejects
    out-of-range ``r``/``s``, high-``s`` (malleable) forms and unknown ``v``.
    """
    if isinstance(signature, str):
        candidate = signature.strip()
        if candidate[:2].lower() == "0x":
            candidate = candidate[2:]
        try:
            raw = bytes.fromhex(candidate)
        except ValueError as exc:
            raise InvalidSignatureFormat("Signature is not valid hex") from exc
    elif isinstance(signature, (bytes, bytearray)):
        raw = bytes(signature)
    else:
        raise InvalidSignatureFormat("Signature must be hex text or bytes")

    if len(raw) != SIGNATURE_LENGTH:
        raise InvalidSignatureFormat(
            f"Signature must be {SIGNATURE_LENGTH} bytes, got {len(raw)}"
        )

    r = int.from_bytes(raw[:32], "big")
    s = int.from_bytes(raw[32:64], "big")
    v = raw[64]
    if not 0 < r < _SECP256K1_N:
        raise InvalidSignatureFormat("Signature r value out of range")
    if not 0 < s <= _SECP256K1_N // 2:
        raise InvalidSignatureFormat("Signature s value out of range")
    if v not in _VALID_V:
        raise InvalidSignatureFormat(f"Signature v value {v} is invalid")
    return raw


class SignatureVerifier:
    """Recovers the signer of a session digest and compares it to the wallet."""

    def __init__(self, chain_id: int):
        self.chain_id = chain_id

    def digest(self, wallet: str, nonce: int, expiry: int) -> bytes:
        return session_digest(wallet, nonce, expiry, self.chain_id)

    def recover(self, wallet: str, nonce: int, expiry: int, signature: SignatureInput) -> str:
        """Return the checksummed address that signed the session digest."""
        raw = decode_signature(signature)
        message = encode_defunct(primitive=self.digest(wallet, nonce, expiry))
        try:
            return Account.recover_message(message, signature=raw)
        except (BadSignature, ValidationError, ValueError) as exc:
            raise InvalidSignatureFormat(f"Signature recovery failed: {exc}") from exc

    def verify(self, wallet: str, nonce: int, expiry: int, signature: SignatureInput) -> bool:
        """
        Check that ``wallet`` signed ``(wallet, nonce, expiry, chain_id)``.

        Returns:
            True when the recovered signer is ``wallet``

        Raises:
            InvalidSignatureFormat: signature cannot be parsed or recovered
            SignatureMismatch: signature belongs to another key
        """
        expected = normalize_wallet(wallet)
        recovered = self.recover(expected, nonce, expiry, signature)
        if recovered != expected:
            raise SignatureMismatch(expected=expected, recovered=recovered)
        return True


def sign_session(
    private_key: str | bytes,
    nonce: int,
    expiry: int,
    chain_id: int,
) -> str:
    """Produce the ``0x``-prefixed session signature for the key's own address."""
    account = Account.from_key(private_key)
    digest = session_digest(account.address, nonce, expiry, chain_id)
    signed = Account.sign_message(encode_defunct(primitive=digest), private_key=private_key)
    return "0x" + bytes(signed.signature).hex()
