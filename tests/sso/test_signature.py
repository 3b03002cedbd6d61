from eth_account import Account
from eth_account.messages import encode_defunct
from eth_utils import keccak
import pytest

from dapp_sso.sso.errors import InvalidInput, InvalidSignatureFormat, SignatureMismatch
from dapp_sso.sso.signature import (
    SignatureVerifier,
    decode_signature,
    session_digest,
    sign_session,
)

WALLET_KEY = "0x" + "02" * 32
OTHER_KEY = "0x" + "03" * 32


@pytest.fixture
def wallet():
    return Account.from_key(WALLET_KEY)


def test_session_digest_packs_fields_in_order(wallet) -> None:
    packed = (
        bytes.fromhex(wallet.address[2:])
        + (7).to_bytes(32, "big")
        + (1_700_003_600).to_bytes(32, "big")
        + (1).to_bytes(32, "big")
    )

    assert session_digest(wallet.address, 7, 1_700_003_600, 1) == keccak(packed)


def test_session_digest_ignores_address_case(wallet) -> None:
    lower = session_digest(wallet.address.lower(), 0, 100, 1)
    checksummed = session_digest(wallet.address, 0, 100, 1)

    assert lower == checksummed


def test_session_digest_rejects_negative_values(wallet) -> None:
    with pytest.raises(InvalidInput):
        session_digest(wallet.address, -1, 100, 1)


def test_verify_accepts_wallet_signature(wallet) -> None:
    verifier = SignatureVerifier(chain_id=1)
    signature = sign_session(WALLET_KEY, 0, 1_700_003_600, 1)

    assert verifier.verify(wallet.address, 0, 1_700_003_600, signature) is True


def test_verify_accepts_raw_bytes_and_unprefixed_hex(wallet) -> None:
    verifier = SignatureVerifier(chain_id=1)
    signature = sign_session(WALLET_KEY, 3, 500, 1)

    assert verifier.verify(wallet.address, 3, 500, bytes.fromhex(signature[2:]))
    assert verifier.verify(wallet.address, 3, 500, signature[2:])


def test_signature_is_eip191_personal_message(wallet) -> None:
    digest = session_digest(wallet.address, 0, 500, 1)
    signed = Account.sign_message(encode_defunct(primitive=digest), private_key=WALLET_KEY)

    verifier = SignatureVerifier(chain_id=1)
    assert verifier.verify(wallet.address, 0, 500, bytes(signed.signature))


def test_verify_rejects_other_signer(wallet) -> None:
    verifier = SignatureVerifier(chain_id=1)
    signature = sign_session(OTHER_KEY, 0, 500, 1)

    with pytest.raises(SignatureMismatch) as exc_info:
        verifier.verify(wallet.address, 0, 500, signature)

    assert exc_info.value.expected == wallet.address
    assert exc_info.value.recovered == Account.from_key(OTHER_KEY).address


@pytest.mark.parametrize(
    "nonce, expiry, chain_id",
    [
        (1, 500, 1),     # stale or future nonce
        (0, 501, 1),     # different expiry
        (0, 500, 137),   # other network
    ],
)
def test_verify_binds_every_field(wallet, nonce, expiry, chain_id) -> None:
    signature = sign_session(WALLET_KEY, 0, 500, 1)
    verifier = SignatureVerifier(chain_id=chain_id)

    with pytest.raises(SignatureMismatch):
        verifier.verify(wallet.address, nonce, expiry, signature)


@pytest.mark.parametrize(
    "signature",
    [
        "",
        "0x",
        "not-hex",
        "0x" + "11" * 64,                      # 64 bytes
        "0x" + "11" * 66,                      # 66 bytes
        "0x" + "00" * 32 + "11" * 32 + "1b",   # r == 0
        "0x" + "11" * 32 + "00" * 32 + "1b",   # s == 0
        "0x" + "11" * 32 + "ff" * 32 + "1b",   # high s
        "0x" + "11" * 32 + "11" * 32 + "05",   # bad v
    ],
)
def test_decode_signature_rejects_malformed_input(signature) -> None:
    with pytest.raises(InvalidSignatureFormat):
        decode_signature(signature)


def test_decode_signature_rejects_non_text_input() -> None:
    with pytest.raises(InvalidSignatureFormat):
        decode_signature(12345)


def test_malformed_signature_is_distinct_from_mismatch(wallet) -> None:
    verifier = SignatureVerifier(chain_id=1)

    with pytest.raises(InvalidSignatureFormat) as exc_info:
        verifier.verify(wallet.address, 0, 500, "0x1234")

    assert not isinstance(exc_info.value, SignatureMismatch)


def test_verify_rejects_malformed_wallet() -> None:
    verifier = SignatureVerifier(chain_id=1)
    signature = sign_session(WALLET_KEY, 0, 500, 1)

    with pytest.raises(InvalidInput):
        verifier.verify("0x1234", 0, 500, signature)
