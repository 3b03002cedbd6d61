"""
Session and registry errors.

Every failure surfaces synchronously to the caller as one of these; a failed
mutating call leaves state untouched.
"""


class SSOError(Exception):
    """Base error for session and registry operations."""

    code = "SSO_ERROR"

    def __init__(self, message: str = "", code: str | None = None):
        self.message = message or self.__class__.__doc__ or self.code
        if code:
            self.code = code
        super().__init__(self.message)


class InvalidInput(SSOError):
    """Input rejected (empty id, zero or out-of-range duration, malformed address)."""

    code = "INVALID_INPUT"


class DurationExceedsMax(InvalidInput):
    """Requested duration exceeds the maximum session duration."""

    code = "DURATION_EXCEEDS_MAX"


class Unauthorized(SSOError):
    """Caller is not allowed to perform this operation."""

    code = "UNAUTHORIZED"


class SignatureInvalid(SSOError):
    """Session signature could not be verified."""

    code = "SIGNATURE_INVALID"


class InvalidSignatureFormat(SignatureInvalid):
    """Signature is not a valid 65-byte secp256k1 signature."""

    code = "INVALID_SIGNATURE_FORMAT"


class SignatureMismatch(SignatureInvalid):
    """Signature was produced by a different key than the claimed wallet."""

    code = "SIGNATURE_MISMATCH"

    def __init__(self, expected: str, recovered: str):
        self.expected = expected
        self.recovered = recovered
        super().__init__(f"Signer {recovered} does not match wallet {expected}")


class SessionInvalid(SSOError):
    """Session is absent, disconnected or expired."""

    code = "SESSION_INVALID"


class DappUnavailable(SSOError):
    """dApp cannot accept connections."""

    code = "DAPP_UNAVAILABLE"

    def __init__(self, dapp_id: str, message: str = ""):
        self.dapp_id = dapp_id
        super().__init__(message)


class DappNotVerified(DappUnavailable):
    """dApp is not verified."""

    code = "DAPP_NOT_VERIFIED"

    def __init__(self, dapp_id: str):
        super().__init__(dapp_id, f"dApp {dapp_id!r} is not verified")


class DappNotActive(DappUnavailable):
    """dApp is deactivated."""

    code = "DAPP_NOT_ACTIVE"

    def __init__(self, dapp_id: str):
        super().__init__(dapp_id, f"dApp {dapp_id!r} is not active")


class DappNotConnected(Unauthorized):
    """Wallet has not connected to this dApp in its current session."""

    code = "DAPP_NOT_CONNECTED"

    def __init__(self, dapp_id: str):
        self.dapp_id = dapp_id
        super().__init__(f"Wallet is not connected to dApp {dapp_id!r}")


class DappAlreadyRegistered(SSOError):
    """An active dApp is already registered under this id."""

    code = "DAPP_ALREADY_REGISTERED"

    def __init__(self, dapp_id: str):
        self.dapp_id = dapp_id
        super().__init__(f"dApp {dapp_id!r} is already registered")


class ReentrantCall(SSOError):
    """Session creation was re-entered before the outer call finished."""

    code = "REENTRANT_CALL"


class ExecutorUnavailable(SSOError):
    """No transaction executor could be reached."""

    code = "EXECUTOR_UNAVAILABLE"
