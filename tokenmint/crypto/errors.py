"""Exception hierarchy for key loading, signing, and token verification."""

from enum import StrEnum


class FailureReason(StrEnum):
    """Stable reason codes for a failed token verification."""

    INVALID_INPUT = "invalid_input"
    MALFORMED_TOKEN = "malformed_token"
    SIGNATURE_INVALID = "signature_invalid"
    EXPIRED = "expired"
    NOT_YET_VALID = "not_yet_valid"
    ISSUER_MISMATCH = "issuer_mismatch"


class TokenError(Exception):
    """Base class for every error raised by tokenmint."""


class KeyLoadError(TokenError):
    """Key material is missing, malformed, or not an RSA key."""


class SigningError(TokenError):
    """A token could not be signed."""


class TokenVerificationError(TokenError):
    """A token failed verification."""

    reason: FailureReason

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class InvalidInput(TokenVerificationError):
    """The token was None, not a string, or empty."""

    reason = FailureReason.INVALID_INPUT


class MalformedToken(TokenVerificationError):
    """The token is not a well-formed compact JWS with the required claims."""

    reason = FailureReason.MALFORMED_TOKEN


class SignatureInvalid(TokenVerificationError):
    """The signature does not verify with the public key and RS256."""

    reason = FailureReason.SIGNATURE_INVALID


class Expired(TokenVerificationError):
    """The current time is past the token's exp claim."""

    reason = FailureReason.EXPIRED


class NotYetValid(TokenVerificationError):
    """The current time is before the token's nbf claim."""

    reason = FailureReason.NOT_YET_VALID


class IssuerMismatch(TokenVerificationError):
    """The token's iss claim is not the expected issuer."""

    reason = FailureReason.ISSUER_MISMATCH
