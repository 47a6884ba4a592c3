"""RS256 JWT issuance and verification."""

import binascii
import json
from datetime import UTC, datetime, timedelta

import jwt
import uuid_utils
from jwt.utils import base64url_decode, base64url_encode
from pydantic import ValidationError

from tokenmint.core.logging import get_logger
from tokenmint.core.settings import ISSUER_DEFAULT, SECONDS_TO_EXPIRATION_DEFAULT
from tokenmint.crypto.errors import (
    Expired,
    InvalidInput,
    IssuerMismatch,
    KeyLoadError,
    MalformedToken,
    NotYetValid,
    SignatureInvalid,
    SigningError,
    TokenVerificationError,
)
from tokenmint.crypto.keys import KeyProvider
from tokenmint.crypto.types import ClaimSet, OptionalClaims

ALGORITHM = "RS256"
REQUIRED_CLAIMS = ["iss", "sub", "jti", "iat", "nbf", "exp"]
TOKEN_SEGMENTS = 3

logger = get_logger("tokenmint.crypto.token_engine")


def _decode_json_segment(segment: str, name: str) -> dict[str, object]:
    """Decode a base64url JSON object segment or raise MalformedToken."""
    try:
        value = json.loads(base64url_decode(segment))
    except (binascii.Error, TypeError, ValueError) as exc:
        raise MalformedToken(f"undecodable {name} segment: {exc}") from exc
    if not isinstance(value, dict):
        raise MalformedToken(f"{name} segment must be a JSON object")
    return value


def _check_signature_encoding(segment: str) -> None:
    """Reject a signature segment that is not canonical unpadded base64url."""
    try:
        signature = base64url_decode(segment)
    except (binascii.Error, TypeError, ValueError) as exc:
        raise SignatureInvalid(f"undecodable signature segment: {exc}") from exc
    # lenient base64 ignores stray characters and padding bits
    if base64url_encode(signature).decode("ascii") != segment:
        raise SignatureInvalid("signature segment is not canonical base64url")


class TokenEngine:
    """Issues and verifies RS256-signed JWTs using a loaded KeyProvider.

    The engine holds no per-call state. ``issuer`` and ``lifetime_seconds``
    are defaults for :meth:`issue` and :meth:`verify`; every call may
    override them explicitly.
    """

    def __init__(
        self,
        keys: KeyProvider,
        issuer: str = ISSUER_DEFAULT,
        lifetime_seconds: int = SECONDS_TO_EXPIRATION_DEFAULT,
        leeway_seconds: int = 0,
    ) -> None:
        if not keys.ready:
            raise KeyLoadError("key provider has not loaded a key pair")
        if not issuer:
            raise ValueError("issuer must not be empty")
        if lifetime_seconds <= 0:
            raise ValueError("lifetime_seconds must be positive")
        self._keys = keys
        self._issuer = issuer
        self._lifetime_seconds = lifetime_seconds
        self._leeway = timedelta(seconds=leeway_seconds)

    @property
    def issuer(self) -> str:
        return self._issuer

    @property
    def lifetime_seconds(self) -> int:
        return self._lifetime_seconds

    def issue(
        self,
        subject: str,
        issuer: str | None = None,
        lifetime_seconds: int | None = None,
        claims: OptionalClaims | None = None,
    ) -> str:
        """Create a signed RS256 JWT for ``subject``.

        Optional profile claims are only encoded when non-empty.

        Raises:
            ValueError: subject or issuer is empty, or lifetime is not positive.
            SigningError: no private key is available or signing failed.
        """
        issuer = self._issuer if issuer is None else issuer
        ttl = self._lifetime_seconds if lifetime_seconds is None else lifetime_seconds
        if not subject:
            raise ValueError("subject must not be empty")
        if not issuer:
            raise ValueError("issuer must not be empty")
        if ttl <= 0:
            raise ValueError("lifetime_seconds must be positive")

        private_key = self._keys.private_key
        if private_key is None:
            logger.error("token_signing_failed", error="no private key loaded")
            raise SigningError("no private key loaded; provider is verify-only")

        now = datetime.now(UTC).replace(microsecond=0)
        jti = str(uuid_utils.uuid4())
        payload: dict[str, object] = {
            "iss": issuer,
            "sub": subject,
            "jti": jti,
            "nbf": now,
            "iat": now,
            "exp": now + timedelta(seconds=ttl),
        }
        if claims is not None:
            for name, value in claims.model_dump().items():
                if value:
                    payload[name] = value

        try:
            token = jwt.encode(payload, private_key, algorithm=ALGORITHM)
        except (jwt.PyJWTError, ValueError, TypeError) as exc:
            logger.error("token_signing_failed", error=str(exc))
            raise SigningError(f"unable to sign token: {exc}") from exc

        logger.debug("token_issued", sub=subject, iss=issuer, jti=jti)
        return token

    def verify(self, token: object, expected_issuer: str | None = None) -> ClaimSet:
        """Verify an RS256 JWT and return its claims.

        Raises a TokenVerificationError subclass naming the first check
        that failed: InvalidInput, MalformedToken, SignatureInvalid,
        Expired, NotYetValid, or IssuerMismatch.
        """
        if token is None:
            raise InvalidInput("token cannot be None")
        if not isinstance(token, str):
            raise InvalidInput(f"token must be a string, got {type(token).__name__}")
        if not token.strip():
            raise InvalidInput("token cannot be empty")
        if token.count(".") != TOKEN_SEGMENTS - 1:
            raise MalformedToken(
                f"token must have {TOKEN_SEGMENTS} dot-separated segments"
            )
        header_segment, payload_segment, signature_segment = token.split(".")
        _decode_json_segment(header_segment, "header")
        _decode_json_segment(payload_segment, "payload")
        _check_signature_encoding(signature_segment)

        issuer = self._issuer if expected_issuer is None else expected_issuer
        try:
            raw = jwt.decode(
                token,
                self._keys.public_key,
                algorithms=[ALGORITHM],
                issuer=issuer,
                leeway=self._leeway,
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.InvalidSignatureError as exc:
            raise SignatureInvalid(str(exc)) from exc
        except jwt.InvalidAlgorithmError as exc:
            raise SignatureInvalid(str(exc)) from exc
        except jwt.ExpiredSignatureError as exc:
            raise Expired(str(exc)) from exc
        except jwt.ImmatureSignatureError as exc:
            raise NotYetValid(str(exc)) from exc
        except jwt.InvalidIssuerError as exc:
            raise IssuerMismatch(str(exc)) from exc
        except jwt.DecodeError as exc:
            # header and payload already decoded, so only the signature is left
            raise SignatureInvalid(str(exc)) from exc
        except jwt.InvalidTokenError as exc:
            raise MalformedToken(str(exc)) from exc

        try:
            return ClaimSet.model_validate(raw)
        except ValidationError as exc:
            raise MalformedToken(f"unexpected claim types: {exc}") from exc

    def is_valid(self, token: object, expected_issuer: str | None = None) -> bool:
        """Return True if ``token`` verifies, logging the reason when not."""
        try:
            self.verify(token, expected_issuer)
        except TokenVerificationError as exc:
            logger.info("token_invalid", reason=exc.reason.value, detail=exc.detail)
            return False
        return True
