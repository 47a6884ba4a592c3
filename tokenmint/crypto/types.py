"""Type definitions for key material and JWT claim sets."""

from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey
from pydantic import BaseModel, ConfigDict, field_validator


class KeyPair(BaseModel):
    """An RSA keypair; the private half is absent for verify-only use."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    public_key: RSAPublicKey
    private_key: RSAPrivateKey | None = None


class OptionalClaims(BaseModel):
    """Profile claims a caller may attach to an issued token."""

    email: str | None = None
    given_name: str | None = None
    family_name: str | None = None


class ClaimSet(BaseModel):
    """Decoded and verified JWT claims.

    Profile claims missing from the token read as None but are left out of
    ``model_fields_set`` and :meth:`present_claims`; an explicit JSON null
    for them is rejected.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    iss: str
    sub: str
    jti: str
    iat: int
    nbf: int
    exp: int
    email: str | None = None
    given_name: str | None = None
    family_name: str | None = None

    @field_validator("email", "given_name", "family_name", mode="before")
    @classmethod
    def _reject_null(cls, value: object) -> object:
        if value is None:
            raise ValueError("claim must be omitted rather than null")
        return value

    def present_claims(self) -> dict[str, object]:
        """Return only the claims the token actually carried."""
        return {**self.model_dump(exclude_unset=True), **(self.model_extra or {})}

    @property
    def lifetime_seconds(self) -> int:
        """Seconds between issuance and expiry."""
        return self.exp - self.iat
