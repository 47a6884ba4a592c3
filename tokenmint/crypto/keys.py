"""RSA key loading from PEM material for JWT signing and verification."""

import base64
import binascii
import threading
from pathlib import Path

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey

from tokenmint.core.logging import get_logger
from tokenmint.crypto.errors import KeyLoadError
from tokenmint.crypto.types import KeyPair

PRIVATE_KEY_LABEL = "PRIVATE KEY"
PUBLIC_KEY_LABEL = "PUBLIC KEY"

logger = get_logger("tokenmint.crypto.keys")


def _pem_body(pem: str | bytes | None, label: str) -> bytes:
    """Strip the PEM armor for ``label`` and base64-decode the body."""
    if not pem:
        raise KeyLoadError(f"{label.lower()} material is missing")
    if isinstance(pem, bytes):
        try:
            text = pem.decode("ascii")
        except UnicodeDecodeError as exc:
            raise KeyLoadError(
                f"{label.lower()} contains non-ASCII bytes: {exc}"
            ) from exc
    else:
        text = pem
    body = (
        text.replace(f"-----BEGIN {label}-----", "")
        .replace(f"-----END {label}-----", "")
        .replace("\r", "")
        .replace("\n", "")
        .strip()
    )
    if not body:
        raise KeyLoadError(f"{label.lower()} material is empty")
    try:
        return base64.b64decode(body, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise KeyLoadError(f"{label.lower()} is not valid base64: {exc}") from exc


def load_private_key(pem: str | bytes | None) -> RSAPrivateKey:
    """Parse a PKCS#8 PEM-encoded RSA private key."""
    der = _pem_body(pem, PRIVATE_KEY_LABEL)
    try:
        key = serialization.load_der_private_key(der, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise KeyLoadError(f"invalid PKCS#8 private key: {exc}") from exc
    if not isinstance(key, RSAPrivateKey):
        raise KeyLoadError(f"private key is {type(key).__name__}, not RSA")
    return key


def load_public_key(pem: str | bytes | None) -> RSAPublicKey:
    """Parse an X.509 SubjectPublicKeyInfo PEM-encoded RSA public key."""
    der = _pem_body(pem, PUBLIC_KEY_LABEL)
    try:
        key = serialization.load_der_public_key(der)
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise KeyLoadError(f"invalid SubjectPublicKeyInfo public key: {exc}") from exc
    if not isinstance(key, RSAPublicKey):
        raise KeyLoadError(f"public key is {type(key).__name__}, not RSA")
    return key


def read_key_material(path: str | Path) -> bytes:
    """Read PEM key material from a file."""
    key_path = Path(path)
    try:
        return key_path.read_bytes()
    except FileNotFoundError as exc:
        raise KeyLoadError(f"key file not found: {key_path}") from exc
    except OSError as exc:
        raise KeyLoadError(f"cannot read key file {key_path}: {exc}") from exc


class KeyProvider:
    """Holds the RSA keypair used by the token engine.

    Keys are published by :meth:`load`, which may be called again to swap in
    a new pair. Until the first successful load the provider is not ready
    and key access raises :class:`KeyLoadError`.
    """

    def __init__(self) -> None:
        self._pair: KeyPair | None = None
        self._ready = threading.Event()

    def load(
        self,
        public_key_pem: str | bytes | None,
        private_key_pem: str | bytes | None = None,
    ) -> KeyPair:
        """Parse and publish a keypair; omit the private key for verify-only."""
        try:
            public_key = load_public_key(public_key_pem)
            private_key = (
                load_private_key(private_key_pem)
                if private_key_pem is not None
                else None
            )
        except KeyLoadError as exc:
            logger.error("key_load_failed", error=str(exc))
            raise
        pair = KeyPair(public_key=public_key, private_key=private_key)
        self._pair = pair
        self._ready.set()
        logger.info(
            "key_pair_loaded",
            key_size=public_key.key_size,
            can_sign=private_key is not None,
        )
        return pair

    def load_files(
        self,
        public_key_path: str | Path,
        private_key_path: str | Path | None = None,
    ) -> KeyPair:
        """Read key files from disk and publish them."""
        try:
            public_pem = read_key_material(public_key_path)
            private_pem = (
                read_key_material(private_key_path) if private_key_path else None
            )
        except KeyLoadError as exc:
            logger.error("key_load_failed", error=str(exc))
            raise
        return self.load(public_pem, private_pem)

    @property
    def ready(self) -> bool:
        """Whether a keypair has been published."""
        return self._ready.is_set()

    def wait_ready(self, timeout: float | None = None) -> bool:
        """Block until a keypair is published or ``timeout`` elapses."""
        return self._ready.wait(timeout)

    @property
    def key_pair(self) -> KeyPair:
        """The published keypair; raises KeyLoadError before the first load."""
        pair = self._pair
        if pair is None:
            raise KeyLoadError("key pair has not been loaded")
        return pair

    @property
    def public_key(self) -> RSAPublicKey:
        """Verification key of the published pair."""
        return self.key_pair.public_key

    @property
    def private_key(self) -> RSAPrivateKey | None:
        """Signing key of the published pair, or None when verify-only."""
        return self.key_pair.private_key
