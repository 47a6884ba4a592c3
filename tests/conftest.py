"""Shared test fixtures for tokenmint."""

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from tokenmint.crypto.keys import KeyProvider
from tokenmint.crypto.token_engine import TokenEngine
from tokenmint.crypto.types import KeyPair

ISSUER = "https://a.example/"
RSA_KEY_SIZE = 2048
RSA_PUBLIC_EXPONENT = 65537


def generate_pem_pair() -> tuple[str, str]:
    """Generate a throwaway RSA-2048 keypair as (private PKCS#8, public SPKI) PEM."""
    private_key = rsa.generate_private_key(
        public_exponent=RSA_PUBLIC_EXPONENT,
        key_size=RSA_KEY_SIZE,
    )
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    public_pem = (
        private_key.public_key()
        .public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode()
    )
    return private_pem, public_pem


@pytest.fixture(scope="session")
def pem_pair() -> tuple[str, str]:
    """One keypair shared across the session; RSA generation is slow."""
    return generate_pem_pair()


@pytest.fixture
def private_pem(pem_pair: tuple[str, str]) -> str:
    return pem_pair[0]


@pytest.fixture
def public_pem(pem_pair: tuple[str, str]) -> str:
    return pem_pair[1]


@pytest.fixture
def key_provider(private_pem: str, public_pem: str) -> KeyProvider:
    provider = KeyProvider()
    provider.load(public_pem, private_pem)
    return provider


@pytest.fixture
def key_pair(key_provider: KeyProvider) -> KeyPair:
    return key_provider.key_pair


@pytest.fixture
def engine(key_provider: KeyProvider) -> TokenEngine:
    return TokenEngine(key_provider, issuer=ISSUER, lifetime_seconds=60)


@pytest.fixture(scope="session")
def other_pem_pair() -> tuple[str, str]:
    """A second, unrelated keypair for wrong-key checks."""
    return generate_pem_pair()
