"""Startup wiring: settings, logging, key loading, and engine construction."""

from tokenmint.core.logging import configure_logging
from tokenmint.core.settings import TokenSettings
from tokenmint.crypto.keys import KeyProvider
from tokenmint.crypto.token_engine import TokenEngine


def build_token_engine(settings: TokenSettings | None = None) -> TokenEngine:
    """Load the configured keys and return a ready TokenEngine.

    Raises KeyLoadError when key material is missing or invalid; callers
    should let it abort startup.
    """
    settings = settings or TokenSettings()
    configure_logging(settings.log_level, json_logs=settings.log_json)

    provider = KeyProvider()
    provider.load_files(
        public_key_path=settings.public_key_path,
        private_key_path=settings.private_key_path or None,
    )
    return TokenEngine(
        provider,
        issuer=settings.issuer,
        lifetime_seconds=settings.seconds_to_expiration,
        leeway_seconds=settings.leeway_seconds,
    )
