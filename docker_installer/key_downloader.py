"""Signing key downloader."""

import hashlib
import logging

import requests

from docker_installer.errors import TransientNetworkError

logger = logging.getLogger(__name__)

PGP_KEY_HEADER = "-----BEGIN PGP PUBLIC KEY BLOCK-----"
PGP_KEY_FOOTER = "-----END PGP PUBLIC KEY BLOCK-----"


class KeyDownloader:
    """Downloads ASCII-armored repository signing keys over HTTPS."""

    def __init__(self, timeout: int = 30, session: requests.Session | None = None):
        """Initialize the key downloader.

        Args:
            timeout: Request timeout in seconds
            session: Optional pre-configured requests session
        """
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch_key(self, url: str) -> str:
        """Download a signing key in one attempt.

        Retrying is left to the caller.

        Args:
            url: HTTPS URL of the armored key

        Returns:
            The armored key text

        Raises:
            TransientNetworkError: If the request fails
            ValueError: If the response is not an armored PGP public key
        """
        logger.info(f"Downloading signing key from {url}")

        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise TransientNetworkError(f"Failed to download signing key from {url}: {e}") from e

        key = response.text
        self.verify_key(key, url)

        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        logger.info(f"Downloaded signing key ({len(key)} bytes, sha256 {digest})")
        return key

    def verify_key(self, key: str, source: str = "response") -> None:
        """Check that text looks like an armored PGP public key block.

        Raises:
            ValueError: If the header or footer is missing
        """
        stripped = key.strip() if key else ""
        if not stripped.startswith(PGP_KEY_HEADER) or PGP_KEY_FOOTER not in stripped:
            raise ValueError(f"Downloaded data from {source} is not a PGP public key")
