"""
Client certificate and passphrase management.

PKCS#12 passphrases can be kept in the system keychain (keyring) under
a caller-chosen label, so they never have to live in source or config
files.  The ``PFXSOAP_PFX_PASSWORD`` environment variable takes priority.
"""

from __future__ import annotations

__all__ = [
    "clear_certificate_password",
    "get_certificate_password",
    "load_certificate",
    "resolve_certificate_password",
    "save_certificate_password",
]

import logging
import os
from pathlib import Path

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from ..constants import ENV_PFX_PASSWORD, KEYRING_SERVICE
from ..errors import CertificateError, ConfigError

_logger = logging.getLogger(__name__)


def load_certificate(path: str | os.PathLike[str]) -> bytes:
    """
    Read a ``.pfx``/``.p12`` file into memory.

    Raises:
        CertificateError: If the file cannot be read or is empty.
    """
    cert_path = Path(path)
    try:
        data = cert_path.read_bytes()
    except OSError as e:
        raise CertificateError(f"Cannot read certificate file {cert_path}: {e}") from e
    if not data:
        raise CertificateError(f"Certificate file is empty: {cert_path}")
    _logger.debug("Loaded certificate file %s: %d bytes", cert_path, len(data))
    return data


def _require_label(label: str) -> None:
    if not isinstance(label, str) or not label:
        raise ConfigError("Certificate label must be a non-empty string")


def save_certificate_password(label: str, password: str) -> None:
    """Store a PKCS#12 passphrase in the system keychain.

    Raises:
        ConfigError: If the keychain rejects the write.
    """
    _require_label(label)
    try:
        keyring.set_password(KEYRING_SERVICE, label, password)
    except KeyringError as e:
        raise ConfigError(f"Cannot store passphrase in keychain: {e}") from e
    _logger.info("Saved certificate passphrase to keychain (label=%s)", label)


def get_certificate_password(label: str) -> str | None:
    """Return the stored passphrase for *label*, or None if there is none."""
    _require_label(label)
    try:
        return keyring.get_password(KEYRING_SERVICE, label)
    except KeyringError as e:
        _logger.warning("Keychain lookup failed for label=%s: %s", label, e)
        return None


def clear_certificate_password(label: str) -> None:
    """Remove the stored passphrase for *label*, if any."""
    _require_label(label)
    try:
        keyring.delete_password(KEYRING_SERVICE, label)
        _logger.debug("Deleted keychain entry (label=%s)", label)
    except PasswordDeleteError:
        pass  # entry doesn't exist
    except KeyringError as e:
        _logger.debug("Keychain delete failed: %s", e)


def resolve_certificate_password(label: str | None = None) -> str | None:
    """
    Resolve a PKCS#12 passphrase.

    Priority: ``PFXSOAP_PFX_PASSWORD`` env var > keychain entry for *label*.

    Returns:
        The passphrase, or None when no source has one.
    """
    pwd = os.environ.get(ENV_PFX_PASSWORD)
    if pwd is not None:
        _logger.debug("resolve_certificate_password: source=env")
        return pwd
    if label:
        pwd = get_certificate_password(label)
        _logger.debug("resolve_certificate_password: source=keychain, found=%s", pwd is not None)
        return pwd
    return None

