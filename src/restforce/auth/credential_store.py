"""File-backed credential persistence.

A :class:`FileCredentialStore` is a refresh notifier: hand it to a rest
client and every refreshed credential is written to disk before the
client adopts it. On the next start, :meth:`FileCredentialStore.load`
returns the last saved credential.

Credentials are encrypted at rest with Fernet by default. The key comes
from the ``encryption_key`` argument or, when omitted, from a random key
file kept next to the credential file. Anyone able to read that key
file can decrypt the credential; pass an externally managed key for
production use.
"""

import base64
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from cryptography.fernet import Fernet, InvalidToken

from ..models import Credential
from .base import RefreshNotifier

logger = logging.getLogger(__name__)

KEY_FILE_NAME = ".encryption.key"
ENCRYPTED_FORMAT_VERSION = "1.0"


def _write_private(path: Path, data: bytes) -> None:
    """Write ``data`` to a file created with owner-only permissions."""
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "wb") as f:
        f.write(data)


class FileCredentialStore(RefreshNotifier):
    """Persist the active credential as JSON.

    Writes go to a temporary file, created with owner-only permissions,
    that atomically replaces the target.

    :param path: File the credential is stored in
    :type path: Union[str, Path]
    :param encrypt_at_rest: Encrypt the stored credential with Fernet
    :type encrypt_at_rest: bool
    :param encryption_key: Base64 Fernet key; a key file is used when omitted
    :type encryption_key: Optional[Union[str, bytes]]
    :raises ValueError: If ``encryption_key`` is not a valid Fernet key
    """

    def __init__(
        self,
        path: Union[str, Path],
        encrypt_at_rest: bool = True,
        encryption_key: Optional[Union[str, bytes]] = None,
    ):
        self._path = Path(path).expanduser()
        self._encrypt_at_rest = encrypt_at_rest
        self._encryption_key = encryption_key
        self._cipher: Optional[Fernet] = None

        if self._encrypt_at_rest:
            self._cipher = self._initialize_encryption()
        else:
            logger.warning(
                f"Credential encryption disabled; {self._path} will hold plaintext tokens"
            )

    @property
    def path(self) -> Path:
        return self._path

    @property
    def key_path(self) -> Path:
        return self._path.parent / KEY_FILE_NAME

    @property
    def encrypt_at_rest(self) -> bool:
        return self._encrypt_at_rest

    def on_credential_refreshed(self, credential: Credential) -> None:
        self.save(credential)

    def save(self, credential: Credential) -> None:
        """Write the credential to disk.

        :param credential: Credential to persist
        :type credential: Credential
        """
        self._ensure_parent()

        data: Dict[str, Any] = credential.to_dict()
        if self._encrypt_at_rest:
            data = self._encrypt_data(data)

        temp_path = self._path.with_suffix(".tmp")
        try:
            _write_private(temp_path, json.dumps(data, indent=2).encode("utf-8"))
            temp_path.replace(self._path)
        finally:
            if temp_path.exists():
                temp_path.unlink()

        logger.debug(f"Persisted credential to {self._path}")

    def load(self) -> Optional[Credential]:
        """Load the saved credential.

        :return: Saved credential, or None if absent or unreadable
        :rtype: Optional[Credential]
        """
        if not self._path.exists():
            return None

        try:
            with open(self._path, "r") as f:
                data = json.load(f)
            if self._encrypt_at_rest:
                data = self._decrypt_data(data)
            return Credential.from_dict(data)
        except (OSError, ValueError, InvalidToken) as e:
            logger.error(f"Failed to load credential from {self._path}: {e}")
            return None

    def clear(self) -> None:
        """Remove the saved credential, if any."""
        if self._path.exists():
            self._path.unlink()
            logger.info(f"Cleared stored credential at {self._path}")

    def _ensure_parent(self) -> None:
        try:
            self._path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        except PermissionError:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            logger.warning(
                f"Could not set restricted permissions on {self._path.parent}"
            )

    def _initialize_encryption(self) -> Fernet:
        """Build the Fernet cipher from the given key or the key file."""
        if self._encryption_key:
            key = self._encryption_key
            if isinstance(key, str):
                key = key.encode()
            logger.info("Using configured credential encryption key")
            return Fernet(key)

        key_file = self.key_path
        if key_file.exists():
            try:
                cipher = Fernet(key_file.read_bytes().strip())
                logger.debug(f"Loaded encryption key from {key_file}")
                return cipher
            except (OSError, ValueError) as e:
                logger.warning(f"Failed to load existing key: {e}, generating new one")

        key = Fernet.generate_key()
        self._ensure_parent()
        try:
            _write_private(key_file, key)
            logger.info(f"Generated and saved new encryption key to {key_file}")
        except OSError as e:
            logger.warning(f"Could not persist encryption key: {e}")
        return Fernet(key)

    def _encrypt_data(self, data: Dict[str, Any]) -> Dict[str, Any]:
        json_data = json.dumps(data, separators=(",", ":"))
        encrypted_bytes = self._cipher.encrypt(json_data.encode())
        return {
            "_encrypted": True,
            "_version": ENCRYPTED_FORMAT_VERSION,
            "data": base64.b64encode(encrypted_bytes).decode("ascii"),
        }

    def _decrypt_data(self, data: Any) -> Any:
        """Decrypt stored data; plaintext files are returned as is."""
        if not isinstance(data, dict) or not data.get("_encrypted"):
            return data
        encrypted_bytes = base64.b64decode(data.get("data", ""))
        return json.loads(self._cipher.decrypt(encrypted_bytes).decode())
