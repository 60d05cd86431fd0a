"""File-backed credential storage.

Two stores exist side by side:

- the local store, owned by this tool
  (``<config dir>/meta-ad-library/config.json``), written by
  ``auth set-token``, ``auth extend-token --save`` and ``auth refresh``;
- the shared store maintained by the sibling ``meta-auth`` tool
  (``<config dir>/meta-auth/config.json``), which is only ever read.

Both files hold one JSON object shaped like
:class:`~meta_adlib.models.CredentialRecord`. Saves replace the whole file.
"""

import json
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from ..config.settings import Settings
from ..exceptions import ConfigurationError
from ..models import CredentialRecord

logger = logging.getLogger(__name__)

LOCAL_APP_DIR = "meta-ad-library"
SHARED_APP_DIR = "meta-auth"
CONFIG_FILENAME = "config.json"


def default_config_dir() -> Path:
    """Return the per-user configuration directory for this OS.

    :return: ``%APPDATA%`` on Windows, ``~/Library/Application Support`` on
        macOS, ``$XDG_CONFIG_HOME`` or ``~/.config`` elsewhere
    :rtype: Path
    """
    if os.name == "nt":  # Windows
        return Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support"
    xdg = os.environ.get("XDG_CONFIG_HOME")
    return Path(xdg) if xdg else Path.home() / ".config"


def local_store_path(settings: Optional[Settings] = None) -> Path:
    """Path of this tool's credential file."""
    if settings is not None and settings.local_config_path:
        return Path(settings.local_config_path).expanduser()
    return default_config_dir() / LOCAL_APP_DIR / CONFIG_FILENAME


def shared_store_path(settings: Optional[Settings] = None) -> Path:
    """Path of the shared ``meta-auth`` credential file."""
    if settings is not None and settings.shared_config_path:
        return Path(settings.shared_config_path).expanduser()
    return default_config_dir() / SHARED_APP_DIR / CONFIG_FILENAME


class CredentialStore:
    """Load, save and clear a single credential file.

    :param path: Location of the JSON credential file
    :type path: Path
    :param read_only: Refuse writes (used for the shared store)
    :type read_only: bool
    :param name: Short label used in log and error messages
    :type name: str
    """

    def __init__(self, path: Path, read_only: bool = False, name: str = "local"):
        self.path = Path(path)
        self.read_only = read_only
        self.name = name

    def __repr__(self) -> str:
        mode = "ro" if self.read_only else "rw"
        return f"CredentialStore({self.name}, {self.path}, {mode})"

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> CredentialRecord:
        """Read the stored record.

        :return: The stored record, or an empty record if the file is missing
        :rtype: CredentialRecord
        :raises ConfigurationError: If the file exists but cannot be parsed
        """
        if not self.path.exists():
            logger.debug("No %s credential file at %s", self.name, self.path)
            return CredentialRecord()

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(
                f"failed to read {self.name} config {self.path}: {e}"
            ) from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"failed to read {self.name} config {self.path}: expected a JSON object"
            )

        try:
            return CredentialRecord.model_validate(data)
        except PydanticValidationError as e:
            raise ConfigurationError(
                f"failed to read {self.name} config {self.path}: {e.errors()[0]['msg']}"
            ) from e

    def save(self, record: CredentialRecord) -> None:
        """Replace the stored record.

        The directory is created owner-only and the file is written to a
        temporary sibling, then atomically moved into place with mode 0600.

        :param record: Record to persist
        :type record: CredentialRecord
        :raises ConfigurationError: If the store is read-only or the write fails
        """
        self._ensure_writable()
        try:
            try:
                self.path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
            except PermissionError:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                logger.debug(
                    "Could not set restricted permissions on %s", self.path.parent
                )

            temp_path = self.path.with_suffix(".tmp")
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(record.to_file_dict(), f, indent=2)
            try:
                os.chmod(temp_path, 0o600)
            except OSError:
                pass  # Not supported on every filesystem

            # Atomic move
            temp_path.replace(self.path)
        except OSError as e:
            raise ConfigurationError(f"failed to save config {self.path}: {e}") from e

        logger.debug("Saved %s credential to %s", self.name, self.path)

    def clear(self) -> None:
        """Delete the stored record; a missing file is not an error.

        :raises ConfigurationError: If the store is read-only or deletion fails
        """
        self._ensure_writable()
        try:
            self.path.unlink()
            logger.debug("Removed %s credential file %s", self.name, self.path)
        except FileNotFoundError:
            pass
        except OSError as e:
            raise ConfigurationError(f"failed to clear config {self.path}: {e}") from e

    def _ensure_writable(self) -> None:
        if self.read_only:
            raise ConfigurationError(
                f"the {self.name} credential store at {self.path} is read-only"
            )


def create_local_store(settings: Optional[Settings] = None) -> CredentialStore:
    """Create the writable store owned by this tool."""
    return CredentialStore(local_store_path(settings), read_only=False, name="local")


def create_shared_store(settings: Optional[Settings] = None) -> CredentialStore:
    """Create the read-only view of the shared ``meta-auth`` store."""
    return CredentialStore(shared_store_path(settings), read_only=True, name="meta-auth")
