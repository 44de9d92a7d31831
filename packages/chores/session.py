from __future__ import annotations

import json
import logging
import os
import secrets
import string
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from packages.chores.coordinator import ValidationError
from packages.chores.remote_base import RemoteAdapter, RemoteError

_LOGGER = logging.getLogger(__name__)

_SESSION_KEYS = ("user_id", "user_name", "household_id")


class AuthError(Exception):
    """Joining a household failed remotely. Blocks entry to the chore list."""


@dataclass(frozen=True, slots=True)
class SessionInfo:
    display_name: str
    household_code: str
    identity_id: str


def normalize_household_code(code: str) -> str:
    return (code or "").strip().upper()


def generate_household_code(year: int | None = None) -> str:
    alphabet = string.ascii_uppercase + string.digits
    suffix = "".join(secrets.choice(alphabet) for _ in range(6))
    return f"{year or date.today().year}-{suffix}"


class SessionStorage:
    """Small persistent key-value file for the signed-in session."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @classmethod
    def from_env(cls) -> SessionStorage:
        return cls(Path(os.getenv("CHORES_SESSION_PATH", ".local/session.json")))

    def read(self) -> dict[str, str]:
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            _LOGGER.warning("Ignoring unreadable session file %s: %s", self._path, e)
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items() if isinstance(v, str)}

    def write(self, values: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_name(self._path.name + ".tmp")
        tmp.write_text(json.dumps(values), encoding="utf-8")
        os.replace(tmp, self._path)

    def clear(self) -> None:
        self._path.unlink(missing_ok=True)


class HouseholdSession:
    def __init__(self, adapter: RemoteAdapter, storage: SessionStorage) -> None:
        self._adapter = adapter
        self._storage = storage
        self.current: SessionInfo | None = None

    def join(self, display_name: str, household_code: str) -> SessionInfo:
        """Join (or implicitly create) a household and persist the session.

        A new profile is created on every join, even for a name seen before.
        """

        name = (display_name or "").strip()
        if not name:
            raise ValidationError("display_name", "Please enter your name")

        code = normalize_household_code(household_code)
        if not code:
            raise ValidationError("household_code", "Please enter a household code")

        try:
            if not self._adapter.household_exists(code):
                try:
                    self._adapter.insert_household(code)
                    _LOGGER.info("Created household %s", code)
                except RemoteError as e:
                    # Someone else may have created it first.
                    if e.status_code != 409:
                        raise
            profile = self._adapter.insert_profile(name, code)
        except RemoteError as e:
            _LOGGER.warning("Joining household %s failed: %s", code, e)
            raise AuthError(f"Failed to join household: {e.detail}") from e

        info = SessionInfo(display_name=name, household_code=code, identity_id=profile.id)
        self._storage.write(
            {"user_id": info.identity_id, "user_name": info.display_name, "household_id": code}
        )
        self.current = info
        return info

    def restore(self) -> SessionInfo | None:
        values = self._storage.read()
        if not all(values.get(k) for k in _SESSION_KEYS):
            return None

        self.current = SessionInfo(
            display_name=values["user_name"],
            household_code=values["household_id"],
            identity_id=values["user_id"],
        )
        return self.current

    def sign_out(self) -> None:
        self._storage.clear()
        self.current = None
