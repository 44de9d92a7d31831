from __future__ import annotations

import re
from pathlib import Path

import pytest
from packages.chores.coordinator import ValidationError
from packages.chores.remote_base import RemoteError
from packages.chores.remote_memory import MemoryRemoteAdapter
from packages.chores.session import (
    AuthError,
    HouseholdSession,
    SessionStorage,
    generate_household_code,
    normalize_household_code,
)


@pytest.fixture()
def storage(tmp_path: Path) -> SessionStorage:
    return SessionStorage(tmp_path / "state" / "session.json")


def test_normalize_household_code() -> None:
    assert normalize_household_code("  home-2026 ") == "HOME-2026"


def test_generate_household_code_format() -> None:
    assert re.fullmatch(r"2026-[A-Z0-9]{6}", generate_household_code(2026))


def test_join_creates_household_and_persists_session(storage: SessionStorage) -> None:
    adapter = MemoryRemoteAdapter()
    session = HouseholdSession(adapter, storage)

    info = session.join(" Alex ", " home-2026")

    assert info.display_name == "Alex"
    assert info.household_code == "HOME-2026"
    assert info.identity_id
    assert adapter.household_exists("HOME-2026")

    restored = HouseholdSession(adapter, storage).restore()
    assert restored == info


def test_every_join_creates_a_new_identity(storage: SessionStorage) -> None:
    adapter = MemoryRemoteAdapter()
    session = HouseholdSession(adapter, storage)

    first = session.join("Alex", "HOME-2026")
    second = session.join("Alex", "HOME-2026")

    assert first.identity_id != second.identity_id
    assert adapter.profile_count("HOME-2026") == 2


def test_join_tolerates_household_created_concurrently(storage: SessionStorage) -> None:
    class _Racing(MemoryRemoteAdapter):
        def household_exists(self, household_code: str) -> bool:
            # Reports missing, but another client inserts it first.
            self._households.add(household_code)
            return False

    info = HouseholdSession(_Racing(), storage).join("Sam", "HOME-2026")

    assert info.household_code == "HOME-2026"


def test_join_remote_failure_is_auth_error(storage: SessionStorage) -> None:
    class _Down(MemoryRemoteAdapter):
        def household_exists(self, household_code: str) -> bool:
            raise RemoteError("get households", "connection refused")

    session = HouseholdSession(_Down(), storage)

    with pytest.raises(AuthError, match="connection refused"):
        session.join("Alex", "HOME-2026")

    assert session.restore() is None


def test_join_requires_name_and_code(storage: SessionStorage) -> None:
    session = HouseholdSession(MemoryRemoteAdapter(), storage)

    with pytest.raises(ValidationError, match="Please enter your name"):
        session.join("  ", "HOME-2026")

    with pytest.raises(ValidationError, match="Please enter a household code"):
        session.join("Alex", "   ")


def test_sign_out_clears_persisted_session(storage: SessionStorage) -> None:
    session = HouseholdSession(MemoryRemoteAdapter(), storage)
    session.join("Alex", "HOME-2026")

    session.sign_out()

    assert session.current is None
    assert storage.read() == {}
    assert HouseholdSession(MemoryRemoteAdapter(), storage).restore() is None


def test_partial_or_corrupt_session_is_ignored(storage: SessionStorage, tmp_path: Path) -> None:
    storage.write({"user_id": "abc", "user_name": "Alex"})
    assert HouseholdSession(MemoryRemoteAdapter(), storage).restore() is None

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    assert SessionStorage(broken).read() == {}


def test_storage_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    path = tmp_path / "custom.json"
    monkeypatch.setenv("CHORES_SESSION_PATH", str(path))

    SessionStorage.from_env().write({"user_id": "1", "user_name": "Jo", "household_id": "H"})

    assert path.exists()
