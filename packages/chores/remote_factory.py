from __future__ import annotations

import os

from packages.chores.remote_base import RemoteAdapter
from packages.chores.remote_memory import MemoryRemoteAdapter


def get_remote_adapter() -> RemoteAdapter:
    """Select a remote adapter based on env vars.

    Defaults to the in-memory adapter so tests and local dev are deterministic unless
    CHORES_REMOTE_ADAPTER=http points the client at a running API (CHORES_API_URL).
    """

    mode = os.getenv("CHORES_REMOTE_ADAPTER", "memory").strip().lower()

    if mode == "memory":
        return MemoryRemoteAdapter()

    if mode == "http":
        from packages.chores.remote_http import HttpRemoteAdapter

        return HttpRemoteAdapter.from_env()

    raise ValueError(f"Unknown CHORES_REMOTE_ADAPTER={mode!r}. Expected memory or http.")
