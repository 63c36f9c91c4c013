"""
Shared pytest fixtures for the passkeep test suite.

Autouse fixtures below isolate tests from the live application data:
  - Event logger -> temp directory  (prevents test events in real log files)
  - PASSKEEP_*   -> unset           (prevents a developer .env leaking in)
  - find_dotenv  -> no file         (load_settings() without a path reads nothing)
"""

import os

import pytest


@pytest.fixture(autouse=True)
def _isolate_event_log(tmp_path):
    """Point the global EventLogger at a temp directory for every test.

    Without this, any test that opens a CredentialStore without an explicit
    event_logger would share one process-wide logger across tests.
    """
    import passkeep.core.event_log as event_mod

    old_logger = event_mod._event_logger
    event_mod._event_logger = event_mod.EventLogger(log_dir=tmp_path / "global_logs")

    yield

    event_mod._event_logger.close()
    event_mod._event_logger = old_logger


@pytest.fixture(autouse=True)
def _clear_passkeep_env():
    """Remove PASSKEEP_* variables before and after every test.

    load_dotenv() writes straight into os.environ, so monkeypatch alone
    cannot undo what an .env file loaded.
    """
    def _clear():
        for name in list(os.environ):
            if name.startswith("PASSKEEP_"):
                del os.environ[name]

    saved = {k: v for k, v in os.environ.items() if k.startswith("PASSKEEP_")}
    _clear()

    yield

    _clear()
    os.environ.update(saved)


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "credentials.db"


@pytest.fixture
def store(db_path):
    """CredentialStore backed by a temp database."""
    from passkeep.vault import CredentialStore

    return CredentialStore(db_path=db_path)


@pytest.fixture(autouse=True)
def _no_dotenv_discovery(monkeypatch):
    """Stop load_dotenv() from walking up to a developer's .env file."""
    import dotenv.main

    monkeypatch.setattr(dotenv.main, "find_dotenv", lambda *args, **kwargs: "")
