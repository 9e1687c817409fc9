# Rev 0.2.0

"""Pytest fixtures for burnZ (Rev 0.2.0)"""
from __future__ import annotations
import pytest
from pathlib import Path

from burnz.models.entities import Identity
from burnz.repositories.db import Database
from burnz.services import auth_service


@pytest.fixture()
def db_conn(tmp_path: Path):
    db_path = tmp_path / "test.db"
    db = Database(path=str(db_path))
    try:
        db.run_migrations()
        yield db.conn
    finally:
        db.close()


@pytest.fixture()
def alice() -> Identity:
    return Identity(uid="alice", email="alice@example.com", display_name="Alice")


@pytest.fixture()
def bob() -> Identity:
    return Identity(uid="bob", email="bob@example.com", display_name="Bob")


@pytest.fixture(autouse=True)
def fast_password_hashing(monkeypatch):
    monkeypatch.setattr(auth_service, "PBKDF2_ITERATIONS", 1_000)


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    monkeypatch.setenv("BURNZ_CONFIG", str(tmp_path / "settings.json"))
