"""Tests for main.py -- the account administration CLI.

Each test points DATABASE_URL at a temporary SQLite file and clears the
get_settings() cache so the CLI builds its own store from that URL.
"""

import pytest

import main
from core.config import get_settings


@pytest.fixture
def cli_db(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'cli.db'}")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_create_and_list(cli_db, capsys) -> None:
    assert main.main(["create-user", "Ann Admin", "ann@example.com", "s3cret-pass", "--role", "admin"]) == 0
    out = capsys.readouterr().out
    assert "role 'admin'" in out
    assert "s3cret-pass" not in out

    assert main.main(["list-users"]) == 0
    listing = capsys.readouterr().out
    assert "ann@example.com" in listing
    assert "$2" not in listing


def test_duplicate_reports_error(cli_db, capsys) -> None:
    assert main.main(["create-user", "Ann", "ann@example.com", "pw"]) == 0
    assert main.main(["create-user", "Ann", "ann@example.com", "pw"]) == 1
    assert "email already registered" in capsys.readouterr().err


def test_set_password(cli_db, capsys) -> None:
    main.main(["create-user", "Ann", "ann@example.com", "old-pw"])
    assert main.main(["set-password", "ann@example.com", "new-pw"]) == 0
    assert main.main(["set-password", "nobody@example.com", "new-pw"]) == 1


def test_reserved_role_not_offered(cli_db) -> None:
    with pytest.raises(SystemExit):
        main.main(["create-user", "G", "g@example.com", "pw", "--role", "guest"])
