from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from alembic.config import Config

from alembic import command
from apps.account_cli.main import build_parser, main
from podcast_identity.config.settings import load_settings


def _upgrade_head(tmp_path: Path, filename: str) -> tuple[str, str]:
    db_path = tmp_path / filename
    sync_url = f"sqlite+pysqlite:///{db_path}"
    async_url = f"sqlite+aiosqlite:///{db_path}"

    alembic_config = Config("alembic.ini")
    alembic_config.set_main_option("sqlalchemy.url", sync_url)
    command.upgrade(alembic_config, "head")

    return sync_url, async_url


@pytest.fixture
def cli_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    _, async_url = _upgrade_head(tmp_path, "account_cli.db")
    monkeypatch.setenv("DATABASE_URL", async_url)
    monkeypatch.setenv("TOKEN_SECRET_KEY", "cli-secret")
    monkeypatch.setenv("PASSWORD_HASH_WORKERS", "1")
    monkeypatch.delenv("TOKEN_LIFETIME_SECONDS", raising=False)
    load_settings.cache_clear()
    yield
    load_settings.cache_clear()


def test_parser_defaults_role_to_client() -> None:
    args = build_parser().parse_args(["create-account", "--email", "a@b.com", "--password", "pw"])

    assert args.role == "client"


def test_parser_rejects_unknown_role() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args(
            ["create-account", "--email", "a@b.com", "--password", "pw", "--role", "admin"]
        )


@pytest.mark.usefixtures("cli_env")
def test_create_login_and_whoami_round_trip(capsys: pytest.CaptureFixture[str]) -> None:
    created = main(
        ["create-account", "--email", "a@b.com", "--password", "pw1", "--role", "owner"]
    )
    assert created == 0
    user_id = capsys.readouterr().out.strip()

    assert main(["login", "--email", "a@b.com", "--password", "pw1"]) == 0
    token = capsys.readouterr().out.strip()

    assert main(["whoami", "--token", token]) == 0
    assert capsys.readouterr().out.strip() == f"{user_id} a@b.com owner"


@pytest.mark.usefixtures("cli_env")
def test_failed_results_exit_non_zero(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["create-account", "--email", "a@b.com", "--password", "pw1"]) == 0
    capsys.readouterr()

    assert main(["create-account", "--email", "a@b.com", "--password", "pw2"]) == 1
    assert "There is a user with that email already" in capsys.readouterr().err

    assert main(["login", "--email", "a@b.com", "--password", "wrong"]) == 1
    assert "Wrong password" in capsys.readouterr().err

    assert main(["whoami", "--token", "forged"]) == 1
    assert "User not found" in capsys.readouterr().err
