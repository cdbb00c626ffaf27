"""Точка входа: коды возврата, выбор лог-файла, дозапись лога."""
import logging

import pytest

from zimbra_cleanup import app
from zimbra_cleanup.services import cleanup


@pytest.fixture(autouse=True)
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for h in root.handlers:
        if h not in handlers:
            h.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_parse_args():
    assert app.parse_args([]).dry_run is False
    assert app.parse_args(["--dry-run"]).dry_run is True


def test_parse_args_ignores_extra_arguments():
    assert app.parse_args(["--dry-run", "extra"]).dry_run is True
    assert app.parse_args(["extra", "--verbose"]).dry_run is False


def test_main_dry_run_uses_separate_log(tmp_path, monkeypatch):
    calls = []
    monkeypatch.setattr(app, "LOG_FILE", tmp_path / "delete_old_accounts.log")
    monkeypatch.setattr(app, "DRYRUN_LOG_FILE", tmp_path / "delete_old_accounts_dryrun.log")
    monkeypatch.setattr(cleanup, "run_account_cleanup", lambda dry_run=False: calls.append(dry_run) or {})

    assert app.main(["--dry-run"]) == 0
    assert calls == [True]
    assert (tmp_path / "delete_old_accounts_dryrun.log").exists()
    assert not (tmp_path / "delete_old_accounts.log").exists()


def test_main_missing_roster_exits_1(tmp_path, monkeypatch):
    def fake_run(dry_run=False):
        raise cleanup.RosterNotFoundError("/opt/zimbra/accounts_with_date.csv")

    monkeypatch.setattr(app, "LOG_FILE", tmp_path / "run.log")
    monkeypatch.setattr(cleanup, "run_account_cleanup", fake_run)
    assert app.main([]) == 1


def test_configure_logging_appends(tmp_path):
    log_file = tmp_path / "logs" / "run.log"
    app.configure_logging(log_file)
    logging.getLogger("zimbra_cleanup.test").info("первый запуск")
    app.configure_logging(log_file)
    logging.getLogger("zimbra_cleanup.test").info("второй запуск")
    text = log_file.read_text(encoding="utf-8")
    assert "первый запуск" in text
    assert "второй запуск" in text
