"""Pytest fixtures: фейковые утилиты Zimbra и временные входные файлы."""
import sys
from pathlib import Path

import pytest

# Project root
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

ROSTER_HEADER = "Email;Дата создания;Статус;Notes;Последний вход;DisplayName\n"


class FakeBackuper:
    def __init__(self, payload: bytes = b"tgz-bytes", errors: str = "", empty_for=()):
        self.payload = payload
        self.errors = errors
        self.empty_for = set(empty_for)
        self.calls = []

    def backup(self, email, target):
        self.calls.append((email, Path(target)))
        Path(target).write_bytes(b"" if email in self.empty_for else self.payload)
        return self.errors


class FakeDeleter:
    def __init__(self, ok: bool = True, output: str = "", fail_for=()):
        self.ok = ok
        self.output = output
        self.fail_for = set(fail_for)
        self.calls = []

    def delete(self, email):
        self.calls.append(email)
        return self.ok and email not in self.fail_for, self.output


@pytest.fixture
def backuper():
    return FakeBackuper()


@pytest.fixture
def deleter():
    return FakeDeleter()


@pytest.fixture
def workdir(tmp_path):
    """Каталоги и пути одного запуска во временной папке."""
    paths = {
        "csv_file": tmp_path / "accounts_with_date.csv",
        "exclude_file": tmp_path / "actual_email TXT.txt",
        "backup_dir": tmp_path / "backup",
        "log_dir": tmp_path / "logs",
        "report_file": tmp_path / "logs" / "deleted_accounts_report.log",
    }
    return paths


@pytest.fixture
def write_roster(workdir):
    def _write(*rows):
        workdir["csv_file"].write_text(ROSTER_HEADER + "".join(r + "\n" for r in rows), encoding="utf-8")
        return workdir["csv_file"]
    return _write
