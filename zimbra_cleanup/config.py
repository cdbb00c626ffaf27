"""Конфигурация задачи очистки из окружения (.env).
Пути нормализуются одинаково для cron-запуска и для запуска из корня проекта:
- относительные пути из .env разрешаются относительно BASE_DIR (корень проекта);
- все пути приводятся к абсолютным через resolve();
- пустые переменные окружения означают значение по умолчанию.
"""
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent


def _resolve_path(env_value: str, default: Path) -> Path:
    """Абсолютный путь: если env_value относительный — разрешаем от BASE_DIR."""
    p = Path(env_value) if env_value else default
    if not p.is_absolute():
        p = BASE_DIR / p
    return p.resolve()


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


# Входные файлы. В имени файла исключений по умолчанию есть пробелы.
CSV_FILE = _resolve_path(os.getenv("ACCOUNTS_CSV", "").strip(), Path("/opt/zimbra/accounts_with_date.csv"))
EXCLUDE_FILE = _resolve_path(os.getenv("EXCLUDE_FILE", "").strip(), Path("/opt/zimbra/logs/tmp/actual_email TXT.txt"))

# Каталоги бэкапов и логов
BACKUP_DIR = _resolve_path(os.getenv("BACKUP_DIR", "").strip(), Path("/opt/tmp"))
LOG_DIR = _resolve_path(os.getenv("LOG_DIR", "").strip(), Path("/opt/zimbra/logs"))

# Логи: отдельный файл для dry-run. Отчёт общий (email;DD.MM.YYYY)
LOG_FILE = LOG_DIR / "delete_old_accounts.log"
DRYRUN_LOG_FILE = LOG_DIR / "delete_old_accounts_dryrun.log"
REPORT_FILE = _resolve_path(os.getenv("REPORT_FILE", "").strip(), LOG_DIR / "deleted_accounts_report.log")

# Порог давности в календарных годах
RETENTION_YEARS = int(os.getenv("RETENTION_YEARS", "1"))

# Утилиты Zimbra
ZIMBRA_PATH = os.getenv("ZIMBRA_PATH", "").strip() or "/opt/zimbra/bin:/usr/bin:/bin:/opt/zimbra/common/bin"
ZMMAILBOX_BIN = os.getenv("ZMMAILBOX_BIN", "").strip() or "zmmailbox"
ZMPROV_BIN = os.getenv("ZMPROV_BIN", "").strip() or "zmprov"
# 0 — без таймаута (зависание утилиты останавливает весь запуск)
COMMAND_TIMEOUT_SECONDS = float(os.getenv("COMMAND_TIMEOUT_SECONDS", "0") or 0) or None

# Очистка *.tgz в BACKUP_DIR перед запуском. По умолчанию выключена.
PURGE_BACKUPS_ON_START = _env_flag("PURGE_BACKUPS_ON_START")
