"""Очистка старых почтовых ящиков: решение по каждому ящику, бэкап, удаление, отчёт."""
import enum
import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Optional

from zimbra_cleanup.config import (
    BACKUP_DIR,
    CSV_FILE,
    EXCLUDE_FILE,
    LOG_DIR,
    PURGE_BACKUPS_ON_START,
    REPORT_FILE,
    RETENTION_YEARS,
)
from zimbra_cleanup.services.exclusions import load_exclusions
from zimbra_cleanup.services.retention import RetentionDecision, decide
from zimbra_cleanup.services.roster import AccountRecord, read_roster
from zimbra_cleanup.services.zimbra import Backuper, Deleter, ZmmailboxBackuper, ZmprovDeleter

logger = logging.getLogger(__name__)

# Простая валидация email перед удалением (без ограничений на длину и TLD)
VALID_EMAIL = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+$")


class RosterNotFoundError(FileNotFoundError):
    """CSV со списком ящиков не найден: запуск прерывается."""


class BackupOutcome(enum.Enum):
    CREATED = "created"
    EMPTY_OR_MISSING = "empty_or_missing"


class DeletionOutcome(enum.Enum):
    DELETED = "deleted"
    FAILED = "failed"
    SKIPPED_DRY_RUN = "skipped_dry_run"


@dataclass(frozen=True)
class ReportEntry:
    email: str
    day: date

    def format_line(self) -> str:
        return f"{self.email};{self.day.strftime('%d.%m.%Y')}"


@dataclass(frozen=True)
class AccountOutcome:
    backup: BackupOutcome
    backup_path: Path
    deletion: Optional[DeletionOutcome] = None
    report: Optional[ReportEntry] = None
    invalid_email: bool = False


def backup_path_for(backup_dir: Path, email: str, today: date) -> Path:
    return Path(backup_dir) / f"{email}-{today.strftime('%Y%m%d')}.tgz"


def append_report(report_file: Path, entry: ReportEntry) -> None:
    """Запись в отчёт (формат: email;DD.MM.YYYY). Файл только дополняется."""
    with Path(report_file).open("a", encoding="utf-8") as f:
        f.write(entry.format_line() + "\n")


def _remove_artifact(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Не удалось удалить файл бэкапа %s: %s", path, e)


def _artifact_size(path: Path) -> int:
    """Размер файла бэкапа; 0, если файла нет или путь недоступен (например, слишком длинное имя)."""
    try:
        return path.stat().st_size if path.is_file() else 0
    except OSError as e:
        logger.warning("Не удалось проверить файл бэкапа %s: %s", path, e)
        return 0


def process_account(
    record: AccountRecord,
    decision: RetentionDecision,
    *,
    backuper: Backuper,
    deleter: Deleter,
    backup_dir: Path,
    report_file: Path,
    today: date,
    dry_run: bool = False,
) -> Optional[AccountOutcome]:
    """
    Бэкап и удаление одного ящика, прошедшего все проверки.
    Вызывающий код передаёт только ELIGIBLE; для остальных решений ничего не делается и возвращается None.
    Отчёт пишется после успешного бэкапа, в том числе если удаление не удалось:
    при ошибке удаления бэкап остаётся на диске.
    """
    if not decision.eligible:
        logger.warning("%s — не подлежит удалению (%s), бэкап не выполняется", record.email, decision.kind.value)
        return None

    email = record.email
    backup_file = backup_path_for(backup_dir, email, today)
    errors = backuper.backup(email, backup_file)
    if errors:
        logger.warning("%s — %s", email, errors)

    # Непустой файл считаем корректным бэкапом
    if _artifact_size(backup_file) <= 0:
        logger.warning("%s — резервная копия не создана или пуста (возможно, ящик не существует)", email)
        _remove_artifact(backup_file)
        return AccountOutcome(BackupOutcome.EMPTY_OR_MISSING, backup_file)

    logger.info("%s — резервная копия создана: %s", email, backup_file)

    if not email or not VALID_EMAIL.match(email):
        logger.warning("%s — ошибка: некорректный email, удаление отменено", email)
        _remove_artifact(backup_file)
        return AccountOutcome(BackupOutcome.CREATED, backup_file, invalid_email=True)

    if dry_run:
        logger.info("%s — [dry-run] удаление пропущено", email)
        deletion = DeletionOutcome.SKIPPED_DRY_RUN
    else:
        ok, output = deleter.delete(email)
        if output:
            logger.info("%s — %s", email, output)
        if ok:
            logger.info("%s — удалён", email)
            deletion = DeletionOutcome.DELETED
        else:
            logger.warning("%s — ошибка удаления (см. выше), бэкап оставлен: %s", email, backup_file)
            deletion = DeletionOutcome.FAILED

    entry = ReportEntry(email, today)
    append_report(report_file, entry)
    return AccountOutcome(BackupOutcome.CREATED, backup_file, deletion, entry)


def purge_backups(backup_dir: Path) -> int:
    """Удаляет *.tgz из каталога бэкапов. Возвращает число удалённых файлов."""
    logger.info("Очистка каталога %s", backup_dir)
    removed = 0
    for p in Path(backup_dir).glob("*.tgz"):
        try:
            p.unlink()
            removed += 1
        except OSError as e:
            logger.warning("Не удалось удалить %s: %s", p, e)
    return removed


def run_account_cleanup(
    dry_run: bool = False,
    *,
    csv_file: Path = CSV_FILE,
    exclude_file: Path = EXCLUDE_FILE,
    backup_dir: Path = BACKUP_DIR,
    log_dir: Path = LOG_DIR,
    report_file: Path = REPORT_FILE,
    retention_years: int = RETENTION_YEARS,
    purge_backups_on_start: bool = PURGE_BACKUPS_ON_START,
    backuper: Optional[Backuper] = None,
    deleter: Optional[Deleter] = None,
    now: Optional[datetime] = None,
) -> dict:
    """
    Один запуск очистки. Возвращает счётчики по решениям и исходам.
    Нет CSV — RosterNotFoundError (фатально); остальные ошибки изолированы в пределах записи.
    """
    now = now or datetime.now()
    today = now.date()
    backuper = backuper or ZmmailboxBackuper()
    deleter = deleter or ZmprovDeleter()
    stats = {
        "records": 0,
        "decisions": {},
        "backups_created": 0,
        "backups_empty": 0,
        "invalid_email": 0,
        "deleted": 0,
        "delete_failed": 0,
        "dry_run_skipped": 0,
        "reported": 0,
        "errors": 0,
    }

    for d in (Path(backup_dir), Path(log_dir), Path(report_file).parent):
        d.mkdir(parents=True, exist_ok=True)
    Path(report_file).touch()

    logger.info("=== Запуск удаления (dry-run=%s) ===", str(dry_run).lower())
    try:
        if purge_backups_on_start:
            purge_backups(backup_dir)

        if not Path(csv_file).is_file():
            logger.error("ERROR: CSV-файл не найден: %s", csv_file)
            raise RosterNotFoundError(str(csv_file))

        exclusions = load_exclusions(exclude_file)

        for record in read_roster(csv_file):
            stats["records"] += 1
            decision = decide(record, exclusions, now, retention_years)
            kind = decision.kind.value
            stats["decisions"][kind] = stats["decisions"].get(kind, 0) + 1
            logger.info("%s — %s", record.email, decision.reason)
            if not decision.eligible:
                continue

            try:
                outcome = process_account(
                    record,
                    decision,
                    backuper=backuper,
                    deleter=deleter,
                    backup_dir=backup_dir,
                    report_file=report_file,
                    today=today,
                    dry_run=dry_run,
                )
            except OSError as e:
                logger.warning("%s — ошибка обработки, ящик пропущен: %s", record.email, e)
                stats["errors"] += 1
                continue
            if outcome.backup is BackupOutcome.EMPTY_OR_MISSING:
                stats["backups_empty"] += 1
                continue
            stats["backups_created"] += 1
            if outcome.invalid_email:
                stats["invalid_email"] += 1
            if outcome.deletion is DeletionOutcome.DELETED:
                stats["deleted"] += 1
            elif outcome.deletion is DeletionOutcome.FAILED:
                stats["delete_failed"] += 1
            elif outcome.deletion is DeletionOutcome.SKIPPED_DRY_RUN:
                stats["dry_run_skipped"] += 1
            if outcome.report is not None:
                stats["reported"] += 1

        logger.info(
            "Итого: записей=%s, бэкапов=%s, удалено=%s, ошибок удаления=%s, dry-run=%s, в отчёте=%s",
            stats["records"],
            stats["backups_created"],
            stats["deleted"],
            stats["delete_failed"],
            stats["dry_run_skipped"],
            stats["reported"],
        )
    finally:
        logger.info("=== Завершено ===")
    return stats
