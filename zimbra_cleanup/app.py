"""Точка входа задачи очистки: логирование, разбор аргументов, запуск."""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from zimbra_cleanup.config import DRYRUN_LOG_FILE, LOG_FILE

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(log_file: Path, level: int = logging.INFO) -> None:
    """Лог в терминал и в файл. Файл только дополняется, ротация — снаружи (logrotate)."""
    log_file = Path(log_file)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    fh = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    fh.setFormatter(logging.Formatter(LOG_FORMAT))
    fh.setLevel(logging.DEBUG)
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=[logging.StreamHandler(), fh], force=True)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="zimbra-cleanup",
        description="Бэкап и удаление почтовых ящиков Zimbra без входов дольше срока хранения.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Решения и бэкапы выполняются, удаление только логируется.",
    )
    # Лишние аргументы cron-строки игнорируются
    args, _extra = parser.parse_known_args(argv)
    return args


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(DRYRUN_LOG_FILE if args.dry_run else LOG_FILE)

    from zimbra_cleanup.services.cleanup import RosterNotFoundError, run_account_cleanup

    try:
        run_account_cleanup(dry_run=args.dry_run)
    except RosterNotFoundError:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
