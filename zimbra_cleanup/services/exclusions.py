"""Загрузка файла исключений: защищённые ящики, которые задача никогда не трогает."""
import logging
import re
from pathlib import Path
from typing import FrozenSet

logger = logging.getLogger(__name__)

# Email в произвольном тексте: в строке может быть несколько адресов с любыми разделителями
EMAIL_IN_TEXT = re.compile(r"[a-z0-9._%+-]+@[a-z0-9.-]+\.[a-z]{2,}", re.IGNORECASE)


def extract_emails(line: str) -> set:
    """Все адреса из строки, в нижнем регистре."""
    return {m.lower() for m in EMAIL_IN_TEXT.findall(line)}


def load_exclusions(path: Path) -> FrozenSet[str]:
    """
    Читает файл исключений. 1-я строка — заголовок (игнорируется),
    пустые строки и текст без адресов пропускаются.
    Нет файла — пустое множество и предупреждение в лог, запуск продолжается.
    """
    path = Path(path)
    if not path.is_file():
        logger.warning("WARN: файл исключений не найден: %s", path)
        return frozenset()

    excludes = set()
    with path.open(encoding="utf-8", errors="replace") as f:
        next(f, None)
        for raw_line in f:
            excludes |= extract_emails(raw_line)

    logger.info("Загружено исключений: %s", len(excludes))
    return frozenset(excludes)
