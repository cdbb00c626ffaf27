"""Чтение и нормализация CSV со списком ящиков.
Структура фиксированная: Email;Дата создания;Статус;Notes;Последний вход;DisplayName
"""
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

logger = logging.getLogger(__name__)

DELIMITER = ";"
FIELD_COUNT = 6

_WHITESPACE = re.compile(r"\s+")
# 20161007172147Z, 20161007172147.846Z -> 20161007
_COMPACT_PREFIX = re.compile(r"^(\d{8})")
# хвост .846Z или просто Z
_ZULU_SUFFIX = re.compile(r"(\.\d+)?Z$")


@dataclass(frozen=True)
class AccountRecord:
    email: str
    created_at: str
    status: str
    notes: str
    last_login: str
    display_name: str = ""
    created_raw: str = ""
    last_login_raw: str = ""


def _strip_all(value: str) -> str:
    return _WHITESPACE.sub("", value)


def normalize_created(raw: str) -> str:
    value = raw.strip()
    m = _COMPACT_PREFIX.match(value)
    return m.group(1) if m else value


def normalize_last_login(raw: str) -> str:
    # Пробел перед временем ("YYYY-MM-DD hh:mm:ss") должен сохраниться
    return _ZULU_SUFFIX.sub("", raw.strip())


def normalize(raw_row: str) -> AccountRecord:
    """Разбор одной строки CSV. Недостающие поля в конце считаются пустыми."""
    fields = raw_row.rstrip("\r\n").split(DELIMITER)
    fields += [""] * (FIELD_COUNT - len(fields))
    email, created_raw, status, notes, last_login_raw, display_name = fields[:FIELD_COUNT]
    return AccountRecord(
        email=_strip_all(email),
        created_at=normalize_created(created_raw),
        status=_strip_all(status).lower(),
        notes=_strip_all(notes).lower(),
        last_login=normalize_last_login(last_login_raw),
        display_name=display_name.strip(),
        created_raw=created_raw,
        last_login_raw=last_login_raw,
    )


def read_roster(path: Path) -> Iterator[AccountRecord]:
    """Ленивый поток записей. Заголовок и пустые строки пропускаются."""
    with Path(path).open(encoding="utf-8", errors="replace") as f:
        next(f, None)
        for line_no, line in enumerate(f, start=2):
            if not line.strip():
                logger.debug("Пустая строка %s в списке ящиков пропущена", line_no)
                continue
            yield normalize(line)
