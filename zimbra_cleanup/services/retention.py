"""Решение о сроке хранения ящика: пропустить (с причиной) или готовить бэкап.

Решение — чистая функция от записи, множества исключений и текущего момента.
Порядок проверок строгий, срабатывает первая:

1. email в файле исключений;
2. notes содержит never_disable;
3. входов не было — смотрим дату создания;
4. вход был — обрабатываем только status=closed и смотрим дату входа.

Граница включительная: дата, равная порогу, ещё считается свежей.
"""
import enum
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import AbstractSet, Optional, Union

from zimbra_cleanup.services.roster import AccountRecord

NEVER_DISABLE_MARKER = "never_disable"
CLOSED_STATUS = "closed"

_ISO_DATE_PREFIX = re.compile(r"^(\d{4}-\d{2}-\d{2})")
_COMPACT_DATE_PREFIX = re.compile(r"^(\d{8})")


class TimestampEncoding(enum.Enum):
    COMPACT_DIGITS = "compact"  # 20240730105430[.398Z]
    ISO_DATETIME = "iso"  # 2024-07-30[ 10:54:30]


@dataclass(frozen=True)
class ParsedTimestamp:
    encoding: TimestampEncoding
    value: date


@dataclass(frozen=True)
class ParseFailure:
    raw: str
    reason: str


def parse_timestamp(raw: str) -> Union[ParsedTimestamp, ParseFailure]:
    """Дата из YYYY-MM-DD[ hh:mm:ss] или YYYYMMDD[...]. Время суток отбрасывается."""
    value = (raw or "").strip()
    if not value:
        return ParseFailure(raw, "пустое значение")
    m = _ISO_DATE_PREFIX.match(value)
    if m:
        encoding, text, fmt = TimestampEncoding.ISO_DATETIME, m.group(1), "%Y-%m-%d"
    else:
        m = _COMPACT_DATE_PREFIX.match(value)
        if not m:
            return ParseFailure(raw, "неизвестный формат")
        encoding, text, fmt = TimestampEncoding.COMPACT_DIGITS, m.group(1), "%Y%m%d"
    try:
        return ParsedTimestamp(encoding, datetime.strptime(text, fmt).date())
    except ValueError as e:
        return ParseFailure(raw, str(e))


def years_ago(moment: date, years: int) -> date:
    """Календарное вычитание лет. 29 февраля -> 1 марта, как у GNU date."""
    try:
        return moment.replace(year=moment.year - years)
    except ValueError:
        return moment.replace(year=moment.year - years, month=3, day=1)


class DecisionKind(enum.Enum):
    EXCLUDED = "excluded"
    NEVER_DISABLE = "never_disable"
    TOO_YOUNG = "too_young"
    STILL_ACTIVE_STATUS = "still_active_status"
    STILL_ACTIVE_LOGIN = "still_active_login"
    DATE_PARSE_ERROR = "date_parse_error"
    ELIGIBLE = "eligible"


@dataclass(frozen=True)
class RetentionDecision:
    kind: DecisionKind
    reason: str
    relevant_date: Optional[date] = None

    @property
    def eligible(self) -> bool:
        return self.kind is DecisionKind.ELIGIBLE


def decide(
    record: AccountRecord,
    exclusions: AbstractSet[str],
    now: datetime,
    years: int = 1,
) -> RetentionDecision:
    threshold = years_ago(now.date() if isinstance(now, datetime) else now, years)

    if record.email.lower() in exclusions:
        return RetentionDecision(DecisionKind.EXCLUDED, "пропущен (в файле исключений)")

    if NEVER_DISABLE_MARKER in record.notes.lower():
        return RetentionDecision(DecisionKind.NEVER_DISABLE, "пропущен (never_disable)")

    if not record.last_login:
        parsed = parse_timestamp(record.created_at)
        if isinstance(parsed, ParseFailure):
            return RetentionDecision(
                DecisionKind.DATE_PARSE_ERROR,
                f"ошибка разбора даты создания: {record.created_raw or record.created_at}",
            )
        created = parsed.value
        if created >= threshold:
            return RetentionDecision(
                DecisionKind.TOO_YOUNG,
                f"создан менее {years} г. назад ({created.isoformat()}), пропущен",
                created,
            )
        return RetentionDecision(
            DecisionKind.ELIGIBLE,
            f"входов не было, но создан до {created.isoformat()}, готовим резервную копию",
            created,
        )

    if record.status != CLOSED_STATUS:
        return RetentionDecision(DecisionKind.STILL_ACTIVE_STATUS, f"пропущен (статус: {record.status})")

    parsed = parse_timestamp(record.last_login)
    if isinstance(parsed, ParseFailure):
        return RetentionDecision(
            DecisionKind.DATE_PARSE_ERROR,
            f"ошибка разбора даты входа: {record.last_login_raw or record.last_login}",
        )
    login = parsed.value
    if login >= threshold:
        return RetentionDecision(
            DecisionKind.STILL_ACTIVE_LOGIN,
            f"активен после {login.isoformat()}, пропущен",
            login,
        )
    return RetentionDecision(
        DecisionKind.ELIGIBLE,
        f"последний вход до {login.isoformat()}, готовим резервную копию",
        login,
    )
