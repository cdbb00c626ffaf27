"""Внешние утилиты Zimbra: экспорт ящика в tgz (zmmailbox) и удаление аккаунта (zmprov).
Оркестратор работает с интерфейсами Backuper/Deleter, поэтому в тестах их подменяют фейками.
"""
import logging
import os
import subprocess
from pathlib import Path
from typing import Optional, Protocol, Tuple

from zimbra_cleanup.config import (
    COMMAND_TIMEOUT_SECONDS,
    ZIMBRA_PATH,
    ZMMAILBOX_BIN,
    ZMPROV_BIN,
)

logger = logging.getLogger(__name__)


class Backuper(Protocol):
    def backup(self, email: str, target: Path) -> str:
        """Пишет архив ящика в target. Возвращает текст ошибок утилиты (или пустую строку)."""


class Deleter(Protocol):
    def delete(self, email: str) -> Tuple[bool, str]:
        """Удаляет аккаунт. Возвращает (успех, вывод утилиты)."""


def _command_env(path: str) -> dict:
    env = dict(os.environ)
    env["PATH"] = path
    return env


class ZmmailboxBackuper:
    """zmmailbox -z -m <email> getRestURL "//?fmt=tgz" > target"""

    def __init__(self, binary: str = ZMMAILBOX_BIN, path: str = ZIMBRA_PATH, timeout: Optional[float] = COMMAND_TIMEOUT_SECONDS):
        self.binary = binary
        self.path = path
        self.timeout = timeout

    def backup(self, email: str, target: Path) -> str:
        cmd = [self.binary, "-z", "-m", email, "getRestURL", "//?fmt=tgz"]
        try:
            with open(target, "wb") as out:
                proc = subprocess.run(
                    cmd,
                    stdout=out,
                    stderr=subprocess.PIPE,
                    env=_command_env(self.path),
                    timeout=self.timeout,
                )
        except subprocess.TimeoutExpired:
            return f"{self.binary}: превышен таймаут {self.timeout} с"
        except OSError as e:
            return f"{self.binary}: {e}"
        stderr = (proc.stderr or b"").decode("utf-8", errors="replace").strip()
        if proc.returncode != 0 and not stderr:
            stderr = f"{self.binary}: код возврата {proc.returncode}"
        return stderr


class ZmprovDeleter:
    """zmprov da <email>"""

    def __init__(self, binary: str = ZMPROV_BIN, path: str = ZIMBRA_PATH, timeout: Optional[float] = COMMAND_TIMEOUT_SECONDS):
        self.binary = binary
        self.path = path
        self.timeout = timeout

    def delete(self, email: str) -> Tuple[bool, str]:
        cmd = [self.binary, "da", email]
        try:
            proc = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                env=_command_env(self.path),
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            return False, f"{self.binary}: превышен таймаут {self.timeout} с"
        except OSError as e:
            return False, f"{self.binary}: {e}"
        output = (proc.stdout or b"").decode("utf-8", errors="replace").strip()
        return proc.returncode == 0, output
