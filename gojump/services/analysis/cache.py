"""Двухуровневый кэш результатов разбора."""

import logging
import os
import threading
import time
from collections.abc import Callable

from .config import AnalysisConfig
from .models import ParseResult

logger = logging.getLogger(__name__)


class ResultCache:
    """
    Кэш результатов разбора.

    Уровень файла: короткий TTL, ключ - путь файла.
    Уровень пакета: длинный TTL, ключ - директория пакета из результата.
    Время берётся из clock, чтобы тесты могли им управлять.
    """

    def __init__(
        self,
        config: AnalysisConfig,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config
        self.clock = clock

        self._file_entries: dict[str, tuple[float, ParseResult]] = {}
        self._package_entries: dict[str, tuple[float, ParseResult]] = {}
        # Файл -> директория пакета, под которой он был закэширован
        self._file_packages: dict[str, str] = {}
        self._lock = threading.RLock()

    @staticmethod
    def package_key(file_path: str) -> str:
        return os.path.dirname(file_path)

    def get(self, file_path: str) -> ParseResult | None:
        """Найти свежий результат: сначала уровень файла, затем пакета."""
        with self._lock:
            return self._get(file_path)

    def _get(self, file_path: str) -> ParseResult | None:
        now = self.clock()

        entry = self._file_entries.get(file_path)
        if entry and now - entry[0] < self.config.file_cache_ttl:
            logger.debug(f"[Cache] File hit: {file_path}")
            return entry[1]

        package_path = self._file_packages.get(file_path, self.package_key(file_path))
        entry = self._package_entries.get(package_path)
        if entry and now - entry[0] < self.config.package_cache_ttl:
            logger.debug(f"[Cache] Package hit: {package_path} for {file_path}")
            # Прогреваем уровень файла; время записи пакета сохраняется,
            # чтобы запись файла не пережила запись пакета
            self._file_entries[file_path] = entry
            self._file_packages[file_path] = package_path
            return entry[1]

        return None

    def put(self, file_path: str, result: ParseResult) -> None:
        """Сохранить результат на обоих уровнях. Пустые результаты не кэшируются."""
        if result.is_empty:
            return

        # При откате к родительской директории пакет лежит не в dirname(file_path)
        package_path = next(iter(result.packages))

        with self._lock:
            now = self.clock()
            self._package_entries[package_path] = (now, result)
            self._file_entries[file_path] = (now, result)
            self._file_packages[file_path] = package_path

    def invalidate(self, file_path: str | None = None) -> None:
        """
        Сбросить кэш.

        Args:
            file_path: если задан - запись файла и запись его пакета;
                иначе весь кэш
        """
        with self._lock:
            self._invalidate(file_path)

    def _invalidate(self, file_path: str | None) -> None:
        if file_path is None:
            self._file_entries.clear()
            self._package_entries.clear()
            self._file_packages.clear()
            logger.debug("[Cache] Cleared")
            return

        package_path = self._file_packages.pop(file_path, self.package_key(file_path))
        self._file_entries.pop(file_path, None)
        self._package_entries.pop(package_path, None)

        # Записи других файлов пакета ссылаются на сброшенный результат
        for other, other_package in list(self._file_packages.items()):
            if other_package == package_path:
                self._file_entries.pop(other, None)
                del self._file_packages[other]

        logger.debug(f"[Cache] Invalidated {file_path} (package {package_path})")

    def __len__(self) -> int:
        with self._lock:
            return len(self._file_entries) + len(self._package_entries)
