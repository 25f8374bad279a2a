"""Главный сервис анализа реализаций интерфейсов (фасад)."""

import asyncio
import os
import logging
import threading
import time
from collections.abc import Callable

from gojump.constants import STRUCT_DEF_KEY

from .models import (
    AnalysisError,
    Location,
    PackageInfo,
    ParseResult,
    ParserUnavailableError,
    ResolutionResult,
)
from .config import AnalysisConfig
from .file_scanner import PackageScanner
from .ast_parser import GoASTParser
from .aggregator import (
    FactAggregator,
    get_all_interface_names,
    get_implementations,
    get_interface_locations,
    get_interface_methods,
    get_structs_info,
)
from .resolver import ImplementationResolver
from .cache import ResultCache

logger = logging.getLogger(__name__)


class AnalysisService:
    """Сервис для разбора пакета Go и поиска реализаций интерфейсов."""

    def __init__(
        self,
        config: AnalysisConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config if config is not None else AnalysisConfig()

        self.scanner = PackageScanner(self.config)
        self.parser = GoASTParser(self.config)
        self.aggregator = FactAggregator()
        self.resolver = ImplementationResolver(self.config)
        self.cache = ResultCache(self.config, clock)

        self._parser_ready: bool | None = None
        # Парсер tree-sitter и кэш не потокобезопасны (см. parse_go_file_async)
        self._lock = threading.RLock()

    def ensure_parser_ready(self) -> bool:
        """
        Убедиться, что грамматика Go загружена.

        Ошибка логируется один раз; дальше сервис отдаёт пустые результаты.
        """
        if self._parser_ready is None:
            try:
                self.parser.load()
                self._parser_ready = True
            except ParserUnavailableError as e:
                logger.error(f"[Analysis] {e}. Interface analysis is disabled")
                self._parser_ready = False

        return self._parser_ready

    def parse_go_file(self, file_path: str) -> ParseResult:
        """
        Разобрать пакет, которому принадлежит файл.

        Args:
            file_path: путь к файлу .go

        Returns:
            ParseResult; пустой packages означает "фактов нет", это не ошибка
        """
        file_path = os.path.abspath(file_path)

        with self._lock:
            return self._parse_go_file(file_path)

    def _parse_go_file(self, file_path: str) -> ParseResult:
        cached = self.cache.get(file_path)
        if cached is not None:
            return cached

        if not self.ensure_parser_ready():
            return ParseResult.empty()

        if not os.path.isfile(file_path):
            logger.warning(f"[Analysis] File does not exist: {file_path}")
            return ParseResult.empty()

        try:
            result = self._parse_package(os.path.dirname(file_path), file_path)
        except (AnalysisError, OSError, ValueError) as e:
            logger.warning(f"[Analysis] Failed to parse {file_path}: {e}")
            return ParseResult.empty()

        if result.is_empty:
            logger.warning(f"[Analysis] No package found for {file_path}")
            return result

        self.cache.put(file_path, result)
        logger.info(
            f"[Analysis] Parsed {file_path}: {len(result.packages)} package(s) cached"
        )
        return result

    async def parse_go_file_async(self, file_path: str) -> ParseResult:
        """
        То же, что parse_go_file, но не блокирует цикл событий вызывающего.

        Параллельные вызовы выполняются по очереди под общей блокировкой.
        """
        return await asyncio.to_thread(self.parse_go_file, file_path)

    def invalidate(self, file_path: str | None = None) -> None:
        """Сбросить кэш файла (и его пакета) или весь кэш."""
        with self._lock:
            self.cache.invalidate(os.path.abspath(file_path) if file_path else None)

    def _parse_package(self, dir_path: str, file_path: str) -> ParseResult:
        """Разобрать директорию; если пакета нет - родительскую."""
        package = self._parse_dir(dir_path, file_path)

        if package is None and self.config.fallback_to_parent_dir:
            parent = os.path.dirname(dir_path)
            if parent != dir_path:
                logger.debug(f"[Analysis] Nothing in {dir_path}, trying {parent}")
                package = self._parse_dir(parent)

        if package is None:
            return ParseResult.empty()

        return ParseResult(packages={package.path: package})

    def _parse_dir(
        self, dir_path: str, target_file: str | None = None
    ) -> PackageInfo | None:
        """Разобрать все файлы директории и собрать пакет (по имени пакета target_file)."""
        files = self.scanner.scan(dir_path)
        file_facts = [self.parser.parse_file(path) for path in files]
        return self.aggregator.merge(dir_path, file_facts, target_file)

    def resolve(self, result: ParseResult) -> ResolutionResult:
        """Вычислить, какие структуры реализуют какие интерфейсы."""
        return self.resolver.resolve(
            get_interface_methods(result),
            get_implementations(result),
            get_structs_info(result),
        )

    def analyze_file(self, file_path: str) -> tuple[ParseResult, ResolutionResult]:
        """Разобрать пакет файла и сразу вычислить реализации."""
        result = self.parse_go_file(file_path)
        return result, self.resolve(result)

    def implementations_of(
        self, result: ParseResult, resolution: ResolutionResult, interface_name: str
    ) -> dict[str, Location | None]:
        """Структуры, реализующие интерфейс, с позициями их объявлений."""
        receivers = get_implementations(result)
        return {
            name: receivers.get(name, {}).get(STRUCT_DEF_KEY)
            for name in sorted(resolution.implementations.get(interface_name, ()))
        }

    def interfaces_of(self, resolution: ResolutionResult, struct_name: str) -> set[str]:
        """Интерфейсы, которые реализует структура."""
        return {
            interface_name
            for interface_name, struct_names in resolution.implementations.items()
            if struct_name in struct_names
        }

    # Запросы для слоя отображения
    get_all_interface_names = staticmethod(get_all_interface_names)
    get_interface_methods = staticmethod(get_interface_methods)
    get_interface_locations = staticmethod(get_interface_locations)
    get_implementations = staticmethod(get_implementations)
    get_structs_info = staticmethod(get_structs_info)
