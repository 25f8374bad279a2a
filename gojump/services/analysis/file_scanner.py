"""Поиск исходных файлов пакета с поддержкой gitignore."""

import os
import logging
from pathlib import Path
import pathspec

from .config import AnalysisConfig

logger = logging.getLogger(__name__)


class PackageScanner:
    """Перечисление файлов одного пакета (директории) с учётом исключений."""

    def __init__(self, config: AnalysisConfig):
        self.config = config
        self._exclude_spec = self._build_exclude_spec()

    def _build_exclude_spec(self) -> pathspec.PathSpec | None:
        """Собрать PathSpec из шаблонов конфигурации."""
        if not self.config.exclude_patterns:
            return None

        return pathspec.PathSpec.from_lines("gitwildmatch", self.config.exclude_patterns)

    def _load_gitignore(self, dir_path: str) -> pathspec.PathSpec | None:
        """Загрузить .gitignore директории пакета."""
        if not self.config.respect_gitignore:
            return None

        gitignore_path = Path(dir_path) / ".gitignore"
        if not gitignore_path.exists():
            return None

        try:
            with open(gitignore_path, encoding="utf-8") as f:
                return pathspec.PathSpec.from_lines("gitwildmatch", f)
        except OSError as e:
            logger.debug(f"[Scanner] Cannot read {gitignore_path}: {e}")
            return None

    def scan(self, dir_path: str) -> list[str]:
        """
        Найти исходные файлы пакета.

        Args:
            dir_path: директория пакета

        Returns:
            Отсортированный список абсолютных путей (без поддиректорий)
        """
        try:
            filenames = sorted(os.listdir(dir_path))
        except OSError as e:
            logger.warning(f"[Scanner] Cannot list {dir_path}: {e}")
            return []

        gitignore_spec = self._load_gitignore(dir_path)
        files = []

        for filename in filenames:
            full_path = os.path.join(dir_path, filename)
            if not os.path.isfile(full_path):
                continue

            if self._should_include_file(filename, gitignore_spec):
                files.append(full_path)

        logger.debug(f"[Scanner] Found {len(files)} files in {dir_path}")
        return files

    def _should_include_file(
        self, filename: str, gitignore_spec: pathspec.PathSpec | None
    ) -> bool:
        """Проверить, нужно ли включать файл в анализ."""
        # Проверка расширения
        if not filename.endswith(self.config.file_extensions):
            return False

        if self._exclude_spec and self._exclude_spec.match_file(filename):
            return False

        # Проверка .gitignore
        if gitignore_spec and gitignore_spec.match_file(filename):
            return False

        return True
