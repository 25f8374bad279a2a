"""Конфигурация для анализа реализаций."""

from dataclasses import dataclass

from gojump.constants import LANGUAGE_MAP


@dataclass
class AnalysisConfig:
    """Конфигурация анализа реализаций интерфейсов."""

    # Расширения файлов для анализа
    file_extensions: tuple[str, ...] = tuple(f".{ext}" for ext in LANGUAGE_MAP.keys())

    # Доля методов интерфейса, достаточная для частичного совпадения.
    # Эвристика: прощает методы, которые парсер не увидел.
    partial_match_threshold: float = 0.8

    # Предел итераций замыкания по встраиванию (страховка от циклов)
    max_closure_iterations: int = 5

    # Время жизни кэша, секунды
    file_cache_ttl: float = 30.0
    package_cache_ttl: float = 300.0

    # Если в директории файла пакет не найден, пробуем родительскую
    fallback_to_parent_dir: bool = True

    # Шаблоны исключения файлов (gitwildmatch)
    exclude_patterns: tuple[str, ...] = ()
    respect_gitignore: bool = True
