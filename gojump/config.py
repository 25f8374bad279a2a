"""Настройки конфигурации."""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

from gojump.services.analysis.config import AnalysisConfig


class Config(BaseSettings):
    """Конфигурация приложения."""

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore"
    )

    # Файл для анализа (обязательно)
    file_path: str

    log_level: str = Field(default="INFO")

    # Настройки резолвера
    partial_match_threshold: float = Field(default=0.8, ge=0.0, le=1.0)
    max_closure_iterations: int = Field(default=5, ge=1)

    # Кэш, секунды
    file_cache_ttl: float = Field(default=30.0)
    package_cache_ttl: float = Field(default=300.0)

    # Сканирование
    fallback_to_parent_dir: bool = Field(default=True)
    exclude_patterns: list[str] = Field(default_factory=list)

    def to_analysis_config(self) -> AnalysisConfig:
        """Собрать конфигурацию сервиса анализа."""
        return AnalysisConfig(
            partial_match_threshold=self.partial_match_threshold,
            max_closure_iterations=self.max_closure_iterations,
            file_cache_ttl=self.file_cache_ttl,
            package_cache_ttl=self.package_cache_ttl,
            fallback_to_parent_dir=self.fallback_to_parent_dir,
            exclude_patterns=tuple(self.exclude_patterns),
        )
