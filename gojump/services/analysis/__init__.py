"""Анализ реализаций интерфейсов в пакетах Go."""

from .config import AnalysisConfig
from .models import ParseResult, ResolutionResult
from .service import AnalysisService

__all__ = ["AnalysisConfig", "AnalysisService", "ParseResult", "ResolutionResult"]
