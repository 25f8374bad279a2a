"""Анализ реализаций интерфейсов для одного файла Go."""

import asyncio
import json
import logging

from gojump.config import Config
from gojump.services.analysis import AnalysisService, ParseResult, ResolutionResult

logger = logging.getLogger(__name__)


class Pipeline:
    """Пайплайн: разбор пакета файла -> поиск реализаций -> вывод."""

    def __init__(self, config: Config):
        self.config = config
        self.analysis_service = AnalysisService(config.to_analysis_config())

    async def run(self) -> None:
        """Запустить пайплайн."""
        # Шаг 1: разбираем пакет файла
        result = await self.analysis_service.parse_go_file_async(self.config.file_path)
        self._log_parse_result(result)

        if result.is_empty:
            logger.info("No usable facts found")
            print(json.dumps({"packages": {}}, indent=2))
            return

        # Шаг 2: ищем реализации
        resolution = self.analysis_service.resolve(result)
        self._log_resolution(resolution)

        print(json.dumps(self._format_output(result, resolution), ensure_ascii=False, indent=2))

    def _log_parse_result(self, result: ParseResult) -> None:
        """Логировать результаты разбора."""
        for pkg in result.packages.values():
            logger.info(
                f"[1/2] Package {pkg.name} ({pkg.path}): {len(pkg.interfaces)} interfaces, "
                f"{len(pkg.structs)} structs, {len(pkg.methods)} methods"
            )

    def _log_resolution(self, resolution: ResolutionResult) -> None:
        """Логировать найденные реализации."""
        logger.info(
            f"[2/2] Implementations: {len(resolution.edges)} edges, "
            f"{len(resolution.satisfied_interfaces)} interfaces satisfied"
        )

    def _format_output(self, result: ParseResult, resolution: ResolutionResult) -> dict:
        output = result.to_dict()
        output["implementations"] = {
            name: sorted(structs)
            for name, structs in sorted(resolution.implementations.items())
        }
        output["edges"] = [
            {
                "interface": edge.interface_name,
                "struct": edge.struct_name,
                "reason": edge.reason,
                "match_rate": edge.match_rate,
            }
            for _, edge in sorted(resolution.edges.items())
        ]
        return output


if __name__ == "__main__":
    config = Config.model_validate(
        {}
    )  # https://github.com/pydantic/pydantic/issues/3753
    logging.basicConfig(level=config.log_level.upper(), format="%(message)s")
    pipeline = Pipeline(config)
    asyncio.run(pipeline.run())
