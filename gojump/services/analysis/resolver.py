"""Определение того, какие структуры реализуют какие интерфейсы."""

import logging
from collections.abc import Iterable, Mapping

from gojump.constants import POINTER_PREFIX
from .aggregator import is_marker_key
from .config import AnalysisConfig
from .models import ImplementationEdge, ResolutionResult, StructSummary

logger = logging.getLogger(__name__)


def match_rate(interface_methods: Iterable[str], struct_methods: set[str]) -> float:
    """Доля методов интерфейса, присутствующих у структуры. Пустой интерфейс -> 0."""
    required = set(interface_methods)
    if not required:
        return 0.0
    return len(required & struct_methods) / len(required)


class ImplementationResolver:
    """
    Резолвер реализаций.

    Порядок правил:
    1. явные директивы "ensure X implements Y";
    2. совпадение наборов методов (полное или частичное по порогу),
       включая типы-получатели без объявления структуры (например, func-типы);
    3. замыкание по встроенным полям до неподвижной точки.
    """

    def __init__(self, config: AnalysisConfig):
        self.config = config

    def resolve(
        self,
        interface_methods: Mapping[str, list[str]],
        struct_methods: Mapping[str, Iterable[str]],
        structs: Mapping[str, StructSummary] | None = None,
    ) -> ResolutionResult:
        """
        Вычислить отношение реализации.

        Args:
            interface_methods: интерфейс -> имена методов
            struct_methods: тип-получатель (возможно "*Name") -> имена методов;
                служебные ключи позиций отфильтровываются
            structs: сводки структур (поля, явные директивы)

        Returns:
            ResolutionResult; ошибок этот шаг не выбрасывает
        """
        result = ResolutionResult()
        method_sets = self._effective_method_sets(struct_methods)

        if structs:
            self._apply_explicit(result, interface_methods, structs)
            struct_candidates = [name for name in method_sets if name in structs]
            receiver_candidates = [name for name in method_sets if name not in structs]
        else:
            struct_candidates = list(method_sets)
            receiver_candidates = []

        self._match_methods(result, interface_methods, method_sets, struct_candidates, "full")
        self._match_methods(
            result, interface_methods, method_sets, receiver_candidates, "receiver"
        )

        # Встроенный тип-получатель тоже передаёт свои интерфейсы
        if structs:
            self.close_over_embedding(result, interface_methods, structs)

        logger.info(
            f"[Resolver] {len(result.edges)} implementations, "
            f"{len(result.satisfied_interfaces)}/{len(interface_methods)} interfaces satisfied"
        )
        return result

    def _effective_method_sets(
        self, struct_methods: Mapping[str, Iterable[str]]
    ) -> dict[str, set[str]]:
        """Объединить методы Name и *Name в один набор на тип."""
        method_sets: dict[str, set[str]] = {}

        for receiver, methods in struct_methods.items():
            name = receiver.removeprefix(POINTER_PREFIX)
            names = method_sets.setdefault(name, set())
            names.update(m for m in methods if not is_marker_key(m))

        return method_sets

    def _apply_explicit(
        self,
        result: ResolutionResult,
        interface_methods: Mapping[str, list[str]],
        structs: Mapping[str, StructSummary],
    ) -> None:
        """Правило 1: явные директивы, если интерфейс известен."""
        for struct_name, summary in structs.items():
            for interface_name in sorted(summary.implements):
                if interface_name in interface_methods:
                    result.add(
                        ImplementationEdge(interface_name, struct_name, "explicit")
                    )
                else:
                    logger.debug(
                        f"[Resolver] {struct_name} declares unknown interface {interface_name}"
                    )

    def _match_methods(
        self,
        result: ResolutionResult,
        interface_methods: Mapping[str, list[str]],
        method_sets: dict[str, set[str]],
        candidates: list[str],
        full_reason: str,
    ) -> None:
        """Правило 2: сравнение наборов методов."""
        threshold = self.config.partial_match_threshold

        for interface_name, methods in interface_methods.items():
            # Пустой интерфейс подошёл бы любому типу
            if not methods:
                continue

            for name in candidates:
                if result.has_edge(interface_name, name):
                    continue

                rate = match_rate(methods, method_sets[name])
                if rate == 1.0:
                    reason = full_reason
                elif rate >= threshold:
                    reason = "partial"
                else:
                    continue

                result.add(ImplementationEdge(interface_name, name, reason, rate))

    def close_over_embedding(
        self,
        result: ResolutionResult,
        interface_names: Iterable[str],
        structs: Mapping[str, StructSummary],
    ) -> int:
        """
        Правило 3: структура со встроенным полем типа T реализует I,
        если T реализует I или T и есть I.

        Повторяется до неподвижной точки; max_closure_iterations
        ограничивает число проходов на случай циклов встраивания.

        Returns:
            число добавленных рёбер
        """
        interface_names = list(interface_names)
        added = 0
        iterations = 0
        changed = True

        while changed and iterations < self.config.max_closure_iterations:
            changed = False
            iterations += 1

            for struct_name, summary in structs.items():
                for field in summary.fields.values():
                    if not field.embedded:
                        continue

                    for interface_name in interface_names:
                        if not (
                            field.type_name == interface_name
                            or result.has_edge(interface_name, field.type_name)
                        ):
                            continue

                        if result.add(
                            ImplementationEdge(interface_name, struct_name, "embedded")
                        ):
                            added += 1
                            changed = True

        if changed:
            logger.debug(
                f"[Resolver] Embedding closure stopped at {iterations} iterations"
            )

        return added
