"""Модели данных для анализа реализаций интерфейсов."""

import logging
from dataclasses import dataclass, field, asdict
from typing import Any

logger = logging.getLogger(__name__)


class AnalysisError(Exception):
    """Базовая ошибка анализа."""


class ParserUnavailableError(AnalysisError):
    """Грамматика Go для tree-sitter недоступна."""


@dataclass(frozen=True)
class Location:
    """Позиция в исходнике (строка с нуля)."""

    line: int
    file_path: str


@dataclass(frozen=True)
class MethodInfo:
    """Метод, объявленный в интерфейсе."""

    name: str
    line: int
    file_path: str


@dataclass(frozen=True)
class InterfaceInfo:
    """Объявление интерфейса."""

    name: str
    line: int
    file_path: str
    methods: tuple[MethodInfo, ...] = ()
    internal_type: str | None = None  # встроенный интерфейс, в резолвере не используется


@dataclass(frozen=True)
class FieldInfo:
    """Поле структуры."""

    name: str
    type_name: str
    line: int
    file_path: str
    embedded: bool = False
    is_pointer: bool = False


@dataclass(frozen=True)
class StructInfo:
    """Объявление структуры."""

    name: str
    line: int
    file_path: str
    fields: tuple[FieldInfo, ...] = ()


@dataclass(frozen=True)
class ImplementationInfo:
    """Метод, привязанный к типу-получателю."""

    receiver_type: str
    method_name: str
    line: int
    file_path: str
    is_pointer: bool = False


@dataclass(frozen=True)
class ExplicitDeclaration:
    """Директива "ensure X implements Y" из комментария."""

    struct_name: str
    interface_name: str
    line: int
    file_path: str


@dataclass(frozen=True)
class FileFacts:
    """Вклад одного файла в пакет."""

    file_path: str
    package_name: str | None = None
    interfaces: tuple[InterfaceInfo, ...] = ()
    structs: tuple[StructInfo, ...] = ()
    methods: tuple[ImplementationInfo, ...] = ()
    declarations: tuple[ExplicitDeclaration, ...] = ()

    @property
    def is_empty(self) -> bool:
        return self.package_name is None


@dataclass(frozen=True)
class PackageInfo:
    """Факты одного пакета (директории)."""

    path: str
    name: str
    interfaces: tuple[InterfaceInfo, ...] = ()
    structs: tuple[StructInfo, ...] = ()
    methods: tuple[ImplementationInfo, ...] = ()
    declarations: tuple[ExplicitDeclaration, ...] = ()


@dataclass(frozen=True)
class ParseResult:
    """Результат разбора: путь директории -> PackageInfo."""

    packages: dict[str, PackageInfo] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> "ParseResult":
        return cls(packages={})

    @property
    def is_empty(self) -> bool:
        return not self.packages

    def to_dict(self) -> dict:
        """Преобразовать в словарь для JSON сериализации."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Any) -> "ParseResult":
        """
        Восстановить результат из словаря (формат to_dict).

        Некорректные данные дают пустой результат, исключение не выбрасывается.
        """
        try:
            packages = {
                path: _package_from_dict(raw) for path, raw in data["packages"].items()
            }
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            logger.warning(f"[Analysis] Malformed parse result payload: {e}")
            return cls.empty()

        return cls(packages=packages)


def _package_from_dict(raw: dict) -> PackageInfo:
    return PackageInfo(
        path=raw["path"],
        name=raw["name"],
        interfaces=tuple(
            InterfaceInfo(
                name=i["name"],
                line=i["line"],
                file_path=i["file_path"],
                methods=tuple(MethodInfo(**m) for m in i.get("methods", ())),
                internal_type=i.get("internal_type"),
            )
            for i in raw.get("interfaces", ())
        ),
        structs=tuple(
            StructInfo(
                name=s["name"],
                line=s["line"],
                file_path=s["file_path"],
                fields=tuple(FieldInfo(**f) for f in s.get("fields", ())),
            )
            for s in raw.get("structs", ())
        ),
        methods=tuple(ImplementationInfo(**m) for m in raw.get("methods", ())),
        declarations=tuple(
            ExplicitDeclaration(**d) for d in raw.get("declarations", ())
        ),
    )


@dataclass
class StructSummary:
    """Сводка по структуре для потребителя: позиция, поля, явные реализации."""

    name: str
    location: Location
    fields: dict[str, FieldInfo] = field(default_factory=dict)
    implements: set[str] = field(default_factory=set)


@dataclass(frozen=True)
class ImplementationEdge:
    """Ребро "структура реализует интерфейс" с причиной."""

    interface_name: str
    struct_name: str
    reason: str  # explicit | full | partial | embedded | receiver
    match_rate: float | None = None


@dataclass
class ResolutionResult:
    """Результат резолвинга реализаций."""

    satisfied_interfaces: set[str] = field(default_factory=set)
    implementations: dict[str, set[str]] = field(default_factory=dict)
    edges: dict[tuple[str, str], ImplementationEdge] = field(default_factory=dict)

    def has_edge(self, interface_name: str, struct_name: str) -> bool:
        return (interface_name, struct_name) in self.edges

    def add(self, edge: ImplementationEdge) -> bool:
        """Добавить ребро. Возвращает False, если оно уже было."""
        key = (edge.interface_name, edge.struct_name)
        if key in self.edges:
            return False

        self.edges[key] = edge
        self.satisfied_interfaces.add(edge.interface_name)
        self.implementations.setdefault(edge.interface_name, set()).add(
            edge.struct_name
        )
        return True
