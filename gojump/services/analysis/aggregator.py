"""Сборка фактов файлов в пакеты и запросы к результату разбора."""

import logging
import os

from gojump.constants import INTERFACE_DEF_KEY, MARKER_KEYS, STRUCT_DEF_KEY
from .models import (
    FileFacts,
    Location,
    PackageInfo,
    ParseResult,
    StructSummary,
)

logger = logging.getLogger(__name__)


def is_marker_key(key: str) -> bool:
    """Служебный ключ (позиция определения), а не имя метода."""
    return key in MARKER_KEYS


class FactAggregator:
    """Объединение фактов файлов одной директории в PackageInfo."""

    def merge(
        self,
        dir_path: str,
        file_facts: list[FileFacts],
        target_file: str | None = None,
    ) -> PackageInfo | None:
        """
        Объединить факты файлов в пакет.

        Имя пакета берётся из target_file (файла, для которого идёт разбор),
        иначе из первого файла с именем без суффикса _test. Файлы с другим
        именем пакета (например, внешние _test-пакеты) пропускаются.

        Returns:
            PackageInfo или None, если ни один файл не дал фактов
        """
        package_name = self._choose_package_name(file_facts, target_file)
        if package_name is None:
            return None

        interfaces, structs, methods, declarations = [], [], [], []

        for facts in file_facts:
            if facts.is_empty:
                continue

            if facts.package_name != package_name:
                logger.debug(
                    f"[Aggregator] {facts.file_path} declares package "
                    f"{facts.package_name}, expected {package_name}; skipped"
                )
                continue

            interfaces.extend(facts.interfaces)
            structs.extend(facts.structs)
            methods.extend(facts.methods)
            declarations.extend(facts.declarations)

        logger.debug(
            f"[Aggregator] Package {package_name} at {dir_path}: "
            f"{len(interfaces)} interfaces, {len(structs)} structs, {len(methods)} methods"
        )

        return PackageInfo(
            path=dir_path,
            name=package_name,
            interfaces=tuple(interfaces),
            structs=tuple(structs),
            methods=tuple(methods),
            declarations=tuple(declarations),
        )

    def _choose_package_name(
        self, file_facts: list[FileFacts], target_file: str | None
    ) -> str | None:
        names = [facts.package_name for facts in file_facts if not facts.is_empty]
        if not names:
            return None

        for facts in file_facts:
            if facts.file_path == target_file and not facts.is_empty:
                return facts.package_name

        for name in names:
            if not name.endswith("_test"):
                return name

        return names[0]


def get_all_interface_names(result: ParseResult) -> set[str]:
    """Имена всех интерфейсов."""
    return {iface.name for pkg in result.packages.values() for iface in pkg.interfaces}


def get_interface_methods(result: ParseResult) -> dict[str, list[str]]:
    """Интерфейс -> имена его собственных методов (без встроенных)."""
    interface_methods = {}

    for pkg in result.packages.values():
        for iface in pkg.interfaces:
            interface_methods[iface.name] = [m.name for m in iface.methods]

    return interface_methods


def get_interface_locations(result: ParseResult) -> dict[str, dict[str, Location]]:
    """
    Интерфейс -> {метод | INTERFACE_DEF_KEY: Location}.

    Под INTERFACE_DEF_KEY лежит позиция самого объявления интерфейса.
    """
    locations: dict[str, dict[str, Location]] = {}

    for pkg in result.packages.values():
        for iface in pkg.interfaces:
            method_locations = locations.setdefault(iface.name, {})
            method_locations[INTERFACE_DEF_KEY] = Location(iface.line, iface.file_path)

            for method in iface.methods:
                method_locations[method.name] = Location(method.line, method.file_path)

    return locations


def get_implementations(result: ParseResult) -> dict[str, dict[str, Location]]:
    """
    Тип-получатель -> {метод | STRUCT_DEF_KEY: Location}.

    Методы с указательным и значимым получателем сливаются под одним
    именем типа. Дубликаты перезаписываются в порядке обхода файлов.
    """
    receiver_methods: dict[str, dict[str, Location]] = {}

    for pkg in result.packages.values():
        for method in pkg.methods:
            receiver_methods.setdefault(method.receiver_type, {})[method.method_name] = (
                Location(method.line, method.file_path)
            )

        for struct in pkg.structs:
            receiver_methods.setdefault(struct.name, {})[STRUCT_DEF_KEY] = Location(
                struct.line, struct.file_path
            )

    return receiver_methods


def get_structs_info(result: ParseResult) -> dict[str, StructSummary]:
    """Структура -> позиция, поля и явно заявленные интерфейсы."""
    structs: dict[str, StructSummary] = {}

    for pkg in result.packages.values():
        for struct in pkg.structs:
            structs[struct.name] = StructSummary(
                name=struct.name,
                location=Location(struct.line, struct.file_path),
                fields={f.name: f for f in struct.fields},
            )

    # Явные директивы могут лежать в любом файле пакета
    for pkg in result.packages.values():
        for decl in pkg.declarations:
            summary = structs.get(decl.struct_name)
            if summary is None:
                logger.debug(
                    f"[Aggregator] Directive for unknown struct {decl.struct_name} "
                    f"at {os.path.basename(decl.file_path)}:{decl.line}"
                )
                continue
            summary.implements.add(decl.interface_name)

    return structs
