"""Парсинг AST Go для извлечения интерфейсов, структур и методов."""

import logging
from pathlib import Path
from typing import cast

from tree_sitter_language_pack import get_parser, SupportedLanguage

from gojump.constants import IMPLEMENTS_DIRECTIVE, LANGUAGE_MAP
from .config import AnalysisConfig
from .models import (
    ExplicitDeclaration,
    FieldInfo,
    FileFacts,
    ImplementationInfo,
    InterfaceInfo,
    MethodInfo,
    ParserUnavailableError,
    StructInfo,
)

logger = logging.getLogger(__name__)

# Элементы тела интерфейса в разных версиях грамматики
INTERFACE_METHOD_NODES = ("method_elem", "method_spec")
INTERFACE_EMBED_NODES = ("type_elem", "interface_type_name", "constraint_elem")


def node_text(node) -> str:
    """Текст узла (tree-sitter хранит только байты)."""
    return node.text.decode("utf-8", errors="replace")


def node_line(node) -> int:
    """Строка начала узла, с нуля."""
    return node.start_point[0]


class GoASTParser:
    """Извлечение фактов из одного файла Go через tree-sitter."""

    def __init__(self, config: AnalysisConfig):
        self.config = config
        self._parser = None

    def load(self) -> None:
        """
        Загрузить грамматику Go.

        Raises:
            ParserUnavailableError: если грамматика недоступна
        """
        if self._parser is not None:
            return

        try:
            self._parser = get_parser(cast(SupportedLanguage, LANGUAGE_MAP["go"]))
        except Exception as e:
            raise ParserUnavailableError(f"Go grammar is not available: {e}") from e

    def parse_file(self, file_path: str) -> FileFacts:
        """
        Прочитать и разобрать файл.

        Нечитаемый файл даёт пустой вклад, исключение не выбрасывается.
        """
        try:
            source = Path(file_path).read_bytes()
        except OSError as e:
            logger.warning(f"[Parser] Cannot read {file_path}: {e}")
            return FileFacts(file_path=file_path)

        try:
            return self.parse_source(source, file_path)
        except ValueError as e:
            logger.warning(f"[Parser] Cannot parse {file_path}: {e}")
            return FileFacts(file_path=file_path)

    def parse_source(self, source: bytes | str, file_path: str) -> FileFacts:
        """
        Разобрать исходный код файла.

        Args:
            source: содержимое файла
            file_path: путь, который попадёт в факты

        Returns:
            FileFacts; без package-клаузы вклад пустой
        """
        self.load()

        if isinstance(source, str):
            source = source.encode("utf-8")

        tree = self._parser.parse(source)
        root = tree.root_node

        package_name = self._extract_package_name(root)
        if package_name is None:
            logger.debug(f"[Parser] No package clause in {file_path}, skipping")
            return FileFacts(file_path=file_path)

        interfaces: list[InterfaceInfo] = []
        structs: list[StructInfo] = []
        methods: list[ImplementationInfo] = []
        declarations: list[ExplicitDeclaration] = []

        stack = [root]
        while stack:
            n = stack.pop()

            # Битые конструкции пропускаем целиком
            if n.type == "ERROR":
                continue

            if n.type == "type_declaration":
                for spec in n.named_children:
                    if spec.type != "type_spec":
                        continue
                    self._extract_type_spec(spec, file_path, interfaces, structs)

            elif n.type == "method_declaration":
                method = self._extract_method(n, file_path)
                if method:
                    methods.append(method)

            elif n.type == "comment":
                declarations.extend(self._extract_declarations(n, file_path))

            stack.extend(reversed(n.children))

        if root.has_error:
            logger.debug(f"[Parser] Syntax errors in {file_path}, partial facts kept")

        return FileFacts(
            file_path=file_path,
            package_name=package_name,
            interfaces=tuple(interfaces),
            structs=tuple(structs),
            methods=tuple(methods),
            declarations=tuple(declarations),
        )

    def _extract_package_name(self, root) -> str | None:
        """Имя пакета из package-клаузы."""
        for child in root.named_children:
            if child.type == "package_clause":
                for c in child.named_children:
                    if c.type == "package_identifier":
                        return node_text(c)
        return None

    def _type_name(self, node) -> tuple[str, bool]:
        """
        Имя типа из выражения типа.

        Returns:
            (имя, указатель ли); для неподдерживаемых выражений ("", False)
        """
        if node is None:
            return "", False

        if node.type == "type_identifier":
            return node_text(node), False

        if node.type == "pointer_type":
            inner = node.named_children[0] if node.named_children else None
            name, _ = self._type_name(inner)
            return name, bool(name)

        if node.type == "qualified_type":
            package = node.child_by_field_name("package")
            name = node.child_by_field_name("name")
            if package and name:
                return f"{node_text(package)}.{node_text(name)}", False
            return "", False

        # Stack[T] -> Stack
        if node.type == "generic_type":
            return self._type_name(node.child_by_field_name("type"))

        if node.type == "parenthesized_type" and node.named_children:
            return self._type_name(node.named_children[0])

        return "", False

    def _extract_type_spec(
        self,
        spec,
        file_path: str,
        interfaces: list[InterfaceInfo],
        structs: list[StructInfo],
    ) -> None:
        name_node = spec.child_by_field_name("name")
        type_node = spec.child_by_field_name("type")
        if not name_node or not type_node:
            return

        if type_node.type == "interface_type":
            interfaces.append(
                self._extract_interface(node_text(name_node), spec, type_node, file_path)
            )
        elif type_node.type == "struct_type":
            structs.append(
                self._extract_struct(node_text(name_node), spec, type_node, file_path)
            )

    def _extract_interface(
        self, name: str, spec, type_node, file_path: str
    ) -> InterfaceInfo:
        """Методы интерфейса и (последний) встроенный интерфейс."""
        methods = []
        internal_type = None

        for child in type_node.named_children:
            if child.has_error:
                continue

            if child.type in INTERFACE_METHOD_NODES:
                method_name = child.child_by_field_name("name")
                if method_name:
                    methods.append(
                        MethodInfo(
                            name=node_text(method_name),
                            line=node_line(child),
                            file_path=file_path,
                        )
                    )

            elif child.type in INTERFACE_EMBED_NODES:
                # Объединения вида ~int | ~string не считаем встраиванием
                if len(child.named_children) == 1:
                    embedded, _ = self._type_name(child.named_children[0])
                    if embedded:
                        internal_type = embedded

            elif child.type in ("type_identifier", "qualified_type"):
                embedded, _ = self._type_name(child)
                if embedded:
                    internal_type = embedded

        return InterfaceInfo(
            name=name,
            line=node_line(spec),
            file_path=file_path,
            methods=tuple(methods),
            internal_type=internal_type,
        )

    def _extract_struct(self, name: str, spec, type_node, file_path: str) -> StructInfo:
        """Поля структуры: встроенные и именованные."""
        fields = []

        for field_list in type_node.named_children:
            if field_list.type != "field_declaration_list":
                continue

            for decl in field_list.named_children:
                if decl.type != "field_declaration" or decl.has_error:
                    continue
                fields.extend(self._extract_fields(decl, file_path))

        return StructInfo(
            name=name,
            line=node_line(spec),
            file_path=file_path,
            fields=tuple(fields),
        )

    def _extract_fields(self, decl, file_path: str) -> list[FieldInfo]:
        type_name, is_pointer = self._type_name(decl.child_by_field_name("type"))
        names = decl.children_by_field_name("name")
        line = node_line(decl)

        if not names:
            # Встроенное поле: "*" идёт отдельным токеном перед типом
            if not type_name:
                return []
            is_pointer = is_pointer or any(c.type == "*" for c in decl.children)
            return [
                FieldInfo(
                    name=type_name,
                    type_name=type_name,
                    line=line,
                    file_path=file_path,
                    embedded=True,
                    is_pointer=is_pointer,
                )
            ]

        return [
            FieldInfo(
                name=node_text(n),
                type_name=type_name,
                line=line,
                file_path=file_path,
                embedded=False,
                is_pointer=is_pointer,
            )
            for n in names
        ]

    def _extract_method(self, node, file_path: str) -> ImplementationInfo | None:
        """Метод с получателем (x T) или (x *T)."""
        receiver = node.child_by_field_name("receiver")
        name_node = node.child_by_field_name("name")
        if not receiver or not name_node or receiver.has_error:
            return None

        params = [c for c in receiver.named_children if c.type == "parameter_declaration"]
        if not params:
            return None

        receiver_type, is_pointer = self._type_name(params[0].child_by_field_name("type"))
        if not receiver_type:
            return None

        return ImplementationInfo(
            receiver_type=receiver_type,
            method_name=node_text(name_node),
            line=node_line(node),
            file_path=file_path,
            is_pointer=is_pointer,
        )

    def _extract_declarations(self, comment, file_path: str) -> list[ExplicitDeclaration]:
        """Директивы "ensure X implements Y" / "确保 X 实现 Y" в комментарии."""
        text = node_text(comment)
        result = []

        for match in IMPLEMENTS_DIRECTIVE.finditer(text):
            result.append(
                ExplicitDeclaration(
                    struct_name=match.group(1),
                    interface_name=match.group(2),
                    line=node_line(comment) + text.count("\n", 0, match.start()),
                    file_path=file_path,
                )
            )

        return result
