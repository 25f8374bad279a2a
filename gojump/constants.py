"""Общие константы."""

import re

# Расширение файла -> имя грамматики tree-sitter
LANGUAGE_MAP = {
    "go": "go",
}

# Служебные ключи в картах методов. Не являются допустимыми идентификаторами Go,
# поэтому не могут совпасть с именем метода.
INTERFACE_DEF_KEY = "<interface_def>"
STRUCT_DEF_KEY = "<struct_def>"
MARKER_KEYS = frozenset({INTERFACE_DEF_KEY, STRUCT_DEF_KEY})

# Префикс ключа для методов с указательным получателем (*Name)
POINTER_PREFIX = "*"

# Директива явной реализации: "ensure Foo implements Bar" / "确保 Foo 实现 Bar"
IMPLEMENTS_DIRECTIVE = re.compile(
    r"(?:\bensure\s+|确保\s*)\*?([A-Za-z_]\w*)(?:\s+implements\s+|\s*实现\s*)([A-Za-z_]\w*)",
    re.IGNORECASE | re.ASCII,
)
