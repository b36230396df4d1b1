"""Tree-sitter based extraction of TypeScript source files.

One pass over the syntax tree collects decorators, imports, exports, classes
and functions. Traversal dispatches on an explicit table of node kinds; every
other node kind is only walked through.
"""

from __future__ import annotations

import codecs
import logging
from typing import TYPE_CHECKING, Any

import tree_sitter_typescript
from tree_sitter import Language, Node, Parser

from ngmap.errors import ExtractionError
from ngmap.models.records import (
    ClassInfo,
    DecoratorMetadata,
    ExportKind,
    ExportRef,
    FileRecord,
    FunctionInfo,
    FunctionKind,
    ImportRef,
    ImportSpecifier,
)
from ngmap.parse.resolve import classify_import, import_category
from ngmap.rules.config import DEFAULT_EXTENSIONS
from ngmap.utils import relative_posix

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence
    from pathlib import Path

logger = logging.getLogger(__name__)

_PARSERS: dict[str, Parser] = {}

# Decorators whose object-literal argument is read into DecoratorMetadata.
ROLE_DECORATORS = frozenset(
    {"Component", "Directive", "Injectable", "NgModule", "Pipe"}
)

_CLASS_NODES = frozenset({"class_declaration", "abstract_class_declaration", "class"})
_FUNCTION_VALUE_NODES = frozenset({"arrow_function", "function_expression", "function"})
_PARAMETER_NODES = frozenset({"required_parameter", "optional_parameter"})

_EXPORT_KINDS: dict[str, ExportKind] = {
    "class_declaration": "class",
    "abstract_class_declaration": "class",
    "function_declaration": "function",
    "generator_function_declaration": "function",
    "function_signature": "function",
    "interface_declaration": "interface",
    "type_alias_declaration": "type",
    "enum_declaration": "enum",
    "internal_module": "namespace",
    "module": "namespace",
}

_METADATA_KEYS: dict[str, str] = {
    "selector": "selector",
    "templateUrl": "template_url",
    "styleUrls": "style_urls",
    "styleUrl": "style_urls",
    "standalone": "standalone",
    "providedIn": "provided_in",
    "imports": "imports",
    "exports": "exports",
    "declarations": "declarations",
    "providers": "providers",
}
_METADATA_LIST_FIELDS = frozenset(
    {"style_urls", "imports", "exports", "declarations", "providers"}
)


def _get_parser(dialect: str) -> Parser:
    """Return the cached Tree-sitter parser for ``typescript`` or ``tsx``."""
    parser = _PARSERS.get(dialect)
    if parser is None:
        if dialect == "tsx":
            lang = Language(tree_sitter_typescript.language_tsx())
        else:
            lang = Language(tree_sitter_typescript.language_typescript())
        parser = Parser(lang)
        _PARSERS[dialect] = parser
    return parser


def _dialect_for(file_path: Path) -> str:
    return "tsx" if file_path.suffix == ".tsx" else "typescript"


def _text(node: Node | None) -> str:
    if node is None or not node.text:
        return ""
    return node.text.decode("utf8", errors="replace")


def _line(node: Node) -> int:
    return node.start_point[0] + 1


def _string_value(node: Node | None) -> str:
    """Strip the quotes from a string literal node."""
    text = _text(node)
    if len(text) >= 2 and text[0] in "'\"`" and text[-1] == text[0]:
        return text[1:-1]
    return text


def _first_child_of_type(node: Node, node_type: str) -> Node | None:
    for child in node.children:
        if child.type == node_type:
            return child
    return None


def _has_token(node: Node, token: str) -> bool:
    return any(not child.is_named and child.type == token for child in node.children)


def _decorator_expression(node: Node) -> Node | None:
    """Return the expression following ``@`` in a decorator node."""
    for child in node.named_children:
        if child.type != "comment":
            return child
    return None


def _decorator_name(node: Node) -> str | None:
    """Return ``Component`` for ``@Component({...})`` and ``Input`` for ``@Input``."""
    expr = _decorator_expression(node)
    if expr is None:
        return None
    if expr.type == "identifier":
        return _text(expr)
    if expr.type == "call_expression":
        callee = expr.child_by_field_name("function")
        if callee is not None and callee.type == "identifier":
            return _text(callee)
    return None


def _reference_name(node: Node) -> str | None:
    """Name of an array element in decorator metadata, if it is a reference."""
    if node.type in ("identifier", "member_expression"):
        return _text(node)
    if node.type == "string":
        return _string_value(node)
    if node.type == "call_expression":
        # RouterModule.forRoot(routes) -> RouterModule.forRoot
        return _text(node.child_by_field_name("function")) or None
    return None


def _list_value(node: Node) -> list[str]:
    if node.type == "array":
        names = (_reference_name(child) for child in node.named_children)
        return [name for name in names if name]
    name = _reference_name(node)
    return [name] if name else []


def _decorator_metadata(node: Node, decorator: str) -> DecoratorMetadata:
    """Read the object-literal argument of a role-defining decorator."""
    values: dict[str, Any] = {"decorator": decorator}

    expr = _decorator_expression(node)
    arguments = (
        expr.child_by_field_name("arguments")
        if expr is not None and expr.type == "call_expression"
        else None
    )
    config = None
    if arguments is not None and arguments.named_children:
        config = arguments.named_children[0]
    if config is None or config.type != "object":
        return DecoratorMetadata(**values)

    for pair in config.named_children:
        if pair.type != "pair":
            continue
        key_node = pair.child_by_field_name("key")
        value_node = pair.child_by_field_name("value")
        if key_node is None or value_node is None:
            continue

        key = _string_value(key_node) if key_node.type == "string" else _text(key_node)
        field_name = _METADATA_KEYS.get(key)
        if key == "name" and decorator == "Pipe":
            field_name = "pipe_name"
        if field_name is None:
            continue

        if field_name in _METADATA_LIST_FIELDS:
            values[field_name] = [*values.get(field_name, []), *_list_value(value_node)]
        elif field_name == "standalone":
            if value_node.type in ("true", "false"):
                values[field_name] = value_node.type == "true"
        elif value_node.type == "string":
            values[field_name] = _string_value(value_node)

    return DecoratorMetadata(**values)


def _binding_name(spec: Node) -> Node | None:
    """The alias of an import or export specifier, or else its name."""
    return spec.child_by_field_name("alias") or spec.child_by_field_name("name")


def _import_bindings(node: Node) -> tuple[ImportSpecifier, list[str]]:
    """Return the specifier kind and local names bound by an import statement.

    When a statement mixes forms (``import a, { b } from "x"``) the last
    form wins, so the example above is ``named``.
    """
    clause = _first_child_of_type(node, "import_clause")
    if clause is None:
        require = _first_child_of_type(node, "import_require_clause")
        if require is not None:
            ident = _first_child_of_type(require, "identifier")
            return "default", [_text(ident)] if ident is not None else []
        return "side-effect", []

    specifier: ImportSpecifier = "side-effect"
    names: list[str] = []
    for child in clause.named_children:
        if child.type == "identifier":
            specifier = "default"
            names.append(_text(child))
        elif child.type == "namespace_import":
            specifier = "namespace"
            ident = _first_child_of_type(child, "identifier")
            names.append(f"* as {_text(ident)}")
        elif child.type == "named_imports":
            specifier = "named"
            for spec in child.named_children:
                if spec.type != "import_specifier":
                    continue
                names.append(_text(_binding_name(spec)))
    return specifier, names


def _import_source(node: Node) -> Node | None:
    source = node.child_by_field_name("source")
    if source is not None:
        return source
    require = _first_child_of_type(node, "import_require_clause")
    if require is not None:
        return require.child_by_field_name("source") or _first_child_of_type(
            require, "string"
        )
    return _first_child_of_type(node, "string")


def _declared_exports(declaration: Node) -> list[ExportRef]:
    if declaration.type == "ambient_declaration":
        inner = declaration.named_children
        return _declared_exports(inner[0]) if inner else []

    if declaration.type in ("lexical_declaration", "variable_declaration"):
        exports: list[ExportRef] = []
        for declarator in declaration.named_children:
            if declarator.type != "variable_declarator":
                continue
            name = declarator.child_by_field_name("name")
            if name is not None and name.type == "identifier":
                exports.append(ExportRef(name=_text(name), kind="variable"))
        return exports

    kind = _EXPORT_KINDS.get(declaration.type)
    name = declaration.child_by_field_name("name")
    if kind is None or name is None:
        return []
    return [ExportRef(name=_text(name), kind=kind)]


def _class_heritage(node: Node) -> tuple[list[str], str | None]:
    heritage = _first_child_of_type(node, "class_heritage")
    if heritage is None:
        return [], None

    implements: list[str] = []
    extends: str | None = None
    for clause in heritage.named_children:
        if clause.type == "extends_clause":
            value = clause.child_by_field_name("value")
            if value is not None:
                extends = _text(value)
        elif clause.type == "implements_clause":
            for type_node in clause.named_children:
                if type_node.type == "generic_type":
                    type_node = type_node.child_by_field_name("name") or type_node
                implements.append(_text(type_node))
    return implements, extends


def _parameter_count(node: Node) -> int:
    params = node.child_by_field_name("parameters")
    if params is None:
        # x => x
        return 1 if node.child_by_field_name("parameter") is not None else 0
    return sum(1 for child in params.named_children if child.type in _PARAMETER_NODES)


def _signature_parts(node: Node) -> list[Node]:
    parts = (node.child_by_field_name("parameters"), node.child_by_field_name("body"))
    return [part for part in parts if part is not None]


class _SourceVisitor:
    """Collects extraction results from one syntax tree."""

    def __init__(self, file_path: Path, extensions: Sequence[str]) -> None:
        self.file_path = file_path
        self.extensions = extensions
        self.annotations: list[str] = []
        self.imports: list[ImportRef] = []
        self.exports: list[ExportRef] = []
        self.classes: list[ClassInfo] = []
        self.functions: list[FunctionInfo] = []
        self._handlers: dict[str, Callable[[Node], Iterable[Node]]] = {
            "import_statement": self._visit_import,
            "export_statement": self._visit_export,
            "class_declaration": self._visit_class,
            "abstract_class_declaration": self._visit_class,
            "class": self._visit_class,
            "function_declaration": self._visit_function,
            "generator_function_declaration": self._visit_function,
            "method_definition": self._visit_method,
            "variable_declarator": self._visit_variable,
            "decorator": self._visit_decorator,
        }

    def run(self, root: Node) -> None:
        stack = [root]
        while stack:
            node = stack.pop()
            handler = self._handlers.get(node.type)
            children = node.children if handler is None else handler(node)
            stack.extend(reversed(list(children)))

    def _record_decorator(self, node: Node) -> str | None:
        name = _decorator_name(node)
        if name and name not in self.annotations:
            self.annotations.append(name)
        return name

    def _visit_decorator(self, node: Node) -> list[Node]:
        self._record_decorator(node)
        return []

    def _visit_import(self, node: Node) -> list[Node]:
        source_node = _import_source(node)
        if source_node is None:
            return []

        source = _string_value(source_node)
        specifier, names = _import_bindings(node)
        kind, resolved = classify_import(self.file_path, source, self.extensions)
        self.imports.append(
            ImportRef(
                source=source,
                resolved=resolved,
                kind=kind,
                specifier=specifier,
                names=names,
                line=_line(node),
                category=import_category(source),
            )
        )
        return []

    def _visit_export(self, node: Node) -> list[Node]:
        decorators = [child for child in node.children if child.type == "decorator"]

        declaration = node.child_by_field_name("declaration")
        if declaration is not None:
            self.exports.extend(_declared_exports(declaration))
            if declaration.type in _CLASS_NODES:
                return self._visit_class(declaration, decorators)
            for decorator in decorators:
                self._record_decorator(decorator)
            return [declaration]

        for decorator in decorators:
            self._record_decorator(decorator)

        value = node.child_by_field_name("value")
        if value is not None:
            self.exports.append(ExportRef(name="default", kind="default"))
            return [value]

        has_source = node.child_by_field_name("source") is not None
        clause = _first_child_of_type(node, "export_clause")
        if clause is not None:
            kind: ExportKind = "reexport" if has_source else "binding"
            for spec in clause.named_children:
                if spec.type != "export_specifier":
                    continue
                exported = _string_value(_binding_name(spec))
                self.exports.append(ExportRef(name=exported, kind=kind))
        elif has_source:
            # export * from "./x" / export * as ns from "./x"
            namespace = _first_child_of_type(node, "namespace_export")
            name = "*"
            if namespace is not None and namespace.named_children:
                name = _text(namespace.named_children[-1])
            self.exports.append(ExportRef(name=name, kind="reexport"))
        return []

    def _visit_class(
        self, node: Node, outer_decorators: Sequence[Node] = ()
    ) -> list[Node]:
        decorator_nodes = [
            *outer_decorators,
            *(child for child in node.children if child.type == "decorator"),
        ]
        decorators: list[str] = []
        metadata: DecoratorMetadata | None = None
        for decorator in decorator_nodes:
            name = self._record_decorator(decorator)
            if not name:
                continue
            decorators.append(name)
            if metadata is None and name in ROLE_DECORATORS:
                metadata = _decorator_metadata(decorator, name)

        name_node = node.child_by_field_name("name")
        if name_node is not None:
            implements, extends = _class_heritage(node)
            self.classes.append(
                ClassInfo(
                    name=_text(name_node),
                    implements=implements,
                    extends=extends,
                    decorators=decorators,
                    metadata=metadata,
                    line=_line(node),
                )
            )

        body = node.child_by_field_name("body")
        return [body] if body is not None else []

    def _visit_function(self, node: Node) -> list[Node]:
        name_node = node.child_by_field_name("name")
        if name_node is not None:
            self.functions.append(
                FunctionInfo(
                    name=_text(name_node),
                    kind="function",
                    parameters=_parameter_count(node),
                    is_async=_has_token(node, "async"),
                    line=_line(node),
                )
            )
        return _signature_parts(node)

    def _visit_method(self, node: Node) -> list[Node]:
        # Object-literal methods are properties, not class members.
        if node.parent is None or node.parent.type != "class_body":
            return _signature_parts(node)

        name = _text(node.child_by_field_name("name")) or "unknown"
        kind: FunctionKind = "method"
        if name == "constructor":
            kind = "constructor"
        elif _has_token(node, "get"):
            kind = "getter"
        elif _has_token(node, "set"):
            kind = "setter"

        self.functions.append(
            FunctionInfo(
                name=name,
                kind=kind,
                parameters=_parameter_count(node),
                is_async=_has_token(node, "async"),
                line=_line(node),
            )
        )
        return _signature_parts(node)

    def _visit_variable(self, node: Node) -> list[Node]:
        name_node = node.child_by_field_name("name")
        value = node.child_by_field_name("value")
        if value is None:
            return []

        if (
            name_node is not None
            and name_node.type == "identifier"
            and value.type in _FUNCTION_VALUE_NODES
        ):
            self.functions.append(
                FunctionInfo(
                    name=_text(name_node),
                    kind="arrow" if value.type == "arrow_function" else "function",
                    parameters=_parameter_count(value),
                    is_async=_has_token(value, "async"),
                    line=_line(node),
                )
            )
            return _signature_parts(value)

        return [value]


def _first_error_line(root: Node) -> int:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return _line(node)
        if node.has_error:
            stack.extend(reversed(node.children))
    return _line(root)


def _read_source(file_path: Path) -> bytes:
    try:
        return file_path.read_bytes()
    except OSError as exc:
        msg = f"Cannot read {file_path}: {exc.strerror or exc}"
        raise ExtractionError(msg, path=str(file_path)) from exc


def _decode(source_bytes: bytes, file_path: Path) -> str:
    try:
        return source_bytes.decode("utf-8")
    except UnicodeDecodeError as exc:
        msg = f"Cannot decode {file_path} as UTF-8: {exc.reason}"
        raise ExtractionError(msg, path=str(file_path)) from exc


def _parse(
    source_bytes: bytes, file_path: Path, extensions: Sequence[str]
) -> _SourceVisitor:
    """Parse and visit one file. Raises ExtractionError on syntax errors."""
    tree = _get_parser(_dialect_for(file_path)).parse(source_bytes)
    root_node = tree.root_node
    if root_node.has_error:
        msg = f"Parse error in {file_path} near line {_first_error_line(root_node)}"
        raise ExtractionError(msg, path=str(file_path))

    visitor = _SourceVisitor(file_path, extensions)
    visitor.run(root_node)
    return visitor


def extract_source(
    file_path: Path,
    root: Path,
    *,
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
    source_bytes: bytes | None = None,
) -> FileRecord:
    """Extract a FileRecord from one TypeScript file.

    Args:
        file_path: Absolute path to the source file
        root: Project root, used for ``relative_path``
        extensions: Source extensions used to resolve relative imports
        source_bytes: File content, if the caller already read it

    Returns:
        A FileRecord with role fields left at their defaults. When the file
        cannot be read, decoded or parsed the record has empty extracted
        fields and ``parse_error`` set; the failure is logged, not raised.
    """
    relative_path = relative_posix(file_path, root)
    line_count = 0
    try:
        if source_bytes is None:
            source_bytes = _read_source(file_path)
        if source_bytes.startswith(codecs.BOM_UTF8):
            source_bytes = source_bytes[len(codecs.BOM_UTF8) :]
        line_count = _decode(source_bytes, file_path).count("\n") + 1
        visitor = _parse(source_bytes, file_path, extensions)
    except ExtractionError as exc:
        logger.warning("%s", exc)
        return FileRecord(
            path=file_path.as_posix(),
            relative_path=relative_path,
            line_count=line_count,
            parse_error=str(exc),
        )

    return FileRecord(
        path=file_path.as_posix(),
        relative_path=relative_path,
        line_count=line_count,
        annotations=visitor.annotations,
        imports=visitor.imports,
        exports=visitor.exports,
        classes=visitor.classes,
        functions=visitor.functions,
    )


__all__ = ["ROLE_DECORATORS", "extract_source"]
