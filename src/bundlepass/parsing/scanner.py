"""
Import Scanner for bundlepass.

Finds module references in JavaScript source using tree-sitter:
- Static imports (`import x from "./a.js"`, `import "./a.js"`)
- Re-exports (`export * from "./a.js"`), which are static as well
- Dynamic imports (`import("./a.js")`)
- `import.meta` references

Only static records are eligible for tracing and rewriting. Offsets in the
returned records are UTF-8 byte offsets into the scanned text.
"""

import logging
import threading
from typing import Iterable, Iterator, List, Optional, Tuple

import tree_sitter_javascript
from tree_sitter import Language, Node, Parser

from ..config import CSS_PROXY_SUFFIX, PROXY_MAPPING_NAME
from ..core.errors import ParseError
from ..core.types import ImportBindings, ImportKind, ImportRecord

logger = logging.getLogger(__name__)

JS_LANGUAGE = Language(tree_sitter_javascript.language())

DECLARATION_TYPES = ("lexical_declaration", "variable_declaration")


def _text(node: Node) -> str:
    return node.text.decode("utf-8")


def _string_specifier(node: Node) -> Tuple[int, int, str]:
    """Offsets and value of a string literal, without its quotes."""
    start = node.start_byte + 1
    end = node.end_byte - 1
    return start, end, node.text[1:-1].decode("utf-8")


def _read_bindings(clause: Optional[Node]) -> ImportBindings:
    if clause is None:
        return ImportBindings()

    default = None
    namespace = None
    named = []
    for child in clause.named_children:
        if child.type == "identifier":
            default = _text(child)
        elif child.type == "namespace_import":
            ident = next((c for c in child.named_children if c.type == "identifier"), None)
            if ident is not None:
                namespace = _text(ident)
        elif child.type == "named_imports":
            for spec in child.named_children:
                if spec.type != "import_specifier":
                    continue
                name = spec.child_by_field_name("name")
                alias = spec.child_by_field_name("alias")
                imported = _text(name)
                named.append((imported, _text(alias) if alias is not None else imported))
    return ImportBindings(default=default, namespace=namespace, named=tuple(named))


def _first_error(root: Node) -> Optional[Node]:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        if node.has_error:
            stack.extend(reversed(node.children))
    return None


def _is_import_meta(node: Node) -> bool:
    if node.type == "meta_property":
        return node.text.startswith(b"import")
    if node.type == "member_expression":
        obj = node.child_by_field_name("object")
        return obj is not None and obj.type == "import"
    return False


class ImportScanner:
    """
    Thin wrapper around a tree-sitter JavaScript parser.

    tree-sitter parsers must not be shared between threads, so each thread
    gets its own lazily created parser.
    """

    def __init__(self):
        self._local = threading.local()

    @property
    def _parser(self) -> Parser:
        parser = getattr(self._local, "parser", None)
        if parser is None:
            parser = Parser(JS_LANGUAGE)
            self._local.parser = parser
        return parser

    def _parse(self, source: bytes):
        return self._parser.parse(source)

    def scan(self, text: str, file_path=None) -> List[ImportRecord]:
        """
        Return every module reference in `text`, ordered by position.

        Raises:
            ParseError: If the text is not syntactically valid JavaScript.
        """
        tree = self._parse(text.encode("utf-8"))
        root = tree.root_node

        if root.has_error:
            bad = _first_error(root) or root
            line, column = bad.start_point
            raise ParseError(
                f"syntax error at line {line + 1}, column {column + 1}",
                file_path=file_path,
            )

        return list(self._walk(root))

    def _walk(self, root: Node) -> Iterator[ImportRecord]:
        stack = [root]
        while stack:
            node = stack.pop()

            if node.type == "import_statement":
                record = self._static_import(node)
                if record is not None:
                    yield record
                continue

            if node.type == "export_statement" and node.child_by_field_name("source") is not None:
                record = self._static_import(node)
                if record is not None:
                    yield record
                continue

            if node.type == "call_expression":
                function = node.child_by_field_name("function")
                if function is not None and function.type == "import":
                    yield self._dynamic_import(node)

            elif _is_import_meta(node):
                yield ImportRecord(
                    specifier_start=node.start_byte,
                    specifier_end=node.end_byte,
                    statement_start=node.start_byte,
                    statement_end=node.end_byte,
                    kind=ImportKind.META,
                )
                continue

            stack.extend(reversed(node.children))

    def _static_import(self, node: Node) -> Optional[ImportRecord]:
        source = node.child_by_field_name("source")
        if source is None or source.type != "string":
            return None

        start, end, specifier = _string_specifier(source)
        if node.type == "import_statement":
            clause = next((c for c in node.named_children if c.type == "import_clause"), None)
            bindings = _read_bindings(clause)
            reexport = False
        else:
            bindings = ImportBindings()
            reexport = True

        return ImportRecord(
            specifier_start=start,
            specifier_end=end,
            statement_start=node.start_byte,
            statement_end=node.end_byte,
            kind=ImportKind.STATIC,
            specifier=specifier,
            bindings=bindings,
            reexport=reexport,
        )

    def _dynamic_import(self, node: Node) -> ImportRecord:
        arguments = node.child_by_field_name("arguments")
        first = arguments.named_children[0] if arguments is not None and arguments.named_children else None

        if first is not None and first.type == "string":
            start, end, specifier = _string_specifier(first)
        elif first is not None:
            start, end, specifier = first.start_byte, first.end_byte, None
        else:
            start, end, specifier = node.start_byte, node.end_byte, None

        return ImportRecord(
            specifier_start=start,
            specifier_end=end,
            statement_start=node.start_byte,
            statement_end=node.end_byte,
            kind=ImportKind.DYNAMIC,
            specifier=specifier,
        )

    def static_specifiers(self, text: str, file_path=None) -> List[str]:
        """Specifiers of the static imports in `text`."""
        return [r.specifier for r in self.scan(text, file_path) if r.is_static and r.specifier]

    def find_mapping_literal(self, text: str) -> Optional[str]:
        """
        Source text of the object literal a CSS module proxy binds to `json`.

        Only top-level declarations are considered. Returns None when there is
        no such literal; callers must not guess its shape.
        """
        root = self._parse(text.encode("utf-8")).root_node
        for node in root.named_children:
            if node.type == "export_statement":
                node = node.child_by_field_name("declaration")
                if node is None:
                    continue
            if node.type not in DECLARATION_TYPES:
                continue
            for declarator in node.named_children:
                if declarator.type != "variable_declarator":
                    continue
                name = declarator.child_by_field_name("name")
                value = declarator.child_by_field_name("value")
                if name is None or value is None or _text(name) != PROXY_MAPPING_NAME:
                    continue
                if value.type == "object":
                    return _text(value)
                return None
        return None


def is_css_proxy(specifier: Optional[str]) -> bool:
    return bool(specifier) and specifier.endswith(CSS_PROXY_SUFFIX)


def css_proxy_imports(records: Iterable[ImportRecord]) -> List[ImportRecord]:
    """Static imports of CSS proxy modules."""
    return [r for r in records if r.is_static and is_css_proxy(r.specifier)]
