"""Unit tests for the tree-sitter import scanner."""

import pytest

from bundlepass.core.errors import ParseError
from bundlepass.core.types import ImportKind
from bundlepass.parsing.scanner import ImportScanner, css_proxy_imports, is_css_proxy


@pytest.fixture
def scanner():
    return ImportScanner()


class TestScan:
    def test_static_import_offsets(self, scanner):
        code = 'import a from "./a.js";\n'
        [record] = scanner.scan(code)

        assert record.kind == ImportKind.STATIC
        assert record.specifier == "./a.js"
        assert code[record.specifier_start:record.specifier_end] == "./a.js"
        assert code[record.statement_start:record.statement_end] == 'import a from "./a.js";'

    def test_records_are_ordered_by_position(self, scanner):
        code = 'import "./first.js";\nimport x from "./second.js";\nexport * from "./third.js";\n'
        assert [r.specifier for r in scanner.scan(code)] == ["./first.js", "./second.js", "./third.js"]

    def test_bindings(self, scanner):
        code = (
            'import def from "./a.js";\n'
            'import * as ns from "./b.js";\n'
            'import {foo, bar as baz} from "./c.js";\n'
            'import d, {e} from "./d.js";\n'
            'import "./e.js";\n'
        )
        records = scanner.scan(code)

        assert records[0].bindings.default == "def"
        assert records[1].bindings.namespace == "ns"
        assert records[2].bindings.named == (("foo", "foo"), ("bar", "baz"))
        assert records[3].bindings.bound_names == ["d", "e"]
        assert records[4].bindings.is_empty

    def test_reexport_is_static(self, scanner):
        [record] = scanner.scan('export {x} from "./x.js";')
        assert record.is_static
        assert record.reexport

    def test_local_export_is_not_an_import(self, scanner):
        assert scanner.scan("export const x = 1;") == []

    def test_dynamic_import_is_not_static(self, scanner):
        code = 'async function load() { return import("./lazy.js"); }'
        [record] = scanner.scan(code)

        assert record.kind == ImportKind.DYNAMIC
        assert record.specifier == "./lazy.js"
        assert not record.is_static

    def test_dynamic_import_with_expression(self, scanner):
        [record] = scanner.scan("const name = './x.js'; import(name);")
        assert record.kind == ImportKind.DYNAMIC
        assert record.specifier is None

    def test_import_meta_is_not_static(self, scanner):
        records = scanner.scan("const here = import.meta.url;")
        assert [r.kind for r in records] == [ImportKind.META]

    def test_non_ascii_source_uses_byte_offsets(self, scanner):
        code = 'const s = "héllo";\nimport a from "./a.js";\n'
        [record] = scanner.scan(code)
        raw = code.encode("utf-8")

        assert raw[record.specifier_start:record.specifier_end] == b"./a.js"

    def test_syntax_error_raises(self, scanner):
        with pytest.raises(ParseError) as exc:
            scanner.scan("import { from ;", file_path="broken.js")

        assert exc.value.file_path == "broken.js"
        assert "broken.js" in str(exc.value)
        assert "line 1" in exc.value.message

    def test_static_specifiers(self, scanner):
        code = 'import "./a.js";\nimport("./b.js");\nexport * from "./c.js";\n'
        assert scanner.static_specifiers(code) == ["./a.js", "./c.js"]


class TestMappingLiteral:
    def test_finds_json_literal(self, scanner):
        code = 'const json = {"foo": "_foo_1", "bar": "_bar_2"};\nexport default json;\n'
        assert scanner.find_mapping_literal(code) == '{"foo": "_foo_1", "bar": "_bar_2"}'

    def test_finds_exported_declaration(self, scanner):
        code = 'export let json = {foo: "a"};'
        assert scanner.find_mapping_literal(code) == '{foo: "a"}'

    def test_ignores_other_names(self, scanner):
        assert scanner.find_mapping_literal('const other = {foo: "a"};') is None

    def test_non_object_value(self, scanner):
        assert scanner.find_mapping_literal('const json = "nope";') is None

    def test_nested_declaration_ignored(self, scanner):
        code = 'function f() { const json = {foo: "a"}; return json; }'
        assert scanner.find_mapping_literal(code) is None


class TestCSSProxy:
    def test_is_css_proxy(self):
        assert is_css_proxy("./x.css.proxy.js")
        assert is_css_proxy("x.module.css.proxy.js")
        assert not is_css_proxy("./x.proxy.js")
        assert not is_css_proxy("./x.css")
        assert not is_css_proxy(None)

    def test_css_proxy_imports_only_static(self, scanner):
        code = 'import "./a.css.proxy.js";\nimport("./b.css.proxy.js");\nimport "./c.js";\n'
        records = css_proxy_imports(scanner.scan(code))
        assert [r.specifier for r in records] == ["./a.css.proxy.js"]
