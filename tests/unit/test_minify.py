"""Unit tests for the minifier collaborators."""

from bundlepass.minify import Minifiers, minify_css, minify_html, minify_js


class TestMinifiers:
    def test_js(self):
        code = "// comment\nconst  a = 1;\n\nexport default a;\n"
        out = minify_js(code, target="es2017")
        assert "comment" not in out
        assert "const a=1;" in out

    def test_js_deterministic(self):
        code = "function f ( x ) {\n  return x + 1;\n}\n"
        assert minify_js(code) == minify_js(code)

    def test_css(self):
        out = minify_css("body {\n  margin: 0px;\n}\n/* note */\n")
        assert "note" not in out
        assert out.startswith("body{margin:0")

    def test_html(self):
        out = minify_html("<html>\n  <!-- note -->\n  <body>\n    <p>hi</p>\n  </body>\n</html>\n")
        assert "note" not in out
        assert "<p>hi</p>" in out

    def test_defaults(self):
        minifiers = Minifiers()
        assert minifiers.js is minify_js
        assert minifiers.css is minify_css
        assert minifiers.html is minify_html
