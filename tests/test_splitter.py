"""
Splitter tests - comment/code segmentation

Tests the single-pass state machine that groups source lines into
(documentation, code) sections.
"""

import pytest

from narrativ.lib.errors import SegmentationError
from narrativ.lib.splitter import commentPattern_make, lines_split, sections_split
from narrativ.models.sections import LanguageMeta, Section


JS = LanguageMeta(language="javascript", symbol="//")
PY = LanguageMeta(language="python", symbol="#")


class TestBasicSplitting:
    """Test the documented examples and simplest inputs"""

    def test_alternating_docs_and_code(self):
        """Each comment run followed by code becomes one section"""
        sections = sections_split(JS, "// hello\nx = 1\n// world\ny = 2\n")

        assert sections == [
            Section(doc_text="hello\n", code_text="x = 1\n"),
            Section(doc_text="world\n", code_text="y = 2\n"),
        ]

    def test_empty_source(self):
        """Empty source still yields one (empty) section"""
        assert sections_split(PY, "") == [Section(doc_text="", code_text="")]

    def test_code_only(self):
        """No comment lines: one section with empty docs"""
        sections = sections_split(PY, "import os\n\nprint(os.getcwd())\n")

        assert len(sections) == 1
        assert sections[0].doc_text == ""
        assert sections[0].code_text == "import os\n\nprint(os.getcwd())\n"

    def test_comments_only(self):
        """No code lines: one section with empty code"""
        sections = sections_split(PY, "# first\n# second\n")

        assert len(sections) == 1
        assert sections[0].doc_text == "first\nsecond\n"
        assert sections[0].code_text == ""

    def test_missing_final_newline(self):
        """Last line without newline is still a full line"""
        sections = sections_split(PY, "# doc\nx = 1")
        assert sections == [Section(doc_text="doc\n", code_text="x = 1\n")]

    def test_crlf_line_endings(self):
        """Windows line endings are treated as plain newlines"""
        sections = sections_split(PY, "# doc\r\nx = 1\r\n")
        assert sections == [Section(doc_text="doc\n", code_text="x = 1\n")]


class TestCommentRuns:
    """Test how comment and code runs are grouped"""

    def test_consecutive_comments_coalesce(self):
        """Several comment lines before code form one doc block"""
        source = "# one\n# two\n# three\ncode()\n"
        sections = sections_split(PY, source)

        assert sections == [Section(doc_text="one\ntwo\nthree\n", code_text="code()\n")]

    def test_leading_code_has_empty_docs(self):
        """Code before the first comment is a section without docs"""
        sections = sections_split(PY, "x = 1\n# doc\ny = 2\n")

        assert sections == [
            Section(doc_text="", code_text="x = 1\n"),
            Section(doc_text="doc\n", code_text="y = 2\n"),
        ]

    def test_trailing_comments_kept(self):
        """Comments after the last code line end up in a final section"""
        sections = sections_split(PY, "x = 1\n# the end\n")

        assert sections == [
            Section(doc_text="", code_text="x = 1\n"),
            Section(doc_text="the end\n", code_text=""),
        ]

    def test_blank_lines_are_code(self):
        """Blank lines between comments count as code and split sections"""
        sections = sections_split(PY, "# a\n\n# b\n")

        assert sections == [
            Section(doc_text="a\n", code_text="\n"),
            Section(doc_text="b\n", code_text=""),
        ]


class TestCommentMatching:
    """Test which lines count as documentation"""

    def test_indented_comment(self):
        """Leading whitespace before the symbol is allowed"""
        sections = sections_split(PY, "def f():\n    # inside\n    return 1\n")

        assert sections[1].doc_text == "inside\n"
        assert sections[1].code_text == "    return 1\n"

    def test_only_one_space_stripped(self):
        """At most one whitespace character after the symbol is removed"""
        sections = sections_split(PY, "#    indented markdown\n")
        assert sections[0].doc_text == "   indented markdown\n"

    def test_no_space_after_symbol(self):
        """Symbol directly followed by text"""
        sections = sections_split(JS, "//tight\n")
        assert sections[0].doc_text == "tight\n"

    def test_bare_symbol_is_blank_doc_line(self):
        """A line holding only the symbol is an empty documentation line"""
        sections = sections_split(PY, "# para one\n#\n# para two\n")
        assert sections[0].doc_text == "para one\n\npara two\n"

    def test_trailing_comment_is_code(self):
        """A comment after code on the same line stays code"""
        sections = sections_split(PY, "x = 1  # one\n")
        assert sections == [Section(doc_text="", code_text="x = 1  # one\n")]

    @pytest.mark.parametrize("symbol", ["--", "%", ";", "#", "//"])
    def test_symbols_are_literal(self, symbol):
        """Symbols with regex meaning are matched literally"""
        meta = LanguageMeta(language="x", symbol=symbol)
        sections = sections_split(meta, f"{symbol} doc\ncode\n")
        assert sections == [Section(doc_text="doc\n", code_text="code\n")]

    def test_regex_metacharacter_symbol(self):
        """A symbol like '*' does not turn into a regex quantifier"""
        meta = LanguageMeta(language="x", symbol="*")
        sections = sections_split(meta, "* doc\nx\n")
        assert sections == [Section(doc_text="doc\n", code_text="x\n")]

    def test_pattern_captures_doc(self):
        """The compiled pattern exposes the doc text"""
        pattern = commentPattern_make("//")
        assert pattern.match("   // some text").group("doc") == "some text"
        assert pattern.match("x // some text") is None


class TestProperties:
    """Structural guarantees of the splitter"""

    SOURCES = [
        "",
        "x\n",
        "# a\n",
        "# a\n# b\nx\ny\n# c\nz\n",
        "x\n# a\n\n\n# b\n# c\ny\n",
        "    # indented\n    code\n# end",
    ]

    @pytest.mark.parametrize("source", SOURCES)
    def test_reconstructs_source(self, source):
        """docs + code over all sections gives back every line, in order"""
        sections = sections_split(PY, source)
        rebuilt = "".join(s.doc_text + s.code_text for s in sections)

        expected = "".join(
            line.lstrip()[2:] + "\n" if line.lstrip().startswith("# ") else line + "\n"
            for line in lines_split(source)
        )
        assert rebuilt == expected

    @pytest.mark.parametrize("source", SOURCES)
    def test_idempotent(self, source):
        """Same input, same output"""
        assert sections_split(PY, source) == sections_split(PY, source)

    def test_code_only_always_one_section(self):
        """Any number of code lines without comments is one section"""
        source = "\n".join(f"line_{i} = {i}" for i in range(50)) + "\n"
        sections = sections_split(PY, source)
        assert len(sections) == 1
        assert sections[0].doc_text == ""

    def test_comment_only_always_one_section(self):
        """Any number of comment lines without code is one section"""
        source = "\n".join(f"# line {i}" for i in range(50)) + "\n"
        sections = sections_split(PY, source)
        assert len(sections) == 1
        assert sections[0].code_text == ""


class TestLinkRewriting:
    """Test (file:...) links while splitting"""

    def test_links_rewritten_in_docs(self):
        """Links in comment lines go through the rewrite callback"""
        sections = sections_split(
            JS,
            "// see [other](file:lib/other.js)\nx = 1\n",
            rewrite=lambda path: "/docs/other.js.html",
        )
        assert sections[0].doc_text == "see [other](/docs/other.js.html)\n"

    def test_links_in_code_untouched(self):
        """Code lines are never rewritten"""
        calls = []
        sections = sections_split(
            JS, "x = '(file:a.js)'\n", rewrite=lambda path: calls.append(path) or path
        )
        assert sections[0].code_text == "x = '(file:a.js)'\n"
        assert calls == []

    def test_rewrite_failure_is_fatal(self):
        """A failing rewrite aborts the split with the line number"""
        def rewrite(path):
            raise ValueError(f"cannot resolve {path}")

        with pytest.raises(SegmentationError, match="line 2") as excinfo:
            sections_split(JS, "x = 1\n// (file:missing.js)\n", rewrite=rewrite)

        assert excinfo.value.line_number == 2
        assert isinstance(excinfo.value.__cause__, ValueError)
