"""
Highlighter process tests - running the external highlighter

Uses small stand-in scripts (tests/fixtures) run with the current
interpreter, plus a real pygments run through `python -m pygments`.
"""

import asyncio
import sys
import time
from pathlib import Path

import pytest

from narrativ.lib.errors import HighlighterProcessError, ReconciliationMismatchError
from narrativ.lib.highlighter import Highlighter
from narrativ.lib.splitter import sections_split
from narrativ.models.sections import LanguageMeta, Section


FIXTURES = Path(__file__).parent / "fixtures"
START = '<div class="highlight"><pre>'
END = "</pre></div>"

JS = LanguageMeta(language="javascript", symbol="//")
PY = LanguageMeta(language="python", symbol="#")


def fixture_command(name, *args):
    return [sys.executable, str(FIXTURES / name), *args]


def inner(fragment):
    """Fragment without the preamble/postamble"""
    assert fragment.startswith(START) and fragment.endswith(END)
    return fragment[len(START):-len(END)]


class TestEchoHighlighter:
    """Reconciliation against a highlighter that echoes its input"""

    def test_fragments_align_with_sections(self):
        """N sections in, N fragments out, each matching its section"""
        sections = sections_split(JS, "// hello\nx = 1\n// world\ny = 2\n// bye\nz = 3\n")
        highlighter = Highlighter(command=fixture_command("echo_highlighter.py"))

        fragments = asyncio.run(highlighter.highlight(sections, JS))

        assert len(fragments) == len(sections) == 3
        for fragment, section in zip(fragments, sections):
            assert inner(fragment).strip("\n") == section.code_text.strip("\n")

    def test_doc_only_sections_get_empty_fragments(self):
        """Sections without code still receive a (blank) fragment"""
        sections = [Section("intro\n", ""), Section("", "x = 1\n"), Section("outro\n", "")]
        highlighter = Highlighter(command=fixture_command("echo_highlighter.py"))

        fragments = asyncio.run(highlighter.highlight(sections, PY))

        assert [inner(f).strip() for f in fragments] == ["", "x = 1", ""]

    def test_chunked_output_concatenated_in_order(self):
        """Output arriving in many pieces is joined in arrival order"""
        codes = [f"value_{i} = {i}\n" for i in range(20)]
        sections = [Section(f"doc {i}\n", code) for i, code in enumerate(codes)]
        highlighter = Highlighter(command=fixture_command("echo_highlighter.py", "--chunked"))

        fragments = asyncio.run(highlighter.highlight(sections, PY))

        assert [inner(f).strip() for f in fragments] == [c.strip() for c in codes]

    def test_unicode_round_trip(self):
        """Payload and output are utf-8"""
        sections = [Section("", "name = 'Grüße ☃'\n")]
        highlighter = Highlighter(command=fixture_command("echo_highlighter.py"))

        fragments = asyncio.run(highlighter.highlight(sections, PY))

        assert "Grüße ☃" in fragments[0]

    def test_divider_collision_reported(self):
        """A divider already present in the code is a mismatch, not a truncation"""
        sections = [Section("", "a\n//DIVIDER\nb\n"), Section("", "c\n")]
        highlighter = Highlighter(command=fixture_command("echo_highlighter.py"))

        with pytest.raises(ReconciliationMismatchError):
            asyncio.run(highlighter.highlight(sections, JS))

    def test_concurrent_invocations_are_independent(self):
        """Several files highlighted at once keep their own output"""
        highlighter = Highlighter(command=fixture_command("echo_highlighter.py", "--chunked"))
        files = [
            [Section("", f"file{n}_line{i}\n") for i in range(5)]
            for n in range(4)
        ]

        async def run_all():
            return await asyncio.gather(*(highlighter.highlight(s, PY) for s in files))

        results = asyncio.run(run_all())

        for n, fragments in enumerate(results):
            assert [inner(f).strip() for f in fragments] == [f"file{n}_line{i}" for i in range(5)]


class TestFailures:
    """Error stream, start failures and timeouts"""

    def test_stderr_output_fails(self):
        """Anything on stderr is a HighlighterProcessError carrying the text"""
        highlighter = Highlighter(command=fixture_command("failing_highlighter.py"))

        with pytest.raises(HighlighterProcessError) as excinfo:
            asyncio.run(highlighter.highlight([Section("", "x\n")], PY))

        assert "no lexer for alias 'bogus'" in excinfo.value.stderr_text
        assert str(excinfo.value).startswith("pygmentize error:")

    def test_stderr_does_not_wait_for_exit(self):
        """The failure is reported without waiting for the process to exit"""
        highlighter = Highlighter(command=fixture_command("failing_highlighter.py", "20"))

        started = time.monotonic()
        with pytest.raises(HighlighterProcessError):
            asyncio.run(highlighter.highlight([Section("", "x\n")], PY))

        assert time.monotonic() - started < 10

    def test_missing_command(self):
        """A highlighter that cannot be started is a HighlighterProcessError"""
        highlighter = Highlighter(command=["narrativ-no-such-highlighter"])

        with pytest.raises(HighlighterProcessError, match="could not start"):
            asyncio.run(highlighter.highlight([Section("", "x\n")], PY))

    def test_timeout(self):
        """A highlighter that never answers is stopped after the timeout"""
        highlighter = Highlighter(command=fixture_command("silent_highlighter.py"), timeout=0.5)

        started = time.monotonic()
        with pytest.raises(HighlighterProcessError, match="did not finish"):
            asyncio.run(highlighter.highlight([Section("", "x\n")], PY))

        assert time.monotonic() - started < 10

    def test_timeout_while_writing_input(self):
        """The timeout also applies while the payload is still being written"""
        highlighter = Highlighter(
            command=fixture_command("silent_highlighter.py", "--no-read"), timeout=0.5
        )
        # Well beyond any pipe buffer
        code = "x = 1\n" * 400_000

        started = time.monotonic()
        with pytest.raises(HighlighterProcessError, match="did not finish"):
            asyncio.run(highlighter.highlight([Section("", code)], PY))

        assert time.monotonic() - started < 10

    def test_unencodable_source(self):
        """Source that cannot be encoded is a HighlighterProcessError"""
        highlighter = Highlighter(command=fixture_command("echo_highlighter.py"))

        with pytest.raises(HighlighterProcessError, match="cannot encode"):
            asyncio.run(highlighter.highlight([Section("", "x = '\udcff'\n")], PY))


class TestArguments:
    """Test the command line handed to the highlighter"""

    def test_argv(self):
        """Language, html output and utf-8 encoding are requested"""
        highlighter = Highlighter(command=["pygmentize"])
        assert highlighter.argv_build("python") == [
            "pygmentize", "-l", "python", "-f", "html", "-O", "encoding=utf-8"
        ]

    def test_default_command_from_settings(self):
        """Without an explicit command the configured one is used"""
        assert Highlighter().command == ["pygmentize"]


class TestPygments:
    """Against the real pygments command line"""

    @pytest.fixture
    def highlighter(self):
        return Highlighter(command=[sys.executable, "-m", "pygments"])

    def test_python_source(self, highlighter):
        """Two python sections come back highlighted and separated"""
        sections = sections_split(PY, "# hello\nx = 1\n# world\ny = 2\n")

        fragments = asyncio.run(highlighter.highlight(sections, PY))

        assert len(fragments) == 2
        assert '<span class="mi">1</span>' in fragments[0]
        assert '<span class="mi">2</span>' in fragments[1]
        assert '<span class="mi">2</span>' not in fragments[0]
        assert all("DIVIDER" not in fragment for fragment in fragments)

    def test_javascript_with_doc_only_edges(self, highlighter):
        """Empty first and last fragments survive pygments' newline stripping"""
        source = "// intro\n// more intro\nvar a = 1;\n// trailing docs\n"
        sections = sections_split(JS, source)

        fragments = asyncio.run(highlighter.highlight(sections, JS))

        assert len(fragments) == len(sections) == 2
        assert "var" in fragments[0]
        assert "DIVIDER" not in fragments[1]

    def test_unknown_lexer(self, highlighter):
        """pygments reports an unknown language on stderr"""
        meta = LanguageMeta(language="no-such-language-xyz", symbol="#")

        with pytest.raises(HighlighterProcessError):
            asyncio.run(highlighter.highlight([Section("", "x\n")], meta))
