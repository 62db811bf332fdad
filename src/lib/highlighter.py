"""
Syntax highlighting through an external pygmentize process

All code fragments of a file go to a single highlighter run, joined by a
divider comment line ("\\n" + symbol + "DIVIDER\\n"). The highlighter knows
nothing about sections; the divider comes back inside its html output and is
used to cut that output into one fragment per section again.

Two pieces:
    HighlightAdapter: builds the request and reconciles the response. Every
        assumption about the shape of the html formatter's output lives here.
    Highlighter: owns one subprocess per call, feeds it, collects stdout in
        arrival order and fails fast on anything written to stderr.

Example:
    >>> highlighter = Highlighter()
    >>> fragments = await highlighter.highlight(sections, meta)
    >>> len(fragments) == len(sections)
    True
"""

import asyncio
import contextlib
import html
import re
from typing import List, Optional, Pattern, Sequence

from ..config import appsettings, AppSettings
from ..models.sections import LanguageMeta, Section
from .errors import HighlighterProcessError, ReconciliationMismatchError
from .log import LOG


class HighlightAdapter:
    """
    Request/response contract with the html formatter

    The formatter wraps its whole output once in a preamble and postamble
    and renders the divider as a comment, usually inside a span and with
    the surrounding newlines kept. Newer pygments releases also emit an
    empty "<span></span>" right after the preamble.
    """

    def __init__(self, symbol: str, settings: AppSettings = appsettings) -> None:
        """
        Args:
            symbol: Single-line comment token of the language
            settings: Source of the divider token and wrapper markup
        """
        self.symbol = symbol
        self.highlight_start = settings.highlight_start
        self.highlight_end = settings.highlight_end
        self.sentinel = settings.sentinel_make(symbol)

        divider = html.escape(f"{symbol}{settings.divider_token}", quote=False)
        self.divider_html: Pattern[str] = re.compile(
            r'\n*(?:<span class="[^"]*">)?' + re.escape(divider) + r"(?:</span>)?\n*"
        )
        self.preamble: Pattern[str] = re.compile(
            r"^\s*" + re.escape(self.highlight_start) + r"(?:<span></span>)?"
        )
        self.postamble: Pattern[str] = re.compile(
            re.escape(self.highlight_end) + r"\s*$"
        )

    def request_build(self, sections: Sequence[Section]) -> str:
        """Join every section's code with the divider line"""
        return self.sentinel.join(section.code_text or "" for section in sections)

    def response_unwrap(self, output: str) -> str:
        """Strip the single global preamble and postamble"""
        output = self.preamble.sub("", output, count=1)
        return self.postamble.sub("", output, count=1)

    def response_reconcile(self, output: str, expected: int) -> List[str]:
        """
        Cut the highlighter's combined output back into per-section html

        Args:
            output: Complete stdout of the highlighter run
            expected: Number of sections that were sent

        Returns:
            One fragment per section, in order, each re-wrapped in the
            preamble/postamble

        Raises:
            ReconciliationMismatchError: If the split does not yield exactly
                `expected` parts
        """
        parts = self.divider_html.split(self.response_unwrap(output))
        if len(parts) != expected:
            raise ReconciliationMismatchError(expected, len(parts))
        return [f"{self.highlight_start}{part}{self.highlight_end}" for part in parts]


class Highlighter:
    """
    Runs the external highlighter, one process per call

    Calls share no state: each owns its subprocess, its chunk buffer and its
    adapter, so several files can be highlighted concurrently.
    """

    def __init__(
        self,
        command: Optional[Sequence[str]] = None,
        timeout: Optional[float] = None,
        settings: AppSettings = appsettings,
    ) -> None:
        """
        Args:
            command: argv prefix of the highlighter (default from settings,
                     normally ["pygmentize"])
            timeout: Seconds to wait for a run (default from settings; None
                     waits indefinitely)
            settings: Application settings
        """
        self.settings = settings
        self.command = list(command) if command else settings.highlighterCommand_split()
        self.timeout = timeout if timeout is not None else settings.highlighter_timeout

    def argv_build(self, language: str) -> List[str]:
        """Full command line for one language, html output, utf-8"""
        return [*self.command, "-l", language, "-f", "html", "-O", "encoding=utf-8"]

    async def stdout_collect(self, stream: asyncio.StreamReader, chunks: List[bytes]) -> None:
        """Append stdout chunks to `chunks` in arrival order until EOF"""
        while True:
            chunk = await stream.read(65536)
            if not chunk:
                break
            chunks.append(chunk)

    async def stderr_watch(self, stream: asyncio.StreamReader) -> None:
        """Raise as soon as anything shows up on the error stream"""
        data = await stream.read(65536)
        if data:
            raise HighlighterProcessError(data.decode("utf-8", errors="replace"))

    async def stdin_feed(self, stdin: asyncio.StreamWriter, payload: bytes) -> None:
        """Write the payload and close the input stream"""
        try:
            stdin.write(payload)
            await stdin.drain()
        except (BrokenPipeError, ConnectionResetError):
            # Process exited early; its stderr carries the reason.
            LOG("Highlighter closed its input early", level=3)
        finally:
            stdin.close()

    async def highlight(self, sections: Sequence[Section], meta: LanguageMeta) -> List[str]:
        """
        Highlight every section's code in one highlighter run

        Args:
            sections: Sections of one file, in file order
            meta: Language of the file

        Returns:
            Highlighted html per section, same order and length as `sections`

        Raises:
            HighlighterProcessError: Output on stderr, start failure or timeout
            ReconciliationMismatchError: Output did not split into
                len(sections) fragments
        """
        adapter = HighlightAdapter(meta.symbol, self.settings)
        argv = self.argv_build(meta.language)
        try:
            payload = adapter.request_build(sections).encode("utf-8")
        except UnicodeEncodeError as e:
            raise HighlighterProcessError(f"cannot encode source for {argv[0]}: {e}") from e
        LOG(f"Running {' '.join(argv)} on {len(sections)} sections", level=3)

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise HighlighterProcessError(f"could not start {argv[0]}: {e}") from e

        chunks: List[bytes] = []
        # Readers are scheduled before the writer; the timeout covers all three.
        tasks = [
            asyncio.ensure_future(self.stdout_collect(process.stdout, chunks)),
            asyncio.ensure_future(self.stderr_watch(process.stderr)),
            asyncio.ensure_future(self.stdin_feed(process.stdin, payload)),
        ]
        try:
            await asyncio.wait_for(asyncio.gather(*tasks), timeout=self.timeout)
            returncode = await process.wait()
        except asyncio.TimeoutError as e:
            raise HighlighterProcessError(
                f"{argv[0]} did not finish within {self.timeout} seconds"
            ) from e
        finally:
            for task in tasks:
                task.cancel()
            if process.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    process.kill()
                await process.wait()

        if returncode:
            LOG(f"{argv[0]} exited with status {returncode}", level=2)
        LOG(f"Collected {len(chunks)} output chunks", level=3)

        output = b"".join(chunks).decode("utf-8", errors="replace")
        return adapter.response_reconcile(output, len(sections))
