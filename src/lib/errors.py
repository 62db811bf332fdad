"""
Exceptions raised while compiling a source file

Every failure of a single file's compile is one of these; the parser hands
them to that file's completion callback.
"""

from typing import Optional


class NarrativError(Exception):
    """Base class for per-file compile failures"""
    pass


class SegmentationError(NarrativError):
    """Raised when a documentation line cannot be processed (link rewrite failed)"""

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class HighlighterProcessError(NarrativError):
    """
    Raised when the external highlighter fails

    Covers output on its error stream, failure to start, and timeouts.
    The collected error text is kept on `stderr_text`.
    """

    def __init__(self, stderr_text: str):
        self.stderr_text = stderr_text
        super().__init__(f"pygmentize error:\n{stderr_text}")


class ReconciliationMismatchError(NarrativError):
    """
    Raised when the highlighter output does not split back into one
    fragment per section

    Usually a divider collision inside the source code, or a highlighter
    whose html output no longer has the expected shape.
    """

    def __init__(self, expected: int, received: int):
        self.expected = expected
        self.received = received
        super().__init__(
            f"Expected {expected} highlighted fragments, recovered {received}"
        )


class UnsupportedLanguageError(NarrativError):
    """Raised when a file's extension has no language mapping"""
    pass
