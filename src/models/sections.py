"""
Section data models

Type-safe structures passed between the splitter, the highlighter and the
page renderer.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class LanguageMeta:
    """
    Per-extension language description

    Looked up from the extension mapping by file suffix and held constant
    for the duration of one compile.

    Attributes:
        language: Lexer alias understood by the highlighter (e.g., "python")
        symbol: Single-line comment token used to detect documentation
                lines (e.g., "#", "//")

    Example:
        Mapping entry ".js: {language: javascript, symbol: //}" becomes
        LanguageMeta(language="javascript", symbol="//")
    """
    language: str
    symbol: str

    @classmethod
    def from_dict(cls, entry: Dict[str, Any]) -> "LanguageMeta":
        """Build from one value of the extension mapping"""
        return cls(language=str(entry["language"]), symbol=str(entry["symbol"]))


@dataclass(frozen=True)
class Section:
    """
    One (documentation, code) pair extracted from a source file

    Attributes:
        doc_text: Comment text with the markers removed, newline-terminated
                  per line. Empty for a code run with no preceding comments.
        code_text: Raw code lines, newline-terminated. Empty for a trailing
                   or comment-only run.

    Example:
        For source "# hello\\nx = 1\\n" with symbol "#":
        Section(doc_text="hello\\n", code_text="x = 1\\n")
    """
    doc_text: str = ""
    code_text: str = ""


@dataclass
class RenderedSection:
    """
    HTML counterpart of a Section

    Attributes:
        doc: Rendered documentation HTML, or None when the section had no docs
        code: Highlighted code wrapped in the highlighter's preamble/postamble
    """
    doc: Optional[str]
    code: str
