"""
Source segmentation

Splits a source file into ordered (documentation, code) sections using the
language's single-line comment symbol.

Consecutive comment lines collect into one documentation block; a section
is closed only when a comment line follows code, so every section reads as
"the docs, then the code they describe".

Example:
    >>> meta = LanguageMeta(language="javascript", symbol="//")
    >>> sections_split(meta, "// hello\\nx = 1\\n// world\\ny = 2\\n")
    [Section(doc_text='hello\\n', code_text='x = 1\\n'),
     Section(doc_text='world\\n', code_text='y = 2\\n')]
"""

import re
from typing import Callable, List, Optional, Pattern

from ..models.sections import LanguageMeta, Section
from .errors import SegmentationError


# (file:lib/other.js) style links between documented files
FILE_LINK = re.compile(r"\(file:(.*?)\)")


def links_rewrite(text: str, rewrite: Callable[[str], str]) -> str:
    """
    Resolve cross-file references in a line of documentation

    Args:
        text: Documentation text
        rewrite: Maps a source path to the URL of its generated page

    Returns:
        Text with every "(file:<path>)" replaced by "(<rewrite(path)>)"

    Example:
        >>> links_rewrite("see (file:lib/a.js)", lambda p: "/docs/a.js.html")
        'see (/docs/a.js.html)'
    """
    return FILE_LINK.sub(lambda match: f"({rewrite(match.group(1))})", text)


def commentPattern_make(symbol: str) -> Pattern[str]:
    """
    Compile the pattern for a documentation line

    Optional leading whitespace, the literal symbol, at most one whitespace
    character, then the documentation text (captured as "doc").
    """
    return re.compile(r"^\s*" + re.escape(symbol) + r"\s?(?P<doc>.*)$")


def lines_split(source: str) -> List[str]:
    """Split source on newlines; a final newline does not start another line"""
    lines = source.replace("\r\n", "\n").split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def sections_split(
    meta: LanguageMeta,
    source: str,
    rewrite: Optional[Callable[[str], str]] = None,
) -> List[Section]:
    """
    Split source text into ordered documentation/code sections

    Single pass over the lines. Comment lines accumulate into the current
    documentation text; any other line sets has_code and accumulates into
    the code text. A comment line seen while has_code is set flushes the
    pending section first. One last flush after the loop keeps whatever is
    left over.

    Args:
        meta: Language description; only meta.symbol is used here
        source: Complete source file contents
        rewrite: Optional URL rewrite for (file:...) links in comments

    Returns:
        Sections in file order. Never empty: a source with no lines yields
        a single empty section.

    Raises:
        SegmentationError: If the rewrite callback fails on a line
    """
    comment_match = commentPattern_make(meta.symbol)
    sections: List[Section] = []
    docs_text = ""
    code_text = ""
    has_code = False

    for line_number, line in enumerate(lines_split(source), start=1):
        match = comment_match.match(line)
        if match:
            if has_code:
                sections.append(Section(doc_text=docs_text, code_text=code_text))
                docs_text = code_text = ""
                has_code = False

            doc = match.group("doc")
            if rewrite is not None:
                try:
                    doc = links_rewrite(doc, rewrite)
                except Exception as e:
                    raise SegmentationError(f"link rewrite failed: {e}", line_number) from e
            docs_text += doc + "\n"
        else:
            has_code = True
            code_text += line + "\n"

    sections.append(Section(doc_text=docs_text, code_text=code_text))
    return sections
