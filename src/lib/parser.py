"""
Parser for annotated source files

Turns one source file into the rendered sections of its documentation page.

The parser operates in three phases:
1. Splitting: group the source into [(docs, code), ...] sections using the
   comment symbol of the file's language
2. Highlighting: send all code sections through one pygmentize run and cut
   the output back into per-section html
3. Assembly: render each section's docs with Markdown and pair them with
   the highlighted code

Example:
    >>> parser = Parser(destination, extensions)
    >>> await parser.compile(source_file, source, callback)
    # callback(None, [RenderedSection(doc='<p>hello</p>', code='<div ...'), ...])
"""

from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

import markdown

from ..config import appsettings, AppSettings
from ..models.sections import LanguageMeta, RenderedSection, Section
from .assembler import sections_assemble
from .errors import NarrativError, UnsupportedLanguageError
from .highlighter import Highlighter
from .log import LOG
from .splitter import sections_split


CompileCallback = Callable[[Optional[Exception], Optional[List[RenderedSection]]], None]


class Parser:
    """
    Compiles annotated source into rendered sections

    Handles:
    - Language lookup by file extension
    - Comment/code segmentation with (file:...) link rewriting
    - Batched syntax highlighting
    - Markdown rendering of documentation
    - Exactly-once completion reporting
    """

    def __init__(
        self,
        destination,
        extensions: Dict[str, LanguageMeta],
        highlighter: Optional[Highlighter] = None,
        settings: AppSettings = appsettings,
    ) -> None:
        """
        Initialize parser

        Args:
            destination: Destination whose url_rewrite() resolves (file:...) links
            extensions: Mapping of file suffix (".py") to LanguageMeta
            highlighter: Highlighter to use (default: one built from settings)
            settings: Application settings
        """
        self.destination = destination
        self.extensions = extensions
        self.highlighter = highlighter or Highlighter(settings=settings)
        self.markdown = markdown.Markdown(extensions=settings.markdown_extensions)

    def meta_get(self, pathname: Union[str, Path]) -> Optional[LanguageMeta]:
        """Language of a path, by extension, or None if unsupported"""
        return self.extensions.get(Path(pathname).suffix)

    def match(self, pathname: Union[str, Path]) -> bool:
        """Check whether a path has a supported extension"""
        return self.meta_get(pathname) is not None

    def parse(self, meta: LanguageMeta, source: str) -> List[Section]:
        """Split source into sections, rewriting (file:...) links"""
        return sections_split(meta, source, self.destination.url_rewrite)

    def doc_render(self, text: str) -> str:
        """Render documentation text to html"""
        return self.markdown.reset().convert(text)

    async def sections_compile(self, file, source: str) -> List[RenderedSection]:
        """
        Compile one file's source into rendered sections

        Args:
            file: Source file object (anything with a .path)
            source: Contents of the file

        Returns:
            Rendered sections in file order

        Raises:
            UnsupportedLanguageError: If the extension is not mapped
            SegmentationError: If a link rewrite fails
            HighlighterProcessError: If the highlighter fails
            ReconciliationMismatchError: If highlighted output cannot be
                realigned with the sections
        """
        meta = self.meta_get(file.path)
        if meta is None:
            raise UnsupportedLanguageError(f"No language configured for {file.path}")

        sections = self.parse(meta, source)
        LOG(f"Split {file.path} into {len(sections)} sections", level=2)

        rendered_code = await self.highlighter.highlight(sections, meta)
        return sections_assemble(sections, rendered_code, self.doc_render)

    async def compile(self, file, source: str, callback: CompileCallback) -> None:
        """
        Compile one file and report the outcome through `callback`

        The callback runs exactly once, either as callback(None, sections)
        or as callback(error, None). Failures are per file; nothing is
        raised to the caller for them.

        Args:
            file: Source file object (anything with a .path)
            source: Contents of the file
            callback: Completion callback
        """
        try:
            sections = await self.sections_compile(file, source)
        except (NarrativError, OSError) as e:
            callback(e, None)
            return
        callback(None, sections)
