"""
Source files and directories to document

SourceDirectory walks a directory tree and creates a SourceFile for every
file the parser supports. Each created file is announced through an
explicit `register` callback (normally Options.file_register).
"""

from pathlib import Path
from typing import Callable, Iterator, List, Optional, Type, Union

from .log import LOG


class SourceFile:
    """A single source file and the parser that understands it"""

    def __init__(
        self,
        path: Union[str, Path],
        parser,
        register: Optional[Callable[["SourceFile"], None]] = None,
    ) -> None:
        self.path = Path(path)
        self.parser = parser
        self.filename = self.path.name

        if register is not None:
            register(self)

    def data_read(self) -> str:
        """Read the file as utf-8 text"""
        return self.path.read_text(encoding="utf-8")

    async def compile(self, options, destination) -> None:
        """
        Compile this file and render its page

        Read and compile failures, and failures while rendering the page,
        are reported through options.error; they never propagate.

        Args:
            options: Runtime Options (visit/error reporting, template)
            destination: Destination the page is written to
        """
        try:
            source = self.data_read()
        except (OSError, UnicodeDecodeError) as e:
            options.error(e, self)
            return

        def finished(err, sections) -> None:
            if err is not None:
                options.error(err, self)
                return
            options.visit(self)
            try:
                destination.render(self, options, sections)
            except Exception as e:
                # User templates can raise anything while rendering.
                options.error(e, self)

        await self.parser.compile(self, source, finished)


class SourceDirectory:
    """
    A directory of source files

    Args:
        path: Directory path
        parser: Parser deciding which files are supported
        register: Called with every SourceFile created below this directory
        file_class: Class used for files (override for test stubbing)
    """

    def __init__(
        self,
        path: Union[str, Path],
        parser,
        register: Optional[Callable[[SourceFile], None]] = None,
        file_class: Type[SourceFile] = SourceFile,
    ) -> None:
        self.path = Path(path)
        self.parser = parser
        self.register = register
        self.file_class = file_class

    def children(self) -> Iterator[Union["SourceDirectory", SourceFile]]:
        """
        Subdirectories and supported files, sorted by name

        Hidden entries (leading dot) are skipped.
        """
        for child in sorted(self.path.iterdir()):
            if child.name.startswith("."):
                continue
            if child.is_dir():
                yield SourceDirectory(child, self.parser, self.register, self.file_class)
            elif child.is_file() and self.parser.match(child):
                yield self.file_class(child, self.parser, self.register)

    def files_walk(self, recurse: bool = True) -> List[SourceFile]:
        """Every supported file below this directory"""
        LOG(f"Scanning {self.path}", level=2)
        files: List[SourceFile] = []
        for child in self.children():
            if isinstance(child, SourceDirectory):
                if recurse:
                    files.extend(child.files_walk(recurse))
            else:
                files.append(child)
        return files
