"""
Output location and page rendering

A Destination knows the base directory of one documentation target (the
directory given on the command line, or the parent of a single file), the
target directory pages are written into, and an optional leading directory
to drop from output paths.

Example:
    base_dir   = some/dir
    target_dir = docs
    ignore_dirs = application

    some/dir/application/file.js  ->  docs/file.js.html
    some/dir/lib/util.js          ->  docs/lib/util.js.html
"""

from pathlib import Path, PurePath
from typing import List, Union

from ..config import appsettings, AppSettings
from ..models.sections import RenderedSection
from .log import LOG


class Destination:
    """
    Maps source paths to generated pages and writes them

    Responsibilities:
    - Compute output paths and cross-page URLs
    - Render the page template for a compiled file
    - Write the stylesheet next to the pages
    """

    def __init__(
        self,
        base_dir: Union[str, Path],
        target_dir: Union[str, Path],
        ignore_dirs: str = "",
        base_url: str = "",
        settings: AppSettings = appsettings,
    ) -> None:
        """
        Args:
            base_dir: Common root of the sources being documented
            target_dir: Directory the pages are written into
            ignore_dirs: Leading directory (relative to base_dir) to omit
                         from output paths
            base_url: Prefix for generated URLs
            settings: Application settings
        """
        self.base_dir = Path(base_dir)
        self.target_dir = Path(target_dir)
        self.ignore_dirs = ignore_dirs.strip("/")
        self.base_url = base_url.rstrip("/")
        self.output_suffix = settings.output_suffix

    def relativePath_get(self, path: Union[str, Path]) -> PurePath:
        """Path below base_dir with ignore_dirs removed; unchanged if outside base_dir"""
        relative = PurePath(path)
        try:
            relative = relative.relative_to(self.base_dir)
        except ValueError:
            pass
        if self.ignore_dirs:
            try:
                relative = relative.relative_to(self.ignore_dirs)
            except ValueError:
                pass
        return relative

    def targetName_get(self, path: Union[str, Path]) -> Path:
        """
        Output page for a source path

        Args:
            path: Source file path

        Returns:
            target_dir / <relative path> + ".html"
        """
        relative = self.relativePath_get(path)
        return self.target_dir / f"{relative.as_posix()}{self.output_suffix}"

    def url_rewrite(self, path: Union[str, Path]) -> str:
        """
        URL of the page generated for a source path

        Used for (file:...) links in documentation and for the file list
        in the page template.

        Example:
            >>> Destination("src", "docs").url_rewrite("lib/other.js")
            '/lib/other.js.html'
        """
        relative = self.relativePath_get(path)
        return f"{self.base_url}/{relative.as_posix()}{self.output_suffix}"

    def path_ensure(self, directory: Path) -> None:
        """Create a directory and its parents if needed"""
        directory.mkdir(parents=True, exist_ok=True)

    def render(self, file, options, sections: List[RenderedSection]) -> Path:
        """
        Render a compiled file with the page template and write it

        The template receives destination, file, options, sections and the
        list of every registered file (for navigation).

        Args:
            file: The compiled SourceFile
            options: Runtime Options (template, stylesheet, registered files)
            sections: Rendered sections of the file

        Returns:
            Path of the written page

        Raises:
            jinja2.TemplateError: If the template fails to render
            OSError: If the page cannot be written
        """
        target = self.targetName_get(file.path)
        html = options.template.render(
            destination=self,
            file=file,
            options=options,
            sections=sections,
            files=options.files,
        )
        self.path_ensure(target.parent)
        target.write_text(html, encoding="utf-8")
        LOG(f"wrote {target}", level=1)
        return target

    def media_write(self, options) -> Path:
        """Write the stylesheet into the target directory"""
        self.path_ensure(self.target_dir)
        stylesheet = self.target_dir / options.stylesheet
        stylesheet.write_text(options.css_text, encoding="utf-8")
        LOG(f"wrote {options.stylesheet}", level=1)
        return stylesheet
