"""
Runtime options for a documentation run

Holds everything the CLI resolved (output directory, stylesheet, page
template, extension mapping) plus the run-wide bookkeeping: the list of
registered source files and the errors collected while compiling.

Resource files ship in the package resources/ directory:
  - base.css: default stylesheet
  - templates/default.html: default Jinja2 page template
  - extensions/base.yaml: default extension -> {language, symbol} mapping
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from jinja2 import Environment, FileSystemLoader, Template, select_autoescape

from ..config import appsettings, AppSettings
from ..models.sections import LanguageMeta
from .log import LOG, LOG_error


RESOURCES_DIR = Path(__file__).parent.parent / "resources"


class OptionsError(Exception):
    """Raised when a resource file (extensions, template, stylesheet) cannot be loaded"""
    pass


def extensions_load(path: Optional[Union[str, Path]] = None) -> Dict[str, LanguageMeta]:
    """
    Load an extension mapping file

    The file maps an extension to its language and comment symbol. YAML and
    JSON are both accepted (JSON is valid YAML):

        .py:
          language: python
          symbol: "#"

    Args:
        path: Mapping file (default: resources/extensions/base.yaml)

    Returns:
        Dict of extension (with leading dot) to LanguageMeta

    Raises:
        OptionsError: If the file cannot be read or an entry is malformed
    """
    path = Path(path) if path else RESOURCES_DIR / "extensions" / "base.yaml"
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw: Any = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise OptionsError(f"Failed to parse {path}: {e}")
    except OSError as e:
        raise OptionsError(f"Failed to load {path}: {e}")

    if not isinstance(raw, dict):
        raise OptionsError(f"{path} must map extensions to {{language, symbol}}")

    extensions: Dict[str, LanguageMeta] = {}
    for extension, entry in raw.items():
        try:
            meta = LanguageMeta.from_dict(entry)
        except (KeyError, TypeError) as e:
            raise OptionsError(f"{path}: bad entry for '{extension}': {e}")
        key = str(extension)
        extensions[key if key.startswith(".") else f".{key}"] = meta
    return extensions


def template_load(path: Optional[Union[str, Path]] = None) -> Template:
    """Load a Jinja2 page template (default: resources/templates/default.html)"""
    path = Path(path) if path else RESOURCES_DIR / "templates" / "default.html"
    if not path.is_file():
        raise OptionsError(f"Template not found: {path}")
    environment = Environment(
        loader=FileSystemLoader(str(path.parent)),
        autoescape=select_autoescape(["html", "htm"]),
    )
    return environment.get_template(path.name)


class Options:
    """
    Resolved options plus run-wide bookkeeping

    Source objects receive `file_register` as their registration callback,
    so the file list is built explicitly as targets are discovered.
    """

    def __init__(
        self,
        target_dir: Optional[Union[str, Path]] = None,
        base_url: str = "",
        css_path: Optional[Union[str, Path]] = None,
        template_path: Optional[Union[str, Path]] = None,
        extensions_path: Optional[Union[str, Path]] = None,
        ignore_dirs: str = "",
        recurse: bool = True,
        settings: AppSettings = appsettings,
    ) -> None:
        """
        Args:
            target_dir: Output directory (default: ./docs); made absolute
            base_url: Base URL for the stylesheet and page links
            css_path: Custom stylesheet (default: resources/base.css)
            template_path: Custom page template
            extensions_path: Custom extension mapping file
            ignore_dirs: Leading directory dropped from output paths
            recurse: Descend into subdirectories
            settings: Application settings

        Raises:
            OptionsError: If a resource file cannot be loaded
        """
        self.target_dir = Path(target_dir or settings.default_target_dir).absolute()
        self.base_url = base_url
        self.ignore_dirs = ignore_dirs
        self.recurse = recurse

        css_file = Path(css_path) if css_path else RESOURCES_DIR / "base.css"
        try:
            self.css_text = css_file.read_text(encoding="utf-8")
        except OSError as e:
            raise OptionsError(f"Failed to load stylesheet {css_file}: {e}")
        self.stylesheet = css_file.name

        self.template = template_load(template_path)
        self.extensions = extensions_load(extensions_path)

        self.files: List[Any] = []
        self.errors: List[Exception] = []

    def file_register(self, file: Any) -> None:
        """Record a discovered source file"""
        self.files.append(file)

    def visit(self, what: Any) -> None:
        """Report that a file or directory is being compiled"""
        LOG(f"compiling {what.path}...", level=1)

    def error(self, err: Exception, what: Any = None) -> None:
        """Log and record a failure; the run continues"""
        where = f"{what.path}: " if what is not None else ""
        LOG_error(f"{where}{err}")
        self.errors.append(err)
