"""
narrativ - Literate documentation generator

Splits annotated source into documentation and code, highlights the code
with pygments and interleaves both into html pages.
"""

__version__ = "1.0.0"

from .parser import Parser
from .highlighter import Highlighter, HighlightAdapter
from .splitter import sections_split, links_rewrite
from .destination import Destination
from .log import LOG, state_connectToLogger

__all__ = [
    "Parser",
    "Highlighter",
    "HighlightAdapter",
    "sections_split",
    "links_rewrite",
    "Destination",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
