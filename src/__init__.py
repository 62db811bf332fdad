"""
narrativ - Literate documentation generator

Reads annotated source files and writes one html page per file, with the
comments rendered as Markdown beside the syntax-highlighted code.
"""

__version__ = "1.0.0"

from .lib import Parser, Highlighter, Destination, LOG, state_connectToLogger

__all__ = ["Parser", "Highlighter", "Destination", "LOG", "state_connectToLogger", "__version__"]
