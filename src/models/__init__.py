"""
Models package for narrativ

Contains data structures and type definitions for the compilation pipeline.
"""

from .state import ProgramState, pipeline
from .sections import LanguageMeta, Section, RenderedSection

__all__ = [
    "ProgramState",
    "pipeline",
    "LanguageMeta",
    "Section",
    "RenderedSection",
]
