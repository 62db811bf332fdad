"""
Program state model and pipeline helper

Defines ProgramState dataclass for the functional pipeline pattern and
the pipeline() helper for composing transformation stages.
"""

from pathlib import Path
from argparse import Namespace
from typing import Any, Optional, Type, TypeVar, List, Dict, Callable
from dataclasses import dataclass, field


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for the documentation pipeline (state bus pattern).

    Each stage receives a copy of the previous stage's state and adds the
    fields it is responsible for.

    Pipeline stages and their state additions:
        - Initial: inputdir, outputdir, verbosity and the CLI options
        - env_check: targetPaths, envOK
        - options_build: options
        - targets_discover: roots, sourceFiles
        - sources_compile: compileResult
        - media_write: stylesheetFile
        - results_report: (no additions, terminal stage)

    Attributes:
        inputdir: Directory holding the sources to document
        outputdir: Directory the pages are written to
        verbosity: Logging verbosity level (1-3)
        inputFile: Optional single file (relative to inputdir) to document
        url: Base URL for stylesheet and cross-page links
        css: Optional custom stylesheet path
        template: Optional custom Jinja2 page template path
        extensions: Optional extension mapping file (YAML or JSON)
        ignoreDirs: Leading directory dropped from output paths
        noRecurse: Do not descend into subdirectories
        envOK: Environment validation passed
        targetPaths: Resolved files or directories to document
        options: Runtime Options built from the CLI values
        roots: (source object, Destination) pairs, one per target
        sourceFiles: Every source file discovered under the targets
        compileResult: Counts of compiled and failed files
        stylesheetFile: Where the stylesheet was written
    """

    # CLI arguments
    inputdir: Optional[Path] = field(default=None)
    outputdir: Optional[Path] = field(default=None)
    verbosity: int = field(default=1)
    inputFile: Optional[str] = field(default=None)
    url: str = field(default="")
    css: Optional[str] = field(default=None)
    template: Optional[str] = field(default=None)
    extensions: Optional[str] = field(default=None)
    ignoreDirs: str = field(default="")
    noRecurse: bool = field(default=False)

    # Pipeline state
    envOK: bool = field(default=False)
    targetPaths: List[Path] = field(default_factory=list)
    options: Optional[Any] = field(default=None)  # lib.options.Options at runtime
    roots: List[Any] = field(default_factory=list)
    sourceFiles: List[Any] = field(default_factory=list)
    compileResult: Optional[Dict] = field(default=None)
    stylesheetFile: Optional[Path] = field(default=None)

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace, inputdir: Path, outputdir: Path
    ) -> "ProgramState":
        """
        Create ProgramState from argparse Namespace and directory paths.

        Args:
            options: Parsed CLI arguments (inputFile, url, css, etc.)
            inputdir: Directory containing source files
            outputdir: Directory for generated pages

        Returns:
            ProgramState instance with all CLI options as attributes
        """
        options_dict = vars(options)

        import dataclasses
        valid_fields = {f.name for f in dataclasses.fields(cls)}

        # Only keep CLI values that ProgramState knows about
        filtered_options = {k: v for k, v in options_dict.items() if k in valid_fields}

        merged_args = {**filtered_options, "inputdir": inputdir, "outputdir": outputdir}

        return cls(**merged_args)

    def copy(self: PS) -> PS:
        """
        Creates a shallow copy of the ProgramState instance.

        Returns:
            A new ProgramState instance.
        """
        return type(self)(**self.__dict__)


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Execute a functional pipeline of state transformations.

    Each stage is a function (ProgramState) -> ProgramState that receives
    the output of the previous stage and returns a new state.

    Args:
        initial_state: Starting ProgramState
        *stages: Variable number of stage functions to execute in order

    Returns:
        Final ProgramState after all transformations

    Example:
        final_state = pipeline(
            initial_state,
            env_check,
            options_build,
            targets_discover,
            sources_compile,
        )

    This is equivalent to:
        sources_compile(targets_discover(options_build(env_check(initial_state))))
    """
    from functools import reduce
    return reduce(lambda state, stage: stage(state), stages, initial_state)
