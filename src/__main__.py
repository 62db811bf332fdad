#!/usr/bin/env python3
"""
narrativ - Literate documentation generator

Reads annotated source files and writes one html page per file, with the
comment text rendered as Markdown beside the syntax-highlighted code.

As an aside, this codebase leverages the ChRIS "plugin" concept/pattern as
general purpose python app development framework.

Philosophy:
    - Comments are the documentation: no separate doc files to maintain
    - One page per source file, prose and code side by side
    - Cross-file links in comments: (file:lib/parser.py)
    - Any language pygments knows, configured by extension

Usage:
    narrativ inputdir/ outputdir/

    Every supported file below inputdir/ is documented into outputdir/,
    mirroring the directory layout (src/app.py -> outputdir/src/app.py.html).

Examples:
    # Document a whole tree
    narrativ project/ docs/

    # Document a single file
    narrativ project/ docs/ --inputFile lib/parser.py

    # Custom template, stylesheet and language mapping
    narrativ . docs/ --template page.html --css style.css --extensions langs.yaml

    # Verbose output
    narrativ . docs/ -vv
"""

import sys
import asyncio
from pathlib import Path
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter
from typing import List, Tuple

from chris_plugin import chris_plugin
from .lib import Parser, Destination, __version__, LOG, state_connectToLogger
from .lib.options import Options, OptionsError
from .lib.sources import SourceDirectory, SourceFile
from .models import ProgramState, pipeline


DISPLAY_TITLE = r"""
                                 _   _
  _ __   __ _ _ __ _ __ __ _| |_(_)_   __
 | '_ \ / _` | '__| '__/ _` | __| \ \ / /
 | | | | (_| | |  | | | (_| | |_| |\ V /
 |_| |_|\__,_|_|  |_|  \__,_|\__|_| \_/

  Literate documentation generator
"""

# Define CLI arguments
parser = ArgumentParser(
    description="narrativ - literate documentation from annotated source",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--inputFile",
    default=None,
    type=str,
    help="Document only this file (relative to inputdir) instead of the whole tree",
)

parser.add_argument(
    "--url",
    default="",
    type=str,
    help="Base URL for serving the stylesheet and page links",
)

parser.add_argument(
    "--css",
    default=None,
    type=str,
    help="Custom stylesheet. Defaults to the package base.css",
)

parser.add_argument(
    "--template",
    default=None,
    type=str,
    help="Jinja2 page template. Defaults to the package default.html",
)

parser.add_argument(
    "--extensions",
    default=None,
    type=str,
    help="Extension mapping file (YAML or JSON) adding support for other languages",
)

parser.add_argument(
    "--ignoreDirs",
    default="",
    type=str,
    help="Leading directory (relative to inputdir) to omit from output paths",
)

parser.add_argument(
    "--noRecurse",
    action="store_true",
    default=False,
    help="Do not descend into subdirectories of inputdir",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv, -vvv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate environment and resolve the documentation targets.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with added fields:
            - targetPaths: Files or directories to document
            - envOK: True if environment is valid

    Exits:
        1 if inputdir or the requested input file does not exist
    """

    state = inputstate.copy()

    if state.verbosity >= 2:
        LOG(DISPLAY_TITLE, level=2)

    LOG("Checking environment...", level=2)

    if not state.inputdir or not state.inputdir.is_dir():
        print(f"Error: Input directory not found: {state.inputdir}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    if state.inputFile:
        target = state.inputdir / state.inputFile
        if not target.is_file():
            print(f"Error: Input file not found: {target}", file=sys.stderr)
            state.envOK = False
            sys.exit(1)
    else:
        target = state.inputdir

    state.targetPaths = [target]
    LOG(f"Target: {target}", level=2)

    state.outputdir.mkdir(parents=True, exist_ok=True)
    LOG(f"Output directory: {state.outputdir}", level=2)

    state.envOK = True
    return state


def options_build(inputstate: ProgramState) -> ProgramState:
    """
    Load stylesheet, page template and extension mapping into Options.

    Exits:
        1 if any resource file cannot be loaded
    """

    state = inputstate.copy()

    LOG("Loading options...", level=2)
    try:
        state.options = Options(
            target_dir=state.outputdir,
            base_url=state.url,
            css_path=state.css,
            template_path=state.template,
            extensions_path=state.extensions,
            ignore_dirs=state.ignoreDirs,
            recurse=not state.noRecurse,
        )
    except OptionsError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    LOG(f"{len(state.options.extensions)} extensions configured", level=2)
    return state


def targets_discover(inputstate: ProgramState) -> ProgramState:
    """
    Build a Destination and Parser per target and collect its source files.

    Every file is registered with Options before any file is compiled, so
    each page's template sees the complete file list.

    Returns:
        ProgramState with added fields:
            - roots: (source object, Destination) per target
            - sourceFiles: (SourceFile, Destination) per file to compile
    """

    state = inputstate.copy()
    options: Options = state.options

    roots: List[Tuple[object, Destination]] = []
    source_files: List[Tuple[SourceFile, Destination]] = []
    for target in state.targetPaths:
        base_dir = target.parent if target.is_file() else target
        destination = Destination(base_dir, options.target_dir, options.ignore_dirs, options.base_url)
        target_parser = Parser(destination, options.extensions)

        if target.is_file():
            if not target_parser.match(target):
                LOG(f"No language configured for {target}, skipping", level=1)
                continue
            root = SourceFile(target, target_parser, options.file_register)
            files = [root]
        else:
            root = SourceDirectory(target, target_parser, options.file_register)
            options.visit(root)
            files = root.files_walk(options.recurse)

        roots.append((root, destination))
        source_files.extend((file, destination) for file in files)

    state.roots = roots
    state.sourceFiles = source_files
    LOG(f"Discovered {len(source_files)} source files", level=2)
    return state


async def files_compile(source_files: List[Tuple[SourceFile, Destination]], options: Options) -> None:
    """Compile every file concurrently; failures stay with their file"""
    results = await asyncio.gather(
        *(file.compile(options, destination) for file, destination in source_files),
        return_exceptions=True,
    )
    for (file, _), result in zip(source_files, results):
        if isinstance(result, Exception):
            options.error(result, file)


def sources_compile(inputstate: ProgramState) -> ProgramState:
    """
    Compile all discovered files and write their pages.

    Returns:
        ProgramState with added field:
            - compileResult: Dict containing:
                - compiled: int (pages written)
                - failed: int (files that failed)
    """

    state = inputstate.copy()

    LOG("Compiling sources...", level=1)
    asyncio.run(files_compile(state.sourceFiles, state.options))

    failed = len(state.options.errors)
    state.compileResult = {
        "compiled": len(state.sourceFiles) - failed,
        "failed": failed,
    }
    return state


def media_write(inputstate: ProgramState) -> ProgramState:
    """Write the stylesheet next to the generated pages."""

    state = inputstate.copy()

    if not state.roots:
        return state

    _, destination = state.roots[0]
    try:
        state.stylesheetFile = destination.media_write(state.options)
    except OSError as e:
        state.options.error(e)
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Display documentation results to the user.

    Exits:
        1 if any file failed to compile
    """
    state: ProgramState = inputstate.copy()
    result = state.compileResult or {"compiled": 0, "failed": 0}

    LOG("\n✓ Documentation generated" if not state.options.errors else "\n✗ Documentation generated with errors", level=1)
    LOG(f"  Output: {state.options.target_dir}", level=1)
    LOG(f"  Pages:  {result['compiled']}", level=1)
    if state.options.errors:
        LOG(f"  Failed: {len(state.options.errors)}", level=1)
        sys.exit(1)
    return state


@chris_plugin(
    parser=parser,
    title="narrativ - Literate documentation generator",
    category="Documentation",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - generate documentation pages from annotated source.

    Orchestrates the full pipeline:
        1. env_check: Validate paths and resolve targets
        2. options_build: Load stylesheet, template and extension mapping
        3. targets_discover: Collect and register source files
        4. sources_compile: Compile every file and write its page
        5. media_write: Write the stylesheet
        6. results_report: Display results to user

    Args:
        options: CLI arguments from argparse
        inputdir: Directory containing the sources to document
        outputdir: Directory the pages are written to

    Note:
        This function is wrapped by @chris_plugin which handles CLI
        argument parsing and invokes this function with parsed values.
    """

    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    pipeline(state, env_check, options_build, targets_discover, sources_compile, media_write, results_report)


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature
