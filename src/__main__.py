#!/usr/bin/env python3
"""
mdtangle - Literate Markdown tangle and weave tool

Extracts compilable source code from a literate Markdown document (tangle),
or renders the same document as readable documentation (weave).

As with other ChRIS-style apps, the CLI is a ChRIS "plugin": it reads from
an input directory and writes to an output directory.

Document features:
    - Fenced code blocks, optionally named: ``` python block-name
    - Replacing fragments: ``` python =block-name
    - Macro references with filters: ⦅block-name | add_comma⦆
    - Includes: ! include [description](path/to/file.lmd)
    - Conditional output: ! if EXPR / ! elsif EXPR / ! else / ! end
    - Extension blocks executed at tangle time: ``` python !

Usage:
    mdtangle inputdir/ outputdir/ --inputFile program.py.lmd --outputFile program.py

Examples:
    # Tangle
    mdtangle . build/ --inputFile tool.py.lmd --outputFile tool.py

    # Weave documentation, searching an extra include directory
    mdtangle . docs/ --inputFile tool.py.lmd --outputFile tool.md --weave --includePath shared/

    # Keep going when the self test fails, with debug output
    mdtangle . build/ --inputFile tool.py.lmd --outputFile tool.py --dev -vv
"""

import sys
import traceback
from pathlib import Path
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter

from chris_plugin import chris_plugin
from .lib import Tangler, Weaver, TangleError, __version__, LOG, state_connectToLogger
from .lib.selftest import selfTest_run
from .models import ProgramState, pipeline


# Define CLI arguments
parser = ArgumentParser(
    description="mdtangle - Literate Markdown tangle and weave tool",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--inputFile", required=True, type=str, help="Input literate document (relative to inputdir)"
)

parser.add_argument(
    "--outputFile", required=True, type=str, help="Output file (relative to outputdir)"
)

parser.add_argument(
    "--includePath",
    action="append",
    default=None,
    type=str,
    help="Additional include directory (can be repeated)",
)

parser.add_argument(
    "--weave",
    action="store_true",
    default=False,
    help="Weave documentation instead of tangling source",
)

parser.add_argument(
    "--dev",
    action="store_true",
    default=False,
    help="Development mode: self test failures are logged instead of fatal",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv, -vvv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def error_exit(state: ProgramState, error: TangleError) -> None:
    """
    Print a fatal error with its cause chain and exit non-zero

    The Python traceback follows at debug verbosity.
    """
    print(error.report(), file=sys.stderr)
    if state.verbosity >= 3:
        traceback.print_exception(error)
    sys.exit(1)


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate environment and resolve all file paths.

    Returns:
        ProgramState with added fields:
            - inputSourceFile: Resolved path to the input document
            - outputTargetFile: Resolved path of the output file
            - includeDirs: Resolved include directories
            - envOK: True if environment is valid

    Exits:
        1 if the input file or an include directory is not found
    """
    from .config import appsettings

    state = inputstate.copy()

    LOG("Checking environment...", level=2)

    input_file = state.inputdir / state.inputFile
    if not input_file.is_file():
        print(f"Error: Input file not found: {input_file}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)
    state.inputSourceFile = input_file
    LOG(f"Input file: {input_file}", level=2)

    include_dirs = [Path(d) for d in appsettings.include_dirs]
    for directory in state.includePath:
        path = Path(directory)
        if not path.is_absolute():
            path = state.inputdir / path
        if not path.is_dir():
            print(f"Error: Include directory not found: {path}", file=sys.stderr)
            state.envOK = False
            sys.exit(1)
        include_dirs.append(path)
    state.includeDirs = include_dirs
    LOG(f"Include directories: {[str(d) for d in include_dirs]}", level=2)

    state.outputTargetFile = state.outputdir / state.outputFile
    state.outputTargetFile.parent.mkdir(parents=True, exist_ok=True)
    LOG(f"Output file: {state.outputTargetFile}", level=2)

    state.envOK = True
    return state


def selftest_check(inputstate: ProgramState) -> ProgramState:
    """
    Run the built-in self test before touching the document.

    Exits:
        1 if a self test check fails outside dev mode
    """
    from .config import appsettings

    state = inputstate.copy()

    LOG("Running self test...", level=1)
    try:
        state.selfTestOK = selfTest_run(dev=state.dev or appsettings.dev_mode)
    except TangleError as e:
        error_exit(state, e)
    return state


def source_process(inputstate: ProgramState) -> ProgramState:
    """
    Tangle (or weave) the input document.

    Returns:
        ProgramState with added field:
            - processedLines: Output lines, None if there is no root block

    Exits:
        1 on any fatal document error
    """
    state = inputstate.copy()

    try:
        if state.weave:
            LOG("Weaving document...", level=1)
            state.processedLines = Weaver.from_file(state.inputSourceFile, state.includeDirs).weave()
        else:
            LOG("Tangling document...", level=1)
            state.processedLines = Tangler(state.inputSourceFile, include_dirs=state.includeDirs).tangle()
    except TangleError as e:
        error_exit(state, e)
    return state


def output_write(inputstate: ProgramState) -> ProgramState:
    """
    Write the processed lines.

    A tangled document without a root block writes nothing.

    Returns:
        ProgramState with added field:
            - writeResult: Dict with status, output_file, line_count
    """
    from .lib.tangle import lines_write

    state = inputstate.copy()

    if state.processedLines is None:
        LOG("No output block found, nothing written", level=1)
        state.writeResult = {"status": False, "output_file": None, "line_count": 0}
        return state

    try:
        lines_write(state.outputTargetFile, state.processedLines)
    except TangleError as e:
        error_exit(state, e)
    state.writeResult = {
        "status": True,
        "output_file": str(state.outputTargetFile),
        "line_count": len(state.processedLines),
    }
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Display results to the user.

    Returns:
        ProgramState unchanged (terminal pipeline stage)
    """
    state: ProgramState = inputstate.copy()
    if state.writeResult and state.writeResult["status"]:
        LOG(f"✓ Wrote {state.writeResult['output_file']} ({state.writeResult['line_count']} lines)", level=1)
    return state


@chris_plugin(
    parser=parser,
    title="mdtangle - Literate Markdown tangle and weave tool",
    category="Utility",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - tangle or weave a literate document.

    Orchestrates the pipeline:
        1. env_check: Validate paths and environment
        2. selftest_check: Run the built-in self test
        3. source_process: Tangle or weave the document
        4. output_write: Write the result
        5. results_report: Display results to user
    """

    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    state_connectToLogger(state)

    pipeline(state, env_check, selftest_check, source_process, output_write, results_report)


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature
