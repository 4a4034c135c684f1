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
    Central state container for the CLI pipeline (state bus pattern).

    This dataclass carries all program state through the functional pipeline,
    with each stage adding new fields as processing progresses.

    Pipeline stages and their state additions:
        - Initial: inputdir, outputdir, verbosity, inputFile, outputFile,
          includePath, weave, dev
        - env_check: inputSourceFile, outputTargetFile, includeDirs, envOK
        - selftest_check: selfTestOK
        - source_process: processedLines
        - output_write: writeResult
        - results_report: (no additions, terminal stage)

    Attributes:
        inputdir: Directory containing the literate source document
        outputdir: Base output directory
        verbosity: Logging verbosity level (1-3)
        inputFile: Input document filename (relative to inputdir)
        outputFile: Output filename (relative to outputdir)
        includePath: Extra include directories from the command line
        weave: Produce documentation instead of tangled source
        dev: Downgrade self-test failures to warnings
        envOK: Environment validation passed
        inputSourceFile: Resolved path to the input document
        outputTargetFile: Resolved path of the file to write
        includeDirs: Resolved include search directories
        selfTestOK: Self-test passed (or was downgraded in dev mode)
        processedLines: Tangled or woven lines; None when no root block exists
        writeResult: Write results (status, output_file, line_count)
    """

    # CLI arguments
    inputdir: Optional[Path] = field(default=None)
    outputdir: Optional[Path] = field(default=None)
    verbosity: int = field(default=1)
    inputFile: str = field(default="")
    outputFile: str = field(default="")
    includePath: List[str] = field(default_factory=list)
    weave: bool = field(default=False)
    dev: bool = field(default=False)

    # Pipeline state
    envOK: bool = field(default=False)
    inputSourceFile: Path = field(default=Path("/"))
    outputTargetFile: Path = field(default=Path("/"))
    includeDirs: List[Path] = field(default_factory=list)
    selfTestOK: bool = field(default=False)
    processedLines: Optional[List[str]] = field(default=None)
    writeResult: Optional[Dict[str, Any]] = field(default=None)

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace, inputdir: Path, outputdir: Path
    ) -> "ProgramState":
        """
        Create ProgramState from argparse Namespace and directory paths.

        Args:
            options: Parsed CLI arguments (inputFile, outputFile, etc.)
            inputdir: Directory containing source files
            outputdir: Directory for output

        Returns:
            ProgramState instance with all CLI options as attributes
        """
        options_dict = vars(options)

        import dataclasses
        valid_fields = {f.name for f in dataclasses.fields(cls)}

        # Only keep options that are ProgramState fields
        filtered_options = {
            k: v for k, v in options_dict.items() if k in valid_fields and v is not None
        }

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

    Example:
        final_state = pipeline(
            initial_state,
            env_check,
            selftest_check,
            source_process,
            output_write,
            results_report
        )

    This is equivalent to:
        results_report(output_write(source_process(selftest_check(env_check(initial_state)))))
    """
    from functools import reduce
    return reduce(lambda state, stage: stage(state), stages, initial_state)
