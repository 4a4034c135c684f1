"""
Tangler - extract source code from a literate document

Runs the full pipeline over one document:

    include resolution -> conditionals + extension blocks -> block assembly
    -> parse hook -> macro expansion -> delimiter unescaping

Example:
    >>> tangler = Tangler(Path("program.py.lmd"))
    >>> tangler.tangle()
    >>> tangler.write(Path("program.py"))
"""

from pathlib import Path
from typing import Dict, List, Optional, Sequence

from ..models.errors import ErrorKind, TangleError
from .blocks import BlockAssembler
from .conditionals import extensionsAndConditionals_handle
from .extensions import ExtensionContext
from .filters import FilterRegistry
from .includes import IncludeResolver
from .log import LOG
from .macros import MacroExpander, delimiters_unescape
from .recursion import recursionLimit_ensure


class Tangler:
    """
    Tangles one literate document into source lines

    Attributes:
        input_file: Path of the document
        context: Extension evaluator shared by every stage of the run
        resolver: Include resolver (keeps the include records)
        block: Expanded root block, None if the document has no root block
        blocks: Named blocks after the parse hook
    """

    def __init__(
        self,
        input_file: Path,
        context: Optional[ExtensionContext] = None,
        include_dirs: Optional[Sequence[Path]] = None,
        settings=None,
    ) -> None:
        if settings is None:
            from ..config import appsettings
            settings = appsettings
        self.settings = settings
        self.input_file = Path(input_file)
        self.context = context if context is not None else ExtensionContext(FilterRegistry(settings.indent_unit))
        self.resolver = IncludeResolver(include_dirs, settings)
        self.block: Optional[List[str]] = None
        self.blocks: Dict[str, List[str]] = {}
        self.tangled = False

    def tangle(self) -> Optional[List[str]]:
        """
        Run the pipeline

        Returns:
            Output lines, or None when the document has no root block

        Raises:
            TangleError: On any malformed document (all errors are fatal)
        """
        LOG(f"Tangling {self.input_file}", level=1)
        with recursionLimit_ensure(self.settings.recursionLimit_required()):
            lines = self.resolver.file_resolve(self.input_file)
            LOG(f"Resolved {len(self.resolver.records)} includes, {len(lines)} lines", level=2)

            lines = extensionsAndConditionals_handle(lines, self.context, self.settings)

            root, blocks = BlockAssembler(self.settings).blocks_parse(lines)
            self.block, self.blocks = self.context.parse_hook(root, blocks)

            if self.block is not None:
                expander = MacroExpander(self.blocks, self.context.filters, self.settings)
                self.block = delimiters_unescape(expander.expand(self.block), self.settings)

        self.tangled = True
        return self.block

    def write(self, output: Path) -> bool:
        """
        Write the tangled root block

        Nothing is written when the document has no root block.

        Returns:
            True if a file was written

        Raises:
            TangleError(IO): If the output cannot be written
        """
        if not self.tangled:
            self.tangle()
        if self.block is None:
            LOG(f"No output block in {self.input_file}, nothing written", level=1)
            return False

        return lines_write(Path(output), self.block)


def lines_write(output: Path, lines: List[str]) -> bool:
    """Write lines verbatim, raising TangleError(IO) on failure"""
    try:
        with open(output, "w", encoding="utf-8", newline="") as fout:
            fout.writelines(lines)
    except OSError as e:
        raise TangleError(ErrorKind.IO, f"Cannot write '{output}'", e)
    LOG(f"Wrote {len(lines)} lines to {output}", level=2)
    return True
