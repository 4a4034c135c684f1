"""
Weaver - render a literate document as readable documentation

The document is validated the same way the tangler reads it (includes are
resolved, fences must balance, each block keeps one language) and then
rewritten line by line:

    ! include [desc](path)   ->  **See include:** [path](path)
    ! include-path DIR       ->  (removed)
    ``` python =setup-code   ->  ###### Replacing Code Block: Setup Code
                                 (blank line)
                                 ``` python
    ``` python               ->  ###### Output Block ...
    ``` python !             ->  ###### Extension Block ...

Everything else, closing fences included, passes through unchanged.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ..models.document import DirectiveKind, FenceHeader, Line
from .blocks import BlockAssembler, fenceHeader_parse
from .directives import directive_parse
from .includes import IncludeResolver, file_read
from .log import LOG
from .recursion import recursionLimit_ensure
from .tangle import lines_write


def name_humanize(name: str) -> str:
    """
    Turn a block name into a title

    Example:
        >>> name_humanize("parse_blocks-helper")
        'Parse Blocks Helper'
    """
    return " ".join(word.capitalize() for word in name.replace("-", " ").replace("_", " ").split())


def header_make(header: FenceHeader) -> str:
    """Section header replacing an opening fence"""
    if header.extension:
        return "###### Extension Block\n"
    replacing = " Replacing" if header.replacing else ""
    if header.name:
        return f"######{replacing} Code Block: {name_humanize(header.name)}\n"
    return f"######{replacing} Output Block\n"


class Weaver:
    """
    Weaves one literate document

    Attributes:
        lines: Document lines (includes not resolved)
        file_name: Path of the document, used to resolve includes
        blocks: Summary per block name after validation
                ({"count": fragments, "locations": [(index, source file)]})
        weaved_lines: Rendered output, once weave() has run
    """

    @classmethod
    def from_file(cls, file: Path, include_dirs: Optional[Sequence[Path]] = None, settings=None) -> "Weaver":
        file = Path(file)
        return cls(file_read(file), file, include_dirs, settings)

    def __init__(
        self,
        lines: List[Line],
        file_name: Path = Path("."),
        include_dirs: Optional[Sequence[Path]] = None,
        settings=None,
    ) -> None:
        if settings is None:
            from ..config import appsettings
            settings = appsettings
        self.settings = settings
        self.lines = lines
        self.file_name = Path(file_name)
        self.include_dirs = include_dirs
        self.blocks: Dict[str, Dict[str, Any]] = {}
        self.weaved_lines: List[str] = []
        self.weaved = False

    def weave(self) -> List[str]:
        """
        Validate and render the document

        Raises:
            TangleError: For missing includes, unbalanced fences or
                         blocks with mixed languages
        """
        LOG(f"Weaving {self.file_name}", level=1)
        with recursionLimit_ensure(self.settings.recursionLimit_required()):
            self.blocks = self.blocks_find()
        self.weaved_lines = self.directivesAndHeaders_substitute(self.lines)
        self.weaved = True
        return self.weaved_lines

    def blocks_find(self) -> Dict[str, Dict[str, Any]]:
        """Resolve includes and summarise every block of the document"""
        resolver = IncludeResolver(self.include_dirs, self.settings)
        lines = resolver.includes_resolve(self.lines, self.file_name)

        assembler = BlockAssembler(self.settings)
        grouped = assembler.blocks_group(assembler.fragments_collect(lines))

        summary: Dict[str, Dict[str, Any]] = {}
        for name, block in grouped.items():
            summary[name] = {
                "count": len(block.fragments),
                "locations": [
                    (index, fragment.opened_at.source if fragment.opened_at else None)
                    for index, fragment in enumerate(block.fragments)
                ],
            }
        LOG(f"Found {len(summary)} blocks", level=2)
        return summary

    def directivesAndHeaders_substitute(self, lines: List[Line]) -> List[str]:
        """Rewrite include directives and opening fences"""
        woven: List[str] = []
        in_block = False
        for line in lines:
            directive = directive_parse(line.text)
            if directive is not None and directive.kind is DirectiveKind.INCLUDE:
                woven.append(f"**See include:** [{directive.argument}]({directive.argument})\n")
                continue
            if directive is not None and directive.kind is DirectiveKind.INCLUDE_PATH:
                continue

            header = fenceHeader_parse(line.text, self.settings.extension_language)
            if header is None:
                woven.append(line.text)
                continue

            in_block = not in_block
            if in_block:
                woven.append(header_make(header))
                woven.append("\n")
                woven.append(f"{header.indent}``` {header.language}\n")
            else:
                woven.append(line.text)
        return woven

    def write(self, output: Path) -> bool:
        """Write the woven document, weaving first if needed"""
        if not self.weaved:
            self.weave()
        return lines_write(Path(output), self.weaved_lines)
