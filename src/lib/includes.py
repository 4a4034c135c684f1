"""
Include resolver

Replaces ``! include [desc](path)`` lines with the lines of the referenced
file, recursively, and tags every line with the file it came from.

Resolution order for a referenced path:
1. Relative to the directory of the including file
2. Each configured include directory, in order

``! include-path DIR`` lines append DIR to the search list for every
include resolved after them.
"""

from pathlib import Path
from typing import List, Optional, Sequence

from ..models.document import DirectiveKind, IncludeRecord, Line
from ..models.errors import ErrorKind, TangleError
from .directives import directive_parse
from .log import LOG
from .recursion import recursionLimit_ensure


def file_read(path: Path) -> List[Line]:
    """
    Read a whole file as ordered lines with provenance

    Line endings are kept exactly as written.

    Raises:
        TangleError(IO): If the file cannot be read
    """
    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            texts = f.readlines()
    except OSError as e:
        raise TangleError(ErrorKind.IO, f"Cannot read '{path}'", e)
    return [Line(text=text, source=path, number=number) for number, text in enumerate(texts, 1)]


def lines_fromText(text: str, source: Optional[Path] = None) -> List[Line]:
    """Split an in-memory document into Lines"""
    return [
        Line(text=line, source=source, number=number)
        for number, line in enumerate(text.splitlines(keepends=True), 1)
    ]


class IncludeResolver:
    """
    Recursively inlines include directives

    Attributes:
        include_dirs: Search directories, extended by ``! include-path``
        max_depth: Include nesting bound
        records: Every include resolved so far, in resolution order
    """

    def __init__(
        self,
        include_dirs: Optional[Sequence[Path]] = None,
        settings=None,
    ) -> None:
        if settings is None:
            from ..config import appsettings
            settings = appsettings
        dirs = include_dirs if include_dirs is not None else settings.include_dirs
        self.include_dirs: List[Path] = [Path(d) for d in dirs]
        self.max_depth: int = settings.max_include_depth
        self.settings = settings
        self.records: List[IncludeRecord] = []

    def file_resolve(self, file: Path) -> List[Line]:
        """Read a document and inline all of its includes"""
        with recursionLimit_ensure(self.settings.recursionLimit_required()):
            return self.includes_resolve(file_read(file), Path(file))

    def includes_resolve(
        self, lines: List[Line], current_file: Path, depth: int = 0
    ) -> List[Line]:
        """
        Inline every include directive in lines

        Args:
            lines: Lines of the current file
            current_file: Path of the file the lines came from
            depth: Include nesting level of current_file

        Returns:
            Flat list of lines with includes expanded in place

        Raises:
            TangleError(BOUND_EXCEEDED): More than max_depth nested includes
            TangleError(REFERENCE): Included file not found
        """
        if depth > self.max_depth:
            raise TangleError(
                ErrorKind.BOUND_EXCEEDED,
                f"too many includes (depth {depth} in '{current_file}')",
            )

        resolved: List[Line] = []
        for line in lines:
            directive = directive_parse(line.text)
            if directive is None:
                resolved.append(line)
            elif directive.kind is DirectiveKind.INCLUDE:
                target = self.path_resolve(directive.argument, current_file)
                record = IncludeRecord(path=directive.argument, resolved=target, depth=depth + 1)
                self.records.append(record)
                LOG(f"Including {target} (depth {record.depth})", level=3)
                resolved.extend(self.includes_resolve(file_read(target), target, depth + 1))
            elif directive.kind is DirectiveKind.INCLUDE_PATH:
                directory = Path(directive.argument)
                if not directory.is_absolute():
                    directory = current_file.parent / directory
                self.include_dirs.append(directory)
                LOG(f"Added include directory {directory}", level=3)
            else:
                resolved.append(line)
        return resolved

    def path_resolve(self, reference: str, current_file: Path) -> Path:
        """
        Locate an included file

        Raises:
            TangleError(REFERENCE): If no candidate exists
        """
        candidates = [current_file.parent / reference]
        candidates.extend(directory / reference for directory in self.include_dirs)
        for candidate in candidates:
            if candidate.is_file():
                return candidate
        searched = ", ".join(str(d) for d in self.include_dirs) or "(none)"
        raise TangleError(
            ErrorKind.REFERENCE,
            f"Include file '{reference}' not found (included from '{current_file}'; "
            f"include path: {searched})",
        )
