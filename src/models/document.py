"""
Document data models

Type-safe structures passed between the tangle stages: provenance-carrying
lines, parsed directives and fence headers, block fragments and the merged
blocks they form, macro references, conditional frames and include records.
"""

from enum import Enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


@dataclass
class Line:
    """
    One line of a document, with its provenance

    Attributes:
        text: Line text including its trailing newline, if any
        source: File the line was read from (None for in-memory documents)
        number: One-based line number within source

    Example:
        Line(text="``` python main\\n", source=Path("doc.lmd"), number=12)
    """
    text: str
    source: Optional[Path] = None
    number: int = 0

    def location(self) -> str:
        """Human-readable 'file:line' for error messages"""
        return f"{self.source or '<string>'}:{self.number}"


class DirectiveKind(Enum):
    """
    Line directives recognised at the start of a line (``! keyword ...``)
    """
    INCLUDE = "include"
    INCLUDE_PATH = "include-path"
    IF = "if"
    ELSIF = "elsif"
    ELSE = "else"
    END = "end"


@dataclass
class Directive:
    """
    A parsed ``! keyword argument`` line

    Attributes:
        kind: Which directive this is
        argument: Condition expression, directory, or include path
        description: Link text of an include directive (``[desc](path)``)
    """
    kind: DirectiveKind
    argument: str = ""
    description: str = ""


@dataclass
class FenceHeader:
    """
    A parsed fence line

    A bare closing fence parses to a header with every field empty.

    Attributes:
        indent: Whitespace before the fence marker
        language: Language tag (e.g. "python"), may be empty
        replacing: True when the '=' replacement marker is present
        name: Block name; empty for the root block
        extension: True for an extension fence (``` python !)

    Example:
        "``` python =imports" ->
        FenceHeader(indent="", language="python", replacing=True,
                    name="imports", extension=False)
    """
    indent: str = ""
    language: str = ""
    replacing: bool = False
    name: str = ""
    extension: bool = False


@dataclass
class Fragment:
    """
    The body of one fenced block occurrence, in document order
    """
    header: FenceHeader
    lines: List[str] = field(default_factory=list)
    opened_at: Optional[Line] = None

    @property
    def name(self) -> str:
        return self.header.name

    @property
    def language(self) -> str:
        return self.header.language


@dataclass
class Block:
    """
    All fragments sharing one name, merged by the replace/append rule

    Attributes:
        name: Block name ("" is the root/output block)
        language: Language tag shared by every fragment
        fragments: Fragments in document order
    """
    name: str
    language: str
    fragments: List[Fragment] = field(default_factory=list)

    def replacementIndex_last(self) -> int:
        """Index of the last replacing fragment, 0 when none replaces"""
        last = 0
        for index, fragment in enumerate(self.fragments):
            if fragment.header.replacing:
                last = index
        return last

    def body_resolve(self) -> List[str]:
        """
        Merge fragments into the block body

        Starts at the last replacing fragment (or the first fragment) and
        concatenates it with every later fragment. The final line loses
        its trailing newline.

        Example:
            [append "a"], [replace "b"], [append "c"] -> ["b\\n", "c"]
        """
        body: List[str] = []
        for fragment in self.fragments[self.replacementIndex_last():]:
            body.extend(fragment.lines)
        if body:
            body[-1] = body[-1].removesuffix("\n").removesuffix("\r")
        return body


@dataclass
class MacroReference:
    """
    A macro token found on a line: ⦅name | filter | filter⦆

    Attributes:
        name: Referenced block name
        filters: Filter names, applied left to right
        raw: The token text as written, delimiters included
    """
    name: str
    filters: List[str] = field(default_factory=list)
    raw: str = ""


@dataclass
class ConditionalFrame:
    """
    State pushed by ``! if`` and popped by ``! end``

    Attributes:
        previous: Output state to restore on ``! end``
        eligible: Whether a later elsif/else in this frame may still fire
    """
    previous: bool
    eligible: bool


@dataclass
class IncludeRecord:
    """
    One resolved include directive

    Attributes:
        path: Path as written in the directive
        resolved: File actually read
        depth: Include nesting level of the included file
    """
    path: str
    resolved: Path
    depth: int
