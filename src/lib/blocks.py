"""
Fence parser and block assembler

Partitions document lines into fenced code blocks and merges blocks that
share a name.

Fence header grammar (scanned by hand, left to right):

    [indent] ``` [spaces] [language] [spaces] [= | !] [name] [anything]

    ``` python            root block fragment, appended
    ``` python main       named block "main", appended
    ``` python =main      named block "main", replaces earlier fragments
    ``` python !          extension block (when python is the extension language)
    ```                   closing fence

Every fence line toggles between "outside" and "inside" a block; only the
lines between an opening and a closing fence are kept.
"""

from typing import Dict, List, Optional, Tuple

from ..models.document import Block, FenceHeader, Fragment, Line
from ..models.errors import ErrorKind, TangleError
from .log import LOG


FENCE = "```"


def _word_char(c: str) -> bool:
    return c.isalnum() or c == "_"


def _name_char(c: str) -> bool:
    return _word_char(c) or c == "-"


def fenceHeader_parse(text: str, extension_language: Optional[str] = None) -> Optional[FenceHeader]:
    """
    Parse a fence line

    Args:
        text: Raw line text
        extension_language: Language whose "!" marker denotes an extension
                            block (defaults to the configured one)

    Returns:
        FenceHeader, or None if the line is not a fence

    Example:
        >>> fenceHeader_parse("  ``` python =setup-code\\n")
        FenceHeader(indent='  ', language='python', replacing=True, name='setup-code', extension=False)
    """
    if extension_language is None:
        from ..config import appsettings
        extension_language = appsettings.extension_language

    rest = text.lstrip(" \t")
    indent = text[:len(text) - len(rest)]
    if not rest.startswith(FENCE):
        return None

    pos = len(FENCE)
    while pos < len(rest) and rest[pos] == " ":
        pos += 1

    start = pos
    while pos < len(rest) and _word_char(rest[pos]):
        pos += 1
    language = rest[start:pos]

    while pos < len(rest) and rest[pos] == " ":
        pos += 1

    if language and language == extension_language and rest[pos:pos + 1] == "!":
        return FenceHeader(indent=indent, language=language, extension=True)

    replacing = rest[pos:pos + 1] == "="
    if replacing:
        pos += 1

    start = pos
    while pos < len(rest) and _name_char(rest[pos]):
        pos += 1
    name = rest[start:pos]

    return FenceHeader(indent=indent, language=language, replacing=replacing, name=name)


class BlockAssembler:
    """
    Turns document lines into (root block, named blocks)

    Responsibilities:
    - Collect fragment bodies between fence pairs
    - Group fragments by name in order of first appearance
    - Enforce one language per name
    - Resolve each block with the replace/append rule
    - Separate the unnamed root block from the named blocks
    """

    def __init__(self, settings=None) -> None:
        if settings is None:
            from ..config import appsettings
            settings = appsettings
        self.extension_language = settings.extension_language

    def fragments_collect(self, lines: List[Line]) -> List[Fragment]:
        """
        Collect the body of every fenced region

        Raises:
            TangleError(STRUCTURAL): If input ends inside a block
        """
        fragments: List[Fragment] = []
        current: Optional[Fragment] = None

        for line in lines:
            header = fenceHeader_parse(line.text, self.extension_language)
            if header is not None:
                if current is None:
                    current = Fragment(header=header, opened_at=line)
                else:
                    fragments.append(current)
                    current = None
            elif current is not None:
                current.lines.append(line.text)

        if current is not None:
            where = current.opened_at.location() if current.opened_at else "<unknown>"
            raise TangleError(ErrorKind.STRUCTURAL, f"Missing code fence for block opened at {where}")

        return fragments

    def blocks_group(self, fragments: List[Fragment]) -> Dict[str, Block]:
        """
        Group fragments by name, preserving order of first appearance

        Extension fragments never join the block table.

        Raises:
            TangleError(STRUCTURAL): If fragments of one name mix languages
        """
        blocks: Dict[str, Block] = {}
        for fragment in fragments:
            if fragment.header.extension:
                continue
            block = blocks.get(fragment.name)
            if block is None:
                block = Block(name=fragment.name, language=fragment.language)
                blocks[fragment.name] = block
            elif fragment.language != block.language:
                label = f"'{block.name}'" if block.name else "(output)"
                where = fragment.opened_at.location() if fragment.opened_at else "<unknown>"
                raise TangleError(
                    ErrorKind.STRUCTURAL,
                    f"block {label} has multiple languages: "
                    f"'{block.language}' and '{fragment.language}' at {where}",
                )
            block.fragments.append(fragment)
        return blocks

    def blocks_parse(
        self, lines: List[Line]
    ) -> Tuple[Optional[List[str]], Dict[str, List[str]]]:
        """
        Assemble lines into the root block and the named block table

        Args:
            lines: Lines surviving include, conditional and extension handling

        Returns:
            (root body or None, mapping of name -> resolved body)
        """
        blocks = self.blocks_group(self.fragments_collect(lines))
        resolved = {name: block.body_resolve() for name, block in blocks.items()}
        root = resolved.pop("", None)
        LOG(f"Assembled {len(resolved)} named blocks, root block {'found' if root is not None else 'absent'}", level=2)
        return root, resolved
