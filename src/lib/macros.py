r"""
Macro tokenizer and expander

A macro reference is a delimited token naming a block, optionally followed
by a filter chain:

    value = ⦅default-value⦆
    items = [⦅item-list | add_comma | indent_lines⦆]

The expander replaces each reference with the (recursively expanded and
filtered) lines of the named block. Multi-line expansions keep the call
site's indentation on every continuation line.

A delimiter preceded by the escape character (\⦅) is never matched; the
escape is removed by delimiters_unescape() once expansion is complete.
"""

from typing import Dict, List, Optional, Union

from ..models.document import MacroReference
from ..models.errors import ErrorKind, TangleError
from .filters import FilterRegistry
from .log import LOG
from .recursion import recursionLimit_ensure


Segment = Union[str, MacroReference]


def _tokenChar_valid(c: str) -> bool:
    return c.isalnum() or c in "_- |"


def reference_parse(inner: str) -> Optional[MacroReference]:
    """
    Parse the text between two delimiters

    Returns:
        MacroReference, or None if the text is not a valid reference

    Example:
        >>> reference_parse(" items | add_comma |indent_lines ")
        MacroReference(name='items', filters=['add_comma', 'indent_lines'], raw='')
    """
    if not all(_tokenChar_valid(c) for c in inner):
        return None
    name, *filters = [part.strip() for part in inner.split("|")]
    if not name:
        return None
    return MacroReference(name=name, filters=filters)


class MacroTokenizer:
    """
    Splits text into alternating literal spans and macro references
    """

    def __init__(self, settings=None) -> None:
        if settings is None:
            from ..config import appsettings
            settings = appsettings
        self.open = settings.macro_open
        self.close = settings.macro_close
        self.escape = settings.escape_char

    def text_tokenize(self, text: str) -> List[Segment]:
        """
        Tokenize one line of text

        Example:
            >>> MacroTokenizer().text_tokenize("a ⦅x⦆ b \\⦅y⦆\\n")
            ['a ', MacroReference(name='x', filters=[], raw='⦅x⦆'), ' b \\⦅y⦆\\n']
        """
        segments: List[Segment] = []
        literal_start = 0
        pos = 0

        while True:
            open_pos = text.find(self.open, pos)
            if open_pos == -1:
                break
            inner_start = open_pos + len(self.open)

            # Escaped opening delimiter stays literal
            if open_pos > 0 and text[open_pos - 1] == self.escape:
                pos = inner_start
                continue

            close_pos = text.find(self.close, inner_start)
            if close_pos == -1:
                break

            reference = reference_parse(text[inner_start:close_pos])
            if reference is None:
                pos = inner_start
                continue

            end = close_pos + len(self.close)
            reference.raw = text[open_pos:end]
            if open_pos > literal_start:
                segments.append(text[literal_start:open_pos])
            segments.append(reference)
            literal_start = pos = end

        if literal_start < len(text):
            segments.append(text[literal_start:])
        return segments


class MacroExpander:
    """
    Recursively substitutes macro references

    Attributes:
        blocks: Named block table (name -> resolved lines)
        filters: Filter registry for filter chains
        max_depth: Expansion nesting bound
    """

    def __init__(
        self,
        blocks: Dict[str, List[str]],
        filters: Optional[FilterRegistry] = None,
        settings=None,
    ) -> None:
        if settings is None:
            from ..config import appsettings
            settings = appsettings
        self.blocks = blocks
        self.filters = filters if filters is not None else FilterRegistry(settings.indent_unit)
        self.max_depth: int = settings.max_macro_depth
        self.tokenizer = MacroTokenizer(settings)
        self.settings = settings

    def expand(self, lines: List[str]) -> List[str]:
        """
        Fully expand a block (typically the root block)

        Raises:
            TangleError(REFERENCE): Unknown macro or filter
            TangleError(BOUND_EXCEEDED): Expansion nested deeper than max_depth
        """
        with recursionLimit_ensure(self.settings.recursionLimit_required()):
            return self.lines_expand(lines)

    def lines_expand(self, lines: List[str], depth: int = 0) -> List[str]:
        """Expand every line, wrapping failures with the offending line"""
        if depth > self.max_depth:
            raise TangleError(ErrorKind.BOUND_EXCEEDED, f"too deep macro expansion (depth {depth})")
        LOG(f"Expanding {len(lines)} lines at depth {depth}", level=3)

        expanded: List[str] = []
        for line in lines:
            try:
                expanded.extend(self.line_expand(line, depth))
            except TangleError as e:
                raise TangleError.wrap(f"Failed to process line: {line.rstrip()}", e)
        return expanded

    def line_expand(self, line: str, depth: int) -> List[str]:
        """
        Expand the macro references on one line

        The first expanded line takes the place of the token; further
        expanded lines start new output lines prefixed with the line's
        leading whitespace. A line whose references all expand to nothing
        and that holds no other text disappears.
        """
        text = line.lstrip(" \t")
        indent = line[:len(line) - len(text)]
        segments = self.tokenizer.text_tokenize(text)
        if not any(isinstance(segment, MacroReference) for segment in segments):
            return [line]

        output = [indent]
        produced = False
        for segment in segments:
            if isinstance(segment, str):
                output[-1] += segment
                continue

            body = self.blocks.get(segment.name)
            if body is None:
                raise TangleError(
                    ErrorKind.REFERENCE, f"Macro '{segment.name}' unknown in line: {line.strip()}"
                )
            macro_lines = self.filters_apply(self.lines_expand(body, depth + 1), segment.filters)
            if not macro_lines:
                continue

            produced = True
            output[-1] += macro_lines[0]
            for macro_line in macro_lines[1:]:
                output.append(indent + macro_line)

        if not produced and not output[-1].strip():
            return []
        return output

    def filters_apply(self, lines: List[str], names: List[str]) -> List[str]:
        """
        Run lines through a filter chain, left to right

        Raises:
            TangleError(REFERENCE): Unknown filter name
            TangleError(EVALUATOR): A filter raised
        """
        chain = []
        for name in names:
            filter = self.filters.get(name)
            if filter is None:
                raise TangleError(ErrorKind.REFERENCE, f"Filter '{name}' unknown")
            chain.append((name, filter))

        for name, filter in chain:
            try:
                lines = filter.filter(lines)
            except TangleError:
                raise
            except Exception as e:
                raise TangleError(ErrorKind.EVALUATOR, f"Filter '{name}' failed", e)
        return lines


def delimiters_unescape(lines: List[str], settings=None) -> List[str]:
    r"""
    Restore escaped delimiters to their literal form

    Example:
        >>> delimiters_unescape(["x = '\\⦅name\\⦆'"])
        ["x = '⦅name⦆'"]
    """
    if settings is None:
        from ..config import appsettings
        settings = appsettings
    escaped_open, escaped_close = settings.delimiters_escaped()
    return [
        line.replace(escaped_open, settings.macro_open).replace(escaped_close, settings.macro_close)
        for line in lines
    ]
