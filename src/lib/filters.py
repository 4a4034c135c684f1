"""
Macro filters

A filter transforms the expanded lines of a macro reference before they are
spliced into the calling line: ⦅name | add_comma | indent_lines⦆.

Two shapes:
- Filter: applied once to the whole list of lines
- LineFilter: applied independently to every line

Filters are looked up in a FilterRegistry that extension code may extend
at runtime.
"""

from typing import Callable, Dict, Iterator, List, Optional


class Filter:
    """
    Block filter: a callable over the whole list of lines

    Example:
        >>> reverse = Filter(lambda lines: list(reversed(lines)))
        >>> reverse.filter(["a\\n", "b"])
        ['b', 'a\\n']
    """

    def __init__(self, code: Callable[[List[str]], List[str]]) -> None:
        self.code = code

    def filter(self, lines: List[str]) -> List[str]:
        return list(self.code(list(lines)))


class LineFilter(Filter):
    """
    Line filter: a callable applied to each line on its own
    """

    def __init__(self, code: Callable[[str], str]) -> None:
        self.code = code

    def filter(self, lines: List[str]) -> List[str]:
        return [self.code(line) for line in lines]


def _whitespace_split(line: str):
    """Split a line into (leading whitespace, content, trailing whitespace)"""
    content = line.strip()
    if not content:
        return line, "", ""
    start = len(line) - len(line.lstrip())
    end = len(line.rstrip())
    return line[:start], content, line[end:]


def string_escape(line: str) -> str:
    """Render a line as the body of a double-quoted string literal"""
    return line.encode("unicode_escape").decode("ascii").replace('"', '\\"')


def double_quote(line: str) -> str:
    """Wrap the content of a line in double quotes, keeping its whitespace"""
    before, content, after = _whitespace_split(line)
    if not content:
        return line
    return f'{before}"{content}"{after}'


def add_comma(line: str) -> str:
    """Append a comma to the content of a line, keeping its whitespace"""
    before, content, after = _whitespace_split(line)
    if not content:
        return line
    return f"{before}{content},{after}"


def indent_make(unit: str) -> Callable[[str], str]:
    def indent(line: str) -> str:
        return f"{unit}{line}"
    return indent


def indentContinuation_make(unit: str) -> Callable[[List[str]], List[str]]:
    def indent_continuation(lines: List[str]) -> List[str]:
        if not lines:
            return lines
        return [lines[0], *(f"{unit}{line}" for line in lines[1:])]
    return indent_continuation


class FilterRegistry:
    """
    Registry of named filters

    Starts with the built-in filters; extension code registers more (or
    overrides built-ins) through register().
    """

    def __init__(self, indent_unit: Optional[str] = None) -> None:
        """Initialize the registry with the built-in filters"""
        if indent_unit is None:
            from ..config import appsettings
            indent_unit = appsettings.indent_unit
        self.filters: Dict[str, Filter] = {}
        self.builtins_register(indent_unit)

    def builtins_register(self, indent_unit: str) -> None:
        """Register the built-in filters"""
        self.register("string_escape", LineFilter(string_escape))
        self.register("double_quote", LineFilter(double_quote))
        self.register("add_comma", LineFilter(add_comma))
        self.register("indent_lines", LineFilter(indent_make(indent_unit)))
        self.register("indent_continuation", Filter(indentContinuation_make(indent_unit)))

    def register(self, name: str, filter: Filter) -> None:
        """Register (or replace) a filter"""
        self.filters[name] = filter

    def get(self, name: str) -> Optional[Filter]:
        """Get a filter by name, None if unknown"""
        return self.filters.get(name)

    def names(self) -> List[str]:
        return list(self.filters)

    def __contains__(self, name: object) -> bool:
        return name in self.filters

    def __getitem__(self, name: str) -> Filter:
        return self.filters[name]

    def __setitem__(self, name: str, filter: Filter) -> None:
        self.register(name, filter)

    def __iter__(self) -> Iterator[str]:
        return iter(self.filters)

    def __len__(self) -> int:
        return len(self.filters)
