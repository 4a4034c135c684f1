"""
Line directive parser

Recognises document-level directives written as a line starting with
``!`` followed by whitespace and a keyword:

    ! include [Shared helpers](helpers.lmd)
    ! include-path ../common
    ! if settings.get("debug")
    ! elsif target == "linux"
    ! else
    ! end

``! else`` may carry trailing text (``! else  fallback for other targets``);
``! end`` must stand alone.

Anything that does not parse cleanly is not a directive and stays an
ordinary line.
"""

from typing import Callable, Dict, Optional, Tuple

from ..models.document import Directive, DirectiveKind


def _keyword_split(text: str) -> Optional[Tuple[str, str]]:
    """
    Split a directive line into (keyword, remainder)

    Returns None unless the line is ``!`` + whitespace + keyword.
    """
    if not text.startswith("!"):
        return None
    body = text[1:].rstrip("\r\n")
    if not body or not body[0].isspace():
        return None
    body = body.lstrip()
    pos = 0
    while pos < len(body) and not body[pos].isspace():
        pos += 1
    if pos == 0:
        return None
    return body[:pos], body[pos:]


def _include_parse(remainder: str) -> Optional[Directive]:
    """Parse ``[description](path)`` with optional trailing whitespace"""
    link = remainder.strip()
    if not link.startswith("[") or not link.endswith(")"):
        return None
    # The path is the last parenthesised group after a closing bracket
    split = link.rfind("](")
    if split == -1:
        return None
    return Directive(
        kind=DirectiveKind.INCLUDE,
        argument=link[split + 2:-1],
        description=link[1:split],
    )


def _includePath_parse(remainder: str) -> Optional[Directive]:
    directory = remainder.strip()
    if not directory:
        return None
    return Directive(kind=DirectiveKind.INCLUDE_PATH, argument=directory)


def _condition_parse(kind: DirectiveKind) -> Callable[[str], Optional[Directive]]:
    def parse(remainder: str) -> Optional[Directive]:
        # A condition needs whitespace between keyword and expression
        if not remainder or not remainder[0].isspace():
            return None
        return Directive(kind=kind, argument=remainder.strip())
    return parse


def _else_parse(remainder: str) -> Optional[Directive]:
    # Text after else is a free-form annotation
    return Directive(kind=DirectiveKind.ELSE)


def _end_parse(remainder: str) -> Optional[Directive]:
    if remainder.strip():
        return None
    return Directive(kind=DirectiveKind.END)


class DirectiveRegistry:
    """
    Maps directive keywords to their argument parsers
    """

    def __init__(self) -> None:
        self.parsers: Dict[str, Callable[[str], Optional[Directive]]] = {
            DirectiveKind.INCLUDE.value: _include_parse,
            DirectiveKind.INCLUDE_PATH.value: _includePath_parse,
            DirectiveKind.IF.value: _condition_parse(DirectiveKind.IF),
            DirectiveKind.ELSIF.value: _condition_parse(DirectiveKind.ELSIF),
            DirectiveKind.ELSE.value: _else_parse,
            DirectiveKind.END.value: _end_parse,
        }

    def parse(self, text: str) -> Optional[Directive]:
        """
        Parse a line into a Directive

        Args:
            text: Raw line text (trailing newline allowed)

        Returns:
            Directive, or None if the line is not a well-formed directive

        Example:
            >>> DirectiveRegistry().parse("! include [x](lib/x.lmd)\\n")
            Directive(kind=<DirectiveKind.INCLUDE: 'include'>, argument='lib/x.lmd', description='x')
        """
        split = _keyword_split(text)
        if split is None:
            return None
        keyword, remainder = split
        parser = self.parsers.get(keyword)
        if parser is None:
            return None
        return parser(remainder)


_registry = DirectiveRegistry()


def directive_parse(text: str) -> Optional[Directive]:
    """Parse a line with the default directive registry"""
    return _registry.parse(text)
