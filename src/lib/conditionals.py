"""
Conditional output and extension block extraction

A single forward pass over the included document:

1. ConditionalProcessor decides whether each line is kept, driven by
   ``! if / ! elsif / ! else / ! end`` directives whose expressions are
   evaluated by the ExtensionContext.
2. ExtensionExtractor captures kept lines between an extension fence
   (``` python !) and the next fence, runs them through the ExtensionContext
   and drops them from the output.

Both work line by line, so an extension block runs before any condition
that follows it in the document.
"""

from typing import List, Optional

from ..models.document import ConditionalFrame, DirectiveKind, Line
from ..models.errors import ErrorKind, TangleError
from .blocks import FENCE, fenceHeader_parse
from .directives import directive_parse
from .extensions import ExtensionContext
from .log import LOG


class ConditionalProcessor:
    """
    Stack machine over conditional directives

    Each directive sets the output state from its own frame alone: a true
    ``! if`` nested in a disabled branch turns output back on until its
    ``! end`` restores the outer state. Conditions are evaluated even inside
    a disabled region.
    """

    def __init__(self, context: ExtensionContext) -> None:
        self.context = context
        self.output_enabled = True
        self.stack: List[ConditionalFrame] = []

    def line_shouldOutput(self, line: Line) -> bool:
        """
        Consume one line and report whether it belongs in the output

        Directive lines are consumed and never output.

        Raises:
            TangleError(STRUCTURAL): elsif/else/end without a matching if
        """
        directive = directive_parse(line.text)
        if directive is None or directive.kind in (DirectiveKind.INCLUDE, DirectiveKind.INCLUDE_PATH):
            return self.output_enabled

        if directive.kind is DirectiveKind.IF:
            result = self.context.evaluate(directive.argument)
            self.stack.append(ConditionalFrame(previous=self.output_enabled, eligible=not result))
            self.output_enabled = result

        elif directive.kind is DirectiveKind.ELSIF:
            frame = self.frame_top("elsif without if", line)
            result = frame.eligible and self.context.evaluate(directive.argument)
            self.output_enabled = result
            frame.eligible = frame.eligible and not result

        elif directive.kind is DirectiveKind.ELSE:
            frame = self.frame_top("else without if", line)
            self.output_enabled = frame.eligible
            frame.eligible = False

        elif directive.kind is DirectiveKind.END:
            frame = self.frame_top("end without if", line)
            self.stack.pop()
            self.output_enabled = frame.previous

        return False

    def frame_top(self, message: str, line: Line) -> ConditionalFrame:
        if not self.stack:
            raise TangleError(ErrorKind.STRUCTURAL, f"{message} at {line.location()}")
        return self.stack[-1]

    def balance_check(self) -> None:
        """
        Raises:
            TangleError(STRUCTURAL): If any if is still open
        """
        if self.stack:
            raise TangleError(
                ErrorKind.STRUCTURAL, f"unbalanced blocks: {len(self.stack)} if without end"
            )


class ExtensionExtractor:
    """
    Captures extension blocks and hands them to the evaluator
    """

    def __init__(self, context: ExtensionContext, extension_language: str) -> None:
        self.context = context
        self.extension_language = extension_language
        self.capture: Optional[List[str]] = None
        self.opened_at: Optional[Line] = None
        self.executed = 0

    def line_passes(self, line: Line) -> bool:
        """
        Consume one line, True if it is not part of an extension block
        """
        if self.capture is None:
            header = fenceHeader_parse(line.text, self.extension_language)
            if header is not None and header.extension:
                self.capture = []
                self.opened_at = line
                return False
            return True

        if line.text.lstrip().startswith(FENCE):
            code = "".join(self.capture)
            self.capture = None
            self.context.execute(code)
            self.executed += 1
        else:
            self.capture.append(line.text)
        return False

    def finish(self) -> None:
        """
        Raises:
            TangleError(STRUCTURAL): If input ended inside an extension block
        """
        if self.capture is not None:
            where = self.opened_at.location() if self.opened_at else "<unknown>"
            raise TangleError(
                ErrorKind.STRUCTURAL, f"Missing code fence for extension block opened at {where}"
            )


def extensionsAndConditionals_handle(
    lines: List[Line], context: ExtensionContext, settings=None
) -> List[Line]:
    """
    Filter lines through conditionals, then extract extension blocks

    Args:
        lines: Included document lines
        context: Evaluator for conditions and extension code

    Returns:
        Lines to hand to the block assembler
    """
    if settings is None:
        from ..config import appsettings
        settings = appsettings

    conditions = ConditionalProcessor(context)
    extensions = ExtensionExtractor(context, settings.extension_language)

    kept: List[Line] = []
    for line in lines:
        if conditions.line_shouldOutput(line) and extensions.line_passes(line):
            kept.append(line)

    extensions.finish()
    conditions.balance_check()

    LOG(f"Kept {len(kept)} of {len(lines)} lines, ran {extensions.executed} extension blocks", level=2)
    return kept
