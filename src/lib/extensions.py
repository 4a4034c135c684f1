"""
Extension evaluator

Extension blocks (``` python !) and conditional expressions (! if EXPR) are
run by an ExtensionContext owned by a single tangle run. Extension code
executes in the context's namespace and can reach:

    context   the ExtensionContext itself
    filters   the FilterRegistry used by macro expansion
    blocks    dict of injected blocks (name -> list of lines)
    Filter, LineFilter   filter classes for registering new filters

Defining ``parse_hook(root, blocks)`` in an extension block installs a hook
that may rewrite the assembled blocks before macro expansion.
"""

from typing import Any, Dict, List, Optional, Tuple

from ..models.errors import ErrorKind, TangleError
from .filters import Filter, FilterRegistry, LineFilter
from .log import LOG


Blocks = Dict[str, List[str]]


class ExtensionContext:
    """
    Evaluator and shared registries for one document run

    Attributes:
        filters: Filter registry consulted by the macro expander
        blocks: Blocks injected by extension code, merged over the
                assembled blocks by parse_hook()
        namespace: Globals for extension code and conditions
    """

    def __init__(self, filters: Optional[FilterRegistry] = None) -> None:
        self.filters = filters if filters is not None else FilterRegistry()
        self.blocks: Blocks = {}
        self.namespace: Dict[str, Any] = {
            "__name__": "mdtangle_extension",
            "context": self,
            "filters": self.filters,
            "blocks": self.blocks,
            "Filter": Filter,
            "LineFilter": LineFilter,
        }

    def evaluate(self, expression: str) -> bool:
        """
        Evaluate a condition expression to a boolean

        Raises:
            TangleError(EVALUATOR): If the expression raises
        """
        try:
            result = eval(expression, self.namespace)
        except Exception as e:
            raise TangleError(
                ErrorKind.EVALUATOR, f"Failed to evaluate condition: {expression}", e
            )
        LOG(f"Condition {expression!r} -> {bool(result)}", level=3)
        return bool(result)

    def execute(self, code: str) -> None:
        """
        Execute an extension block for its side effects

        Raises:
            TangleError(EVALUATOR): If the code raises
        """
        try:
            exec(compile(code, "<extension block>", "exec"), self.namespace)
        except Exception as e:
            first_line = code.strip().splitlines()[0] if code.strip() else ""
            raise TangleError(
                ErrorKind.EVALUATOR, f"Failed to execute extension block: {first_line}", e
            )

    def parse_hook(
        self, root: Optional[List[str]], blocks: Blocks
    ) -> Tuple[Optional[List[str]], Blocks]:
        """
        Let extension code adjust the assembled blocks

        Injected blocks are merged over the assembled ones, then a
        ``parse_hook`` defined by extension code (if any) gets the final say.

        Args:
            root: Resolved root block, None if the document has none
            blocks: Resolved named blocks

        Returns:
            (root, blocks) to use for macro expansion
        """
        merged = dict(blocks)
        for name, lines in self.blocks.items():
            if name == "":
                root = list(lines)
            else:
                merged[name] = list(lines)
        hook = self.namespace.get("parse_hook")
        if hook is None:
            return root, merged
        try:
            root, merged = hook(root, merged)
        except Exception as e:
            raise TangleError(ErrorKind.EVALUATOR, "parse_hook failed", e)
        return root, merged
