r"""
Built-in self-test

Tangles a small literate document that exercises every feature of the
pipeline (replacement, appending, filters, escaping, includes, extension
blocks, conditionals) into Python source, runs that source and checks the
variables it defines.

A failed check aborts with TangleError(SELF_TEST), or only logs a warning
in dev mode.
"""

import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, List, Tuple

from ..config import AppSettings
from ..models.errors import ErrorKind, TangleError
from .log import LOG, WARN


SELFTEST_DOCUMENT = r"""# mdtangle self test

``` python !
filters.register("shout", LineFilter(lambda line: line.upper()))
blocks["from-extension"] = ["from_extension = True"]
selftest_flag = True
```

``` python
block_replacement = True
replaced_block = False
block_appendment = False
⦅replaced-block⦆
⦅appended-block⦆
insertion_works_with_spaces = False
⦅ spaced-insertion ⦆
escaped_string = '\⦅macro_description\⦆'
two_macros = "⦅foo⦆ ⦅foo⦆"
string_with_backslash = "⦅string-with-backslash | string_escape⦆"
some_text = ⦅some-text | double_quote⦆
some_indented_text = "⦅some-text | indent_lines⦆"
items = [⦅item-list | add_comma⦆]
continued = ⦅continuation-list | indent_continuation⦆
shouted = "⦅shout-me | shout⦆"
included_string = "⦅included-string⦆"
from_extension = False
⦅from-extension⦆
conditional_results = {}
⦅conditional-checks⦆
```

``` python replaced-block
replaced_block = False
```

``` python =replaced-block
# this is the replacement
replaced_block = True
```

``` python appended-block
# appended code gets injected
```

``` python appended-block
block_appendment = True
```

``` python spaced-insertion
insertion_works_with_spaces = True
```

``` text foo
foo
```

``` text string-with-backslash
this string ends in \.
```

``` text some-text
some text
```

``` text item-list
'item 1'
'item 2'
```

``` text continuation-list
(1 +
2)
```

``` text shout-me
quiet
```

``` text included-string
I came from the main document
```

``` python conditional-checks
! if True
conditional_results["if-true-elsif-true"] = "if"
! elsif True
conditional_results["if-true-elsif-true"] = "elsif"
! else
conditional_results["if-true-elsif-true"] = "else"
! end
! if selftest_flag
conditional_results["if-true-elsif-false"] = "if"
! elsif False
conditional_results["if-true-elsif-false"] = "elsif"
! else
conditional_results["if-true-elsif-false"] = "else"
! end
! if False
conditional_results["if-false-elsif-true"] = "if"
! elsif selftest_flag
conditional_results["if-false-elsif-true"] = "elsif"
! else
conditional_results["if-false-elsif-true"] = "else"
! end
! if False
conditional_results["if-false-elsif-false"] = "if"
! elsif not selftest_flag
conditional_results["if-false-elsif-false"] = "elsif"
! else
conditional_results["if-false-elsif-false"] = "else"
! end
! if True
conditional_results["if-true-else"] = "if"
! else
conditional_results["if-true-else"] = "else"
! end
! if False
conditional_results["if-false-else"] = "if"
! else
conditional_results["if-false-else"] = "else"
! end
```

! include [Included replacements](selftest_include.lmd)
"""

SELFTEST_INCLUDE = """# Included by the self test

``` text =included-string
I came from selftest_include.lmd
```
"""


Check = Tuple[str, Callable[[Dict[str, Any]], bool]]

CHECKS: List[Check] = [
    ("block replacement doesn't work",
     lambda ns: ns["block_replacement"] and ns["replaced_block"]),
    ("appending to macros doesn't work",
     lambda ns: ns["block_appendment"]),
    ("insertion must support spaces",
     lambda ns: ns["insertion_works_with_spaces"]),
    ("macro delimiters may be escaped",
     lambda ns: ns["escaped_string"] == "⦅macro_description⦆"),
    ("Should be able to place two macros on the same line",
     lambda ns: ns["two_macros"] == "foo foo"),
    ("string_escape doesn't escape backslash",
     lambda ns: ns["string_with_backslash"] == "this string ends in \\."),
    ("double_quote doesn't double quote",
     lambda ns: ns["some_text"] == "some text"),
    ("indent_lines should add two spaces to lines",
     lambda ns: ns["some_indented_text"] == "  some text"),
    ("add_comma isn't adding commas",
     lambda ns: ns["items"] == ["item 1", "item 2"]),
    ("indent_continuation should indent continuation lines",
     lambda ns: ns["continued"] == 3),
    ("filters registered by extensions should be usable",
     lambda ns: ns["shouted"] == "QUIET"),
    ("included replacements should replace blocks",
     lambda ns: ns["included_string"] == "I came from selftest_include.lmd"),
    ("extension hook should be able to add blocks",
     lambda ns: ns["from_extension"]),
    ("conditional output: if should win when if and elsif are true",
     lambda ns: ns["conditional_results"].get("if-true-elsif-true") == "if"),
    ("conditional output: if should win when elsif is false",
     lambda ns: ns["conditional_results"].get("if-true-elsif-false") == "if"),
    ("conditional output: elsif should be output when if is false and elsif is true",
     lambda ns: ns["conditional_results"].get("if-false-elsif-true") == "elsif"),
    ("conditional output: else should be output when neither if nor elsif is true",
     lambda ns: ns["conditional_results"].get("if-false-elsif-false") == "else"),
    ("conditional output: else should not be output when if is true",
     lambda ns: ns["conditional_results"].get("if-true-else") == "if"),
    ("conditional output: else should be output when if is false",
     lambda ns: ns["conditional_results"].get("if-false-else") == "else"),
]


def selfTestFailure_report(message: str, dev: bool) -> None:
    """
    Report one failed check

    Raises:
        TangleError(SELF_TEST): Unless dev is set
    """
    if dev:
        WARN(f"Self test failure: {message}")
    else:
        raise TangleError(ErrorKind.SELF_TEST, f"Self test failure: {message}")


def selfTestSettings_make() -> AppSettings:
    """
    Settings the self-test document is written for

    Environment overrides (other delimiters, a different extension
    language or indent unit) apply to user documents only.
    """
    return AppSettings(
        macro_open="⦅",
        macro_close="⦆",
        escape_char="\\",
        max_include_depth=1000,
        max_macro_depth=1000,
        extension_language="python",
        include_dirs=[],
        indent_unit="  ",
    )


def selfTest_tangle(workdir: Path) -> List[str]:
    """Write the self-test document into workdir and tangle it"""
    from .tangle import Tangler

    document = workdir / "selftest.lmd"
    document.write_text(SELFTEST_DOCUMENT, encoding="utf-8")
    (workdir / "selftest_include.lmd").write_text(SELFTEST_INCLUDE, encoding="utf-8")

    tangled = Tangler(document, settings=selfTestSettings_make()).tangle()
    return tangled or []


def selfTest_run(dev: bool = False) -> bool:
    """
    Run the self-test

    Args:
        dev: Log failures as warnings instead of raising

    Returns:
        True if every check passed

    Raises:
        TangleError(SELF_TEST): On the first failed check, unless dev is set
    """
    LOG("Running self test...", level=2)
    with tempfile.TemporaryDirectory() as tmpdir:
        source = "".join(selfTest_tangle(Path(tmpdir)))

    namespace: Dict[str, Any] = {}
    try:
        exec(compile(source, "<selftest>", "exec"), namespace)
    except Exception as e:
        if not dev:
            raise TangleError(ErrorKind.SELF_TEST, "Self test output does not run", e)
        WARN(f"Self test output does not run: {e}")
        return False

    passed = True
    for message, check in CHECKS:
        try:
            ok = bool(check(namespace))
        except KeyError:
            ok = False
        if not ok:
            passed = False
            selfTestFailure_report(message, dev)

    LOG(f"Self test {'passed' if passed else 'failed'}", level=2)
    return passed
