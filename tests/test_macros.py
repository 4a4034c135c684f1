r"""
Macro tokenizer and expander tests

Tests token recognition, escaping, multi-line expansion with indentation,
filter chains, unknown references and the expansion depth bound.
"""

import pytest

from mdtangle.config import AppSettings
from mdtangle.lib.filters import FilterRegistry, LineFilter
from mdtangle.lib.macros import (
    MacroExpander,
    MacroTokenizer,
    delimiters_unescape,
    reference_parse,
)
from mdtangle.models.document import MacroReference
from mdtangle.models.errors import ErrorKind, TangleError


def expand(lines, blocks, settings=None):
    return MacroExpander(blocks, settings=settings).expand(lines)


class TestReferenceParse:
    """Text between delimiters"""

    def test_name_only(self):
        assert reference_parse("items") == MacroReference(name="items")

    def test_surrounding_spaces(self):
        assert reference_parse("  items  ").name == "items"

    def test_filter_chain(self):
        reference = reference_parse("items|add_comma | indent_lines ")
        assert reference.name == "items"
        assert reference.filters == ["add_comma", "indent_lines"]

    def test_invalid_characters(self):
        assert reference_parse("a.b") is None
        assert reference_parse("x(y)") is None

    def test_empty(self):
        assert reference_parse("   ") is None


class TestTokenizer:
    """Splitting lines into literals and references"""

    def test_plain_text(self):
        assert MacroTokenizer().text_tokenize("no macros here\n") == ["no macros here\n"]

    def test_single_reference(self):
        segments = MacroTokenizer().text_tokenize("x = ⦅value⦆\n")
        assert segments[0] == "x = "
        assert segments[1].name == "value"
        assert segments[1].raw == "⦅value⦆"
        assert segments[2] == "\n"

    def test_escaped_delimiter_is_literal(self):
        assert MacroTokenizer().text_tokenize("s = '\\⦅name\\⦆'\n") == ["s = '\\⦅name\\⦆'\n"]

    def test_invalid_token_is_literal(self):
        assert MacroTokenizer().text_tokenize("⦅not.a.macro⦆") == ["⦅not.a.macro⦆"]

    def test_unclosed_is_literal(self):
        assert MacroTokenizer().text_tokenize("⦅open") == ["⦅open"]

    def test_recovers_after_invalid_open(self):
        segments = MacroTokenizer().text_tokenize("⦅a ⦅b⦆")
        assert segments[0] == "⦅a "
        assert segments[1].name == "b"


class TestExpansion:
    """Substituting block bodies"""

    def test_simple_substitution(self):
        assert expand(["x = ⦅value⦆\n"], {"value": ["42"]}) == ["x = 42\n"]

    def test_line_without_macros_untouched(self):
        assert expand(["  plain\n"], {}) == ["  plain\n"]

    def test_two_macros_on_one_line(self):
        assert expand(["⦅foo⦆ ⦅foo⦆"], {"foo": ["foo"]}) == ["foo foo"]

    def test_indentation_inherited(self):
        """Continuation lines get the call site's indentation"""
        blocks = {"body": ["one\n", "two\n", "three"]}
        result = expand(["def f():\n", "  ⦅body⦆\n"], blocks)
        assert result == ["def f():\n", "  one\n", "  two\n", "  three\n"]

    def test_text_around_multiline_macro(self):
        blocks = {"items": ["1,\n", "2"]}
        assert expand(["x = [⦅items⦆]\n"], blocks) == ["x = [1,\n", "2]\n"]

    def test_recursive_expansion(self):
        blocks = {
            "outer": ["begin\n", "  ⦅inner⦆\n", "end"],
            "inner": ["a\n", "b"],
        }
        result = expand(["⦅outer⦆\n"], blocks)
        assert result == ["begin\n", "  a\n", "  b\n", "end\n"]

    def test_empty_macro_contributes_nothing(self):
        """A line holding only an empty macro disappears"""
        assert expand(["a\n", "  ⦅empty⦆\n", "b\n"], {"empty": []}) == ["a\n", "b\n"]

    def test_empty_macro_keeps_surrounding_text(self):
        assert expand(["x = ⦅empty⦆1\n"], {"empty": []}) == ["x = 1\n"]

    def test_escaped_delimiters_not_expanded(self):
        result = expand(["s = '\\⦅foo\\⦆'\n"], {})
        assert result == ["s = '\\⦅foo\\⦆'\n"]
        assert delimiters_unescape(result) == ["s = '⦅foo⦆'\n"]


class TestFilters:
    """Filter chains on references"""

    def test_filter_applied(self):
        assert expand(["⦅x | double_quote⦆\n"], {"x": ["hi"]}) == ['"hi"\n']

    def test_filter_order_left_to_right(self):
        """add_comma runs before indent_lines"""
        assert expand(["⦅x | add_comma | indent_lines⦆"], {"x": ["x"]}) == ["  x,"]

    def test_unknown_filter(self):
        with pytest.raises(TangleError, match="nope") as info:
            expand(["⦅x | nope⦆\n"], {"x": ["1"]})
        assert info.value.kind is ErrorKind.REFERENCE

    def test_custom_filter_registry(self):
        filters = FilterRegistry()
        filters.register("upper", LineFilter(str.upper))
        expander = MacroExpander({"x": ["abc"]}, filters)
        assert expander.expand(["⦅x|upper⦆"]) == ["ABC"]

    def test_failing_filter_is_evaluator_error(self):
        filters = FilterRegistry()
        filters.register("broken", LineFilter(lambda line: 1 / 0))
        expander = MacroExpander({"x": ["abc"]}, filters)
        with pytest.raises(TangleError) as info:
            expander.expand(["⦅x|broken⦆"])
        assert info.value.kind is ErrorKind.EVALUATOR


class TestReferenceErrors:
    """Unknown macros and cycles"""

    def test_unknown_macro_names_macro_and_line(self):
        with pytest.raises(TangleError) as info:
            expand(["call ⦅missing⦆\n"], {})
        error = info.value
        assert error.kind is ErrorKind.REFERENCE
        assert "missing" in error.report()
        assert "call ⦅missing⦆" in error.report()

    def test_failure_wrapped_with_line(self):
        with pytest.raises(TangleError) as info:
            expand(["⦅outer⦆\n"], {"outer": ["⦅missing⦆"]})
        assert info.value.message == "Failed to process line: ⦅outer⦆"
        assert info.value.root().kind is ErrorKind.REFERENCE

    def test_self_reference_terminates(self):
        with pytest.raises(TangleError) as info:
            expand(["⦅loop⦆\n"], {"loop": ["⦅loop⦆"]})
        assert info.value.kind is ErrorKind.BOUND_EXCEEDED
        assert "too deep macro expansion (depth 1001)" in info.value.root().message

    def test_indirect_cycle_terminates(self):
        blocks = {"a": ["⦅b⦆"], "b": ["⦅a⦆"]}
        with pytest.raises(TangleError) as info:
            expand(["⦅a⦆"], blocks)
        assert info.value.kind is ErrorKind.BOUND_EXCEEDED


def chain(length: int):
    """Blocks b1 -> b2 -> ... -> b{length}"""
    blocks = {f"b{i}": [f"⦅b{i + 1}⦆"] for i in range(1, length)}
    blocks[f"b{length}"] = ["bottom"]
    return blocks


class TestDepthBound:
    """Expansion stops exactly at the configured depth"""

    def test_at_limit_succeeds(self):
        settings = AppSettings(max_macro_depth=5)
        assert expand(["⦅b1⦆"], chain(5), settings) == ["bottom"]

    def test_past_limit_fails(self):
        settings = AppSettings(max_macro_depth=5)
        with pytest.raises(TangleError) as info:
            expand(["⦅b1⦆"], chain(6), settings)
        assert info.value.kind is ErrorKind.BOUND_EXCEEDED

    def test_default_limit_reachable(self):
        """A legitimate chain of 1000 nested references expands"""
        assert expand(["⦅b1⦆"], chain(1000)) == ["bottom"]
