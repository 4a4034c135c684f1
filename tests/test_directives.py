"""
Directive parser tests

Tests recognition of ! include, ! include-path, ! if, ! elsif, ! else
and ! end lines, and that near-misses stay ordinary text.
"""

import pytest

from mdtangle.lib.directives import directive_parse
from mdtangle.models.document import DirectiveKind


class TestInclude:
    """Test ! include [desc](path)"""

    def test_simple_include(self):
        """Description and path are extracted"""
        directive = directive_parse("! include [Helpers](lib/helpers.lmd)\n")
        assert directive.kind is DirectiveKind.INCLUDE
        assert directive.argument == "lib/helpers.lmd"
        assert directive.description == "Helpers"

    def test_trailing_whitespace(self):
        """Trailing whitespace after the link is allowed"""
        directive = directive_parse("!  include  [x](y.lmd)   \n")
        assert directive.kind is DirectiveKind.INCLUDE
        assert directive.argument == "y.lmd"

    def test_brackets_in_description(self):
        """The path is taken from the last ]( group"""
        directive = directive_parse("! include [a [b]](c.lmd)\n")
        assert directive.argument == "c.lmd"
        assert directive.description == "a [b]"

    def test_malformed_include_is_text(self):
        """An include without a link is not a directive"""
        assert directive_parse("! include helpers.lmd\n") is None

    def test_include_path(self):
        """! include-path takes the rest of the line as a directory"""
        directive = directive_parse("! include-path ../shared \n")
        assert directive.kind is DirectiveKind.INCLUDE_PATH
        assert directive.argument == "../shared"


class TestConditionals:
    """Test ! if / ! elsif / ! else / ! end"""

    def test_if_expression(self):
        directive = directive_parse("! if target == 'linux'\n")
        assert directive.kind is DirectiveKind.IF
        assert directive.argument == "target == 'linux'"

    def test_elsif_expression(self):
        directive = directive_parse("! elsif debug\n")
        assert directive.kind is DirectiveKind.ELSIF
        assert directive.argument == "debug"

    def test_else(self):
        assert directive_parse("! else\n").kind is DirectiveKind.ELSE

    def test_end(self):
        assert directive_parse("! end\n").kind is DirectiveKind.END

    def test_else_with_annotation(self):
        """Trailing text after else is an annotation"""
        directive = directive_parse("! else  fallback for other targets\n")
        assert directive.kind is DirectiveKind.ELSE
        assert directive.argument == ""

    def test_else_prefix_of_longer_word_is_not_directive(self):
        assert directive_parse("! elsewhere\n") is None

    def test_end_with_text_is_not_directive(self):
        """! end must stand alone"""
        assert directive_parse("! end of story\n") is None

    def test_if_without_expression_is_not_directive(self):
        assert directive_parse("! if\n") is None


class TestNotDirectives:
    """Lines that must stay ordinary text"""

    @pytest.mark.parametrize("text", [
        "plain text\n",
        "!include [x](y)\n",
        " ! if True\n",
        "! iffy\n",
        "! unknown keyword\n",
        "!\n",
        "",
    ])
    def test_not_a_directive(self, text):
        assert directive_parse(text) is None
