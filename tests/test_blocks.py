"""
Fence parser and block assembler tests

Tests fence header parsing, the replace/append merge rule, root block
separation and structural errors.
"""

import pytest

from mdtangle.lib.blocks import BlockAssembler, fenceHeader_parse
from mdtangle.lib.includes import lines_fromText
from mdtangle.models.document import FenceHeader
from mdtangle.models.errors import ErrorKind, TangleError


def assemble(source: str):
    return BlockAssembler().blocks_parse(lines_fromText(source))


class TestFenceHeader:
    """Parsing of fence lines"""

    def test_not_a_fence(self):
        assert fenceHeader_parse("plain text\n") is None
        assert fenceHeader_parse("`` almost\n") is None

    def test_closing_fence(self):
        assert fenceHeader_parse("```\n") == FenceHeader()

    def test_language_only(self):
        header = fenceHeader_parse("``` python\n")
        assert header.language == "python"
        assert header.name == ""
        assert header.replacing is False

    def test_named_block(self):
        header = fenceHeader_parse("``` python parse-blocks\n")
        assert header.language == "python"
        assert header.name == "parse-blocks"

    def test_replacing_block(self):
        header = fenceHeader_parse("  ```ruby =setup_code\n")
        assert header.indent == "  "
        assert header.language == "ruby"
        assert header.replacing is True
        assert header.name == "setup_code"

    def test_extension_fence(self):
        header = fenceHeader_parse("``` python !\n")
        assert header.extension is True
        assert header.name == ""

    def test_extension_language_configurable(self):
        assert fenceHeader_parse("``` ruby !\n", extension_language="ruby").extension is True
        assert fenceHeader_parse("``` ruby !\n", extension_language="python").extension is False


class TestMergeRules:
    """Replace/append semantics per block name"""

    def test_append_fragments_concatenate(self):
        root, blocks = assemble(
            "``` python x\na\n```\n"
            "text between\n"
            "``` python x\nb\n```\n"
        )
        assert root is None
        assert blocks["x"] == ["a\n", "b"]

    def test_replace_discards_earlier(self):
        """[append a], [replace b], [append c] resolves to b then c"""
        root, blocks = assemble(
            "``` python x\na\n```\n"
            "``` python =x\nb\n```\n"
            "``` python x\nc\n```\n"
        )
        assert blocks["x"] == ["b\n", "c"]

    def test_last_replacement_wins(self):
        root, blocks = assemble(
            "``` python =x\na\n```\n"
            "``` python =x\nb\n```\n"
        )
        assert blocks["x"] == ["b"]

    def test_last_line_newline_stripped(self):
        root, blocks = assemble("``` python x\nline 1\nline 2\n```\n")
        assert blocks["x"] == ["line 1\n", "line 2"]

    def test_empty_block(self):
        root, blocks = assemble("``` python x\n```\n")
        assert blocks["x"] == []

    def test_first_appearance_order(self):
        root, blocks = assemble(
            "``` python b\n1\n```\n"
            "``` python a\n2\n```\n"
            "``` python b\n3\n```\n"
        )
        assert list(blocks) == ["b", "a"]


class TestRootBlock:
    """The unnamed block is separated from the table"""

    def test_root_extracted(self):
        root, blocks = assemble(
            "# Title\n"
            "``` python\nprint('hi')\n```\n"
            "``` python helper\npass\n```\n"
        )
        assert root == ["print('hi')"]
        assert "" not in blocks
        assert list(blocks) == ["helper"]

    def test_no_root_block(self):
        root, blocks = assemble("just prose\n")
        assert root is None
        assert blocks == {}

    def test_fence_lines_discarded(self):
        root, blocks = assemble("outside\n```python\ninside\n```\noutside again\n")
        assert root == ["inside"]


class TestStructuralErrors:
    """Missing fences and mixed languages"""

    def test_missing_closing_fence(self):
        with pytest.raises(TangleError, match="Missing code fence") as info:
            assemble("``` python x\nnever closed\n")
        assert info.value.kind is ErrorKind.STRUCTURAL

    def test_missing_fence_names_opening_line(self):
        with pytest.raises(TangleError) as info:
            assemble("prose\n\n``` python x\nnever closed\n")
        assert str(info.value).endswith("opened at <string>:3")

    def test_mixed_languages(self):
        with pytest.raises(TangleError, match="multiple languages") as info:
            assemble(
                "``` python x\na\n```\n"
                "``` ruby x\nb\n```\n"
            )
        assert info.value.kind is ErrorKind.STRUCTURAL

    def test_same_language_different_names_ok(self):
        root, blocks = assemble(
            "``` python x\na\n```\n"
            "``` ruby y\nb\n```\n"
        )
        assert blocks == {"x": ["a"], "y": ["b"]}
