"""
Weaver tests

Tests header rendering, include and include-path substitution, and that
weaving validates the document like tangling does.
"""

import pytest
from pathlib import Path

from mdtangle.lib.includes import lines_fromText
from mdtangle.lib.weave import Weaver, header_make, name_humanize
from mdtangle.models.document import FenceHeader
from mdtangle.models.errors import ErrorKind, TangleError


def weave(source: str, directory: Path = Path(".")):
    return "".join(Weaver(lines_fromText(source), directory / "doc.lmd").weave())


class TestHeaders:
    """Section headers for opening fences"""

    def test_name_humanize(self):
        assert name_humanize("parse_blocks-helper") == "Parse Blocks Helper"

    @pytest.mark.parametrize("header, expected", [
        (FenceHeader(language="python"), "###### Output Block\n"),
        (FenceHeader(language="python", replacing=True), "###### Replacing Output Block\n"),
        (FenceHeader(language="python", name="setup-code"), "###### Code Block: Setup Code\n"),
        (FenceHeader(language="python", name="x", replacing=True), "###### Replacing Code Block: X\n"),
        (FenceHeader(language="python", extension=True), "###### Extension Block\n"),
    ])
    def test_header_make(self, header, expected):
        assert header_make(header) == expected


class TestWeave:
    """Whole documents"""

    def test_named_block(self):
        woven = weave("Intro\n``` python =setup-code\nx = 1\n```\nOutro\n")
        assert woven == (
            "Intro\n"
            "###### Replacing Code Block: Setup Code\n"
            "\n"
            "``` python\n"
            "x = 1\n"
            "```\n"
            "Outro\n"
        )

    def test_indent_kept_on_fence(self):
        woven = weave("  ``` python\n  x\n  ```\n")
        assert woven == "###### Output Block\n\n  ``` python\n  x\n  ```\n"

    def test_extension_block(self):
        woven = weave("``` python !\nflag = True\n```\n")
        assert woven.startswith("###### Extension Block\n\n``` python\nflag = True\n")

    def test_macros_and_conditionals_untouched(self):
        source = "``` python\n! if debug\nprint(⦅x⦆)\n! end\n```\n"
        woven = weave(source)
        assert "! if debug\nprint(⦅x⦆)\n! end\n" in woven

    def test_include_becomes_link(self, tmp_path):
        (tmp_path / "part.lmd").write_text("``` python part\npass\n```\n")
        woven = weave("Text\n! include [The part](part.lmd)\n", tmp_path)
        assert woven == "Text\n**See include:** [part.lmd](part.lmd)\n"

    def test_include_path_removed(self, tmp_path):
        (tmp_path / "shared").mkdir()
        (tmp_path / "shared" / "part.lmd").write_text("text\n")
        woven = weave("! include-path shared\n! include [Part](part.lmd)\n", tmp_path)
        assert woven == "**See include:** [part.lmd](part.lmd)\n"

    def test_block_summary(self, tmp_path):
        (tmp_path / "part.lmd").write_text("``` python x\nb\n```\n")
        weaver = Weaver(lines_fromText("``` python x\na\n```\n! include [P](part.lmd)\n"), tmp_path / "doc.lmd")
        weaver.weave()
        assert weaver.blocks["x"]["count"] == 2
        assert weaver.blocks["x"]["locations"][1] == (1, tmp_path / "part.lmd")

    def test_write(self, tmp_path):
        doc = tmp_path / "doc.lmd"
        doc.write_text("``` python\npass\n```\n")
        output = tmp_path / "doc.md"

        assert Weaver.from_file(doc).write(output) is True
        assert output.read_text().startswith("###### Output Block\n")


class TestValidation:
    """Weaving fails where tangling would"""

    def test_missing_fence(self):
        with pytest.raises(TangleError) as info:
            weave("``` python x\nnever closed\n")
        assert info.value.kind is ErrorKind.STRUCTURAL

    def test_mixed_languages(self):
        with pytest.raises(TangleError) as info:
            weave("``` python x\na\n```\n``` ruby x\nb\n```\n")
        assert info.value.kind is ErrorKind.STRUCTURAL

    def test_missing_include(self, tmp_path):
        with pytest.raises(TangleError) as info:
            weave("! include [Gone](gone.lmd)\n", tmp_path)
        assert info.value.kind is ErrorKind.REFERENCE
