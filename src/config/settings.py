"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use MDTANGLE_ prefix (e.g., MDTANGLE_MAX_MACRO_DEPTH=200).

Settings can also be loaded from a .env file in the project root.
"""

from typing import List, Tuple

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use MDTANGLE_ prefix.

    Examples:
        MDTANGLE_MAX_INCLUDE_DEPTH=50
        MDTANGLE_EXTENSION_LANGUAGE=python
        MDTANGLE_INCLUDE_DIRS='["lib", "vendor/docs"]'
    """

    model_config = SettingsConfigDict(
        env_prefix="MDTANGLE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Macro token configuration
    macro_open: str = Field(
        default="⦅",
        description="Opening delimiter of a macro reference",
    )

    macro_close: str = Field(
        default="⦆",
        description="Closing delimiter of a macro reference",
    )

    escape_char: str = Field(
        default="\\",
        description="Character that protects a delimiter from macro matching",
    )

    # Recursion bounds
    max_include_depth: int = Field(
        default=1000,
        description="Maximum nesting of include directives",
    )

    max_macro_depth: int = Field(
        default=1000,
        description="Maximum nesting of macro expansion",
    )

    # Extension configuration
    extension_language: str = Field(
        default="python",
        description="Language tag that marks an extension fence (``` python !)",
    )

    include_dirs: List[str] = Field(
        default_factory=list,
        description="Directories searched for includes not found beside the including file",
    )

    # Filter configuration
    indent_unit: str = Field(
        default="  ",
        description="Prefix added by the indent_lines and indent_continuation filters",
    )

    # Self-test configuration
    dev_mode: bool = Field(
        default=False,
        description="Report self-test failures as warnings instead of aborting",
    )

    def delimiters_escaped(self) -> Tuple[str, str]:
        """
        Escaped forms of the macro delimiters.

        Returns:
            (escaped open, escaped close), e.g. ('\\\\⦅', '\\\\⦆')
        """
        return (
            f"{self.escape_char}{self.macro_open}",
            f"{self.escape_char}{self.macro_close}",
        )

    def recursionLimit_required(self) -> int:
        """
        Interpreter stack depth needed to reach both recursion bounds.

        Each include level costs one frame and each macro level costs two
        (line list -> single line -> line list), plus headroom for the
        caller and for filters.
        """
        return max(self.max_include_depth, 2 * self.max_macro_depth) + 500


# Singleton instance - import this in your code
appsettings = AppSettings()
