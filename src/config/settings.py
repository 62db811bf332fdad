"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use NARRATIV_ prefix (e.g., NARRATIV_HIGHLIGHTER_TIMEOUT=30).

Settings can also be loaded from a .env file in the project root.
"""

import shlex
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use NARRATIV_ prefix.

    Examples:
        NARRATIV_HIGHLIGHTER_COMMAND="python -m pygments"
        NARRATIV_HIGHLIGHTER_TIMEOUT=30
        NARRATIV_MARKDOWN_EXTENSIONS='["fenced_code", "tables", "toc"]'
    """

    model_config = SettingsConfigDict(
        env_prefix="NARRATIV_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Highlighter configuration
    highlighter_command: str = Field(
        default="pygmentize",
        description="Command line used to start the external highlighter (shell-split)",
    )

    highlighter_timeout: Optional[float] = Field(
        default=None,
        description="Seconds to wait for one highlighter run; None waits indefinitely",
    )

    divider_token: str = Field(
        default="DIVIDER",
        description="Token appended to the comment symbol to delimit code fragments",
    )

    highlight_start: str = Field(
        default='<div class="highlight"><pre>',
        description="Markup the html formatter opens its output with",
    )

    highlight_end: str = Field(
        default="</pre></div>",
        description="Markup the html formatter closes its output with",
    )

    # Prose configuration
    markdown_extensions: List[str] = Field(
        default_factory=lambda: ["fenced_code", "tables"],
        description="Python-Markdown extensions enabled for documentation text",
    )

    # Output configuration
    default_target_dir: str = Field(
        default="docs",
        description="Output directory used when none is given",
    )

    output_suffix: str = Field(
        default=".html",
        description="Suffix appended to a source path to name its page",
    )

    def sentinel_make(self, symbol: str) -> str:
        """
        Build the divider line placed between code fragments.

        Args:
            symbol: Single-line comment token of the language

        Returns:
            Sentinel string (e.g., "\\n#DIVIDER\\n")

        Example:
            >>> settings = AppSettings()
            >>> settings.sentinel_make('//')
            '\\n//DIVIDER\\n'
        """
        return f"\n{symbol}{self.divider_token}\n"

    def highlighterCommand_split(self) -> List[str]:
        """Split the configured highlighter command into an argv prefix"""
        return shlex.split(self.highlighter_command)


# Singleton instance - import this in your code
appsettings = AppSettings()
