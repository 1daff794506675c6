"""manuscript/base.py — Shared loader types: name parsing, errors, section layout."""

import os
import re
from dataclasses import dataclass
from pathlib import Path

# Optional non-word prefix, digits, separator, remainder: "03. The Storm.md"
FILENAME_PATTERN = re.compile(r"^\W*([0-9]+)\W+(.*)$")

MARKDOWN_SUFFIXES = (".md", ".markdown")


class LoadError(ValueError):
    """A manuscript entry does not have the shape its section requires."""

    def __init__(self, message: str, path: Path):
        super().__init__(message)
        self.path = Path(path)


class RenderError(RuntimeError):
    """The markdown engine failed on a source file."""

    def __init__(self, message: str, path: Path | None = None):
        super().__init__(message)
        self.path = Path(path) if path is not None else None


def parse_name(raw_name: str) -> tuple[int | None, str]:
    """Split a directory entry name into (ordinal, display_name).

    "03. The Storm.md" -> (3, "The Storm.md"); names without a leading
    number come back unchanged with no ordinal.
    """
    m = FILENAME_PATTERN.match(raw_name)
    if not m:
        return None, raw_name
    return int(m.group(1)), m.group(2)


def strip_markdown_suffix(name: str) -> str:
    """'The Storm.md' -> 'The Storm'. Other names are returned as-is."""
    lowered = name.lower()
    for suffix in MARKDOWN_SUFFIXES:
        if lowered.endswith(suffix) and len(name) > len(suffix):
            return name[: -len(suffix)]
    return name


@dataclass(frozen=True)
class SectionLayout:
    """Names of the three section directories under a manuscript base directory."""
    front: str = "front"
    chapters: str = "chapters"
    back: str = "back"

    @classmethod
    def from_env(cls) -> "SectionLayout":
        """Read MANUSCRIPT_*_DIR overrides; call load_dotenv() first."""
        defaults = cls()
        return cls(
            front=os.getenv("MANUSCRIPT_FRONT_DIR", "").strip() or defaults.front,
            chapters=os.getenv("MANUSCRIPT_CHAPTERS_DIR", "").strip() or defaults.chapters,
            back=os.getenv("MANUSCRIPT_BACK_DIR", "").strip() or defaults.back,
        )
