"""models.py — Shared data types for bindery."""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ManuscriptUnit:
    display_name: str        # Filename remainder after the ordinal, e.g. "The Storm.md"
    ordinal: int | None      # Leading number of the filename, if any
    source_filename: str
    source_directory: Path
    source_path: Path
    raw_markdown: str
    rendered_html: str       # Trimmed HTML fragment
    rendered_ooxml: str      # Trimmed WordprocessingML fragment


# Front/back matter pages and chapter scenes are the same record.
Page = ManuscriptUnit
Scene = ManuscriptUnit


@dataclass(frozen=True)
class Chapter:
    ordinal: int
    display_name: str
    scenes: tuple[Scene, ...] = ()


@dataclass(frozen=True)
class Manuscript:
    base_dir: Path
    front_matter: tuple[Page, ...] = ()
    chapters: tuple[Chapter, ...] = ()
    back_matter: tuple[Page, ...] = ()

    def units(self):
        """Yield every unit in composition order."""
        yield from self.front_matter
        for chapter in self.chapters:
            yield from chapter.scenes
        yield from self.back_matter
