"""manuscript/loader.py — Load a front/chapters/back manuscript directory into models.

Directory listings and file reads run in worker threads so independent
entries load concurrently; results are always kept in listing order.
"""

import asyncio
from pathlib import Path

from models import Chapter, Manuscript, ManuscriptUnit
from manuscript.base import LoadError, SectionLayout, parse_name, strip_markdown_suffix
from manuscript.render import Renderers


def _ordinal_key(item) -> tuple[bool, int]:
    # Numbered entries first, by number; unnumbered keep their listing order.
    return item.ordinal is None, item.ordinal or 0


def sort_by_ordinal(items):
    return tuple(sorted(items, key=_ordinal_key))


async def list_entries(directory: Path) -> list[Path]:
    """Immediate children of a directory in name order, skipping dot-files."""
    directory = Path(directory)
    children = await asyncio.to_thread(lambda: list(directory.iterdir()))
    return sorted((p for p in children if not p.name.startswith(".")), key=lambda p: p.name)


async def load_unit(entry: Path, renderers: Renderers) -> ManuscriptUnit:
    """Read one markdown file and render it in both modes."""
    entry = Path(entry)
    if await asyncio.to_thread(entry.is_dir):
        raise LoadError(f'Expected a file but found a directory: "{entry.name}"', entry)

    ordinal, display_name = parse_name(entry.name)
    try:
        markdown_text = await asyncio.to_thread(entry.read_text, encoding="utf-8")
    except UnicodeDecodeError as e:
        raise LoadError(f'Not UTF-8 text: "{entry.name}" (byte {e.start})', entry) from e
    return ManuscriptUnit(
        display_name=display_name,
        ordinal=ordinal,
        source_filename=entry.name,
        source_directory=entry.parent,
        source_path=entry,
        raw_markdown=markdown_text,
        rendered_html=renderers.html.render(markdown_text, source=entry).strip(),
        rendered_ooxml=renderers.ooxml.render(markdown_text, source=entry).strip(),
    )


async def load_chapter(entry: Path, renderers: Renderers) -> Chapter:
    """A chapter is a numbered markdown file (one scene) or a numbered directory of scenes."""
    entry = Path(entry)
    ordinal, display_name = parse_name(entry.name)
    if ordinal is None:
        raise LoadError(f'Chapter does not include a number: "{display_name}"', entry)

    if await asyncio.to_thread(entry.is_dir):
        scene_entries = await list_entries(entry)
        scenes = await asyncio.gather(*(load_unit(p, renderers) for p in scene_entries))
        return Chapter(ordinal=ordinal, display_name=display_name, scenes=sort_by_ordinal(scenes))

    scene = await load_unit(entry, renderers)
    return Chapter(ordinal=ordinal, display_name=strip_markdown_suffix(display_name), scenes=(scene,))


async def _load_pages(directory: Path, renderers: Renderers) -> tuple[ManuscriptUnit, ...]:
    entries = await list_entries(directory)
    pages = await asyncio.gather(*(load_unit(p, renderers) for p in entries))
    return sort_by_ordinal(pages)


async def _load_chapters(directory: Path, renderers: Renderers) -> tuple[Chapter, ...]:
    entries = await list_entries(directory)
    chapters = await asyncio.gather(*(load_chapter(p, renderers) for p in entries))
    return sort_by_ordinal(chapters)


async def load_manuscript(
    base_dir: Path,
    renderers: Renderers,
    layout: SectionLayout | None = None,
) -> Manuscript:
    """Load all three sections; any failure aborts the whole load."""
    base_dir = Path(base_dir)
    layout = layout or SectionLayout()
    front, chapters, back = await asyncio.gather(
        _load_pages(base_dir / layout.front, renderers),
        _load_chapters(base_dir / layout.chapters, renderers),
        _load_pages(base_dir / layout.back, renderers),
    )
    return Manuscript(base_dir=base_dir, front_matter=front, chapters=chapters, back_matter=back)
