#!/usr/bin/env python3
"""
bindery — Compile a markdown manuscript into one HTML page and one Word document.

Expected layout under the base directory:
  front/      front-matter pages, e.g. "01. Title.md"
  chapters/   numbered chapter files, or numbered directories of scene files
  back/       back-matter pages

Output:
  out/compiled.html
  out/compiled.docx   (built from the scratch tree in out/docx)

Quick start:
  1. python bindery.py my-novel/ --dry-run
  2. python bindery.py my-novel/
  3. python bindery.py my-novel/ --format docx --docx-chapter-titles
"""

import argparse
import asyncio
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

FORMATS = ("html", "docx")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Compile a front/chapters/back markdown manuscript to HTML and DOCX",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List what would be compiled, write nothing:
  python bindery.py my-novel/ --dry-run

  # Only the Word document, with a heading per chapter:
  python bindery.py my-novel/ --format docx --docx-chapter-titles

  # Section directory names and page title can also come from .env:
  MANUSCRIPT_FRONT_DIR="1. Front"  MANUSCRIPT_CHAPTERS_DIR="2. Chapters"
  MANUSCRIPT_BACK_DIR="3. Back"    BOOK_TITLE="The Storm"
        """,
    )
    parser.add_argument(
        "base_dir", type=Path, nargs="?", default=None,
        help="Manuscript directory (default: $MANUSCRIPT_DIR or current directory)",
    )
    parser.add_argument(
        "--format", choices=["html", "docx", "both"], default="both", dest="output_format",
        help="Which artifacts to build (default: both)",
    )
    parser.add_argument(
        "--docx-chapter-titles", action="store_true", default=False,
        help="Emit a Heading1 paragraph per chapter in the DOCX output",
    )
    parser.add_argument(
        "--title", type=str, default=None, metavar="TEXT",
        help="HTML page title (default: $BOOK_TITLE or the directory name)",
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Load the manuscript and list its contents without writing output",
    )
    return parser.parse_args(argv)


def word_count(fragment_html: str) -> int:
    from bs4 import BeautifulSoup
    return len(BeautifulSoup(fragment_html, "lxml").get_text(" ").split())


def print_outline(manuscript) -> None:
    def _line(indent: str, unit) -> None:
        number = f"{unit.ordinal:2d}." if unit.ordinal is not None else "   "
        print(f"{indent}{number} {unit.display_name:<50} {word_count(unit.rendered_html):>7} words")

    print(f"\nFront matter: {len(manuscript.front_matter)} page(s)")
    for page in manuscript.front_matter:
        _line("  ", page)
    print(f"Chapters: {len(manuscript.chapters)}")
    print("-" * 70)
    for chapter in manuscript.chapters:
        print(f"  Chapter {chapter.ordinal}: {chapter.display_name} ({len(chapter.scenes)} scene(s))")
        for scene in chapter.scenes:
            _line("    ", scene)
    print("-" * 70)
    print(f"Back matter: {len(manuscript.back_matter)} page(s)")
    for page in manuscript.back_matter:
        _line("  ", page)
    total_words = sum(word_count(unit.rendered_html) for unit in manuscript.units())
    print(f"\n  Total: {total_words:,} words\n")


async def build(args: argparse.Namespace) -> list[Path]:
    from docx_builder import compile_docx
    from html_builder import compile_html
    from manuscript import SectionLayout, build_renderers, load_manuscript

    base_dir = args.base_dir or Path(os.getenv("MANUSCRIPT_DIR", "").strip() or ".")
    layout = SectionLayout.from_env()
    renderers = build_renderers()

    print(f"Loading: {base_dir}")
    manuscript = await load_manuscript(base_dir, renderers, layout)
    print_outline(manuscript)

    if args.dry_run:
        print("Dry run complete. Nothing written.")
        return []

    formats = FORMATS if args.output_format == "both" else (args.output_format,)
    title = args.title or os.getenv("BOOK_TITLE", "").strip() or None

    # Either every requested artifact is written, or none from this run remains.
    written: list[Path] = []
    try:
        if "html" in formats:
            print("=== Building HTML ===")
            written.append(await compile_html(manuscript, title=title, progress=True))
            print(f"  Wrote {written[-1]}")
        if "docx" in formats:
            print("=== Building DOCX ===")
            written.append(await compile_docx(
                manuscript, chapter_titles=args.docx_chapter_titles, progress=True,
            ))
            print(f"  Wrote {written[-1]}")
    except BaseException:
        for path in written:
            path.unlink(missing_ok=True)
        raise
    return written


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    load_dotenv()

    from docx_builder import PackageError
    from manuscript import LoadError, RenderError

    try:
        written = asyncio.run(build(args))
    except (LoadError, RenderError, PackageError) as e:
        print(f"ERROR: {e}")
        if e.path is not None:
            print(f"  at: {e.path}")
        return 1
    except OSError as e:
        print(f"ERROR: {e.strerror or e}")
        if e.filename:
            print(f"  at: {e.filename}")
        return 1

    if written:
        print(f"\nDone! {len(written)} file(s) written.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
