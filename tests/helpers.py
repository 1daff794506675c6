"""Shared fixtures: on-disk manuscripts and in-memory models."""

from pathlib import Path

from models import Chapter, Manuscript, ManuscriptUnit


def write_tree(root: Path, files: dict[str, str], dirs: tuple[str, ...] = ()) -> Path:
    """Create files (path -> content) and empty directories under root."""
    for d in dirs:
        (root / d).mkdir(parents=True, exist_ok=True)
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


def storm_manuscript(root: Path) -> Path:
    """One titled front page, one chapter directory with two scenes, no back matter."""
    return write_tree(
        root,
        {
            "front/01. Title.md": "# Title\n",
            "chapters/01. Storm/01. Opening.md": "Hello.\n",
            "chapters/01. Storm/02. Climax.md": "World.\n",
        },
        dirs=("back",),
    )


def unit(name: str, html: str = "<p>x</p>", ooxml: str = "<w:p><w:r><w:t>x</w:t></w:r></w:p>",
         ordinal: int | None = None) -> ManuscriptUnit:
    path = Path("mem") / name
    return ManuscriptUnit(
        display_name=name,
        ordinal=ordinal,
        source_filename=name,
        source_directory=path.parent,
        source_path=path,
        raw_markdown="",
        rendered_html=html,
        rendered_ooxml=ooxml,
    )


def manuscript_with(base_dir: Path, scene_counts: list[int]) -> Manuscript:
    chapters = tuple(
        Chapter(
            ordinal=i,
            display_name=f"Part {i}",
            scenes=tuple(unit(f"s{i}-{j}", html=f"<p>Scene {i}.{j}</p>") for j in range(1, n + 1)),
        )
        for i, n in enumerate(scene_counts, start=1)
    )
    return Manuscript(
        base_dir=base_dir,
        front_matter=(unit("Title", html="<h3>Title</h3>"),),
        chapters=chapters,
        back_matter=(unit("Afterword", html="<h3>Afterword</h3>"),),
    )
