"""html_builder.py — Compose a loaded manuscript into one HTML page."""

import html
from pathlib import Path

from tqdm import tqdm

from models import Manuscript
from output import open_output

SCENE_BREAK = '<p class="scene-break">❖</p>'


def default_output_path(manuscript: Manuscript) -> Path:
    return manuscript.base_dir / "out" / "compiled.html"


def indent(text: str, prefix: str) -> str:
    """Prefix every line of a fragment. Fragments holding <pre> blocks are left as-is."""
    text = text.strip()
    if "<pre" in text:
        return text
    return prefix + text.replace("\n", "\n" + prefix)


async def compile_html(
    manuscript: Manuscript,
    output_path: Path | None = None,
    title: str | None = None,
    progress: bool = False,
) -> Path:
    """
    Write <header> (front matter), <main> (chapters) and <footer> (back matter)
    part by part. Returns the output path.
    """
    output_path = Path(output_path) if output_path else default_output_path(manuscript)
    title = title or manuscript.base_dir.resolve().name

    async with open_output(output_path) as out:
        await out.write(
            "<!DOCTYPE html>\n"
            '<html lang="en">\n'
            "<head>\n"
            '  <meta charset="UTF-8">\n'
            f"  <title>{html.escape(title)}</title>\n"
            "</head>\n"
            "<body>\n"
        )

        await out.write("<header>\n")
        for page in manuscript.front_matter:
            await out.write("\n <section>\n")
            await out.write(indent(page.rendered_html, "  ") + "\n")
            await out.write(" </section>\n")
        await out.write("\n</header>\n\n")

        await out.write("<main>\n")
        with tqdm(total=len(manuscript.chapters), desc="  HTML", unit="chapter", disable=not progress) as pbar:
            for chapter in manuscript.chapters:
                await out.write("\n <section>\n")
                await out.write(
                    f"  <h2>Chapter {chapter.ordinal}<br />{html.escape(chapter.display_name)}</h2>\n"
                )
                for i, scene in enumerate(chapter.scenes):
                    if i > 0:
                        await out.write(f"  {SCENE_BREAK}\n")
                    await out.write("  <article>\n")
                    await out.write(indent(scene.rendered_html, "   ") + "\n")
                    await out.write("  </article>\n")
                await out.write(" </section>\n")
                pbar.update(1)
        await out.write("\n</main>\n\n")

        await out.write("<footer>\n")
        for page in manuscript.back_matter:
            await out.write("\n <section>\n")
            await out.write(indent(page.rendered_html, "  ") + "\n")
            await out.write(" </section>\n")
        await out.write("\n</footer>\n")

        await out.write("</body>\n</html>\n")

    return output_path
