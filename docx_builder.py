"""docx_builder.py — Assemble rendered WordprocessingML fragments into a .docx package."""

import asyncio
import os
import zipfile
from pathlib import Path
from xml.sax.saxutils import escape as xml_escape

from lxml import etree
from tqdm import tqdm

from models import Manuscript
from manuscript.render import wp, wppr_heading, wr, wt
from output import open_output, partial_path

DOCX_PREAMBLE = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
    '<w:document'
    ' xmlns:ve="http://schemas.openxmlformats.org/markup-compatibility/2006"'
    ' xmlns:o="urn:schemas-microsoft-com:office:office"'
    ' xmlns:r="http://schemas.openxmlformats.org/officeDocument/2006/relationships"'
    ' xmlns:m="http://schemas.openxmlformats.org/officeDocument/2006/math"'
    ' xmlns:v="urn:schemas-microsoft-com:vml"'
    ' xmlns:wp="http://schemas.openxmlformats.org/drawingml/2006/wordprocessingDrawing"'
    ' xmlns:w10="urn:schemas-microsoft-com:office:word"'
    ' xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main"'
    ' xmlns:wne="http://schemas.microsoft.com/office/word/2006/wordml">\n'
    "<w:body>"
)

# US Letter, 1" margins
DOCX_POSTAMBLE = """<w:sectPr>
  <w:pgSz w:w="12240" w:h="15840"/>
  <w:pgMar w:top="1440" w:right="1440" w:bottom="1440" w:left="1440" w:header="720" w:footer="720" w:gutter="0"/>
  <w:cols w:space="720"/>
  <w:docGrid w:linePitch="360"/>
</w:sectPr>
</w:body>
</w:document>
"""

CONTENT_TYPES_XML = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
    '<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">'
    '<Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>'
    '<Default Extension="xml" ContentType="application/xml"/>'
    '<Override PartName="/word/document.xml"'
    ' ContentType="application/vnd.openxmlformats-officedocument.wordprocessingml.document.main+xml"/>'
    "</Types>\n"
)

ROOT_RELS_XML = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
    '<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">'
    '<Relationship Id="rId1"'
    ' Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/officeDocument"'
    ' Target="word/document.xml"/>'
    "</Relationships>\n"
)

DOCUMENT_RELS_XML = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
    '<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships"/>\n'
)

CONTENT_TYPES_NAME = "[Content_Types].xml"

# Package-relative path -> static content
SKELETON_PARTS = {
    CONTENT_TYPES_NAME: CONTENT_TYPES_XML,
    "_rels/.rels": ROOT_RELS_XML,
    "word/_rels/document.xml.rels": DOCUMENT_RELS_XML,
}
DOCUMENT_PART = "word/document.xml"


class PackageError(RuntimeError):
    """The assembled package is not usable (e.g. document.xml is not well-formed)."""

    def __init__(self, message: str, path: Path):
        super().__init__(message)
        self.path = Path(path)


class DocxWriter:
    """Writes the document part: preamble, one fragment per write, postamble."""

    def __init__(self, sink):
        self._sink = sink

    async def start(self) -> None:
        await self._sink.write(DOCX_PREAMBLE)

    async def write(self, fragment: str) -> None:
        await self._sink.write("\n" + fragment)

    async def end(self) -> None:
        await self.write(DOCX_POSTAMBLE)


def chapter_title_xml(ordinal: int, name: str) -> str:
    return wp(wppr_heading(1), wr(wt(xml_escape(f"Chapter {ordinal}: {name}")))).strip()


def default_paths(manuscript: Manuscript) -> tuple[Path, Path]:
    """Return (scratch_dir, docx_path) under <base>/out."""
    out_dir = manuscript.base_dir / "out"
    return out_dir / "docx", out_dir / "compiled.docx"


async def write_package_skeleton(scratch_dir: Path) -> None:
    """Write the fixed relationship and content-type parts."""
    for name, content in SKELETON_PARTS.items():
        part = scratch_dir / name
        await asyncio.to_thread(part.parent.mkdir, parents=True, exist_ok=True)
        await asyncio.to_thread(part.write_text, content, encoding="utf-8")


def check_well_formed(xml_path: Path) -> None:
    """Raise PackageError if xml_path does not parse."""
    try:
        etree.parse(str(xml_path))
    except etree.XMLSyntaxError as e:
        raise PackageError(f"Malformed XML in {xml_path}: {e}", xml_path) from e


def zip_package(scratch_dir: Path, docx_path: Path) -> Path:
    """
    Compress the scratch tree into docx_path. [Content_Types].xml goes first;
    member names are package-relative with forward slashes. The archive is
    built beside docx_path and only moved into place once complete.
    """
    scratch_dir = Path(scratch_dir)
    files = sorted(p for p in scratch_dir.rglob("*") if p.is_file())
    files.sort(key=lambda p: p.relative_to(scratch_dir).as_posix() != CONTENT_TYPES_NAME)

    docx_path.parent.mkdir(parents=True, exist_ok=True)
    tmp = partial_path(docx_path)
    try:
        with zipfile.ZipFile(tmp, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for fp in files:
                zf.write(fp, fp.relative_to(scratch_dir).as_posix())
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
    os.replace(tmp, docx_path)
    return docx_path


async def compile_docx(
    manuscript: Manuscript,
    scratch_dir: Path | None = None,
    output_path: Path | None = None,
    chapter_titles: bool = False,
    progress: bool = False,
) -> Path:
    """
    Build the package tree in scratch_dir, then archive it to output_path.
    Without chapter_titles no chapter heading is emitted, only scene content.
    Returns the .docx path.
    """
    default_scratch, default_docx = default_paths(manuscript)
    scratch_dir = Path(scratch_dir) if scratch_dir else default_scratch
    output_path = Path(output_path) if output_path else default_docx

    await write_package_skeleton(scratch_dir)

    document_path = scratch_dir / DOCUMENT_PART
    async with open_output(document_path) as sink:
        docx = DocxWriter(sink)
        await docx.start()
        for page in manuscript.front_matter:
            await docx.write(page.rendered_ooxml)
        with tqdm(total=len(manuscript.chapters), desc="  DOCX", unit="chapter", disable=not progress) as pbar:
            for chapter in manuscript.chapters:
                if chapter_titles:
                    await docx.write(chapter_title_xml(chapter.ordinal, chapter.display_name))
                for scene in chapter.scenes:
                    await docx.write(scene.rendered_ooxml)
                pbar.update(1)
        for page in manuscript.back_matter:
            await docx.write(page.rendered_ooxml)
        await docx.end()

    await asyncio.to_thread(check_well_formed, document_path)
    return await asyncio.to_thread(zip_package, scratch_dir, output_path)
