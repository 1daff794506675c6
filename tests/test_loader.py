import tempfile
import unittest
from pathlib import Path

from manuscript import LoadError, build_renderers, load_chapter, load_manuscript, load_unit
from manuscript.base import SectionLayout
from tests.helpers import storm_manuscript, write_tree


class LoaderTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.renderers = build_renderers()

    def tearDown(self):
        self._tmp.cleanup()


class TestLoadUnit(LoaderTestCase):
    async def test_unit_fields_and_both_renderings(self):
        write_tree(self.root, {"front/01. Title.md": "# Title\n\nBy Someone.\n"})
        path = self.root / "front" / "01. Title.md"

        page = await load_unit(path, self.renderers)

        self.assertEqual(page.ordinal, 1)
        self.assertEqual(page.display_name, "Title.md")
        self.assertEqual(page.source_filename, "01. Title.md")
        self.assertEqual(page.source_directory, self.root / "front")
        self.assertEqual(page.source_path, path)
        self.assertEqual(page.raw_markdown, "# Title\n\nBy Someone.\n")
        self.assertEqual(page.rendered_html, "<h3>Title</h3>\n<p>By Someone.</p>")
        self.assertTrue(page.rendered_ooxml.startswith("<w:p>"))
        self.assertIn('w:val="Heading1"', page.rendered_ooxml)
        self.assertNotIn("<w:", page.rendered_html)

    async def test_unnumbered_page(self):
        write_tree(self.root, {"back/Afterword.md": "Thanks.\n"})
        page = await load_unit(self.root / "back" / "Afterword.md", self.renderers)
        self.assertIsNone(page.ordinal)
        self.assertEqual(page.display_name, "Afterword.md")

    async def test_directory_is_rejected(self):
        (self.root / "01. Folder").mkdir()
        with self.assertRaises(LoadError) as ctx:
            await load_unit(self.root / "01. Folder", self.renderers)
        self.assertEqual(ctx.exception.path, self.root / "01. Folder")

    async def test_non_utf8_file_reports_path(self):
        path = self.root / "02. Two.md"
        path.write_bytes(b"caf\xe9\n")
        with self.assertRaises(LoadError) as ctx:
            await load_unit(path, self.renderers)
        self.assertEqual(ctx.exception.path, path)
        self.assertIn("Not UTF-8 text", str(ctx.exception))
        self.assertIsInstance(ctx.exception.__cause__, UnicodeDecodeError)

    async def test_missing_file_reports_path(self):
        with self.assertRaises(FileNotFoundError) as ctx:
            await load_unit(self.root / "nope.md", self.renderers)
        self.assertIn("nope.md", str(ctx.exception.filename))


class TestLoadChapter(LoaderTestCase):
    async def test_directory_without_number_fails(self):
        (self.root / "Storm").mkdir()
        with self.assertRaises(LoadError) as ctx:
            await load_chapter(self.root / "Storm", self.renderers)
        self.assertIn("Chapter does not include a number", str(ctx.exception))
        self.assertEqual(ctx.exception.path, self.root / "Storm")

    async def test_file_without_number_fails(self):
        write_tree(self.root, {"Storm.md": "x"})
        with self.assertRaises(LoadError):
            await load_chapter(self.root / "Storm.md", self.renderers)

    async def test_empty_numbered_directory_has_no_scenes(self):
        (self.root / "04. Quiet").mkdir()
        chapter = await load_chapter(self.root / "04. Quiet", self.renderers)
        self.assertEqual((chapter.ordinal, chapter.display_name, chapter.scenes), (4, "Quiet", ()))

    async def test_single_file_chapter(self):
        write_tree(self.root, {"03. The Storm.md": "Rain.\n"})
        chapter = await load_chapter(self.root / "03. The Storm.md", self.renderers)
        self.assertEqual(chapter.ordinal, 3)
        self.assertEqual(chapter.display_name, "The Storm")
        self.assertEqual(len(chapter.scenes), 1)
        self.assertEqual(chapter.scenes[0].rendered_html, "<p>Rain.</p>")

    async def test_scenes_ordered_by_number_not_name(self):
        write_tree(self.root, {
            "01. Storm/10. Last.md": "Last.",
            "01. Storm/2. Second.md": "Second.",
            "01. Storm/1. First.md": "First.",
            "01. Storm/.DS_Store": "junk",
        })
        chapter = await load_chapter(self.root / "01. Storm", self.renderers)
        self.assertEqual([s.display_name for s in chapter.scenes], ["First.md", "Second.md", "Last.md"])

    async def test_nested_directory_scene_fails(self):
        (self.root / "01. Storm" / "01. Sub").mkdir(parents=True)
        with self.assertRaises(LoadError):
            await load_chapter(self.root / "01. Storm", self.renderers)


class TestLoadManuscript(LoaderTestCase):
    async def test_storm_manuscript(self):
        storm_manuscript(self.root)
        ms = await load_manuscript(self.root, self.renderers)

        self.assertEqual(ms.base_dir, self.root)
        self.assertEqual([p.rendered_html for p in ms.front_matter], ["<h3>Title</h3>"])
        self.assertEqual(len(ms.chapters), 1)
        self.assertEqual((ms.chapters[0].ordinal, ms.chapters[0].display_name), (1, "Storm"))
        self.assertEqual([s.rendered_html for s in ms.chapters[0].scenes], ["<p>Hello.</p>", "<p>World.</p>"])
        self.assertEqual(ms.back_matter, ())
        self.assertEqual(len(list(ms.units())), 3)

    async def test_chapters_sorted_by_ordinal(self):
        write_tree(self.root, {
            "chapters/10. Ten.md": "10",
            "chapters/2. Two.md": "2",
            "chapters/1. One/01. a.md": "1",
        }, dirs=("front", "back"))
        ms = await load_manuscript(self.root, self.renderers)
        self.assertEqual([c.ordinal for c in ms.chapters], [1, 2, 10])

    async def test_unnumbered_pages_follow_numbered_in_listing_order(self):
        write_tree(self.root, {
            "front/Dedication.md": "d",
            "front/2. Copyright.md": "c",
            "front/Epigraph.md": "e",
            "front/1. Title.md": "t",
        }, dirs=("chapters", "back"))
        ms = await load_manuscript(self.root, self.renderers)
        self.assertEqual(
            [p.display_name for p in ms.front_matter],
            ["Title.md", "Copyright.md", "Dedication.md", "Epigraph.md"],
        )

    async def test_custom_layout(self):
        write_tree(self.root, {
            "1. Front/01. Title.md": "# T",
            "2. Chapters/01. One.md": "x",
        }, dirs=("3. Back",))
        layout = SectionLayout(front="1. Front", chapters="2. Chapters", back="3. Back")
        ms = await load_manuscript(self.root, self.renderers, layout)
        self.assertEqual(len(ms.front_matter), 1)
        self.assertEqual(ms.chapters[0].display_name, "One")

    async def test_missing_section_aborts(self):
        write_tree(self.root, {"front/01. Title.md": "# T"}, dirs=("chapters",))
        with self.assertRaises(FileNotFoundError) as ctx:
            await load_manuscript(self.root, self.renderers)
        self.assertTrue(str(ctx.exception.filename).endswith("back"))

    async def test_bad_chapter_aborts_whole_load(self):
        storm_manuscript(self.root)
        (self.root / "chapters" / "Interlude").mkdir()
        with self.assertRaises(LoadError):
            await load_manuscript(self.root, self.renderers)


if __name__ == "__main__":
    unittest.main()
