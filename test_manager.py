import os
import tempfile
import unittest
from unittest.mock import Mock, patch

from GetSyosetu.config import Settings
from GetSyosetu.exceptions import MetadataError
from GetSyosetu.manager import NovelManager, safe_filename
from GetSyosetu.models import ChapterRange, DownloadRequest, NovelId, NovelInfo
from GetSyosetu.scraper import Scraper

PAGE = (
    '<html><body><h1 class="p-novel__title">第{0}話</h1>'
    '<div class="p-novel__text"><p>本文{0}</p><p><img src="//img.example.com/{0}.jpg" alt="挿絵"></p></div>'
    '</body></html>'
)


@patch('builtins.print')
class TestNovelManager(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)

        self.scraper = Scraper(Settings())
        self.scraper.get_novel_info = Mock(return_value=NovelInfo(
            title="異世界/冒険", ncode=NovelId("n0001aa"), writer="作者",
            chapter_count=3, updated_at="2024-01-01 00:00:00",
        ))
        self.scraper.get_chapter_html = Mock(side_effect=lambda url: PAGE.format(url.rsplit('/', 1)[1]))
        self.scraper.resolve_redirect = Mock(side_effect=lambda url: url.replace("img.", "cdn."))
        self.manager = NovelManager(self.scraper.settings, self.scraper)

    def request(self, **kwargs) -> DownloadRequest:
        kwargs.setdefault('output_dir', self.tmpdir.name)
        return DownloadRequest(novel_id=NovelId.parse("N0001AA"), **kwargs)

    def read_output(self, name: str) -> str:
        with open(os.path.join(self.tmpdir.name, name), encoding='utf-8') as f:
            return f.read()

    def test_writes_markdown_document(self, mock_print):
        code = self.manager.process_novel(self.request(chapter_range=ChapterRange(2)))

        self.assertEqual(code, 0)
        self.assertEqual(
            self.read_output("異世界_冒険.md"),
            "# 異世界/冒険\n\nOriginal: https://ncode.syosetu.com/n0001aa\n\n"
            "## 第2話\n\n本文2\n![挿絵](https://cdn.example.com/2.jpg)\n\n"
            "## 第3話\n\n本文3\n![挿絵](https://cdn.example.com/3.jpg)\n\n",
        )
        self.scraper.get_novel_info.assert_called_once_with(NovelId("N0001AA"), False)

    def test_title_override_and_adult_host(self, mock_print):
        code = self.manager.process_novel(self.request(is_adult=True, title="Custom", chapter_range=ChapterRange(3)))
        self.assertEqual(code, 0)
        self.assertTrue(self.read_output("Custom.md").startswith(
            "# Custom\n\nOriginal: https://novel18.syosetu.com/n0001aa\n\n## 第3話"
        ))

    def test_metadata_failure_exits_non_zero(self, mock_print):
        self.scraper.get_novel_info.side_effect = MetadataError("Novel 'x' is not found", MetadataError.NOT_FOUND)
        with self.assertLogs('GetSyosetu.manager', level='ERROR'):
            self.assertEqual(self.manager.process_novel(self.request()), 1)
        self.assertEqual(os.listdir(self.tmpdir.name), [])

    def test_start_beyond_chapter_count_creates_no_file(self, mock_print):
        with self.assertLogs('GetSyosetu.manager', level='ERROR'):
            self.assertEqual(self.manager.process_novel(self.request(chapter_range=ChapterRange(4))), 1)
        self.scraper.get_chapter_html.assert_not_called()
        self.assertEqual(os.listdir(self.tmpdir.name), [])

    def test_unwritable_output_dir(self, mock_print):
        request = self.request(output_dir=os.path.join(self.tmpdir.name, "missing"))
        with self.assertLogs('GetSyosetu.manager', level='ERROR') as logs:
            self.assertEqual(self.manager.process_novel(request), 1)
        self.assertIn("Failed to create file", logs.output[0])

    def test_layout_change_exits_non_zero(self, mock_print):
        self.scraper.get_chapter_html.side_effect = None
        self.scraper.get_chapter_html.return_value = "<html><body>maintenance</body></html>"
        with self.assertLogs('GetSyosetu.manager', level='ERROR') as logs:
            self.assertEqual(self.manager.process_novel(self.request()), 1)
        self.assertIn("p-novel__title", logs.output[0])


class TestSafeFilename(unittest.TestCase):
    def test_replaces_path_characters(self):
        self.assertEqual(safe_filename('a/b\\c:d?'), 'a_b_c_d_')

    def test_empty_falls_back(self):
        self.assertEqual(safe_filename(' . '), 'novel')


if __name__ == '__main__':
    unittest.main()
