import contextlib
import io
import os
import tempfile
import unittest
from unittest import mock
from manga_downloader.__main__ import main
from manga_downloader.exceptions import MetadataParseError
from manga_downloader.modules import mangasee
from fakes import FakeFetcher, metadata_page, png_bytes

COMIC_NAME = "Test-Manga"
CDN = "scans.example.org"

class Test_test_downloader(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.folder = self._tmp.name

    def tearDown(self):
        self._tmp.cleanup()

    def make_downloader(self, fetcher: FakeFetcher|None = None, **kwargs) -> mangasee.Downloader:
        return mangasee.Downloader(
            comic_name=COMIC_NAME,
            folder=self.folder,
            fetcher=fetcher,
            argv=[],
            **kwargs
        )

    def site(self, chapters: dict[int, int]) -> dict[str, bytes]:
        """Страница метаданных и все картинки глав"""
        link = self.make_downloader()._comic_main_page_link()
        pages = {
            link: metadata_page(
                [(f"1{number:04d}0", count) for number, count in chapters.items()],
                images_cdn=CDN
            ).encode()
        }
        for number, count in chapters.items():
            for url in mangasee.page_urls(COMIC_NAME, CDN, number, count):
                pages[url] = png_bytes()
        return pages

    def batch_path(self, start: int, end: int) -> str:
        return os.path.join(self.folder, COMIC_NAME, f"{COMIC_NAME}-Batch-{start}-{end}.pdf")

    def test_batch_ranges(self):
        downloader = self.make_downloader(first=3, size=2, amount=3)
        a = list(downloader.batch_ranges())
        self.assertEqual(a, [(3, 4), (5, 6), (7, 8)])

    def test_batch_ranges_default_amount(self):
        downloader = self.make_downloader(first=2)
        a = list(downloader.batch_ranges())
        self.assertEqual(a, [(2, 2), (3, 3)])

    def test_params_from_argv(self):
        downloader = mangasee.Downloader(
            argv=["--name", COMIC_NAME, "--chapter", "5", "--size", "10", "--amount", "2", "--log"]
        )
        self.assertEqual(downloader._params, {
            "comic_name": COMIC_NAME,
            "first": 5,
            "size": 10,
            "amount": 2,
            "folder": "mangas",
            "dry_run": True
        })

    def test_without_name(self):
        with self.assertRaises(ValueError):
            mangasee.Downloader(argv=[])

    def test_zero_falls_back_to_defaults(self):
        downloader = mangasee.Downloader(argv=["--name", COMIC_NAME, "--chapter", "0", "--size", "0"])
        self.assertEqual(downloader.first, 1)
        self.assertEqual(downloader.size, 1)
        self.assertEqual(list(downloader.batch_ranges()), [(1, 1)])

    def test_negative_chapter(self):
        with self.assertRaises(ValueError):
            mangasee.Downloader(argv=["--name", COMIC_NAME, "--chapter", "-3"])

    async def test_download(self):
        fetcher = FakeFetcher(self.site({1: 2, 2: 1, 3: 3}))
        downloader = self.make_downloader(fetcher, first=1, size=2, amount=2)
        a = await downloader.async_downloadcomic()
        self.assertEqual(a, 2)
        self.assertTrue(os.path.exists(self.batch_path(1, 2)))
        # Конец второй пачки урезан до последней главы
        self.assertTrue(os.path.exists(self.batch_path(3, 3)))
        self.assertFalse(os.path.exists(self.batch_path(3, 4)))
        # Метаданные запрашиваются один раз
        link = downloader._comic_main_page_link()
        self.assertEqual(fetcher.requested.count(link), 1)
        self.assertEqual(len(fetcher.requested), 1 + 2 + 1 + 3)

    async def test_skip_existing(self):
        fetcher = FakeFetcher(self.site({1: 2}))
        os.makedirs(os.path.join(self.folder, COMIC_NAME))
        with open(self.batch_path(1, 1), "wb") as file:
            file.write(b"%PDF-")
        downloader = self.make_downloader(fetcher, first=1, size=1, amount=1)
        a = await downloader.async_downloadcomic()
        self.assertEqual(a, 0)
        self.assertEqual(fetcher.requested, [])

    async def test_skip_existing_clamped(self):
        fetcher = FakeFetcher(self.site({1: 1, 2: 1}))
        os.makedirs(os.path.join(self.folder, COMIC_NAME))
        with open(self.batch_path(1, 2), "wb") as file:
            file.write(b"%PDF-")
        downloader = self.make_downloader(fetcher, first=1, size=5, amount=1)
        a = await downloader.async_downloadcomic()
        self.assertEqual(a, 0)
        # Только метаданные, картинки не качаются
        self.assertEqual(fetcher.requested, [downloader._comic_main_page_link()])

    async def test_range_error_continues(self):
        fetcher = FakeFetcher(self.site({1: 1, 2: 1}))
        downloader = self.make_downloader(fetcher, first=2, size=1, amount=3)
        a = await downloader.async_downloadcomic()
        # 2-2 скачана, 3-3 и 4-4 за пределами доступных глав
        self.assertEqual(a, 1)
        self.assertTrue(os.path.exists(self.batch_path(2, 2)))

    async def test_failed_batch_continues(self):
        pages = self.site({1: 2, 2: 2})
        del pages[mangasee.page_urls(COMIC_NAME, CDN, 1, 2)[1]]
        fetcher = FakeFetcher(pages)
        downloader = self.make_downloader(fetcher, first=1, size=1, amount=2)
        a = await downloader.async_downloadcomic()
        self.assertEqual(a, 1)
        self.assertFalse(os.path.exists(self.batch_path(1, 1)))
        self.assertTrue(os.path.exists(self.batch_path(2, 2)))

    async def test_missing_chapters_only(self):
        fetcher = FakeFetcher(self.site({1: 1, 5: 1}))
        downloader = self.make_downloader(fetcher, first=2, size=2, amount=1)
        a = await downloader.async_downloadcomic()
        self.assertEqual(a, 0)
        self.assertFalse(os.path.exists(self.batch_path(2, 3)))

    async def test_metadata_error_aborts(self):
        link = self.make_downloader()._comic_main_page_link()
        fetcher = FakeFetcher({link: b"<html>Not found</html>"})
        downloader = self.make_downloader(fetcher, first=1, size=1, amount=3)
        with self.assertRaises(MetadataParseError):
            await downloader.async_downloadcomic()
        self.assertEqual(fetcher.requested, [link])

    async def test_metadata_refetched_on_next_run(self):
        fetcher = FakeFetcher(self.site({1: 1}))
        downloader = self.make_downloader(fetcher, first=1, size=1, amount=2)
        a = await downloader.async_downloadcomic()
        self.assertEqual(a, 1)
        self.assertFalse(os.path.exists(self.batch_path(2, 2)))

        # Вышла вторая глава
        fetcher.pages = self.site({1: 1, 2: 1})
        a = await downloader.async_downloadcomic()
        self.assertEqual(a, 1)
        self.assertTrue(os.path.exists(self.batch_path(2, 2)))
        link = downloader._comic_main_page_link()
        self.assertEqual(fetcher.requested.count(link), 2)

    async def test_dry_run(self):
        fetcher = FakeFetcher({})
        downloader = self.make_downloader(fetcher, first=1, size=10, amount=2, dry_run=True)
        output = io.StringIO()
        with contextlib.redirect_stdout(output):
            a = await downloader.async_downloadcomic()
        self.assertEqual(a, 0)
        self.assertEqual(fetcher.requested, [])
        self.assertIn("{'name': 'Test-Manga', 'start': 11, 'end': 20}", output.getvalue())

class Test_test_main(unittest.TestCase):
    def test_main_without_name(self):
        output = io.StringIO()
        with contextlib.redirect_stdout(output):
            a = main([])
        self.assertIsNone(a)
        self.assertIn("--name", output.getvalue())

    def test_main_exit_code_does_not_count_files(self):
        output = io.StringIO()
        with mock.patch.object(mangasee.Downloader, "downloadcomic", return_value=3):
            with contextlib.redirect_stdout(output):
                a = main(["--name", COMIC_NAME])
        self.assertIsNone(a)
        self.assertIn("3", output.getvalue())

    def test_main_bad_arguments(self):
        output = io.StringIO()
        with contextlib.redirect_stdout(output):
            a = main(["--name", COMIC_NAME, "--size", "-1"])
        self.assertIsNone(a)
        self.assertIn("usage", output.getvalue())

    def test_main_metadata_error(self):
        output = io.StringIO()
        with mock.patch.object(
            mangasee.Downloader, "downloadcomic", side_effect=MetadataParseError("chapters list is empty")
        ):
            with contextlib.redirect_stdout(output):
                a = main(["--name", COMIC_NAME])
        self.assertIsNone(a)
        self.assertIn("chapters list is empty", output.getvalue())

if __name__ == '__main__':
    unittest.main()
