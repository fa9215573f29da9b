"""Модуль скачивания манги с MangaSee
https://mangasee123.com/
"""

import json
from typing import Final
from manga_downloader.exceptions import MetadataParseError
from manga_downloader.fetcher import Fetcher
from manga_downloader.models import ChapterData, ChapterDescriptor, Metadata
from manga_downloader.modules.base_downloader import BaseDownloader
from manga_downloader.tools import extract_between

def page_urls(comic_name: str, images_cdn: str, chapter_number: int|float, pages: int) -> list[str]:
    """Ссылки на картинки страниц 1..pages главы

    Номер главы дополняется нулями до 4 знаков, номер страницы до 3
    """
    chapter_padded = f"{chapter_number}".rjust(4, "0")
    return [
        f"https://{images_cdn}/manga/{comic_name}/{chapter_padded}-{page:03d}.png"
        for page in range(1, pages + 1)
    ]

def _to_number(value: str) -> int|float:
    """Номер главы из строки: целый, если возможно"""
    try:
        return int(value)
    except ValueError:
        return float(value)

def parse_chapters(raw: str) -> tuple[ChapterDescriptor, ...]:
    """Разбор JSON-списка глав

    Номер главы записан с лишней цифрой в начале и в конце: "100010" — глава 1

    Return
    ------
    tuple[ChapterDescriptor, ...]
        Главы по возрастанию номера

    Raises
    ------
    MetadataParseError
        Пустой или битый JSON, либо в записи главы нет нужных полей
    """
    try:
        data: list[ChapterData] = json.loads(raw)
        chapters = [
            ChapterDescriptor(_to_number(chapter["Chapter"][1:-1]), int(chapter["Page"]))
            for chapter in data
        ]
    except (ValueError, KeyError, TypeError) as err:
        raise MetadataParseError(f"chapters list: {err}") from err
    if not chapters:
        raise MetadataParseError("chapters list is empty")
    return tuple(sorted(chapters, key=lambda chapter: chapter.number))

class Downloader(BaseDownloader):
    _COMIC_DOMAIN: Final[str] = "https://mangasee123.com"
    _CHAPTERS_MARKERS: Final[tuple[str, str]] = ("vm.CHAPTERS = ", ";")
    _CDN_MARKERS: Final[tuple[str, str]] = ('vm.CurPathName = "', '";')
    _HEADERS: Final[dict[str, str]] = {
        'user-agent': 'Mozilla/5.0 (X11; Linux x86_64; rv:128.0) Gecko/20100101 Firefox/128.0'
    }

    @property
    def _headers(self) -> dict[str, str]:
        return dict(self._HEADERS)

    def _comic_main_page_link(self) -> str:
        # Метаданные встроены в страницу чтения первой главы
        return f"{self._COMIC_DOMAIN}/read-online/{self.comic_name}-chapter-1-page-1.html"

    @classmethod
    def parse_metadata(cls, page: str) -> Metadata:
        """Вытаскивание метаданных из исходного кода страницы

        Raises
        ------
        MetadataParseError
            Нет списка глав или адреса картинок
        """
        chapters = parse_chapters(extract_between(page, *cls._CHAPTERS_MARKERS))
        images_cdn = extract_between(page, *cls._CDN_MARKERS)
        if not images_cdn:
            raise MetadataParseError("images CDN host not found")
        return Metadata(images_cdn, chapters)

    async def fetch_metadata(self, fetcher: Fetcher) -> Metadata:
        return self.parse_metadata(await fetcher.fetch_text(self._comic_main_page_link()))

    def page_urls(self, images_cdn: str, chapter: ChapterDescriptor) -> list[str]:
        return page_urls(self.comic_name, images_cdn, chapter.number, chapter.pages)

if __name__ == '__main__':
    downloader = Downloader()

    # Скачивание
    r = downloader.downloadcomic()
    # Возвращаемое значение — количество записанных файлов
    print(r)
