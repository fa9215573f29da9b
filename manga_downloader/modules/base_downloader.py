"""Базовый модуль скачивания манги пачками глав
"""

from abc import ABC, abstractmethod
import argparse
import asyncio
import os
from typing import Iterator, Sequence
import aiohttp
from manga_downloader.exceptions import BatchRangeError, ChapterNotFoundError
from manga_downloader.fetcher import Fetcher, RetryConfig
from manga_downloader.models import Batch, ChapterDescriptor, Metadata
from manga_downloader.pdf_builder import PdfBuilder
from manga_downloader.storage import OutputStore
from manga_downloader.tools import make_output_dir

def build_arg_parser() -> argparse.ArgumentParser:
    """Парсер аргументов командной строки
    """
    parser = argparse.ArgumentParser(
        description = 'Скачивание манги в PDF, по файлу на пачку глав'
    )
    parser.add_argument(
        '--name',
        help = 'Название манги, как в ссылке на неё',
        type = str,
        default = None
    )
    parser.add_argument(
        '--chapter',
        help = 'Номер первой главы, число',
        type = int,
        default = 1
    )
    parser.add_argument(
        '--size',
        help = 'Количество глав в одной пачке',
        type = int,
        default = 1
    )
    parser.add_argument(
        '--amount',
        help = 'Количество пачек. Если не задано, равно номеру первой главы',
        type = int,
        default = None
    )
    parser.add_argument(
        '--folder',
        help = 'Директория сохранения',
        type = str,
        default = 'mangas'
    )
    parser.add_argument(
        '--log',
        help = 'Только вывести вычисленные пачки, ничего не скачивая',
        action = 'store_true'
    )
    return parser

class BaseDownloader(ABC):
    """Скачивание манги пачками глав, каждая пачка в отдельный PDF

    Значения, не переданные явно, берутся из командной строки
    """
    def __init__(
        self, *,
        comic_name: str|None = None,
        first: int|None = None,
        size: int|None = None,
        amount: int|None = None,
        folder: str|os.PathLike|None = None,
        dry_run: bool|None = None,
        retry_config: RetryConfig|None = None,
        fetcher: Fetcher|None = None,
        argv: Sequence[str]|None = None
    ):
        args, _ = self.arg_parser.parse_known_args(argv)

        comic_name = comic_name or args.name
        if not comic_name:
            raise ValueError("comic_name is None")
        # Допускается ссылка на мангу целиком
        self.comic_name: str = comic_name.rstrip("/").rsplit("/", 1)[-1]

        # Как в исходном скрипте: 0 означает значение по умолчанию
        self.first: int = first or args.chapter or 1
        self.size: int = size or args.size or 1
        if self.first < 1 or self.size < 1:
            raise ValueError(f"{self.first=}, {self.size=}")

        # Так исторически: без --amount пачек столько же, каков номер первой главы
        self.amount: int = amount or args.amount or self.first

        self.folder: str
        if folder is None:
            self.folder = args.folder
        else:
            self.folder = os.fspath(folder)

        self.dry_run: bool
        if dry_run is None:
            self.dry_run = args.log
        else:
            self.dry_run = dry_run

        self.retry_config = retry_config or RetryConfig()
        self.fetcher = fetcher
        self.store = OutputStore(self.folder, self.comic_name)
        self.metadata: Metadata|None = None

    @property
    def _params(self):
        return dict({
            "comic_name": self.comic_name,
            "first": self.first,
            "size": self.size,
            "amount": self.amount,
            "folder": self.folder,
            "dry_run": self.dry_run
        })

    @property
    def arg_parser(self) -> argparse.ArgumentParser:
        """Парсер аргументов командной строки
        """
        return build_arg_parser()

    @property
    def _headers(self) -> dict[str, str]:
        """Заголовки запросов к сайту"""
        return {}

    @abstractmethod
    def _comic_main_page_link(self) -> str:
        """Получение ссылки на страницу, с которой берутся метаданные"""

    @abstractmethod
    async def fetch_metadata(self, fetcher: Fetcher) -> Metadata:
        """Получение метаданных манги

        Raises
        ------
        MetadataParseError
            Страница не содержит списка глав или адреса картинок
        """

    @abstractmethod
    def page_urls(self, images_cdn: str, chapter: ChapterDescriptor) -> list[str]:
        """Ссылки на картинки всех страниц главы по порядку"""

    def batch_ranges(self) -> Iterator[tuple[int, int]]:
        """Диапазоны глав пачек по порядку, без учёта доступных глав"""
        for i in range(self.amount):
            start = self.first + i * self.size
            yield start, start + self.size - 1

    def _resolve_chapter(self, metadata: Metadata, number: int) -> ChapterDescriptor:
        chapter = metadata.find_chapter(number)
        if chapter is None:
            raise ChapterNotFoundError(number)
        return chapter

    def plan_batch(self, metadata: Metadata, start: int, end: int|None = None) -> Batch:
        """Составление пачки глав start..end

        Parameters
        ----------
        metadata: Metadata
            Метаданные манги
        start: int
            Первая глава
        end: int | None
            Последняя глава. Если больше последней доступной, то урезается до неё.
            Если не задана, пачка из одной главы

        Return
        ------
        Batch
            Ссылки на страницы по порядку глав и путь к файлу.
            Отсутствующие главы пропускаются

        Raises
        ------
        BatchRangeError
            Начало больше конца после урезания
        """
        if end is None:
            end = start
        last = metadata.last_chapter
        if end > last:
            end = int(last)
        if start > end:
            raise BatchRangeError(start, end)

        image_urls: list[str] = []
        for number in range(start, end + 1):
            try:
                chapter = self._resolve_chapter(metadata, number)
            except ChapterNotFoundError as err:
                print(f"Глава не найдена: {err.chapter}")
                continue
            image_urls.extend(self.page_urls(metadata.images_cdn, chapter))

        return Batch(start, end, tuple(image_urls), self.store.path_for(start, end))

    async def _download_batch(self, fetcher: Fetcher, start: int, end: int) -> bool:
        """Скачивание одной пачки

        Return
        ------
        bool
            True, если файл пачки записан
        """
        if self.metadata is None:
            self.metadata = await self.fetch_metadata(fetcher)

        try:
            batch = self.plan_batch(self.metadata, start, end)
        except BatchRangeError as err:
            print(f"Начало пачки больше конца: {err.start} > {err.end}")
            return False

        # Конец мог урезаться, и такая пачка уже может лежать на диске
        if self.store.exists(batch.start, batch.end):
            print(f"Пропуск: {batch.output_path}")
            return False
        if not batch.image_urls:
            print(f"Нет страниц для пачки {batch.start}-{batch.end}")
            return False

        make_output_dir(self.store.folder)
        return await PdfBuilder(fetcher).assemble(batch.image_urls, batch.output_path)

    async def async_downloadcomic(self) -> int:
        """Последовательное скачивание всех пачек

        Return
        ------
        int
            Количество записанных файлов

        Raises
        ------
        MetadataParseError
            Метаданные не разобрать, скачивать нечего
        FetchError
            Не удалось скачать страницу с метаданными
        """
        # Глав могло прибавиться с прошлого запуска
        self.metadata = None
        if self.fetcher is not None:
            return await self._download_batches(self.fetcher)

        async with aiohttp.ClientSession() as session:
            fetcher = Fetcher(self.retry_config, session=session, headers=self._headers)
            return await self._download_batches(fetcher)

    async def _download_batches(self, fetcher: Fetcher) -> int:
        written = 0
        for start, end in self.batch_ranges():
            if self.dry_run:
                print({"name": self.comic_name, "start": start, "end": end})
                continue
            # Уже скачанное не трогаем, даже метаданные не запрашиваем
            if self.store.exists(start, end):
                print(f"Пропуск: {self.store.path_for(start, end)}")
                continue
            if await self._download_batch(fetcher, start, end):
                written += 1
        return written

    def downloadcomic(self) -> int:
        """Скачивание всех пачек от first, amount пачек по size глав

        Return
        ------
        int
            Количество записанных файлов
        """
        return asyncio.run(self.async_downloadcomic())
