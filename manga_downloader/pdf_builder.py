"""Сборка PDF из картинок, по одной картинке на страницу
"""

import asyncio
import io
import os
from typing import Awaitable, Callable, Final, Iterable
import aiofile
from fpdf import FPDF
from PIL import Image
from manga_downloader.exceptions import AssemblyFailure
from manga_downloader.fetcher import Fetcher

class PdfBuilder:
    """Сборщик PDF-файла пачки

    Parameters
    ----------
    fetcher: Fetcher
        Загрузчик картинок
    settle_delay: float
        Пауза после неудачной сборки, секунды
    sleep: Callable[[float], Awaitable]
        Функция ожидания
    """
    # Формат B4 в пунктах
    PAGE_FORMAT: Final[tuple[float, float]] = (708.66, 1000.63)

    def __init__(
        self,
        fetcher: Fetcher,
        settle_delay: float = 0.3,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep
    ):
        self.fetcher = fetcher
        self.settle_delay = settle_delay
        self._sleep = sleep

    def _new_document(self) -> FPDF:
        pdf = FPDF(unit="pt", format=self.PAGE_FORMAT)
        # Картинка выше страницы обрезается, а не переносится
        pdf.set_auto_page_break(False)
        return pdf

    @staticmethod
    def _open_image(data: bytes) -> Image.Image:
        """Декодирование картинки, битые данные падают здесь, а не при выводе"""
        image = Image.open(io.BytesIO(data))
        image.load()
        return image

    async def build(self, image_urls: Iterable[str], output_path: str|os.PathLike) -> None:
        """Скачивание картинок и запись PDF

        Raises
        ------
        AssemblyFailure
            Любая ошибка скачивания, декодирования или записи.
            Недописанный файл к этому моменту уже удалён
        """
        output_path = os.fspath(output_path)
        try:
            async with aiofile.async_open(output_path, "wb") as file:
                pdf = self._new_document()
                for image_url in image_urls:
                    image = self._open_image(await self.fetcher.fetch(image_url))
                    pdf.add_page()
                    pdf.image(image, x=0, y=0, w=pdf.w)
                await file.write(bytes(pdf.output()))
        except Exception as err:
            # Файла может не быть, если упало ещё открытие
            if os.path.exists(output_path):
                os.remove(output_path)
            await self._sleep(self.settle_delay)
            raise AssemblyFailure(output_path, err) from err

    async def assemble(self, image_urls: Iterable[str], output_path: str|os.PathLike) -> bool:
        """Сборка PDF с отчётом в консоль

        Return
        ------
        bool
            True, если файл записан
        """
        try:
            await self.build(image_urls, output_path)
        except AssemblyFailure as err:
            print(f"Не удалось собрать: {err.output_path} ({err.cause!r})")
            return False
        print(f"PDF создан: {os.fspath(output_path)}")
        return True
