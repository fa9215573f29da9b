"""Данные о главах и пачках"""

from typing import NamedTuple, TypedDict

class ChapterData(TypedDict):
    """Запись главы, как она лежит в JSON на странице

    Chapter — номер главы, обрамлённый служебными цифрами: "100010" -> 1
    """
    Chapter: str
    Page: int|str

class ChapterDescriptor(NamedTuple):
    """Глава: номер и количество страниц"""
    number: int|float
    pages: int

class Metadata(NamedTuple):
    """Метаданные манги: хост картинок и главы, отсортированные по номеру"""
    images_cdn: str
    chapters: tuple[ChapterDescriptor, ...]

    @property
    def last_chapter(self) -> int|float:
        """Номер последней доступной главы"""
        return self.chapters[-1].number

    def find_chapter(self, number: int|float) -> ChapterDescriptor|None:
        """Первая глава с указанным номером, либо None"""
        for chapter in self.chapters:
            if chapter.number == number:
                return chapter
        return None

class Batch(NamedTuple):
    """Пачка глав, собираемая в один файл"""
    start: int
    end: int
    image_urls: tuple[str, ...]
    output_path: str
