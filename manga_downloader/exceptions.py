"""Исключения скачивания"""

class DownloaderError(Exception):
    """Базовое исключение пакета"""

class FetchError(DownloaderError):
    """Запрос не удался после всех повторов"""
    def __init__(self, url: str, reason: str):
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason

class MetadataParseError(DownloaderError):
    """Не удалось разобрать список глав или адрес CDN со страницы"""

class ChapterNotFoundError(DownloaderError):
    """Запрошенной главы нет в метаданных"""
    def __init__(self, chapter: int):
        super().__init__(f"chapter not found: {chapter}")
        self.chapter = chapter

class BatchRangeError(DownloaderError):
    """Начало пачки больше её конца"""
    def __init__(self, start: int, end: int):
        super().__init__(f"chapter start cannot be bigger than chapter end: {start} > {end}")
        self.start = start
        self.end = end

class AssemblyFailure(DownloaderError):
    """Сборка PDF прервана, файл удалён"""
    def __init__(self, output_path: str, cause: BaseException):
        super().__init__(f"{output_path}: {cause!r}")
        self.output_path = output_path
        self.cause = cause

class TransientNetworkError(DownloaderError):
    """Временная ошибка сети, запрос можно повторить"""
