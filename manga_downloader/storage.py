"""Хранилище собранных пачек

Наличие файла пачки на диске означает, что она уже скачана
"""

import os

class OutputStore:
    """Файлы пачек одной манги

    Parameters
    ----------
    folder: str | PathLike
        Корневая директория сохранения
    comic_name: str
        Название манги, оно же имя поддиректории и префикс файлов
    """
    def __init__(self, folder: str|os.PathLike, comic_name: str):
        self.folder = os.path.join(os.fspath(folder), comic_name)
        self.comic_name = comic_name

    def path_for(self, start: int, end: int) -> str:
        """Путь к файлу пачки глав start..end"""
        return os.path.join(self.folder, f"{self.comic_name}-Batch-{start}-{end}.pdf")

    def exists(self, start: int, end: int) -> bool:
        """Скачана ли уже пачка глав start..end"""
        return os.path.exists(self.path_for(start, end))
