"""
Набор вспомогательных функций
"""

import os

def extract_between(text: str, start_marker: str, end_marker: str) -> str:
    """Извлечение подстроки между двумя маркерами

    Args:
        text: Исходный текст
        start_marker: Маркер, после которого начинается подстрока
        end_marker: Маркер, на котором подстрока заканчивается.
            Ищется только после start_marker

    Returns:
        str: Подстрока без пробелов по краям.
            Пустая строка, если какого-то маркера нет
    """
    start_index = text.find(start_marker)
    if start_index == -1:
        return ""
    start_index += len(start_marker)
    end_index = text.find(end_marker, start_index)
    if end_index == -1:
        return ""
    return text[start_index:end_index].strip()

def make_output_dir(path: str|os.PathLike) -> str:
    """Создание директории сохранения, если отсутствует

    Args:
        path: Путь к директории

    Returns:
        str: Тот же путь строкой
    """
    path = os.fspath(path)
    os.makedirs(path, exist_ok=True)
    return path
