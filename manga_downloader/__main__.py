from typing import Sequence

from manga_downloader.exceptions import DownloaderError
from manga_downloader.modules import mangasee
from manga_downloader.modules.base_downloader import build_arg_parser

def main(argv: Sequence[str]|None = None) -> None:
    parser = build_arg_parser()
    args, _ = parser.parse_known_args(argv)
    if not args.name:
        print("🚨 Укажите аргумент --name=")
        return

    try:
        downloader = mangasee.Downloader(argv=argv)
    except ValueError as err:
        print(f"🚨 Неверные аргументы: {err}")
        parser.print_usage()
        return

    try:
        written = downloader.downloadcomic()
    except DownloaderError as err:
        # Без метаданных скачивать нечего
        print(f"Скачивание {downloader.comic_name} прервано: {err}")
        return
    print(f"Записано файлов: {written}")

if __name__ == '__main__':
    main()
