"""HTTP-запросы с повторами при временных ошибках
"""

import asyncio
from typing import Awaitable, Callable, Final, NamedTuple
import aiohttp
from manga_downloader.exceptions import FetchError, TransientNetworkError

class RetryConfig(NamedTuple):
    """Политика повторов запроса

    Задержка перед n-м повтором равна n * delay_step секунд
    """
    retries: int = 10
    delay_step: float = 0.3
    timeout: float = 60

class Fetcher:
    """Последовательное скачивание по ссылкам

    Parameters
    ----------
    config: RetryConfig | None
        Политика повторов, по умолчанию 10 повторов с шагом 0.3 с
    session: ClientSession | None
        Сессия для проведения асинхронных запросов
        Если не передана, то каждый запрос делается отдельно
    headers: dict[str, str] | None
        Заголовки всех запросов
    sleep: Callable[[float], Awaitable]
        Функция ожидания между повторами
    """
    _RETRY_STATUSES: Final[frozenset[int]] = frozenset({408, 429})

    def __init__(
        self,
        config: RetryConfig|None = None,
        session: aiohttp.ClientSession|None = None,
        headers: dict[str, str]|None = None,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep
    ):
        self.config = config or RetryConfig()
        self.session = session
        self.headers = dict(headers or {})
        self._sleep = sleep

    async def _request(self, url: str) -> bytes:
        """Один запрос без повторов

        Raises
        ------
        TransientNetworkError
            Обрыв соединения, таймаут, ответ 5xx, 408 или 429
        FetchError
            Прочие неуспешные ответы, повторять их бессмысленно
        """
        # Без сессии используем обычный запрос
        if self.session:
            _request = self.session.request
        else:
            _request = aiohttp.request

        try:
            async with _request(
                "GET",
                url,
                headers = self.headers,
                timeout = aiohttp.ClientTimeout(total=self.config.timeout)
            ) as resp:
                if resp.status >= 500 or resp.status in self._RETRY_STATUSES:
                    raise TransientNetworkError(f"{url}: HTTP {resp.status}")
                if resp.status >= 400:
                    raise FetchError(url, f"HTTP {resp.status}")
                return await resp.read()
        except (aiohttp.ClientConnectionError, aiohttp.ClientPayloadError, asyncio.TimeoutError) as err:
            raise TransientNetworkError(f"{url}: {err!r}") from err
        except aiohttp.ClientError as err:
            # Зацикленные редиректы, битые ссылки
            raise FetchError(url, repr(err)) from err

    async def fetch(self, url: str) -> bytes:
        """Скачивание содержимого по ссылке

        Return
        ------
        bytes
            Тело ответа

        Raises
        ------
        FetchError
            Запрос не удался, в том числе после исчерпания повторов
        """
        last_error: TransientNetworkError|None = None
        for attempt in range(self.config.retries + 1):
            if attempt:
                # Линейно растущая задержка
                await self._sleep(attempt * self.config.delay_step)
            try:
                return await self._request(url)
            except TransientNetworkError as err:
                last_error = err
        raise FetchError(url, f"failed after {self.config.retries} retries") from last_error

    async def fetch_text(self, url: str, encoding: str = "utf-8") -> str:
        """Скачивание страницы как текста"""
        return (await self.fetch(url)).decode(encoding, errors="replace")
