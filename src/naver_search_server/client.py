# -*- coding: utf-8 -*-
"""
Naver Open API client
네이버 검색 / 데이터랩 API 클라이언트

Usage:
    async with NaverSearchClient(credentials) as client:
        data = await client.search("news", {"query": "AI"})
"""

import logging
from typing import Any, NamedTuple, Optional

import httpx

logger = logging.getLogger("naver-search-mcp.client")

BASE_URL = "https://openapi.naver.com/v1"
SEARCH_PATH = "search"
DATALAB_PATH = "datalab"
DEFAULT_TIMEOUT = 30.0
MAX_REDIRECTS = 3


class NaverCredentials(NamedTuple):
    client_id: str
    client_secret: str


class NaverApiError(Exception):
    """Upstream request failed (non-2xx response or transport error)."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code


class NaverSearchClient:
    """
    Thin async wrapper over the Naver Search and DataLab endpoints.

    Responses are returned as decoded JSON without modification. The client
    owns its httpx.AsyncClient; use it as an async context manager so the
    connection pool is closed when the call is done.
    """

    def __init__(
        self,
        credentials: NaverCredentials,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._http = httpx.AsyncClient(
            base_url=BASE_URL,
            headers={
                "X-Naver-Client-Id": credentials.client_id,
                "X-Naver-Client-Secret": credentials.client_secret,
            },
            timeout=timeout,
            follow_redirects=True,
            max_redirects=MAX_REDIRECTS,
            transport=transport,
        )

    async def __aenter__(self) -> "NaverSearchClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = await self._http.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise _api_error(e.response) from e
        except httpx.HTTPError as e:
            logger.error(f"Request to {path} failed: {e}")
            raise NaverApiError(f"네이버 API 요청 실패: {e}") from e
        return response.json()

    async def _get(self, path: str, params: dict) -> Any:
        return await self._request("GET", path, params=params)

    async def _post(self, path: str, data: dict) -> Any:
        return await self._request("POST", path, json=data)

    async def search(self, search_type: str, params: dict) -> Any:
        """
        Naver Search API call.

        Args:
            search_type: webkr, news, blog, shop, image, kin, book, encyc,
                         doc, local, cafearticle
            params: query, display, start, sort
        """
        return await self._get(f"{SEARCH_PATH}/{search_type}.json", params)

    async def search_academic(self, params: dict) -> Any:
        return await self.search("doc", params)

    async def search_local(self, params: dict) -> Any:
        return await self.search("local", params)

    async def search_trend(self, body: dict) -> Any:
        return await self._post(f"{DATALAB_PATH}/search", body)

    async def datalab_shopping_category(self, body: dict) -> Any:
        return await self._post(f"{DATALAB_PATH}/shopping/categories", body)

    async def datalab_shopping_by_device(self, body: dict) -> Any:
        return await self._post(f"{DATALAB_PATH}/shopping/category/device", body)

    async def datalab_shopping_by_gender(self, body: dict) -> Any:
        return await self._post(f"{DATALAB_PATH}/shopping/category/gender", body)

    async def datalab_shopping_by_age(self, body: dict) -> Any:
        return await self._post(f"{DATALAB_PATH}/shopping/category/age", body)

    async def datalab_shopping_keywords(self, body: dict) -> Any:
        return await self._post(f"{DATALAB_PATH}/shopping/category/keywords", body)

    async def datalab_shopping_keyword_by_device(self, body: dict) -> Any:
        return await self._post(f"{DATALAB_PATH}/shopping/category/keyword/device", body)

    async def datalab_shopping_keyword_by_gender(self, body: dict) -> Any:
        return await self._post(f"{DATALAB_PATH}/shopping/category/keyword/gender", body)

    async def datalab_shopping_keyword_by_age(self, body: dict) -> Any:
        return await self._post(f"{DATALAB_PATH}/shopping/category/keyword/age", body)


def _api_error(response: httpx.Response) -> NaverApiError:
    # Naver error bodies look like {"errorMessage": "...", "errorCode": "SE01"}
    error_code = None
    detail = response.text
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        error_code = payload.get("errorCode")
        detail = payload.get("errorMessage") or detail

    logger.error(f"Naver API error {response.status_code} ({error_code}): {detail}")
    return NaverApiError(
        f"네이버 API 오류 ({response.status_code}): {detail}",
        status_code=response.status_code,
        error_code=error_code,
    )
