#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Naver Search MCP Server
네이버 검색 / 데이터랩 MCP 서버

Built with Smithery CLI for Model Context Protocol
"""

import sys
import os
import logging
from typing import Annotated, Any, Literal, Optional

from mcp.server.fastmcp import Context, FastMCP
from pydantic import BaseModel, Field
from dotenv import load_dotenv

from smithery.decorators import smithery

from .categories import DEFAULT_MAX_RESULTS, find_category as lookup_categories
from .client import NaverCredentials, NaverSearchClient
from .schemas import (
    AgeGroup,
    CategoryGroup,
    DatalabSearchArgs,
    DatalabShoppingAgeArgs,
    DatalabShoppingArgs,
    DatalabShoppingDeviceArgs,
    DatalabShoppingGenderArgs,
    DatalabShoppingKeywordAgeArgs,
    DatalabShoppingKeywordDeviceArgs,
    DatalabShoppingKeywordGenderArgs,
    DatalabShoppingKeywordsArgs,
    Device,
    Gender,
    KeywordGroup,
    KeywordParam,
    LocalSearchArgs,
    NaverParams,
    SearchArgs,
    TimeUnit,
)

# Configure logging to write to stderr
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger("naver-search-mcp")

# Force UTF-8 encoding for Windows
if sys.platform == 'win32':
    os.environ['PYTHONIOENCODING'] = 'utf-8'
    if hasattr(sys.stdout, 'reconfigure'):
        sys.stdout.reconfigure(encoding='utf-8')
    if hasattr(sys.stderr, 'reconfigure'):
        sys.stderr.reconfigure(encoding='utf-8')


# Configuration Schema for Session
class ConfigSchema(BaseModel):
    """Configuration schema for Naver Search MCP Server"""
    client_id: str = Field(
        "",
        description="Naver API Client ID. Register an application at "
                    "https://developers.naver.com/apps/ (검색, 데이터랩 API 사용 설정)."
    )
    client_secret: str = Field(
        "",
        description="Naver API Client Secret issued with the Client ID."
    )


def get_credentials(ctx: Optional[Context]) -> NaverCredentials:
    """
    Get Naver API credentials from session config or environment variables.

    Priority:
    1. Session config (Smithery HTTP mode)
    2. NAVER_CLIENT_ID / NAVER_CLIENT_SECRET environment variables
       (STDIO mode, local dev, Docker)

    Args:
        ctx: MCP Context with session configuration

    Returns:
        NaverCredentials

    Raises:
        ValueError: If credentials are not found in any source
    """
    # Load .env file for local development
    load_dotenv()

    session_config = getattr(ctx, "session_config", None) if ctx else None
    if session_config is not None:
        client_id = (getattr(session_config, "client_id", "") or "").strip()
        client_secret = (getattr(session_config, "client_secret", "") or "").strip()
        if client_id and client_secret:
            logger.info("Using Naver credentials from session config (Smithery)")
            return NaverCredentials(client_id, client_secret)

    client_id = os.getenv("NAVER_CLIENT_ID", "").strip()
    client_secret = os.getenv("NAVER_CLIENT_SECRET", "").strip()
    if client_id and client_secret:
        logger.info("Using Naver credentials from environment variables")
        return NaverCredentials(client_id, client_secret)

    raise ValueError(
        "Naver API credentials not found.\n"
        f"  NAVER_CLIENT_ID: {'provided' if client_id else 'missing'}\n"
        f"  NAVER_CLIENT_SECRET: {'provided' if client_secret else 'missing'}\n"
        "For local development (MCP Inspector, Claude Desktop):\n"
        "  1. Create .env file with NAVER_CLIENT_ID=... and NAVER_CLIENT_SECRET=...\n"
        "  2. Or set the environment variables before starting the server\n"
        "For Smithery deployment:\n"
        "  - Credentials will be provided via session config automatically"
    )


async def run_search(ctx: Optional[Context], search_type: str, args: SearchArgs | LocalSearchArgs) -> Any:
    """Validate-then-forward helper for the search_* tools."""
    async with NaverSearchClient(get_credentials(ctx)) as client:
        return await client.search(search_type, args.to_params())


async def run_datalab(ctx: Optional[Context], method: str, args: NaverParams) -> Any:
    """Validate-then-forward helper for the datalab_* tools; method names a NaverSearchClient coroutine."""
    async with NaverSearchClient(get_credentials(ctx)) as client:
        return await getattr(client, method)(args.to_params())


QueryArg = Annotated[str, Field(description="검색어")]
DisplayArg = Annotated[int, Field(description="한 번에 표시할 검색 결과 개수 (1-100)", ge=1, le=100)]
StartArg = Annotated[int, Field(description="검색 시작 위치 (1-1000)", ge=1, le=1000)]
SortArg = Annotated[Literal["sim", "date"], Field(description="정렬 옵션: sim=정확도순, date=날짜순")]
StartDateArg = Annotated[str, Field(description="조회 시작 날짜 (yyyy-mm-dd)")]
EndDateArg = Annotated[str, Field(description="조회 종료 날짜 (yyyy-mm-dd)")]
TimeUnitArg = Annotated[TimeUnit, Field(description="구간 단위: date, week, month")]
CategoryCodeArg = Annotated[str, Field(description="쇼핑 카테고리 코드 (find_category 도구로 조회)")]
KeywordArg = Annotated[str, Field(description="검색 키워드")]

SEARCH_TOOLS = {
    "search_webkr": ("webkr", "Perform a search on Naver Web Documents. (네이버 웹문서 검색)"),
    "search_news": ("news", "Perform a search on Naver News. (네이버 뉴스 검색)"),
    "search_blog": ("blog", "Perform a search on Naver Blog. (네이버 블로그 검색)"),
    "search_shop": ("shop", "Perform a search on Naver Shopping. (네이버 쇼핑 검색)"),
    "search_image": ("image", "Perform a search on Naver Image. (네이버 이미지 검색)"),
    "search_kin": ("kin", "Perform a search on Naver KnowledgeiN. (네이버 지식iN 검색)"),
    "search_book": ("book", "Perform a search on Naver Book. (네이버 책 검색)"),
    "search_encyc": ("encyc", "Perform a search on Naver Encyclopedia. (네이버 지식백과 검색)"),
    "search_academic": ("doc", "Perform a search on Naver Academic. (네이버 전문자료 검색)"),
    "search_cafearticle": ("cafearticle", "Perform a search on Naver Cafe Articles. (네이버 카페글 검색)"),
}


def _register_search_tool(server: FastMCP, name: str, search_type: str, description: str) -> None:
    async def search_tool(
        query: QueryArg,
        display: DisplayArg = 10,
        start: StartArg = 1,
        sort: SortArg = "sim",
        ctx: Context = None,
    ) -> dict:
        args = SearchArgs(query=query, display=display, start=start, sort=sort)
        return await run_search(ctx, search_type, args)

    server.add_tool(search_tool, name=name, description=description)


def build_server() -> FastMCP:
    """Build the FastMCP server with every search, DataLab and category tool registered."""

    server = FastMCP("Naver Search MCP Server")

    for name, (search_type, description) in SEARCH_TOOLS.items():
        _register_search_tool(server, name, search_type, description)

    @server.tool(description="Perform a search on Naver Local. (네이버 지역 검색)")
    async def search_local(
        query: QueryArg,
        display: Annotated[int, Field(description="검색 결과 개수 (1-5)", ge=1, le=5)] = 5,
        start: Annotated[int, Field(description="검색 시작 위치 (1)", ge=1, le=1)] = 1,
        sort: Annotated[Literal["random", "comment"], Field(description="random=정확도순, comment=리뷰순")] = "random",
        ctx: Context = None,
    ) -> dict:
        args = LocalSearchArgs(query=query, display=display, start=start, sort=sort)
        return await run_search(ctx, "local", args)

    @server.tool()
    async def datalab_search(
        start_date: StartDateArg,
        end_date: EndDateArg,
        time_unit: TimeUnitArg,
        keyword_groups: Annotated[list[KeywordGroup], Field(description="주제어와 검색어 묶음 (최대 5개)")],
        device: Optional[Device] = None,
        gender: Optional[Gender] = None,
        ages: Optional[list[AgeGroup]] = None,
        ctx: Context = None,
    ) -> dict:
        """
        Perform a trend analysis on Naver search keywords. (네이버 검색어 트렌드 분석)

        Args:
            start_date: Period start (yyyy-mm-dd, 2016-01-01 or later)
            end_date: Period end (yyyy-mm-dd)
            time_unit: date, week or month
            keyword_groups: Up to 5 groups of {group_name, keywords}
            device: Optional filter, pc or mo
            gender: Optional filter, m or f
            ages: Optional age group codes '1'..'11'
        """
        args = DatalabSearchArgs(
            start_date=start_date, end_date=end_date, time_unit=time_unit,
            keyword_groups=keyword_groups, device=device, gender=gender, ages=ages,
        )
        return await run_datalab(ctx, "search_trend", args)

    @server.tool()
    async def datalab_shopping_category(
        start_date: StartDateArg,
        end_date: EndDateArg,
        time_unit: TimeUnitArg,
        category: Annotated[list[CategoryGroup], Field(description="카테고리 묶음 {name, param: [코드]} (최대 3개)")],
        device: Optional[Device] = None,
        gender: Optional[Gender] = None,
        ages: Optional[list[AgeGroup]] = None,
        ctx: Context = None,
    ) -> dict:
        """
        Perform a trend analysis on Naver Shopping category. (네이버 쇼핑 카테고리별 트렌드 분석)

        Use find_category first to look up category codes.
        """
        args = DatalabShoppingArgs(
            start_date=start_date, end_date=end_date, time_unit=time_unit,
            category=category, device=device, gender=gender, ages=ages,
        )
        return await run_datalab(ctx, "datalab_shopping_category", args)

    @server.tool(description="Perform a trend analysis on Naver Shopping by device. (네이버 쇼핑 기기별 트렌드 분석)")
    async def datalab_shopping_by_device(
        start_date: StartDateArg,
        end_date: EndDateArg,
        time_unit: TimeUnitArg,
        category: CategoryCodeArg,
        device: Optional[Device] = None,
        ctx: Context = None,
    ) -> dict:
        args = DatalabShoppingDeviceArgs(
            start_date=start_date, end_date=end_date, time_unit=time_unit,
            category=category, device=device,
        )
        return await run_datalab(ctx, "datalab_shopping_by_device", args)

    @server.tool(description="Perform a trend analysis on Naver Shopping by gender. (네이버 쇼핑 성별 트렌드 분석)")
    async def datalab_shopping_by_gender(
        start_date: StartDateArg,
        end_date: EndDateArg,
        time_unit: TimeUnitArg,
        category: CategoryCodeArg,
        gender: Optional[Gender] = None,
        ctx: Context = None,
    ) -> dict:
        args = DatalabShoppingGenderArgs(
            start_date=start_date, end_date=end_date, time_unit=time_unit,
            category=category, gender=gender,
        )
        return await run_datalab(ctx, "datalab_shopping_by_gender", args)

    @server.tool(description="Perform a trend analysis on Naver Shopping by age. (네이버 쇼핑 연령별 트렌드 분석)")
    async def datalab_shopping_by_age(
        start_date: StartDateArg,
        end_date: EndDateArg,
        time_unit: TimeUnitArg,
        category: CategoryCodeArg,
        ages: Optional[list[AgeGroup]] = None,
        ctx: Context = None,
    ) -> dict:
        args = DatalabShoppingAgeArgs(
            start_date=start_date, end_date=end_date, time_unit=time_unit,
            category=category, ages=ages,
        )
        return await run_datalab(ctx, "datalab_shopping_by_age", args)

    @server.tool(description="Perform a trend analysis on Naver Shopping keywords. (네이버 쇼핑 키워드별 트렌드 분석)")
    async def datalab_shopping_keywords(
        start_date: StartDateArg,
        end_date: EndDateArg,
        time_unit: TimeUnitArg,
        category: CategoryCodeArg,
        keyword: Annotated[list[KeywordParam], Field(description="키워드 묶음 {name, param: [키워드]} (최대 5개)")],
        device: Optional[Device] = None,
        gender: Optional[Gender] = None,
        ages: Optional[list[AgeGroup]] = None,
        ctx: Context = None,
    ) -> dict:
        args = DatalabShoppingKeywordsArgs(
            start_date=start_date, end_date=end_date, time_unit=time_unit,
            category=category, keyword=keyword, device=device, gender=gender, ages=ages,
        )
        return await run_datalab(ctx, "datalab_shopping_keywords", args)

    @server.tool(description="Perform a trend analysis on Naver Shopping keywords by device. (네이버 쇼핑 키워드 기기별 트렌드 분석)")
    async def datalab_shopping_keyword_by_device(
        start_date: StartDateArg,
        end_date: EndDateArg,
        time_unit: TimeUnitArg,
        category: CategoryCodeArg,
        keyword: KeywordArg,
        device: Optional[Device] = None,
        ctx: Context = None,
    ) -> dict:
        args = DatalabShoppingKeywordDeviceArgs(
            start_date=start_date, end_date=end_date, time_unit=time_unit,
            category=category, keyword=keyword, device=device,
        )
        return await run_datalab(ctx, "datalab_shopping_keyword_by_device", args)

    @server.tool(description="Perform a trend analysis on Naver Shopping keywords by gender. (네이버 쇼핑 키워드 성별 트렌드 분석)")
    async def datalab_shopping_keyword_by_gender(
        start_date: StartDateArg,
        end_date: EndDateArg,
        time_unit: TimeUnitArg,
        category: CategoryCodeArg,
        keyword: KeywordArg,
        gender: Optional[Gender] = None,
        ctx: Context = None,
    ) -> dict:
        args = DatalabShoppingKeywordGenderArgs(
            start_date=start_date, end_date=end_date, time_unit=time_unit,
            category=category, keyword=keyword, gender=gender,
        )
        return await run_datalab(ctx, "datalab_shopping_keyword_by_gender", args)

    @server.tool(description="Perform a trend analysis on Naver Shopping keywords by age. (네이버 쇼핑 키워드 연령별 트렌드 분석)")
    async def datalab_shopping_keyword_by_age(
        start_date: StartDateArg,
        end_date: EndDateArg,
        time_unit: TimeUnitArg,
        category: CategoryCodeArg,
        keyword: KeywordArg,
        ages: Optional[list[AgeGroup]] = None,
        ctx: Context = None,
    ) -> dict:
        args = DatalabShoppingKeywordAgeArgs(
            start_date=start_date, end_date=end_date, time_unit=time_unit,
            category=category, keyword=keyword, ages=ages,
        )
        return await run_datalab(ctx, "datalab_shopping_keyword_by_age", args)

    @server.tool()
    async def find_category(
        query: Annotated[str, Field(description="찾을 카테고리 이름 또는 키워드 (예: '패션', '스마트폰')")],
        max_results: Annotated[int, Field(description="최대 결과 개수", ge=1, le=100)] = DEFAULT_MAX_RESULTS,
    ) -> dict:
        """
        Find Naver Shopping category codes by name with fuzzy matching. (쇼핑 카테고리 코드 검색)
        Results are ranked by relevance; top-level categories (대분류) come first on ties.
        Use the returned codes with the datalab_shopping_* tools.

        Args:
            query: Category name or keyword. Examples: '패션', '화장품', '노트북'
            max_results: Maximum number of categories to return (default 10)

        Returns:
            Ranked categories with code, breadcrumb and match type,
            or suggestions when nothing matches
        """
        return lookup_categories(query, max_results)

    # Add a resource
    @server.resource("info://naver-search")
    def naver_info() -> str:
        """Information about the Naver Search MCP service."""
        return (
            "Naver Search MCP Server provides access to Naver Search and DataLab APIs.\n"
            "Search: web documents, news, blogs, shopping, images, KnowledgeiN, books, "
            "encyclopedia, academic papers, local places and cafe articles.\n"
            "DataLab: search keyword trends and shopping category/keyword trends "
            "by device, gender and age.\n"
            "Use find_category to look up shopping category codes for DataLab tools."
        )

    return server


@smithery.server(config_schema=ConfigSchema)
def create_server():
    """Create and configure the Naver Search MCP server."""
    return build_server()


def main():
    """
    CLI entry point for local STDIO mode.

    This function is used by:
    1. pyproject.toml [project.scripts] naver-search-server command
    2. python -m naver_search_server.server

    For Smithery deployment, use: uv run start (HTTP transport)
    """
    mcp_server = create_server()
    mcp_server.run(transport="stdio")


if __name__ == "__main__":
    main()
