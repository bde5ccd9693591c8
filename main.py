"""
Naver Search MCP Server - Entry Point

A Model Context Protocol server exposing Naver Search and DataLab APIs
(네이버 검색 / 데이터랩) as tools for LLM assistants.

Features:
- Search: web, news, blog, shopping, image, KnowledgeiN, book,
  encyclopedia, academic, local, cafe articles
- DataLab: keyword trends, shopping category / keyword trends
- Shopping category code lookup with fuzzy matching
- Smithery deployment support

Usage:
    python main.py

Environment Variables:
    NAVER_CLIENT_ID - Naver application Client ID (required)
    NAVER_CLIENT_SECRET - Naver application Client Secret (required)
    NAVER_CATEGORIES_PATH - Alternative category dataset (optional)

Get your credentials:
    1. Visit https://developers.naver.com/apps/
    2. Register an application with the 검색 and 데이터랩 APIs enabled
    3. Copy the Client ID and Client Secret

License: MIT
"""

from naver_search_server.server import main

if __name__ == "__main__":
    main()
