"""
Naver Search MCP Server - Naver Search & DataLab tools
네이버 검색 / 데이터랩 MCP 서버

Built with Smithery CLI for Model Context Protocol
"""

from .server import create_server

__version__ = "1.0.30"

__all__ = ["create_server"]
