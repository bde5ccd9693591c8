# -*- coding: utf-8 -*-
"""
Request schemas for Naver Search / DataLab APIs
네이버 검색 / 데이터랩 API 요청 파라미터 스키마

Models use snake_case attributes and dump to the camelCase wire format
with to_params().
"""

from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

SortOption = Literal["sim", "date"]
LocalSortOption = Literal["random", "comment"]
TimeUnit = Literal["date", "week", "month"]
Device = Literal["pc", "mo"]
Gender = Literal["m", "f"]
AgeGroup = Literal["1", "2", "3", "4", "5", "6", "7", "8", "9", "10", "11"]


class NaverParams(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    def to_params(self) -> dict:
        """Wire representation: camelCase keys, unset filters omitted."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class SearchArgs(NaverParams):
    query: str = Field(..., min_length=1, description="검색어")
    display: int = Field(10, ge=1, le=100, description="한 번에 표시할 검색 결과 개수 (1-100)")
    start: int = Field(1, ge=1, le=1000, description="검색 시작 위치 (1-1000)")
    sort: SortOption = Field("sim", description="정렬 옵션: sim=정확도순, date=날짜순")


class LocalSearchArgs(NaverParams):
    query: str = Field(..., min_length=1, description="검색어")
    display: int = Field(5, ge=1, le=5, description="한 번에 표시할 검색 결과 개수 (1-5)")
    start: int = Field(1, ge=1, le=1, description="검색 시작 위치 (1)")
    sort: LocalSortOption = Field("random", description="정렬 옵션: random=정확도순, comment=리뷰순")


class DatalabBase(NaverParams):
    start_date: date = Field(..., description="조회 시작 날짜 (yyyy-mm-dd)")
    end_date: date = Field(..., description="조회 종료 날짜 (yyyy-mm-dd)")
    time_unit: TimeUnit = Field(..., description="구간 단위: date, week, month")

    @model_validator(mode="after")
    def _check_period(self):
        if self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self


class DatalabFilters(NaverParams):
    device: Optional[Device] = Field(None, description="기기: pc, mo")
    gender: Optional[Gender] = Field(None, description="성별: m, f")
    ages: Optional[list[AgeGroup]] = Field(None, description="연령대 코드 목록 ('1'~'11')")


class KeywordGroup(NaverParams):
    group_name: str = Field(..., min_length=1, description="주제어")
    keywords: list[str] = Field(..., min_length=1, max_length=20, description="주제어에 해당하는 검색어")


class DatalabSearchArgs(DatalabBase, DatalabFilters):
    keyword_groups: list[KeywordGroup] = Field(..., min_length=1, max_length=5)


class CategoryGroup(NaverParams):
    name: str = Field(..., min_length=1, description="카테고리 이름")
    param: list[str] = Field(..., min_length=1, max_length=3, description="카테고리 코드 목록")


class DatalabShoppingArgs(DatalabBase, DatalabFilters):
    category: list[CategoryGroup] = Field(..., min_length=1, max_length=3)


class DatalabShoppingDeviceArgs(DatalabBase):
    category: str = Field(..., min_length=1, description="카테고리 코드")
    device: Optional[Device] = None


class DatalabShoppingGenderArgs(DatalabBase):
    category: str = Field(..., min_length=1, description="카테고리 코드")
    gender: Optional[Gender] = None


class DatalabShoppingAgeArgs(DatalabBase):
    category: str = Field(..., min_length=1, description="카테고리 코드")
    ages: Optional[list[AgeGroup]] = None


class KeywordParam(NaverParams):
    name: str = Field(..., min_length=1, description="키워드 이름")
    param: list[str] = Field(..., min_length=1, description="키워드 값 목록")


class DatalabShoppingKeywordsArgs(DatalabBase, DatalabFilters):
    category: str = Field(..., min_length=1, description="카테고리 코드")
    keyword: list[KeywordParam] = Field(..., min_length=1, max_length=5)


class DatalabShoppingKeywordDeviceArgs(DatalabBase):
    category: str = Field(..., min_length=1, description="카테고리 코드")
    keyword: str = Field(..., min_length=1, description="검색 키워드")
    device: Optional[Device] = None


class DatalabShoppingKeywordGenderArgs(DatalabBase):
    category: str = Field(..., min_length=1, description="카테고리 코드")
    keyword: str = Field(..., min_length=1, description="검색 키워드")
    gender: Optional[Gender] = None


class DatalabShoppingKeywordAgeArgs(DatalabBase):
    category: str = Field(..., min_length=1, description="카테고리 코드")
    keyword: str = Field(..., min_length=1, description="검색 키워드")
    ages: Optional[list[AgeGroup]] = None
