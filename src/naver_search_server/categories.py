# -*- coding: utf-8 -*-
"""
Shopping category lookup
쇼핑 카테고리 검색 - 카테고리 코드 퍼지 검색 및 관련도 정렬

The taxonomy is a static JSON dataset of Naver Shopping categories, each
identified by a code and up to four hierarchy levels
(대분류 > 중분류 > 소분류 > 세분류).
"""

import logging
import math
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError, field_validator
from rapidfuzz.distance import Levenshtein

logger = logging.getLogger("naver-search-mcp.categories")

CATEGORIES_PATH_ENV = "NAVER_CATEGORIES_PATH"
BUNDLED_CATEGORIES_PATH = Path(__file__).parent / "data" / "categories.json"

# Scoring constants (empirically tuned)
LEVEL_BONUSES = (50, 30, 20, 10)
LEVEL_NAMES = ("대분류", "중분류", "소분류", "세분류")
EXACT_SCORE = 100
PREFIX_SCORE = 80
SUBSTRING_SCORE = 60
FUZZY_WEIGHT = 40
FUZZY_THRESHOLD = 0.6

DEFAULT_MAX_RESULTS = 10

NO_RESULT_SUGGESTIONS = [
    "패션", "화장품", "가구", "스마트폰", "가전제품",
    "스포츠", "도서", "자동차", "식품", "뷰티",
]


class LoadError(Exception):
    """Category dataset is missing or malformed."""


class QueryValidationError(ValueError):
    """Rejected lookup input (empty query, non-positive result count)."""


class CategoryRecord(BaseModel):
    """One taxonomy node. Levels are filled top-down, unused levels are empty."""

    model_config = ConfigDict(frozen=True)

    code: str
    level1: str = ""
    level2: str = ""
    level3: str = ""
    level4: str = ""

    @field_validator("code", mode="before")
    @classmethod
    def _code_as_string(cls, value):
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("level1", "level2", "level3", "level4", mode="before")
    @classmethod
    def _empty_level(cls, value):
        # whitespace-only labels count as absent levels
        if value is None or (isinstance(value, str) and not value.strip()):
            return ""
        return value

    @property
    def levels(self) -> tuple[str, str, str, str]:
        return (self.level1, self.level2, self.level3, self.level4)

    @property
    def breadcrumb(self) -> str:
        """e.g. '패션의류 > 여성의류 > 원피스'"""
        return " > ".join(level for level in self.levels if level)


@dataclass(frozen=True)
class MatchCandidate:
    record: CategoryRecord
    score: int
    match_type: str


_records_adapter = TypeAdapter(list[CategoryRecord])


def parse_categories(raw: bytes | str) -> list[CategoryRecord]:
    """
    Parse and validate a category dataset.

    Args:
        raw: JSON array of {code, level1, level2, level3, level4} objects

    Returns:
        List of CategoryRecord in dataset order

    Raises:
        LoadError: If the document is not valid JSON, is not an array, or
                   breaks the code/level invariants
    """
    try:
        records = _records_adapter.validate_json(raw)
    except ValidationError as e:
        raise LoadError(f"카테고리 데이터 형식 오류: {e.error_count()} validation error(s)") from e

    seen: set[str] = set()
    for idx, record in enumerate(records):
        if not record.code.strip():
            raise LoadError(f"Empty category code at index {idx}")
        if record.code in seen:
            raise LoadError(f"Duplicate category code: {record.code}")
        seen.add(record.code)

        # no gaps: once a level is empty, every deeper level must be empty too
        levels = record.levels
        for upper, lower in zip(levels, levels[1:]):
            if not upper and lower:
                raise LoadError(f"Category {record.code} has a gap in its levels")

    return records


def find_categories_file() -> Path:
    """
    Locate the category dataset.

    Priority:
    1. NAVER_CATEGORIES_PATH environment variable
    2. Dataset bundled with the package
    3. data/categories.json under the working directory
    """
    candidates = []
    env_path = os.getenv(CATEGORIES_PATH_ENV, "").strip()
    if env_path:
        candidates.append(Path(env_path))
    candidates.append(BUNDLED_CATEGORIES_PATH)
    candidates.append(Path.cwd() / "data" / "categories.json")

    for path in candidates:
        if path.is_file():
            return path

    raise LoadError(
        "카테고리 데이터 파일을 찾을 수 없습니다: "
        + ", ".join(str(path) for path in candidates)
    )


def load_categories_file(path: Optional[Path] = None) -> list[CategoryRecord]:
    path = path or find_categories_file()
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise LoadError(f"Cannot read {path}: {e}") from e
    records = parse_categories(raw)
    logger.info(f"Loaded {len(records)} categories from {path}")
    return records


class CategoryStore:
    """
    Lazily loaded, read-only taxonomy cache.

    The first load() calls the loader and keeps its result; later calls
    return the same tuple until reset(). Load failures are logged, kept in
    last_error and turn into an empty taxonomy.
    """

    def __init__(self, loader: Callable[[], list[CategoryRecord]] = load_categories_file):
        self._loader = loader
        self._records: Optional[tuple[CategoryRecord, ...]] = None
        self._lock = threading.Lock()
        self.last_error: Optional[LoadError] = None

    def load(self) -> tuple[CategoryRecord, ...]:
        records = self._records
        if records is not None:
            return records

        with self._lock:
            if self._records is None:
                try:
                    self._records = tuple(self._loader())
                    self.last_error = None
                except LoadError as e:
                    logger.error(f"카테고리 데이터 로딩 실패: {e}")
                    self.last_error = e
                    return ()
            return self._records

    def reset(self) -> None:
        with self._lock:
            self._records = None
            self.last_error = None


default_store = CategoryStore()


def clear_categories_cache() -> None:
    """Drop the cached taxonomy; the next lookup re-reads the dataset."""
    default_store.reset()


def levenshtein_distance(a: str, b: str) -> int:
    """Unit-cost insert/delete/substitute edit distance."""
    return Levenshtein.distance(a, b)


def similarity(a: str, b: str) -> float:
    """Edit-distance similarity in [0, 1]; 1.0 for two empty strings."""
    max_len = max(len(a), len(b))
    if max_len == 0:
        return 1.0
    return (max_len - Levenshtein.distance(a, b)) / max_len


def _score_level(query: str, level_text: str, bonus: int) -> tuple[int, str]:
    if level_text == query:
        return EXACT_SCORE + bonus, "정확일치"
    if level_text.startswith(query):
        return PREFIX_SCORE + bonus, "시작일치"
    if query in level_text:
        return SUBSTRING_SCORE + bonus, "포함일치"

    ratio = similarity(query, level_text)
    if ratio > FUZZY_THRESHOLD:
        return math.floor(ratio * FUZZY_WEIGHT) + bonus, "유사일치"
    return 0, ""


def match_one(query: str, record: CategoryRecord) -> Optional[MatchCandidate]:
    """
    Best match of a query against one record's hierarchy levels.

    Args:
        query: Raw search text
        record: Category to score

    Returns:
        MatchCandidate for the highest-scoring level, or None if no level matched
    """
    query = query.lower().strip()
    best_score = 0
    best_type = ""

    for level, bonus, name in zip(record.levels, LEVEL_BONUSES, LEVEL_NAMES):
        if not level:
            continue
        score, tier = _score_level(query, level.lower().strip(), bonus)
        if score > best_score:
            best_score = score
            best_type = f"{tier}({name})"

    if best_score == 0:
        return None
    return MatchCandidate(record=record, score=best_score, match_type=best_type)


def _validate_max_results(max_results: int) -> None:
    if isinstance(max_results, bool) or not isinstance(max_results, int) or max_results <= 0:
        raise QueryValidationError(f"max_results must be a positive integer, got {max_results!r}")


def rank(candidates, max_results: int = DEFAULT_MAX_RESULTS) -> list[MatchCandidate]:
    """Sort by score (descending) then code (ascending) and keep the top max_results."""
    _validate_max_results(max_results)
    ordered = sorted(candidates, key=lambda c: (-c.score, c.record.code))
    return ordered[:max_results]


def format_results(query: str, ranked: list[MatchCandidate]) -> dict:
    if not ranked:
        return {
            "message": f'"{query}"와 관련된 카테고리를 찾을 수 없습니다. 다른 검색어를 시도해보세요.',
            "suggestions": list(NO_RESULT_SUGGESTIONS),
        }

    return {
        "message": f'"{query}" 검색 결과 ({len(ranked)}개, 관련도순 정렬)',
        "total_found": len(ranked),
        "categories": [
            {
                "code": candidate.record.code,
                "category": candidate.record.breadcrumb,
                "match_type": candidate.match_type,
                "score": candidate.score,
                "levels": {
                    "level1": candidate.record.level1,
                    "level2": candidate.record.level2,
                    "level3": candidate.record.level3,
                    "level4": candidate.record.level4,
                },
            }
            for candidate in ranked
        ],
        "next_steps": {
            "trend_analysis": "이제 datalab_shopping_category 도구로 각 카테고리의 트렌드 분석이 가능합니다",
            "age_analysis": "datalab_shopping_by_age 도구로 연령별 쇼핑 패턴을 분석할 수 있습니다",
            "gender_analysis": "datalab_shopping_by_gender 도구로 성별 쇼핑 패턴을 분석할 수 있습니다",
            "device_analysis": "datalab_shopping_by_device 도구로 디바이스별 쇼핑 패턴을 분석할 수 있습니다",
        },
    }


def find_category(
    query: str,
    max_results: int = DEFAULT_MAX_RESULTS,
    store: Optional[CategoryStore] = None,
) -> dict:
    """
    Fuzzy category search with relevance ranking.

    Args:
        query: Category name or keyword (e.g. '패션', '스마트폰')
        max_results: Number of categories to return (positive)
        store: Taxonomy store, defaults to the process-wide one

    Returns:
        Result payload, or a 'no results' payload with suggestions

    Raises:
        QueryValidationError: If query is blank or max_results is not positive
    """
    if not isinstance(query, str) or not query.strip():
        raise QueryValidationError("query must not be empty")
    _validate_max_results(max_results)

    records = (store or default_store).load()
    candidates = [c for c in (match_one(query, record) for record in records) if c is not None]
    return format_results(query, rank(candidates, max_results))
