import json

import pytest

from naver_search_server.categories import (
    BUNDLED_CATEGORIES_PATH,
    CATEGORIES_PATH_ENV,
    CategoryRecord,
    CategoryStore,
    LoadError,
    MatchCandidate,
    QueryValidationError,
    clear_categories_cache,
    default_store,
    find_categories_file,
    find_category,
    levenshtein_distance,
    load_categories_file,
    match_one,
    parse_categories,
    rank,
    similarity,
)


def store_of(*records: CategoryRecord) -> CategoryStore:
    return CategoryStore(loader=lambda: list(records))


# --- similarity ---------------------------------------------------------


def test_levenshtein_known_values() -> None:
    assert levenshtein_distance("", "") == 0
    assert levenshtein_distance("kitten", "sitting") == 3
    assert levenshtein_distance("abc", "") == 3
    assert levenshtein_distance("", "abc") == 3
    assert levenshtein_distance("패션", "패션의류") == 2


@pytest.mark.parametrize("text", ["", "a", "fashion", "패션의류", "  spaced  "])
def test_similarity_is_one_for_identical_strings(text: str) -> None:
    assert similarity(text, text) == 1.0


@pytest.mark.parametrize(
    "a, b",
    [("kitten", "sitting"), ("", "abc"), ("phone", "smartphone"), ("가전", "디지털/가전")],
)
def test_similarity_is_symmetric(a: str, b: str) -> None:
    assert similarity(a, b) == similarity(b, a)


def test_similarity_bounds() -> None:
    assert similarity("abc", "xyz") == 0.0
    assert similarity("kitten", "sitting") == pytest.approx(4 / 7)


# --- matching -----------------------------------------------------------


def test_match_tiers_on_same_level() -> None:
    exact = match_one("phone", CategoryRecord(code="1", level1="Phone"))
    prefix = match_one("phone", CategoryRecord(code="2", level1="Phones"))
    substring = match_one("phone", CategoryRecord(code="3", level1="Smartphone"))
    fuzzy = match_one("phone", CategoryRecord(code="4", level1="Phine"))

    assert (exact.score, exact.match_type) == (150, "정확일치(대분류)")
    assert (prefix.score, prefix.match_type) == (130, "시작일치(대분류)")
    assert (substring.score, substring.match_type) == (110, "포함일치(대분류)")
    # similarity 0.8 -> floor(32) + 50
    assert (fuzzy.score, fuzzy.match_type) == (82, "유사일치(대분류)")
    assert exact.score > prefix.score > substring.score > fuzzy.score


def test_level_bonus_prefers_major_category() -> None:
    major = match_one("phone", CategoryRecord(code="9", level1="Phone"))
    minor = match_one("phone", CategoryRecord(code="1", level1="Electronics", level2="Phone"))

    assert major.score == 150
    assert minor.score == 130
    assert minor.match_type == "정확일치(중분류)"
    assert [c.record.code for c in rank([minor, major])] == ["9", "1"]


def test_best_level_wins() -> None:
    record = CategoryRecord(code="1", level1="디지털/가전", level2="휴대폰", level3="스마트폰")
    candidate = match_one("스마트폰", record)

    assert candidate.score == 120
    assert candidate.match_type == "정확일치(소분류)"


def test_query_and_levels_are_normalized() -> None:
    candidate = match_one("  FASHION ", CategoryRecord(code="A", level1="Fashion"))

    assert candidate.score == 150
    assert candidate.record.level1 == "Fashion"


def test_fuzzy_below_threshold_is_no_match() -> None:
    assert match_one("zzzz", CategoryRecord(code="1", level1="Fashion")) is None


def test_fuzzy_typo_matches() -> None:
    candidate = match_one("fashon", CategoryRecord(code="1", level1="Fashion"))

    assert candidate.match_type == "유사일치(대분류)"
    assert candidate.score == 34 + 50


# --- ranking ------------------------------------------------------------


def test_rank_breaks_ties_by_code() -> None:
    b = MatchCandidate(CategoryRecord(code="B2", level1="Camping"), 150, "정확일치(대분류)")
    a = MatchCandidate(CategoryRecord(code="A1", level1="Camping"), 150, "정확일치(대분류)")
    c = MatchCandidate(CategoryRecord(code="C3", level1="Camping gear"), 130, "시작일치(대분류)")

    for order in ([b, a, c], [c, a, b], [a, c, b]):
        assert [x.record.code for x in rank(order)] == ["A1", "B2", "C3"]


@pytest.mark.parametrize("bad", [0, -1, True, 2.5, "3"])
def test_rank_rejects_invalid_max_results(bad) -> None:
    with pytest.raises(QueryValidationError):
        rank([], bad)


# --- find_category ------------------------------------------------------


def test_find_category_exact_above_prefix() -> None:
    store = store_of(
        CategoryRecord(code="B", level1="Fashion/Clothing"),
        CategoryRecord(code="A", level1="Fashion"),
    )
    result = find_category("fashion", store=store)

    assert result["total_found"] == 2
    assert [(c["code"], c["score"]) for c in result["categories"]] == [("A", 150), ("B", 130)]


def test_find_category_payload_shape() -> None:
    store = store_of(CategoryRecord(code="50000807", level1="패션의류", level2="여성의류", level3="원피스"))
    result = find_category("원피스", store=store)

    assert result["message"].startswith('"원피스" 검색 결과 (1개')
    entry = result["categories"][0]
    assert entry == {
        "code": "50000807",
        "category": "패션의류 > 여성의류 > 원피스",
        "match_type": "정확일치(소분류)",
        "score": 120,
        "levels": {"level1": "패션의류", "level2": "여성의류", "level3": "원피스", "level4": ""},
    }
    assert set(result["next_steps"]) == {"trend_analysis", "age_analysis", "gender_analysis", "device_analysis"}


def test_find_category_truncates_to_max_results() -> None:
    store = store_of(
        CategoryRecord(code="3", level1="Sports", level2="Golf"),
        CategoryRecord(code="2", level1="Golf clubs"),
        CategoryRecord(code="1", level1="Golf"),
    )
    result = find_category("golf", max_results=1, store=store)

    assert result["total_found"] == 1
    assert result["categories"][0]["code"] == "1"


def test_find_category_no_results() -> None:
    result = find_category("zzzzqq", store=store_of(CategoryRecord(code="1", level1="Fashion")))

    assert "total_found" not in result
    assert "zzzzqq" in result["message"]
    assert result["suggestions"]


@pytest.mark.parametrize("query", ["", "   ", None])
def test_find_category_rejects_blank_query(query) -> None:
    with pytest.raises(QueryValidationError):
        find_category(query, store=store_of())


def test_find_category_rejects_non_positive_max_results() -> None:
    with pytest.raises(QueryValidationError):
        find_category("fashion", max_results=0, store=store_of())


def test_find_category_with_bundled_dataset() -> None:
    store = CategoryStore(loader=lambda: load_categories_file(BUNDLED_CATEGORIES_PATH))

    phones = find_category("스마트폰", store=store)
    assert phones["categories"][0]["code"] == "50001385"
    assert phones["categories"][0]["match_type"] == "정확일치(소분류)"

    fashion = find_category("패션", max_results=3, store=store)
    assert [c["code"] for c in fashion["categories"]] == ["50000000", "50000001", "50000167"]


# --- store --------------------------------------------------------------


def test_store_caches_until_reset() -> None:
    dataset = [CategoryRecord(code="1", level1="Fashion")]
    calls = []

    def loader():
        calls.append(1)
        return list(dataset)

    store = CategoryStore(loader=loader)
    first = store.load()
    dataset.append(CategoryRecord(code="2", level1="Food"))

    assert store.load() is first
    assert len(calls) == 1

    store.reset()
    assert [r.code for r in store.load()] == ["1", "2"]
    assert len(calls) == 2


def test_store_absorbs_load_error() -> None:
    def loader():
        raise LoadError("missing")

    store = CategoryStore(loader=loader)

    assert store.load() == ()
    assert isinstance(store.last_error, LoadError)
    assert "suggestions" in find_category("fashion", store=store)


def test_store_retries_after_failed_load() -> None:
    attempts = []

    def loader():
        attempts.append(1)
        if len(attempts) == 1:
            raise LoadError("not yet")
        return [CategoryRecord(code="1", level1="Fashion")]

    store = CategoryStore(loader=loader)

    assert store.load() == ()
    assert len(store.load()) == 1
    assert store.last_error is None


# --- dataset parsing ----------------------------------------------------


def test_parse_categories_defaults_and_numeric_codes() -> None:
    records = parse_categories(json.dumps([{"code": 50000000, "level1": "패션의류", "level2": None}]))

    assert records == [CategoryRecord(code="50000000", level1="패션의류")]
    assert records[0].breadcrumb == "패션의류"


@pytest.mark.parametrize(
    "raw",
    [
        "{not json",
        '{"code": "1"}',
        '[{"level1": "no code"}]',
        '[{"code": "  ", "level1": "Blank"}]',
        '[{"code": "1", "level1": "A"}, {"code": "1", "level1": "B"}]',
        '[{"code": "1", "level1": "A", "level3": "gap"}]',
    ],
)
def test_parse_categories_rejects_malformed_data(raw: str) -> None:
    with pytest.raises(LoadError):
        parse_categories(raw)


def test_find_categories_file_prefers_env_path(tmp_path, monkeypatch) -> None:
    dataset = tmp_path / "custom.json"
    dataset.write_text(json.dumps([{"code": "X1", "level1": "Custom"}]), encoding="utf-8")
    monkeypatch.setenv(CATEGORIES_PATH_ENV, str(dataset))

    assert find_categories_file() == dataset
    assert [r.code for r in load_categories_file()] == ["X1"]


def test_find_categories_file_falls_back_to_bundled(monkeypatch) -> None:
    monkeypatch.delenv(CATEGORIES_PATH_ENV, raising=False)

    assert find_categories_file() == BUNDLED_CATEGORIES_PATH


def test_bundled_dataset_is_valid() -> None:
    records = load_categories_file(BUNDLED_CATEGORIES_PATH)

    assert records
    assert all(r.level1 for r in records)


def test_clear_categories_cache_rereads_default_store(monkeypatch) -> None:
    dataset = [CategoryRecord(code="1", level1="Fashion")]
    monkeypatch.setattr(default_store, "_loader", lambda: list(dataset))
    clear_categories_cache()

    try:
        assert find_category("food")["suggestions"]
        dataset.append(CategoryRecord(code="2", level1="Food"))
        assert "suggestions" in find_category("food")

        clear_categories_cache()
        result = find_category("food")
        assert [c["code"] for c in result["categories"]] == ["2"]
    finally:
        clear_categories_cache()


def test_whitespace_only_level_counts_as_empty() -> None:
    assert CategoryRecord(code="1", level1="Fashion", level2="   ").breadcrumb == "Fashion"

    with pytest.raises(LoadError):
        parse_categories('[{"code": "1", "level1": "  ", "level2": "X"}]')


def test_similarity_on_longer_korean_labels() -> None:
    assert levenshtein_distance("스마트폰케이스", "스마트폰") == 3
    assert similarity("스마트폰케이스", "스마트폰") == pytest.approx(4 / 7)
    assert similarity("휴대폰", "스마트폰") == similarity("스마트폰", "휴대폰")
