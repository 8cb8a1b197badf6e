"""콘텐츠 유사도 점수

    content = 0.5·tagOverlap + 0.3·sameCategory
              + 0.2·saveCountSimilarity + 0.1·min(sharedItemTitles, 3)
"""

from typing import Iterable

from app.domains.ranking.types import SimilarityCandidate

TAG_WEIGHT = 0.5
CATEGORY_WEIGHT = 0.3
SAVE_SIMILARITY_WEIGHT = 0.2
SHARED_ITEM_WEIGHT = 0.1
MAX_SHARED_ITEMS = 3


def normalize_title(title: str) -> str:
    return title.strip().lower()


def tag_overlap_count(source_tags: Iterable[str], candidate_tags: Iterable[str]) -> int:
    """source 태그 중 candidate에도 있는 태그 수 (대소문자 구분)"""
    candidate_set = set(candidate_tags)
    return sum(1 for tag in source_tags if tag in candidate_set)


def shared_item_count(
    source_titles: Iterable[str], candidate_titles: Iterable[str]
) -> int:
    """정규화(trim + lower)한 candidate 제목과 일치하는 source 제목 수 (중복 포함)"""
    candidate_set = {normalize_title(t) for t in candidate_titles}
    return sum(1 for t in source_titles if normalize_title(t) in candidate_set)



def save_count_similarity(a: int, b: int, max_save_count: int) -> float:
    """저장 수 근접도 (0~1)"""
    similarity = 1 - abs(a - b) / max(max_save_count, 1)
    return min(1.0, max(0.0, similarity))


def content_similarity(
    source: SimilarityCandidate,
    candidate: SimilarityCandidate,
    max_save_count: int,
) -> float:
    """콘텐츠 유사도 점수

    Args:
        source: 기준 리스트
        candidate: 후보 리스트
        max_save_count: 기준 리스트를 포함한 후보 집합의 최대 저장 수
    """
    same_category = (
        1.0
        if source.category_id is not None
        and source.category_id == candidate.category_id
        else 0.0
    )
    shared = min(
        shared_item_count(source.item_titles, candidate.item_titles),
        MAX_SHARED_ITEMS,
    )
    return (
        TAG_WEIGHT * tag_overlap_count(source.tags, candidate.tags)
        + CATEGORY_WEIGHT * same_category
        + SAVE_SIMILARITY_WEIGHT
        * save_count_similarity(
            source.save_count, candidate.save_count, max_save_count
        )
        + SHARED_ITEM_WEIGHT * shared
    )
