# app/utils/recommender.py
# 發文時的標籤建議：已存在的標籤與貼文內容比對
import re
import Levenshtein
from typing import List, Set, Tuple, Iterable

MIN_CONTENT_LENGTH = 10
MIN_SUGGESTIONS = 3
MAX_SUGGESTIONS = 4
SIMILARITY_THRESHOLD = 0.7

# (輔助函式) 取得兩個字串的 Levenshtein 相似度 (0.0 ~ 1.0)
def _get_string_similarity(s1: str, s2: str) -> float:
    # Levenshtein.distance 算出的是 "編輯距離" (差多少)
    # 將其標準化為 "相似度" (0.0 ~ 1.0)，1.0 表示完全相同
    if not s1 or not s2:
        return 0.0
    distance = Levenshtein.distance(s1.lower(), s2.lower())
    max_len = max(len(s1), len(s2))
    return 1.0 - (distance / max_len)

def _extract_words(content: str) -> Set[str]:
    """內容中的單字 (小寫、去掉 #)"""
    return {word.lower() for word in re.findall(r"\w+", content)}

def score_tag(tag: str, content: str, words: Set[str]) -> float:
    """
    1. 標籤直接出現在內容中 -> 1.0
    2. 否則取與內容單字的最高 Levenshtein 相似度 (需 > 0.7)
    """
    if tag.lower() in content.lower():
        return 1.0

    best_match_score = 0.0
    for word in words:
        similarity = _get_string_similarity(tag, word)
        if similarity > SIMILARITY_THRESHOLD:
            best_match_score = max(best_match_score, similarity)
    return best_match_score

def suggest_tags(
    content: str,
    # 已存在的標籤與使用次數，依使用次數由高到低
    tag_usage: List[Tuple[str, int]],
    selected: Iterable[str] = (),
) -> List[str]:
    """
    內容太短 (少於 10 個字元) 不建議；
    依 (分數, 使用次數) 排序，不足 3 個時用熱門標籤補足，最多 4 個，
    不會回傳已選取的標籤
    """
    if len(content.strip()) < MIN_CONTENT_LENGTH:
        return []

    selected_tags = {tag.strip().lstrip("#").lower() for tag in selected}
    words = _extract_words(content)

    scored = []
    for tag, count in tag_usage:
        if tag.lower() in selected_tags:
            continue
        score = score_tag(tag, content, words)
        if score > 0:
            scored.append((score, count, tag))

    # 排序邏輯：分數 (高到低) -> 使用次數 (高到低) -> 標籤名稱
    scored.sort(key=lambda x: (-x[0], -x[1], x[2]))
    suggestions = [tag for _, _, tag in scored[:MAX_SUGGESTIONS]]

    # 用熱門標籤補足
    for tag, _ in tag_usage:
        if len(suggestions) >= MIN_SUGGESTIONS:
            break
        if tag in suggestions or tag.lower() in selected_tags:
            continue
        suggestions.append(tag)

    return suggestions[:MAX_SUGGESTIONS]
