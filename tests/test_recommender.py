from app.utils.recommender import _get_string_similarity, score_tag, suggest_tags

USAGE = [("daily", 9), ("art", 5), ("coffee", 4), ("travel", 3), ("music", 2)]


def test_short_content_returns_empty():
    assert suggest_tags("too short", USAGE) == []


def test_exact_match_ranked_first():
    res = suggest_tags("Drinking coffee by the window this morning", USAGE)
    assert res[0] == "coffee"


def test_fuzzy_match_scores():
    # 'traval' 與 'travel' 相似度 > 0.7
    words = {"my", "traval", "diary"}
    assert score_tag("travel", "my traval diary", words) > 0.7
    assert score_tag("music", "my traval diary", words) == 0.0


def test_similarity_bounds():
    assert _get_string_similarity("art", "art") == 1.0
    assert _get_string_similarity("", "art") == 0.0


def test_tops_up_with_trending_and_caps_at_four():
    res = suggest_tags("nothing related is mentioned in this text at all", USAGE)
    # 沒有任何比對：用熱門標籤補到 3 個
    assert res == ["daily", "art", "coffee"]

    many = suggest_tags("daily art coffee travel music all in one post", USAGE)
    assert len(many) == 4


def test_usage_breaks_ties():
    res = suggest_tags("art and music for the whole afternoon", USAGE)
    # 兩者都是完全符合，使用次數高的 art 在前
    assert res.index("art") < res.index("music")


def test_selected_tags_never_returned():
    res = suggest_tags("coffee and art at the daily market", USAGE, selected=["#coffee", "Art"])
    assert "coffee" not in res
    assert "art" not in res
    assert len(res) >= 3
