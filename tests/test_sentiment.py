import json
from types import SimpleNamespace
from unittest.mock import AsyncMock

from app.repositories.base import repository_for
from app.repositories.post_repo import PostRepository
from app.schemas.post_schema import PostCreate
from app.services.sentiment_service import NEUTRAL_SENTIMENT, SentimentService, run_post_sentiment_analysis


def fake_client(content=None, error=None):
    """模擬 AsyncOpenAI：chat.completions.create 回傳固定內容或丟出例外"""
    completion = SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])
    create = AsyncMock(return_value=completion, side_effect=error)
    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


async def test_analyze_parses_json_reply():
    client = fake_client(json.dumps({"rating": 4, "confidence": 87}))
    assert await SentimentService(client=client).analyze("what a lovely day") == (4, 87)

    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["response_format"] == {"type": "json_object"}
    assert kwargs["messages"][-1] == {"role": "user", "content": "what a lovely day"}


async def test_analyze_clamps_out_of_range_values():
    client = fake_client(json.dumps({"rating": 9, "confidence": -5}))
    assert await SentimentService(client=client).analyze("!!!") == (5, 0)

    client = fake_client(json.dumps({"rating": 0.4, "confidence": 250}))
    assert await SentimentService(client=client).analyze("...") == (1, 100)


async def test_analyze_falls_back_to_neutral():
    assert await SentimentService(client=fake_client(error=RuntimeError("boom"))).analyze("x") == NEUTRAL_SENTIMENT
    assert await SentimentService(client=fake_client("not json")).analyze("x") == NEUTRAL_SENTIMENT


def test_disabled_without_api_key():
    # conftest 把 OPENAI_API_KEY 設成空字串
    assert SentimentService().enabled is False


async def test_analyze_post_stores_score(storage, make_user):
    alice = await make_user("alice")
    repo = repository_for(PostRepository, storage)
    post = await repo.create_post(PostCreate(content="so happy today"), alice.user_id)

    client = fake_client(json.dumps({"rating": 5, "confidence": 90}))
    assert await SentimentService(storage, client=client).analyze_post(post.post_id, post.content) == (5, 90)

    stored = await repo.get_post_by_id(post.post_id)
    assert stored.sentiment_score == 5
    assert stored.sentiment_confidence == 90
    assert stored.sentiment_analyzed_at is not None


async def test_analyze_post_skips_blank_content(storage):
    client = fake_client(json.dumps({"rating": 5, "confidence": 90}))
    assert await SentimentService(storage, client=client).analyze_post("any", "   ") is None
    client.chat.completions.create.assert_not_called()


async def test_background_task_is_noop_without_api_key():
    await run_post_sentiment_analysis("missing-post", "hello")
