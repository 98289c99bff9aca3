# app/services/sentiment_service.py
# 貼文情緒分析 (OpenAI 相容的 chat model)，發文後以背景任務執行

import json
import logging
from typing import Optional, Tuple
from openai import AsyncOpenAI

from app.core.config import settings
from app.core.database import AsyncSessionLocal, use_file_storage
from app.repositories.base import repository_for
from app.repositories.file_storage import get_file_storage
from app.repositories.post_repo import PostRepository

logger = logging.getLogger(__name__)

# 分析失敗時的中性結果 (rating 3, confidence 0)
NEUTRAL_SENTIMENT = (3, 0)

SYSTEM_PROMPT = """你是情緒分析專家。請分析使用者貼文的情緒，給出 1 到 5 的評分以及 0 到 100 的信心分數。

評分：
1 = 非常負面
2 = 負面
3 = 中立
4 = 正面
5 = 非常正面

只回傳 JSON，格式為：{"rating": number, "confidence": number}"""


def _clamp(value, low: int, high: int) -> int:
    return max(low, min(high, round(float(value))))


class SentimentService:
    def __init__(self, db=None, client: Optional[AsyncOpenAI] = None):
        if client is None and settings.OPENAI_API_KEY:
            client = AsyncOpenAI(api_key=settings.OPENAI_API_KEY, base_url=settings.OPENAI_BASE_URL)
        self.client = client
        self.post_repo = repository_for(PostRepository, db) if db is not None else None

    @property
    def enabled(self) -> bool:
        # 沒有設定 API key 時停用
        return self.client is not None

    async def analyze(self, text: str) -> Tuple[int, int]:
        """
        回傳 (rating 1-5, confidence 0-100)；任何錯誤都回傳中性結果
        """
        try:
            completion = await self.client.chat.completions.create(
                model=settings.SENTIMENT_MODEL,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": text},
                ],
                response_format={"type": "json_object"},
                timeout=30.0,
            )
            raw = (completion.choices[0].message.content if completion.choices else "") or "{}"
            result = json.loads(raw)
            return (
                _clamp(result.get("rating", 3), 1, 5),
                _clamp(result.get("confidence", 50), 0, 100),
            )
        except Exception:
            logger.exception("情緒分析失敗，使用中性結果")
            return NEUTRAL_SENTIMENT

    async def analyze_post(self, post_id: str, content: str) -> Optional[Tuple[int, int]]:
        if not self.enabled or not content.strip():
            return None
        rating, confidence = await self.analyze(content)
        await self.post_repo.update_post_sentiment(post_id, rating, confidence)
        logger.info(f"貼文 {post_id} 情緒分析: rating={rating}, confidence={confidence}")
        return rating, confidence


async def run_post_sentiment_analysis(post_id: str, content: str) -> None:
    """
    BackgroundTasks 使用：請求結束後才執行，需要自己開 session
    """
    if not settings.OPENAI_API_KEY or not content.strip():
        return

    if use_file_storage():
        await SentimentService(get_file_storage()).analyze_post(post_id, content)
        return

    async with AsyncSessionLocal() as session:
        await SentimentService(session).analyze_post(post_id, content)
