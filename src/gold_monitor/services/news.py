"""Gold market news with caching."""

import logging
import math
from dataclasses import dataclass

from pydantic import ValidationError

from gold_monitor.adapters.news_client import NewsClient
from gold_monitor.domain.errors import UpstreamError
from gold_monitor.domain.news import NewsSearchResult
from gold_monitor.services.cache import Cache

NEWS_CACHE_KEY = "gold_news"
NEWS_QUERY = "gold price market"

_logger = logging.getLogger(__name__)


@dataclass
class NewsService:
    """Serves recent gold news articles from cache or the news API."""

    client: NewsClient | None
    cache: Cache
    ttl_seconds: int = 3600
    limit: int = 5

    async def get_news(self) -> dict[str, object]:
        """Return the news envelope, fetching on a cache miss."""
        cached = self.cache.get(NEWS_CACHE_KEY)
        if isinstance(cached, list):
            age = self.cache.age(NEWS_CACHE_KEY)
            remaining = self.cache.time_until_expiry(NEWS_CACHE_KEY)
            return {
                "success": True,
                "articles": cached,
                "cached": True,
                "cacheAge": math.floor(age.total_seconds()) if age else 0,
                "expiresIn": math.floor(remaining.total_seconds()) if remaining else 0,
            }

        if self.client is None:
            raise UpstreamError("API key not configured")
        payload = await self.client.search(NEWS_QUERY, limit=self.limit)
        try:
            result = NewsSearchResult.model_validate(payload)
        except ValidationError as exc:
            raise UpstreamError("GNews API returned malformed articles") from exc
        articles = [article.to_payload() for article in result.articles]
        self.cache.set(NEWS_CACHE_KEY, articles, ttl_seconds=self.ttl_seconds)
        _logger.info("Fetched %s news articles", len(articles))
        return {"success": True, "articles": articles, "cached": False}
