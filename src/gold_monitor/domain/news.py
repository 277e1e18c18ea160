"""Models for news search results."""

from pydantic import BaseModel, ConfigDict, Field


class NewsSource(BaseModel):
    """Publisher of a news article."""

    name: str | None = None


class NewsArticle(BaseModel):
    """Single news article from the search API."""

    model_config = ConfigDict(populate_by_name=True)

    title: str | None = None
    url: str | None = None
    source: NewsSource | None = None
    published_at: str | None = Field(default=None, alias="publishedAt")
    description: str | None = None

    def to_payload(self) -> dict[str, object]:
        """Flatten the article for the dashboard news list."""
        return {
            "title": self.title,
            "url": self.url,
            "source": self.source.name if self.source else None,
            "publishedAt": self.published_at,
            "description": self.description,
        }


class NewsSearchResult(BaseModel):
    """Structured output of a news search."""

    articles: list[NewsArticle] = Field(default_factory=list)
