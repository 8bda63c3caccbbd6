"""Source adapters, one per kind of recipe URL."""

from .allrecipes import AllRecipesAdapter
from .base import SourceAdapter, is_http_url
from .instagram import InstagramAdapter
from .structured_data import StructuredDataAdapter
from .tiktok import TikTokAdapter
from .youtube import YouTubeAdapter

__all__ = [
    "AllRecipesAdapter",
    "InstagramAdapter",
    "SourceAdapter",
    "StructuredDataAdapter",
    "TikTokAdapter",
    "YouTubeAdapter",
    "is_http_url",
]
