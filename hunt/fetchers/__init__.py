"""
Fetcher layer for hunt.

Provides browser-based fetching of posting pages with:
- Logged-in profile reuse
- Auth-wall detection
- "Show more" expansion before extraction
"""

from hunt.fetchers.browser import BrowserConfig, BrowserFetcher, FetchResult

__all__ = ["BrowserConfig", "BrowserFetcher", "FetchResult"]
