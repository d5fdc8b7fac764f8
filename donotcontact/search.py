"""
Brave Search API client for finding organization websites and contact pages.

Strategy for contact pages:
1. Search "<name> contact us"
2. Take the first result whose URL or title looks like a contact page
3. Fall back to the top result

The first result's origin is reported as the organization's website.
"""

import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

import requests

from donotcontact import config
from donotcontact.errors import CollaboratorError, NotFound
from donotcontact.ranker import assess_confidence
from donotcontact.throttle import RateLimiter

logger = logging.getLogger(__name__)


@dataclass
class WebsiteMatch:
    url: str
    title: str
    confidence: str


@dataclass
class ContactPage:
    website_origin: Optional[str]
    contact_url: str
    contact_title: str = ""


def origin_of(url: str) -> Optional[str]:
    """scheme://host of a URL, or None if it has no host."""
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        return None
    return f"{parsed.scheme}://{parsed.netloc}"


def looks_like_contact_page(url: str, title: str) -> bool:
    url_lower = (url or "").lower()
    title_lower = (title or "").lower()
    return any(kw in url_lower or kw in title_lower for kw in config.CONTACT_KEYWORDS)


class BraveSearch:
    """
    Thin client over the Brave web search endpoint.

    Every request waits on the shared RateLimiter first; pass the same
    limiter to every client that uses the same API key.
    """

    def __init__(
        self,
        api_key: str,
        session: Optional[requests.Session] = None,
        limiter: Optional[RateLimiter] = None,
        base_url: str = config.BRAVE_SEARCH_URL,
        timeout: int = config.REQUEST_TIMEOUT,
    ):
        self.api_key = api_key
        self.session = session or requests.Session()
        self.limiter = limiter or RateLimiter(config.SEARCH_MIN_INTERVAL_SECONDS)
        self.base_url = base_url
        self.timeout = timeout

    def _search(self, query: str, count: int) -> list[dict]:
        """Run one query and return the web results. Raises on any failure."""
        self.limiter.wait()
        logger.debug("Brave query: %s", query)

        try:
            resp = self.session.get(
                self.base_url,
                params={"q": query, "count": str(count)},
                headers={
                    "Accept": "application/json",
                    "X-Subscription-Token": self.api_key,
                },
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise CollaboratorError(str(exc)) from exc

        if not resp.ok:
            raise CollaboratorError(f"API error {resp.status_code}: {resp.text}")

        try:
            data = resp.json()
        except ValueError as exc:
            raise CollaboratorError(f"Invalid JSON from search API: {exc}") from exc

        results = [
            r for r in (data.get("web") or {}).get("results", [])
            if r.get("url")
        ]
        if not results:
            raise NotFound("No results found")
        return results

    def find_website(self, org_name: str) -> WebsiteMatch:
        """Top result for the organization's official website, with a confidence tier."""
        results = self._search(f"{org_name} nonprofit official website", config.WEBSITE_RESULT_COUNT)

        top = results[0]
        title = top.get("title", "")
        confidence = assess_confidence(org_name, title, top["url"])
        logger.info("Website for '%s': %s (%s)", org_name, top["url"], confidence)
        return WebsiteMatch(url=top["url"], title=title, confidence=confidence)

    def find_contact_page(self, org_name: str) -> ContactPage:
        """Best guess at the organization's contact page."""
        results = self._search(f"{org_name} contact us", config.CONTACT_RESULT_COUNT)

        website_origin = origin_of(results[0]["url"])
        best = next(
            (r for r in results if looks_like_contact_page(r["url"], r.get("title", ""))),
            results[0],
        )

        logger.info("Contact page for '%s': %s", org_name, best["url"])
        return ContactPage(
            website_origin=website_origin,
            contact_url=best["url"],
            contact_title=best.get("title", ""),
        )

    def close(self) -> None:
        self.session.close()
