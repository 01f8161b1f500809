"""Last-resort topic summaries from DuckDuckGo snippets (via ddgs)"""

import logging
from typing import Dict, List, Optional

from ddgs import DDGS

from . import config
from .knowledge import tokenize
from .lookup import LookupFailed, clean_html

logger = logging.getLogger(__name__)

# url fragment -> ranking bonus
_SOURCE_BONUS = {
    'wikipedia.org': 3,
    'britannica.com': 3,
    'nationalgeographic.com': 2,
    'nasa.gov': 2,
    'docs.python.org': 2,
    'developer.mozilla.org': 2,
    'stackoverflow.com': 1,
    'pinterest.': -3,
    'facebook.com': -3,
    'tiktok.com': -3,
    'youtube.com': -2,
}


def score_result(topic_tokens: List[str], result: Dict[str, str]) -> float:
    """Title overlap with the topic plus a bonus for reference sources"""
    url = result.get('url', '').lower()
    bonus = sum(value for fragment, value in _SOURCE_BONUS.items() if fragment in url)
    title = set(tokenize(result.get('title', '')))
    overlap = len(title.intersection(topic_tokens)) / len(topic_tokens) if topic_tokens else 0.0
    return 2 * overlap + bonus


class WebSearcher:
    """
    Turns the best-ranked search snippet into a topic record
    ({'title', 'summary', 'url'}), the same shape WikipediaClient.lookup returns.
    Only consulted after the encyclopedia has no page for the topic.
    """

    def __init__(self, client: Optional[DDGS] = None, max_results: int = None):
        self.client = client if client is not None else DDGS()
        self.max_results = max_results or config.MAX_SEARCH_RESULTS

    def results(self, topic: str) -> List[Dict[str, str]]:
        """Snippet results for a topic, best first"""
        try:
            raw = self.client.text(topic, max_results=self.max_results,
                                   safesearch='moderate', region='wt-wt')
        except Exception as e:
            raise LookupFailed(f"web search for {topic!r} failed: {e}") from e

        results = []
        for item in raw or []:
            snippet = clean_html(item.get('body', ''))
            if snippet:
                results.append({
                    'title': clean_html(item.get('title', '')),
                    'url': item.get('href', ''),
                    'snippet': snippet,
                })

        topic_tokens = tokenize(topic)
        results.sort(key=lambda r: score_result(topic_tokens, r), reverse=True)
        logger.debug(f"Web search: {len(results)} snippets for {topic!r}")
        return results

    def lookup(self, topic: str) -> Optional[Dict[str, str]]:
        results = self.results(topic)
        if not results:
            return None
        top = results[0]
        logger.info(f"Using web snippet from {top['url'] or 'unknown source'} for {topic!r}")
        return {'title': top['title'] or topic, 'summary': top['snippet'], 'url': top['url']}
