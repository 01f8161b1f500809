"""
External lookup services: dictionary definitions and topic summaries.

The HTTP clients are blocking (requests). ExternalLookup exposes them as
coroutines that run in a worker thread under a caller-imposed timeout, so a
slow service can never stall the message pipeline.
"""

import re
import time
import asyncio
import logging
from typing import Callable, Dict, List, Optional
from urllib.parse import quote, urlparse

import requests
from bs4 import BeautifulSoup
from requests.exceptions import RequestException, Timeout, ConnectionError

from . import config

logger = logging.getLogger(__name__)


class LookupFailed(Exception):
    """A lookup could not produce a usable record"""


def clean_html(fragment: str) -> str:
    """Strip markup and collapse whitespace in an HTML fragment"""
    if not fragment:
        return ""
    text = BeautifulSoup(fragment, "lxml").get_text(" ", strip=True)
    text = re.sub(r"\s+([.,;:!?)])", r"\1", text)
    return re.sub(r"\s+", " ", text).strip()


def _truncate_summary(text: str, limit: int = None) -> str:
    """Cut a summary at the last sentence boundary before the limit"""
    limit = limit or config.MAX_SUMMARY_LENGTH
    if len(text) <= limit:
        return text
    cut = text[:limit]
    boundary = cut.rfind(". ")
    if boundary > limit // 2:
        return cut[:boundary + 1]
    return cut.rstrip() + "..."


class HttpClient:
    """
    Small JSON-over-HTTP client with:
    - per-host rate limiting
    - retry with backoff on timeouts
    - uniform LookupFailed errors
    """

    def __init__(self, session: requests.Session = None):
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": config.USER_AGENT})
        self.last_request_time = {}

    def _rate_limit(self, domain: str):
        """Implement rate limiting per domain"""
        current_time = time.time()
        if domain in self.last_request_time:
            elapsed = current_time - self.last_request_time[domain]
            if elapsed < config.RATE_LIMIT_DELAY:
                time.sleep(config.RATE_LIMIT_DELAY - elapsed)
        self.last_request_time[domain] = time.time()

    def get_json(self, url: str, params: Dict = None, retries: int = 0):
        """GET a URL and decode its JSON body, raising LookupFailed on any failure"""
        try:
            self._rate_limit(urlparse(url).netloc)
            response = self.session.get(
                url,
                params=params,
                timeout=config.REQUEST_TIMEOUT,
                allow_redirects=True,
            )
        except Timeout:
            if retries < config.MAX_RETRIES:
                logger.info(f"Timeout, retrying... ({retries + 1}/{config.MAX_RETRIES})")
                time.sleep(0.25 * 2 ** retries)
                return self.get_json(url, params, retries + 1)
            raise LookupFailed(f"Timed out after {config.MAX_RETRIES} retries: {url}")
        except ConnectionError as e:
            raise LookupFailed(f"Connection error for {url}: {e}") from e
        except RequestException as e:
            raise LookupFailed(f"Request failed for {url}: {e}") from e

        if response.status_code == 404:
            raise LookupFailed(f"Not found: {url}")
        if response.status_code >= 400:
            raise LookupFailed(f"HTTP {response.status_code} for {url}")

        try:
            return response.json()
        except ValueError as e:
            raise LookupFailed(f"Malformed JSON from {url}") from e


def parse_dictionary_entry(word: str, data) -> Optional[Dict]:
    """Normalize a Free Dictionary API response into a vocabulary record"""
    if not isinstance(data, list) or not data or not isinstance(data[0], dict):
        return None

    entry = data[0]
    meanings = entry.get("meanings") or []
    if not meanings:
        return None

    first_meaning = meanings[0]
    definitions = first_meaning.get("definitions") or []
    if not definitions or not definitions[0].get("definition"):
        return None

    examples: List[str] = [d["example"] for d in definitions if d.get("example")][:3]
    phonetic = entry.get("phonetic") or next(
        (p.get("text") for p in entry.get("phonetics", []) if p.get("text")), ""
    )

    return {
        "word": word,
        "definition": definitions[0]["definition"],
        "part_of_speech": first_meaning.get("partOfSpeech", "unknown"),
        "examples": examples,
        "phonetic": phonetic,
        "synonyms": list(definitions[0].get("synonyms") or first_meaning.get("synonyms") or [])[:5],
    }


class DictionaryClient:
    """Word definitions from the Free Dictionary API"""

    def __init__(self, http: HttpClient = None):
        self.http = http or HttpClient()

    def lookup(self, word: str) -> Optional[Dict]:
        clean_word = word.lower().strip()
        url = f"{config.DICTIONARY_API_URL}/{quote(clean_word)}"
        data = self.http.get_json(url)
        record = parse_dictionary_entry(clean_word, data)
        if record is None:
            raise LookupFailed(f"Dictionary returned no usable definition for {clean_word!r}")
        return record


class WikipediaClient:
    """Topic summaries from the Wikipedia REST API, with a search fallback"""

    def __init__(self, http: HttpClient = None):
        self.http = http or HttpClient()

    def summary(self, title: str) -> Optional[Dict]:
        url = f"{config.WIKIPEDIA_SUMMARY_URL}/{quote(title.strip().replace(' ', '_'))}"
        try:
            data = self.http.get_json(url)
        except LookupFailed as e:
            logger.debug(f"Summary lookup failed for {title!r}: {e}")
            return None

        if not isinstance(data, dict) or data.get("type") == "disambiguation":
            return None

        text = data.get("extract") or clean_html(data.get("extract_html", ""))
        if not text:
            return None

        page_url = (data.get("content_urls") or {}).get("desktop", {}).get("page", "")
        return {
            "title": data.get("title") or title,
            "summary": _truncate_summary(text),
            "url": page_url,
        }

    def search(self, query: str) -> Optional[Dict]:
        """Best search hit as {'title', 'snippet'}"""
        params = {
            "action": "query",
            "format": "json",
            "list": "search",
            "srsearch": query,
            "srlimit": 1,
        }
        try:
            data = self.http.get_json(config.WIKIPEDIA_SEARCH_URL, params=params)
        except LookupFailed as e:
            logger.debug(f"Search failed for {query!r}: {e}")
            return None

        hits = ((data or {}).get("query") or {}).get("search") or []
        if not hits or not hits[0].get("title"):
            return None
        return {"title": hits[0]["title"], "snippet": clean_html(hits[0].get("snippet", ""))}

    def lookup(self, topic: str) -> Optional[Dict]:
        record = self.summary(topic)
        if record:
            return record

        hit = self.search(topic)
        if hit is None:
            return None

        logger.info(f"Direct lookup failed for {topic!r}, using search hit {hit['title']!r}")
        record = self.summary(hit["title"])
        if record:
            return record
        if hit["snippet"]:
            return {"title": hit["title"], "summary": hit["snippet"], "url": ""}
        return None


class ExternalLookup:
    """
    Async facade over the lookup services.

    Both methods return a normalized record or None. Network errors, HTTP
    errors, malformed payloads and timeouts are all reported as None.
    """

    _WORD_FIELDS = ("definition", "part_of_speech", "examples")
    _TOPIC_FIELDS = ("title", "summary", "url")

    def __init__(self, dictionary: DictionaryClient = None, wikipedia: WikipediaClient = None,
                 searcher=None, timeout: float = None, enabled: bool = True):
        http = HttpClient() if dictionary is None or wikipedia is None else None
        self.dictionary = dictionary or DictionaryClient(http)
        self.wikipedia = wikipedia or WikipediaClient(http)
        self.searcher = searcher
        if self.searcher is None and enabled and config.USE_WEB_SEARCH_FALLBACK:
            from .search import WebSearcher
            self.searcher = WebSearcher()
        self.timeout = timeout if timeout is not None else config.LOOKUP_TIMEOUT
        self.enabled = enabled

    async def lookup_word(self, word: str) -> Optional[Dict]:
        record = await self._bounded(self.dictionary.lookup, word, f"word {word!r}")
        return record if self._has_fields(record, self._WORD_FIELDS) else None

    async def lookup_topic(self, topic: str) -> Optional[Dict]:
        record = await self._bounded(self._topic_sync, topic, f"topic {topic!r}")
        return record if self._has_fields(record, self._TOPIC_FIELDS) else None

    def _topic_sync(self, topic: str) -> Optional[Dict]:
        record = self.wikipedia.lookup(topic)
        if record or self.searcher is None:
            return record
        return self.searcher.lookup(topic)

    async def _bounded(self, fn: Callable, arg: str, label: str):
        if not self.enabled:
            logger.debug(f"Lookups disabled, skipping {label}")
            return None
        try:
            return await asyncio.wait_for(asyncio.to_thread(fn, arg), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Lookup for {label} timed out after {self.timeout}s")
        except LookupFailed as e:
            logger.warning(f"Lookup for {label} failed: {e}")
        except Exception as e:
            logger.warning(f"Lookup for {label} raised {type(e).__name__}: {e}")
        return None

    @staticmethod
    def _has_fields(record, fields) -> bool:
        return isinstance(record, dict) and all(field in record for field in fields)
