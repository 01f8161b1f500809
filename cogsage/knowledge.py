"""Knowledge store for seeded, learned and user-provided entries"""

import re
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from .models import (
    KnowledgeEntry, ENTRY_KINDS, SOURCE_SEED, SOURCES, normalize_key,
)
from .storage import Storage, MemoryStorage

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"[a-z0-9]+")

_STOP_WORDS = frozenset({
    'a', 'an', 'the', 'is', 'are', 'was', 'were', 'be', 'of', 'to', 'in', 'on',
    'and', 'or', 'for', 'with', 'by', 'at', 'as', 'it', 'its', 'this', 'that',
    'what', 'who', 'whom', 'which', 'when', 'where', 'why', 'how', 'do', 'does',
    'did', 'me', 'about', 'tell', 'please', 'can', 'you', 'i', 'my', 'your',
    's', 'am', 'explain', 'know',
})


def tokenize(text: str) -> List[str]:
    """Lowercase alphanumeric tokens with stop words removed, order kept"""
    seen = set()
    tokens = []
    for token in _TOKEN_RE.findall(str(text).lower()):
        if token in _STOP_WORDS or token in seen:
            continue
        seen.add(token)
        tokens.append(token)
    return tokens


def overlap_score(query_tokens: Iterable[str], key_tokens: Iterable[str],
                  text_tokens: Iterable[str] = ()) -> float:
    """
    Token-overlap relevance.

    Shared tokens are query tokens found anywhere in the candidate
    (key + text); the ratio is taken over max(|query|, |key|).
    """
    query = set(query_tokens)
    key = set(key_tokens)
    if not query:
        return 0.0
    shared = query & (key | set(text_tokens))
    return len(shared) / max(len(query), len(key), 1)


class KnowledgeStore:
    """
    Keyed collections of typed entries.
    At most one entry lives per (kind, key); writes are upserts.
    Non-seed entries are persisted per kind through the storage collaborator.
    """

    def __init__(self, storage: Storage = None):
        self.storage = storage if storage is not None else MemoryStorage()
        self._entries: Dict[str, Dict[str, KnowledgeEntry]] = {kind: {} for kind in ENTRY_KINDS}

    # ── Loading ───────────────────────────────────────────────────────────────

    def seed(self, entries: Iterable[KnowledgeEntry]):
        """Install seed entries without persisting them"""
        count = 0
        for entry in entries:
            self._entries[entry.kind][entry.key] = entry
            count += 1
        logger.info(f"Seeded knowledge store with {count} entries")

    def load(self):
        """Load stored entries for every kind; stored entries override seeds"""
        for kind in ENTRY_KINDS:
            try:
                records = self.storage.load(kind)
            except Exception as e:
                logger.error(f"Failed to load {kind} entries: {e}")
                continue

            loaded = 0
            for record in records:
                try:
                    entry = KnowledgeEntry.from_dict(record)
                except (KeyError, TypeError, ValueError) as e:
                    logger.warning(f"Skipping malformed {kind} record: {e}")
                    continue
                if entry.kind != kind:
                    logger.warning(f"Skipping {entry.kind} record found in {kind} namespace")
                    continue
                self._entries[kind][entry.key] = entry
                loaded += 1
            if loaded:
                logger.info(f"Loaded {loaded} {kind} entries")

    # ── CRUD ──────────────────────────────────────────────────────────────────

    def get(self, kind: str, key: str) -> Optional[KnowledgeEntry]:
        return self._entries[kind].get(normalize_key(key))

    def contains(self, kind: str, key: str) -> bool:
        return normalize_key(key) in self._entries[kind]

    def upsert(self, entry: KnowledgeEntry) -> KnowledgeEntry:
        """Insert or replace the entry for (kind, key)"""
        previous = self._entries[entry.kind].get(entry.key)
        self._entries[entry.kind][entry.key] = entry
        if previous is None:
            logger.info(f"Added {entry.kind} entry: {entry.key[:50]}")
        else:
            logger.debug(f"Replaced {entry.kind} entry: {entry.key[:50]} ({previous.source} -> {entry.source})")
        self._persist(entry.kind)
        return entry

    def remove(self, kind: str, key: str) -> bool:
        removed = self._entries[kind].pop(normalize_key(key), None)
        if removed is None:
            return False
        logger.info(f"Removed {kind} entry: {removed.key}")
        self._persist(kind)
        return True

    def clear(self):
        """Clear all entries of every kind (use with caution!)"""
        for kind in ENTRY_KINDS:
            self._entries[kind] = {}
            self._persist(kind)
        logger.info("Knowledge store cleared")

    def entries(self, kind: str) -> List[KnowledgeEntry]:
        return list(self._entries[kind].values())

    def count(self, kind: str = None) -> int:
        if kind is not None:
            return len(self._entries[kind])
        return sum(len(bucket) for bucket in self._entries.values())

    # ── Search ────────────────────────────────────────────────────────────────

    def search(self, kind: str, query_tokens: Iterable[str],
               limit: int = None) -> List[Tuple[KnowledgeEntry, float]]:
        """
        Rank entries of one kind by token overlap.
        Ties go to higher confidence, then to the more recent entry.
        Entries sharing no token with the query are left out.
        """
        query = [t for t in query_tokens if t]
        if not query:
            return []

        scored = []
        for entry in self._entries[kind].values():
            score = overlap_score(query, tokenize(entry.key), tokenize(entry.text()))
            if score > 0:
                scored.append((entry, score))

        scored.sort(key=lambda pair: (-pair[1], -pair[0].confidence, -pair[0].timestamp))
        if limit is not None:
            scored = scored[:limit]
        return scored

    def search_text(self, kind: str, query: str, limit: int = None) -> List[Tuple[KnowledgeEntry, float]]:
        return self.search(kind, tokenize(query), limit=limit)

    # ── Statistics ────────────────────────────────────────────────────────────

    def get_statistics(self) -> Dict:
        """Get knowledge store statistics"""
        all_entries = [e for bucket in self._entries.values() for e in bucket.values()]
        by_source = {source: 0 for source in SOURCES}
        for entry in all_entries:
            by_source[entry.source] += 1

        return {
            "total_entries": len(all_entries),
            "by_kind": {kind: len(bucket) for kind, bucket in self._entries.items()},
            "by_source": by_source,
            "avg_confidence": (
                sum(e.confidence for e in all_entries) / len(all_entries) if all_entries else 0
            ),
        }

    # ── Persistence ───────────────────────────────────────────────────────────

    def _persist(self, kind: str):
        """Save non-seed entries of one kind; failures are logged, never raised"""
        records = [e.to_dict() for e in self._entries[kind].values() if e.source != SOURCE_SEED]
        try:
            self.storage.save(kind, records)
            logger.debug(f"Saved {len(records)} {kind} entries")
        except Exception as e:
            logger.error(f"Failed to save {kind} entries: {e}")
