"""
Background learning queue for CogSage.
Holds deferred word/topic lookups and resolves them into learned knowledge.
"""

import heapq
import asyncio
import logging
import itertools
from typing import Dict, List, Optional

from . import config
from .models import (
    KnowledgeEntry, LearningQueueItem, QUEUE_WORD,
    KIND_VOCABULARY, KIND_FACT, SOURCE_LEARNED, normalize_key,
)

logger = logging.getLogger(__name__)

QUEUE_NAMESPACE = "learning_queue"

_DOMAIN_BONUS = {
    "science": 2,
    "mathematics": 2,
    "coding": 3,
}


def calculate_priority(target: str, domain: Optional[str] = None) -> int:
    """Base 1, bonus for specific domains and long targets, capped at MAX_PRIORITY"""
    priority = 1 + _DOMAIN_BONUS.get(domain or "", 0)
    if len(target) > 10:
        priority += 1
    return min(priority, config.MAX_PRIORITY)


def _entry_kind(queue_kind: str) -> str:
    return KIND_VOCABULARY if queue_kind == QUEUE_WORD else KIND_FACT


class LearningQueue:
    """
    Priority backlog of lookups, drained one item per tick.

    Highest priority first, FIFO among equal priorities. Failed lookups are
    dropped; the pending backlog is saved after every change so it survives
    a restart.
    """

    def __init__(self, store, lookup, storage=None):
        self.store = store
        self.lookup = lookup
        self.storage = storage if storage is not None else store.storage
        self._heap: List = []
        self._queued = set()
        self._counter = itertools.count()
        self._task: Optional[asyncio.Task] = None
        self.stats = {
            "enqueued": 0,
            "resolved": 0,
            "failed": 0,
            "skipped": 0,
        }

    # ── Backlog ───────────────────────────────────────────────────────────────

    def load(self):
        """Restore the pending backlog saved by a previous session"""
        try:
            records = self.storage.load(QUEUE_NAMESPACE)
        except Exception as e:
            logger.error(f"Failed to load learning queue: {e}")
            return

        restored = 0
        for record in records:
            try:
                item = LearningQueueItem.from_dict(record)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed queue record: {e}")
                continue
            if self._push(item):
                restored += 1
        if restored:
            logger.info(f"Restored {restored} pending lookups")

    def enqueue(self, kind: str, target: str, domain: Optional[str] = None) -> Optional[LearningQueueItem]:
        """
        Queue a lookup unless the target is already known or already queued.
        Returns the new item, or None when skipped.
        """
        key = normalize_key(target)
        if not key:
            return None

        if self.store.contains(_entry_kind(kind), key) or (kind, key) in self._queued:
            self.stats["skipped"] += 1
            logger.debug(f"Skipping {kind} {key!r}: already known or queued")
            return None

        item = LearningQueueItem(kind, key, priority=calculate_priority(key, domain), domain=domain)
        self._push(item)
        self.stats["enqueued"] += 1
        logger.info(f"Queued {kind} {key!r} for learning (priority {item.priority})")
        self._persist()
        return item

    def _push(self, item: LearningQueueItem) -> bool:
        if (item.kind, item.target) in self._queued:
            return False
        heapq.heappush(self._heap, (-item.priority, next(self._counter), item))
        self._queued.add((item.kind, item.target))
        return True

    def _pop(self) -> Optional[LearningQueueItem]:
        if not self._heap:
            return None
        _, _, item = heapq.heappop(self._heap)
        self._queued.discard((item.kind, item.target))
        return item

    def pending(self) -> List[LearningQueueItem]:
        """Pending items in drain order"""
        return [item for _, _, item in sorted(self._heap, key=lambda e: e[:2])]

    def __len__(self) -> int:
        return len(self._heap)

    # ── Draining ──────────────────────────────────────────────────────────────

    async def drain_tick(self) -> Optional[KnowledgeEntry]:
        """Resolve the highest-priority item; returns the learned entry, if any"""
        item = self._pop()
        if item is None:
            return None
        self._persist()

        kind = _entry_kind(item.kind)
        if self.store.contains(kind, item.target):
            self.stats["skipped"] += 1
            logger.debug(f"{item.target!r} was learned while queued")
            return None

        if item.kind == QUEUE_WORD:
            record = await self.lookup.lookup_word(item.target)
        else:
            record = await self.lookup.lookup_topic(item.target)

        if record is None:
            self.stats["failed"] += 1
            logger.info(f"Could not learn {item.kind} {item.target!r}; dropped")
            return None

        entry = self._to_entry(item, record)
        self.store.upsert(entry)
        self.stats["resolved"] += 1
        logger.info(f"Learned {item.kind} {item.target!r} in background")
        return entry

    @staticmethod
    def _to_entry(item: LearningQueueItem, record: Dict) -> KnowledgeEntry:
        if item.kind == QUEUE_WORD:
            value = {"word": item.target}
            value.update(record)
            return KnowledgeEntry(KIND_VOCABULARY, item.target, value,
                                  source=SOURCE_LEARNED,
                                  confidence=config.LEARNED_WORD_CONFIDENCE)

        value = dict(record)
        value["domain"] = item.domain or "general_knowledge"
        return KnowledgeEntry(KIND_FACT, item.target, value,
                              source=SOURCE_LEARNED,
                              confidence=config.LEARNED_FACT_CONFIDENCE)

    async def run(self, interval: float = None):
        """Drain one item per interval until cancelled"""
        interval = interval if interval is not None else config.LEARNING_INTERVAL
        logger.info(f"Background learning started (every {interval}s)")
        try:
            while True:
                await asyncio.sleep(interval)
                if not self._heap:
                    continue
                try:
                    await self.drain_tick()
                except Exception as e:
                    logger.error(f"Learning tick failed: {e}")
        except asyncio.CancelledError:
            logger.info("Background learning stopped")
            raise

    def start(self, interval: float = None) -> asyncio.Task:
        """Start the drain loop on the running event loop"""
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self.run(interval))
        return self._task

    async def stop(self):
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def clear(self):
        self._heap = []
        self._queued = set()
        self._persist()

    # ── Stats / persistence ──────────────────────────────────────────────────

    def get_stats(self) -> Dict:
        """Get learning queue statistics"""
        stats = dict(self.stats)
        stats["pending"] = len(self._heap)
        stats["running"] = self.running
        return stats

    def _persist(self):
        try:
            self.storage.save(QUEUE_NAMESPACE, [item.to_dict() for item in self.pending()])
        except Exception as e:
            logger.error(f"Failed to save learning queue: {e}")
