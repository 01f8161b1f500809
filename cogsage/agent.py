"""Main agent orchestrator for CogSage"""

import asyncio
import logging
from typing import Dict

from . import config
from .classifier import InputClassifier
from .clock import SystemClock
from .conversation import ConversationLog, USER, ASSISTANT
from .knowledge import KnowledgeStore
from .learning import LearningQueue
from .models import FinalResponse, KIND_PERSONAL, PATHWAY_PRIORITY
from .pathways import build_processors
from .seed_data import get_seed_entries
from .storage import Storage, MemoryStorage, JsonFileStorage
from .synthesizer import Synthesizer

logger = logging.getLogger(__name__)


class PipelineState:
    """Everything the pipeline reads or writes, passed by reference"""

    def __init__(self, store: KnowledgeStore, queue: LearningQueue,
                 conversation: ConversationLog, clock, lookup):
        self.store = store
        self.queue = queue
        self.conversation = conversation
        self.clock = clock
        self.lookup = lookup

    @classmethod
    def create(cls, storage: Storage = None, lookup=None, clock=None,
               offline: bool = False, seed: bool = True) -> "PipelineState":
        """
        Build a state with seeded knowledge and restored backlog.
        Stored entries are loaded after the seeds so they take precedence.
        """
        if storage is None:
            storage = JsonFileStorage()
        if lookup is None:
            from .lookup import ExternalLookup
            lookup = ExternalLookup(enabled=not offline)

        store = KnowledgeStore(storage)
        if seed:
            store.seed(get_seed_entries())
        store.load()

        queue = LearningQueue(store, lookup, storage)
        queue.load()

        conversation = ConversationLog(storage)
        conversation.load()

        return cls(store, queue, conversation, clock or SystemClock(), lookup)

    @classmethod
    def in_memory(cls, lookup, clock=None, seed: bool = True) -> "PipelineState":
        return cls.create(storage=MemoryStorage(), lookup=lookup, clock=clock, seed=seed)


class CognitiveAgent:
    """
    Runs one message at a time through:
      1. Classification into pathway activations
      2. Every activated pathway, in priority order
      3. Confidence-weighted synthesis
    Messages never overlap; a second caller waits for the first to finish.
    """

    def __init__(self, state: PipelineState = None, classifier: InputClassifier = None,
                 synthesizer: Synthesizer = None):
        logger.info("Initializing CogSage agent...")
        self.state = state or PipelineState.create()
        self.classifier = classifier or InputClassifier()
        self.synthesizer = synthesizer or Synthesizer()
        self.processors = build_processors(
            self.state.lookup, self.state.queue, self.state.clock, self.state.conversation
        )
        self.last_activation: Dict[str, float] = {}
        self._lock = asyncio.Lock()
        self._reset_stats()
        logger.info("CogSage agent initialized")

    def _reset_stats(self):
        self.stats = {
            "messages": 0,
            "pathway_wins": {},
        }

    # ── Entry point ───────────────────────────────────────────────────────────

    async def handle_message(self, text: str) -> FinalResponse:
        async with self._lock:
            return await self._handle(text)

    async def _handle(self, text: str) -> FinalResponse:
        message = (text or "").strip()
        store = self.state.store
        self.state.conversation.append(USER, message)

        activation = self.classifier.classify(message)
        self.last_activation = activation

        results = []
        for pathway in PATHWAY_PRIORITY:
            level = activation.get(pathway, 0.0)
            if level < config.MIN_ACTIVATION:
                continue
            result = await self.processors[pathway].process(message, level, store)
            if result is not None:
                logger.debug(f"{pathway}: confidence {result.confidence:.2f} at activation {level:.2f}")
            results.append(result)

        response = self.synthesizer.synthesize(results, activation)
        self.state.conversation.append(ASSISTANT, response.content, confidence=response.confidence)

        self.stats["messages"] += 1
        wins = self.stats["pathway_wins"]
        wins[response.pathway] = wins.get(response.pathway, 0) + 1
        logger.info(f"Answered via {response.pathway} (confidence {response.confidence:.2f})")
        return response

    def ask(self, text: str) -> str:
        """Synchronous convenience wrapper; must not be called from a running loop"""
        return asyncio.run(self.handle_message(text)).content

    # ── Background learning ──────────────────────────────────────────────────

    def start_background_learning(self, interval: float = None) -> asyncio.Task:
        return self.state.queue.start(interval)

    async def stop_background_learning(self):
        await self.state.queue.stop()

    # ── Special commands ─────────────────────────────────────────────────────

    def get_stats(self) -> Dict:
        return {
            "messages": self.stats["messages"],
            "pathway_wins": dict(self.stats["pathway_wins"]),
            "knowledge": self.state.store.get_statistics(),
            "learning": self.state.queue.get_stats(),
            "conversation": self.state.conversation.get_summary(),
        }

    def clear_memory(self):
        """Delete every stored entry, the learning backlog and the conversation"""
        self.state.store.clear()
        self.state.queue.clear()
        self.state.conversation.clear()
        self._reset_stats()
        logger.info("Memory cleared")

    def get_greeting(self) -> str:
        entry = self.state.store.get(KIND_PERSONAL, "name")
        if entry is not None:
            return f"Welcome back, {entry.value.get('value')}! What would you like to know?"
        return "Hello! I'm CogSage. Ask me a question, or type 'help'."
