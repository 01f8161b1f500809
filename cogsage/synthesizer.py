"""Confidence-weighted synthesis of pathway results into one response"""

import logging
from typing import Dict, Iterable, Optional

from . import config
from .models import PathwayResult, FinalResponse, CONVERSATIONAL, PATHWAY_PRIORITY
from .responses import fallback_reply

logger = logging.getLogger(__name__)

_RANK = {pathway: index for index, pathway in enumerate(PATHWAY_PRIORITY)}


class Synthesizer:
    """
    Picks the winning candidate by confidence × activation.
    Ties go to the pathway listed first in PATHWAY_PRIORITY.
    """

    def synthesize(self, results: Iterable[Optional[PathwayResult]],
                   activation: Dict[str, float]) -> FinalResponse:
        candidates = [r for r in results if r is not None]

        if not candidates:
            logger.debug("No pathway produced a result, using fallback")
            return FinalResponse(
                fallback_reply(),
                config.FAILURE_CONFIDENCE,
                CONVERSATIONAL,
                {"answer": fallback_reply()},
                ["No pathway produced a result", "selected: fallback"],
            )

        if len(candidates) == 1:
            only = candidates[0]
            return FinalResponse(
                only.answer,
                only.confidence,
                only.pathway,
                only.payload,
                list(only.reasoning),
                considered=[only.pathway],
            )

        scored = [
            (result.confidence * activation.get(result.pathway, 0.0), result)
            for result in candidates
        ]
        scored.sort(key=lambda pair: (-pair[0], _RANK.get(pair[1].pathway, len(_RANK))))
        score, winner = scored[0]

        considered = [result.pathway for _, result in scored]
        discarded = [pathway for pathway in considered if pathway != winner.pathway]

        reasoning = []
        for _, result in scored:
            reasoning.extend(f"[{result.pathway}] {line}" for line in result.reasoning)
        reasoning.append("considered: " + ", ".join(
            f"{result.pathway} ({s:.2f})" for s, result in scored
        ))
        reasoning.append("discarded: " + (", ".join(discarded) or "none"))
        reasoning.append(f"selected: {winner.pathway} ({score:.2f})")

        logger.debug(f"Selected {winner.pathway} with score {score:.2f} over {discarded}")
        return FinalResponse(
            winner.answer,
            winner.confidence,
            winner.pathway,
            winner.payload,
            reasoning,
            considered=considered,
            discarded=discarded,
        )
