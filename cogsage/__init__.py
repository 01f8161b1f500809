"""CogSage: conversational assistant with a cognitive message pipeline"""

__version__ = "0.1.0"
__author__ = "CogSage contributors"
__powered_by__ = "Free Dictionary API · Wikipedia · DuckDuckGo"

from .agent import CognitiveAgent, PipelineState
from .models import FinalResponse, KnowledgeEntry, PathwayResult

__all__ = [
    "CognitiveAgent",
    "PipelineState",
    "FinalResponse",
    "KnowledgeEntry",
    "PathwayResult",
]
