"""Configuration module for CogSage"""

import os
from pathlib import Path

# Base directories
BASE_DIR = Path(os.environ.get("COGSAGE_HOME", Path.home() / ".cogsage"))
DATA_DIR = BASE_DIR / "data"
KNOWLEDGE_DIR = DATA_DIR / "knowledge"

# Web lookup settings
USER_AGENT = "CogSage/0.1 (https://github.com/cogsage/cogsage)"
REQUEST_TIMEOUT = 5  # seconds, per HTTP request
MAX_RETRIES = 1
RATE_LIMIT_DELAY = 0.5  # seconds between requests to the same host
LOOKUP_TIMEOUT = 2.5  # seconds the pipeline waits for any single lookup

DICTIONARY_API_URL = "https://api.dictionaryapi.dev/api/v2/entries/en"
WIKIPEDIA_SUMMARY_URL = "https://en.wikipedia.org/api/rest_v1/page/summary"
WIKIPEDIA_SEARCH_URL = "https://en.wikipedia.org/w/api.php"
MAX_SUMMARY_LENGTH = 1200  # characters kept from a topic summary

# Search settings (fallback for topic lookups)
USE_WEB_SEARCH_FALLBACK = True
MAX_SEARCH_RESULTS = 3

# Classifier activations
STRONG_ACTIVATION = 0.9
MEDIUM_ACTIVATION = 0.7
WEAK_ACTIVATION = 0.5
CONVERSATIONAL_BASELINE = 0.5

# Pathway settings
MIN_ACTIVATION = 0.1  # processors below this activation do not run
FACT_RELEVANCE_THRESHOLD = 0.5
FAILURE_CONFIDENCE = 0.1
UNKNOWN_CONFIDENCE = 0.3
ACKNOWLEDGMENT_CONFIDENCE = 0.25  # below any lookup miss, so a miss is reported
LEARNED_WORD_CONFIDENCE = 0.8
LEARNED_FACT_CONFIDENCE = 0.75
CALCULATION_CONFIDENCE = 0.95
MAX_VOCABULARY_WORDS = 3

# Learning queue settings
LEARNING_INTERVAL = 5.0  # seconds between background drain ticks
MAX_PRIORITY = 5

# Conversation settings
MAX_CONVERSATION_HISTORY = 50  # turns kept in the log

# CLI settings
CLI_PROMPT = "You"
CLI_ASSISTANT = "CogSage"
CLI_WIDTH = 80
