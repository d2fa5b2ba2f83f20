from __future__ import annotations

"""
Token Counting Engine.

Estimates how many LLM tokens the combined artifact occupies so a reviewer
knows whether it fits a model's context window. Uses tiktoken's local BPE
encoders; when an encoder cannot be loaded (offline first run, unknown
encoding) a character-density heuristic is used instead.
"""

import logging
import math
from abc import ABC, abstractmethod
from typing import Dict

import tiktoken

from depmap4ai.domain.constants import DEFAULT_TARGET_MODEL

logger = logging.getLogger(__name__)

CHARS_PER_TOKEN_AVG = 4

# -----------------------------------------------------------------------------
# STRATEGY INTERFACES
# -----------------------------------------------------------------------------

class TokenizerStrategy(ABC):
    """
    Abstract base class for token counting algorithms.
    """

    @abstractmethod
    def count(self, text: str, model_id: str) -> int:
        """
        Calculate the token count for a given text segment.

        Args:
            text: Input string to be tokenized.
            model_id: Model identifier for encoding selection.

        Returns:
            int: Total token count.
        """


class HeuristicStrategy(TokenizerStrategy):
    """Character density estimation (about four characters per token)."""

    def count(self, text: str, model_id: str) -> int:
        if not text:
            return 0
        return math.ceil(len(text) / CHARS_PER_TOKEN_AVG)


class TiktokenStrategy(TokenizerStrategy):
    """
    OpenAI-style BPE encoder backed by tiktoken.
    """

    def __init__(self) -> None:
        self._encodings: Dict[str, "tiktoken.Encoding"] = {}

    @staticmethod
    def encoding_name_for(model_id: str) -> str:
        """Pick 'cl100k_base' for legacy GPT models, 'o200k_base' otherwise."""
        if any(x in model_id.lower() for x in ["gpt-4-", "gpt-3.5", "legacy"]):
            return "cl100k_base"
        return "o200k_base"

    def count(self, text: str, model_id: str) -> int:
        """Execute local BPE encoding via tiktoken."""
        name = self.encoding_name_for(model_id)
        if name not in self._encodings:
            self._encodings[name] = tiktoken.get_encoding(name)
        return len(self._encodings[name].encode(text, disallowed_special=()))

# -----------------------------------------------------------------------------
# SERVICE ORCHESTRATION (FACADE)
# -----------------------------------------------------------------------------

class TokenizerService:
    """
    Routes counting to tiktoken and falls back to the heuristic on failure.
    """

    def __init__(self) -> None:
        self.primary: TokenizerStrategy = TiktokenStrategy()
        self.heuristic = HeuristicStrategy()

    def count(self, text: str, model: str) -> int:
        if not text:
            return 0
        try:
            return self.primary.count(text, model)
        except Exception as e:
            logger.warning(f"Tokenizer {type(self.primary).__name__} failed: {e}. Using heuristic fallback.")
            return self.heuristic.count(text, model)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

_SERVICE_INSTANCE = TokenizerService()


def count_tokens(text: str, model: str = DEFAULT_TARGET_MODEL) -> int:
    """
    Estimate the number of tokens for the target model.

    Args:
        text: Input string content.
        model: Target model name (e.g. 'gpt-4o').

    Returns:
        int: Total token count.
    """
    return _SERVICE_INSTANCE.count(text, model)
