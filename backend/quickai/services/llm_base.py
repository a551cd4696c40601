"""
QuickAI Backend - Abstract Text Completion Interface
=====================================================

What:  Abstract base class for the generative text gateway.
How:   Concrete implementations inherit from LLMService and implement
       generate_text() and health_check().
Who:   Called by ActionService for articles, blog titles, and resume reviews.

    Tests substitute a mock for the concrete GeminiService; ActionService
    only depends on this contract.
"""

from abc import ABC, abstractmethod


class LLMService(ABC):
    """
    Abstract interface for single-turn text completion.

    Contract:
        - generate_text() sends one user prompt and returns one completion string
        - Exactly one upstream call per invocation (no retries)
        - Provider errors are wrapped in LLMServiceError
    """

    @abstractmethod
    async def generate_text(self, prompt: str, max_tokens: int) -> str:
        """
        Generate a completion for a single-turn prompt.

        Args:
            prompt:     The full user prompt.
            max_tokens: Output token budget for the completion.

        Returns:
            The completion text, verbatim.

        Raises:
            LLMServiceError: The provider call failed or returned no text.
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the LLM service is reachable and operational.

        Returns: True if service is reachable, False otherwise.
        """
        ...
