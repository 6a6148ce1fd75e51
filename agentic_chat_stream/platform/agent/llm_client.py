"""LLM client implementation using LiteLLM."""

from collections.abc import AsyncIterator
from typing import Self

from langchain_core.messages import AIMessage, BaseMessageChunk
from langchain_core.runnables import Runnable, RunnableConfig
from langchain_core.tools import BaseTool
from langchain_litellm import ChatLiteLLM

from agentic_chat_stream.platform.agent.metrics import record_agent_tokens


class LlmClient(Runnable):
    """LLM client that wraps ChatLiteLLM as a Runnable.

    Provides a consistent interface for LLM interactions with:
    - Full LCEL compatibility (pipe operator, chains)
    - Incremental streaming of response chunks
    - Automatic token metrics recording
    - Tool binding support
    """

    def __init__(
        self,
        agent_slug: str,
        model_name: str,
        api_key: str | None,
        api_base: str | None,
        temperature: float,
        max_tokens: int = 4096,
        llm=None,
    ):
        """Initialize the LLM client.

        Args:
            agent_slug: Slug of the owning agent, used as a metrics label
            model_name: Model identifier understood by the LiteLLM proxy
            api_key: API key for authentication
            api_base: Base URL for the LLM proxy
            temperature: Sampling temperature
            max_tokens: Maximum tokens generated per call
            llm: Optional pre-configured LLM instance (for bind_tools)
        """
        self._agent_slug = agent_slug
        self._model_name = model_name
        self._api_key = api_key
        self._api_base = api_base
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._llm = llm or ChatLiteLLM(
            model_name=model_name,
            api_key=api_key,
            api_base=api_base,
            temperature=temperature,
            max_tokens=max_tokens,
            streaming=True,
        )

    @property
    def model_name(self) -> str:
        """The model name/identifier."""
        return self._model_name

    def bind_tools(self, tools: list[BaseTool]) -> Self:
        """Return a new client with tools bound.

        Args:
            tools: Tools to bind to the LLM

        Returns:
            New LlmClient instance with tools bound
        """
        return LlmClient(
            agent_slug=self._agent_slug,
            model_name=self._model_name,
            api_key=self._api_key,
            api_base=self._api_base,
            temperature=self._temperature,
            max_tokens=self._max_tokens,
            llm=self._llm.bind_tools(tools),
        )

    @staticmethod
    def extract_tokens(message: AIMessage) -> tuple[int, int]:
        """Extract token counts from an AIMessage's usage metadata.

        Args:
            message: AIMessage (or aggregated chunk) from LLM response

        Returns:
            Tuple of (input_tokens, output_tokens), defaults to (0, 0) if unavailable
        """
        usage = getattr(message, "usage_metadata", None)
        if not usage:
            return 0, 0
        return usage.get("input_tokens", 0), usage.get("output_tokens", 0)

    def _record_tokens(self, message) -> None:
        input_tokens, output_tokens = self.extract_tokens(message)
        record_agent_tokens(
            self._agent_slug,
            self._model_name,
            input_tokens,
            output_tokens,
        )

    def invoke(self, input, config: RunnableConfig | None = None, **kwargs):
        """Invoke the LLM synchronously.

        Args:
            input: Messages to send to the LLM
            config: Optional runnable config
            **kwargs: Additional arguments passed to underlying LLM

        Returns:
            The LLM's response message
        """
        response = self._llm.invoke(input, config=config, **kwargs)
        self._record_tokens(response)
        return response

    async def astream(
        self, input, config: RunnableConfig | None = None, **kwargs
    ) -> AsyncIterator[BaseMessageChunk]:
        """Stream the LLM response chunk by chunk.

        Token usage is recorded once the stream is exhausted.

        Args:
            input: Messages to send to the LLM
            config: Optional runnable config
            **kwargs: Additional arguments passed to underlying LLM

        Yields:
            Response chunks as they arrive
        """
        aggregate = None
        async for chunk in self._llm.astream(input, config=config, **kwargs):
            aggregate = chunk if aggregate is None else aggregate + chunk
            yield chunk
        if aggregate is not None:
            self._record_tokens(aggregate)
