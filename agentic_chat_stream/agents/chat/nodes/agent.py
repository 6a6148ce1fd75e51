"""Agent node: one model call per step."""

import logging
from typing import Any

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langgraph.config import get_stream_writer

from agentic_chat_stream.agents.chat.prompt import FORCE_FINAL_ANSWER
from agentic_chat_stream.agents.chat.state import ChatAgentState
from agentic_chat_stream.platform.agent.config import AgentConfig
from agentic_chat_stream.platform.agent.exceptions import ModelInvocationError
from agentic_chat_stream.platform.agent.history import HistoryPolicy
from agentic_chat_stream.platform.agent.model import AssistantTurn, ModelInvocationAdapter, chunk_text

from .base import Node

logger = logging.getLogger(__name__)


class AgentNode(Node):
    """Node that invokes the model on the prepared history.

    Token deltas are written to the stream as they arrive; the finalized
    assistant message is appended to state. Once ``max_reasoning_steps`` model
    calls have been made the model is told to answer, and any tool calls it
    still requests are dropped so the run terminates.
    """

    def __init__(
        self,
        model: ModelInvocationAdapter,
        history_policy: HistoryPolicy,
        config: AgentConfig,
        system_prompt: str,
    ):
        """Initialize the agent node.

        Args:
            model: Model adapter with the agent's tools bound
            history_policy: Windowing and cache annotation applied before each call
            config: Agent configuration
            system_prompt: Instructions prepended to every model call
        """
        self.model = model
        self.history_policy = history_policy
        self.config = config
        self.system_prompt = system_prompt

    def _build_history(self, messages: list[BaseMessage], force_final: bool) -> list[BaseMessage]:
        history: list[BaseMessage] = [SystemMessage(content=self.system_prompt), *messages]
        if force_final:
            history.append(HumanMessage(content=FORCE_FINAL_ANSWER))
        return self.history_policy.prepare(history)

    @staticmethod
    def _without_tool_calls(message: AIMessage) -> AIMessage:
        return AIMessage(
            content=chunk_text(message),  # type: ignore[arg-type]
            id=message.id,
            usage_metadata=message.usage_metadata,
            response_metadata=message.response_metadata,
        )

    async def __call__(self, state: ChatAgentState) -> dict[str, Any]:
        """Call the model once and return the assistant message as a state update.

        Raises:
            ModelInvocationError: If the model fails or returns no message
        """
        write = get_stream_writer()
        steps = state.get("reasoning_steps", 0)
        force_final = steps >= self.config.max_reasoning_steps
        logger.debug(f"Step {steps}, messages count: {len(state['messages'])}")

        history = self._build_history(state["messages"], force_final)
        response: AIMessage | None = None
        async for event in self.model.stream(history):
            if isinstance(event, AssistantTurn):
                response = event.message
            else:
                write(event)

        if response is None:
            raise ModelInvocationError("model stream ended without a message", self.model.model_name)

        if force_final and response.tool_calls:
            logger.warning(
                f"Dropping {len(response.tool_calls)} tool call(s) requested after the step limit"
            )
            response = self._without_tool_calls(response)

        return {
            "messages": [response],
            "reasoning_steps": steps + 1,
        }
