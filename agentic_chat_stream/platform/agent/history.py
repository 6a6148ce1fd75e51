"""Message history windowing and cache-breakpoint annotation.

Both transforms are pure: they never mutate the messages they receive and
running them on their own output changes nothing.
"""

import logging
from collections.abc import Sequence
from typing import Any

from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage, trim_messages

logger = logging.getLogger(__name__)

CACHE_CONTROL: dict[str, str] = {"type": "ephemeral"}
MAX_CACHE_MARKS = 3


def is_cache_marked(message: BaseMessage) -> bool:
    """Check whether a message carries a cache breakpoint."""
    if "cache_control" in message.additional_kwargs:
        return True
    content = message.content
    if isinstance(content, list):
        return any(isinstance(block, dict) and "cache_control" in block for block in content)
    return False


def _text_blocks(content: str | list[Any]) -> list[Any]:
    if isinstance(content, str):
        return [{"type": "text", "text": content}] if content else []
    return list(content)


def _unmark(message: BaseMessage) -> BaseMessage:
    if not is_cache_marked(message):
        return message
    additional_kwargs = {
        key: value for key, value in message.additional_kwargs.items() if key != "cache_control"
    }
    content = message.content
    if isinstance(content, list):
        content = [
            {key: value for key, value in block.items() if key != "cache_control"}
            if isinstance(block, dict)
            else block
            for block in content
        ]
    return message.model_copy(update={"content": content, "additional_kwargs": additional_kwargs})


def _mark(message: BaseMessage) -> BaseMessage:
    blocks = _text_blocks(message.content)
    if not blocks or not isinstance(blocks[-1], dict):
        # Nothing to attach a block-level breakpoint to (e.g. a pure tool-call turn)
        return message.model_copy(
            update={"additional_kwargs": {**message.additional_kwargs, "cache_control": CACHE_CONTROL}}
        )
    blocks[-1] = {**blocks[-1], "cache_control": CACHE_CONTROL}
    return message.model_copy(update={"content": blocks})


class HistoryPolicy:
    """Prepares conversation history for a model call.

    Windowing keeps the most recent messages up to ``max_messages`` (the unit
    is a message count), always keeps a leading system message and always
    starts the kept history at a user message, excluding partial turns. If the
    bound would leave no user message at all, the full latest turn is kept.

    Cache annotation marks the leading system message, the last message and
    the second most recent user message.
    """

    def __init__(self, max_messages: int = 10) -> None:
        if max_messages < 1:
            raise ValueError("max_messages must be at least 1")
        self.max_messages = max_messages
        self._trimmer = trim_messages(  # type: ignore
            max_tokens=max_messages,
            strategy="last",
            token_counter=len,
            include_system=True,
            allow_partial=False,
            start_on="human",
        )

    def window(self, messages: Sequence[BaseMessage]) -> list[BaseMessage]:
        """Select a bounded suffix of the history starting on a user turn."""
        messages = list(messages)
        if not messages:
            return []

        trimmed = self._trimmer.invoke(messages)
        if not any(isinstance(m, HumanMessage) for m in trimmed):
            trimmed = self._latest_turn(messages)

        if len(trimmed) < len(messages):
            logger.info(f"Trimmed messages from {len(messages)} to {len(trimmed)}")
        return trimmed

    @staticmethod
    def _latest_turn(messages: list[BaseMessage]) -> list[BaseMessage]:
        system = [messages[0]] if isinstance(messages[0], SystemMessage) else []
        for index in range(len(messages) - 1, -1, -1):
            if isinstance(messages[index], HumanMessage):
                return system + messages[index:]
        return system

    @staticmethod
    def annotate(messages: Sequence[BaseMessage]) -> list[BaseMessage]:
        """Return copies of the messages with cache breakpoints applied.

        Existing marks are cleared first, so at most three messages are
        marked and the result depends only on the message sequence.
        """
        annotated = [_unmark(m) for m in messages]
        if not annotated:
            return annotated

        targets: set[int] = {len(annotated) - 1}
        if isinstance(annotated[0], SystemMessage):
            targets.add(0)

        human_count = 0
        for index in range(len(annotated) - 1, -1, -1):
            if isinstance(annotated[index], HumanMessage):
                human_count += 1
                if human_count == 2:
                    targets.add(index)
                    break

        for index in targets:
            annotated[index] = _mark(annotated[index])
        return annotated

    def prepare(self, messages: Sequence[BaseMessage]) -> list[BaseMessage]:
        """Window then annotate the history for the next model call."""
        return self.annotate(self.window(messages))
