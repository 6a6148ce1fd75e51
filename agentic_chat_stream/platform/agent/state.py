"""LangGraph state shared by the agents of this service."""

from typing import Annotated, TypedDict

from langchain_core.messages import AnyMessage
from langgraph.graph.message import add_messages


class BaseAgentState(TypedDict):
    """State of one agent run; it lives only as long as the request.

    Attributes:
        messages: Conversation so far, appended to by every node
    """

    messages: Annotated[list[AnyMessage], add_messages]
