"""Exception hierarchy for agent execution.

Failures raised while the agent loop runs abort the loop and surface to the
caller as a single terminal error; nothing here is retried automatically.
"""


class AgentInvocationError(Exception):
    """Base exception for failures inside the agent loop."""


class ModelInvocationError(AgentInvocationError):
    """Raised when the language model backend fails mid-turn."""

    def __init__(self, message: str, model_name: str | None = None):
        self.model_name = model_name
        super().__init__(f"Model invocation failed: {message}")


class ToolInvocationError(AgentInvocationError):
    """Raised when a tool cannot be found or its execution fails."""

    def __init__(self, message: str, tool_name: str, call_id: str | None = None):
        self.tool_name = tool_name
        self.call_id = call_id
        super().__init__(f"Tool '{tool_name}' failed: {message}")


class UnknownToolError(ToolInvocationError):
    """Raised when the model requests a tool that is not registered."""

    def __init__(self, tool_name: str, call_id: str | None = None):
        super().__init__("tool is not registered", tool_name=tool_name, call_id=call_id)
