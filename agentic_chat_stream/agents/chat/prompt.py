"""System prompt templates for the chat agent."""

FORCE_FINAL_ANSWER = (
    "You have reached the maximum number of reasoning steps. "
    "Do not call any more tools. Provide a final answer now, summarizing "
    "what you found and what remains incomplete."
)


def build_system_prompt(
    custom_instructions: str | None = None,
) -> str:
    """Build the system prompt for the chat agent.

    Args:
        custom_instructions: Optional additional instructions to append

    Returns:
        Complete system prompt string
    """
    base_prompt = """You are a helpful assistant chatting with a user in real time.

## Using Tools

- Call a tool when it gives you information or an action you cannot provide yourself.
- Read each tool's description and pass exactly the arguments its schema asks for.
- If a tool result is empty or unexpected, say so instead of guessing.
- Once you have what you need, answer without calling further tools.

## Answering

- Be concise and direct. Prefer short paragraphs and lists.
- Use Markdown for structure and fenced code blocks for code.
- When a tool produced the information, mention which tool you relied on.
"""
    if custom_instructions:
        return f"{base_prompt}\n## Additional Instructions\n\n{custom_instructions}\n"
    return base_prompt
