"""Unit tests for the chat agent prompts."""

from agentic_chat_stream.agents.chat.prompt import FORCE_FINAL_ANSWER, build_system_prompt


class TestBuildSystemPrompt:
    """Tests for build_system_prompt."""

    def test_base_prompt_sections(self):
        prompt = build_system_prompt()
        assert "## Using Tools" in prompt
        assert "## Answering" in prompt
        assert "## Additional Instructions" not in prompt

    def test_custom_instructions_are_appended(self):
        prompt = build_system_prompt("Always answer in French.")
        assert prompt.index("## Answering") < prompt.index("## Additional Instructions")
        assert prompt.rstrip().endswith("Always answer in French.")

    def test_empty_instructions_are_ignored(self):
        assert build_system_prompt("") == build_system_prompt()


def test_force_final_answer_forbids_tools():
    assert "Do not call any more tools" in FORCE_FINAL_ANSWER
