"""Tests for persona loading and prompt assembly."""

from prompts import (
    PERSONA_TEXT,
    build_prompt,
    load_persona_text,
    normalize_history,
    render_history,
    system_instruction,
)


def _turns(n):
    return [{"role": "user" if i % 2 == 0 else "assistant", "content": f"turn {i}"} for i in range(n)]


class TestRenderHistory:
    """Test history windowing and rendering."""

    def test_keeps_last_six_oldest_first(self):
        rendered = render_history(_turns(9))
        lines = rendered.split("\n")
        assert len(lines) == 6
        assert lines[0] == "ASSISTANT: turn 3"
        assert lines[-1] == "USER: turn 8"

    def test_short_history_kept_whole(self):
        assert render_history(_turns(2)) == "USER: turn 0\nASSISTANT: turn 1"

    def test_other_roles_uppercased(self):
        assert render_history([{"role": "System", "content": "x"}]) == "SYSTEM: x"

    def test_zero_turns(self):
        assert render_history(_turns(3), turns=0) == ""


class TestNormalizeHistory:
    """Test tolerance to malformed caller history."""

    def test_non_list_becomes_empty(self):
        assert normalize_history(None) == []
        assert normalize_history("hello") == []
        assert normalize_history({"role": "user"}) == []

    def test_skips_non_objects_and_coerces(self):
        history = [{"role": "user", "content": "hi"}, "junk", 3, {"role": None, "content": 5}]
        assert normalize_history(history) == [
            {"role": "user", "content": "hi"},
            {"role": "", "content": "5"},
        ]


class TestBuildPrompt:
    """Test the assembled prompt layout."""

    def test_layout(self):
        prompt = build_prompt("PERSONA", [{"role": "user", "content": "hello"}], "Who is Pranjal?")
        assert prompt == (
            "PERSONA\n\nRECENT CONTEXT:\nUSER: hello\n\n"
            "USER: Who is Pranjal?\n\nASSISTANT (Max-AI Assistant):"
        )

    def test_empty_history(self):
        prompt = build_prompt("P", [], "Q", assistant_name="Bot")
        assert prompt == "P\n\nRECENT CONTEXT:\n\n\nUSER: Q\n\nASSISTANT (Bot):"

    def test_deterministic(self):
        history = _turns(8)
        assert build_prompt(PERSONA_TEXT, history, "Q") == build_prompt(PERSONA_TEXT, history, "Q")

    def test_history_window_applied(self):
        prompt = build_prompt("P", _turns(10), "Q")
        assert "turn 3" not in prompt
        assert "turn 4" in prompt


class TestPersona:
    """Test persona text sources."""

    def test_builtin_persona_mentions_profile(self):
        assert "Pranjal Srivastava" in PERSONA_TEXT
        assert "Hobbies: soccer" in PERSONA_TEXT
        assert "Age: 26" in PERSONA_TEXT

    def test_default_path_returns_builtin(self):
        assert load_persona_text("") is PERSONA_TEXT

    def test_missing_file_returns_builtin(self, tmp_path):
        assert load_persona_text(str(tmp_path / "nope.txt")) == PERSONA_TEXT

    def test_file_overrides_builtin(self, tmp_path):
        path = tmp_path / "persona.txt"
        path.write_text("\nYou are a test persona.\n", encoding="utf-8")
        assert load_persona_text(str(path)) == "You are a test persona."

    def test_system_instruction_names_assistant(self):
        text = system_instruction("Max-AI Assistant")
        assert text.startswith("You are Max-AI Assistant:")
        assert "gently steer back" in text
