"""Tests for prompt building and system prompt resolution"""

from homeinspect.domain.prompts.chat_prompts import (
    TRUNCATION_MARKER,
    PromptSources,
    PromptTemplate,
    resolve_system_prompt,
    truncate_context,
)
from homeinspect.domain.prompts.inspection_prompts import (
    DEFAULT_SYSTEM_PROMPT,
    IMAGES_ATTACHED_NOTE,
    build_analysis_text,
    describe_photos,
)
from homeinspect.domain.prompts.messages import user_message


class TestInspectionPrompts:
    def test_default_persona(self):
        assert "home inspection consultant" in DEFAULT_SYSTEM_PROMPT
        assert "**Overall Condition Assessment**" in DEFAULT_SYSTEM_PROMPT

    def test_descriptors_number_by_upload_position(self):
        assert describe_photos(["Roofing", "Kitchen", "Roofing"]) == [
            "Roofing Photo 1",
            "Kitchen Photo 2",
            "Roofing Photo 3",
        ]

    def test_blank_category_is_unknown(self):
        assert describe_photos(["", "Attic"]) == ["Unknown Photo 1", "Attic Photo 2"]

    def test_analysis_text(self):
        text = build_analysis_text(["Roofing", "Kitchen"])
        assert text == (
            "Analyze these home inspection photos grouped by category: "
            "Roofing Photo 1, Kitchen Photo 2\n\n[Images provided for analysis]"
        )

    def test_analysis_text_without_photos(self):
        text = build_analysis_text([])
        assert text.endswith(IMAGES_ATTACHED_NOTE)


class TestUserMessage:
    def test_text_only(self):
        assert user_message("hi") == {"role": "user", "content": "hi"}

    def test_with_images(self):
        message = user_message("look", ["data:image/png;base64,AAAA", "https://x/y.jpg"])
        assert message["content"][0] == {"type": "text", "text": "look"}
        assert message["content"][1] == {"type": "image_url", "image_url": {"url": "data:image/png;base64,AAAA"}}
        assert message["content"][2]["image_url"]["url"] == "https://x/y.jpg"


class TestPromptTemplate:
    def test_render_known_variables(self):
        template = PromptTemplate("Report: {context}\nQ: {message}")
        assert template.variables == {"context", "message"}
        assert template.render({"context": "roof leak", "message": "cost?"}) == "Report: roof leak\nQ: cost?"

    def test_unknown_placeholders_are_kept(self):
        template = PromptTemplate('Answer as JSON like {"a": 1} about {message} {other}')
        assert template.render({"message": "m"}) == 'Answer as JSON like {"a": 1} about m {other}'


class TestTruncateContext:
    def test_short_context_unchanged(self):
        assert truncate_context("abc", 10) == "abc"

    def test_long_context_truncated(self):
        assert truncate_context("x" * 20, 5) == "xxxxx" + TRUNCATION_MARKER

    def test_empty(self):
        assert truncate_context(None, 5) == ""


class TestResolveSystemPrompt:
    def _resolve(self, sources, message="Is the roof ok?", context="Roof: missing shingles"):
        return resolve_system_prompt(sources, message=message, context=context, max_context_chars=100)

    def test_override_beats_configured_template(self):
        sources = PromptSources(
            override="OVERRIDE {message}",
            configured_template="CONFIGURED {message}",
            caller_prompt="CALLER",
            default_prompt="DEFAULT",
        )
        assert self._resolve(sources) == "OVERRIDE Is the roof ok?"

    def test_configured_template_beats_caller_prompt(self):
        sources = PromptSources(configured_template="Context: {context}", caller_prompt="CALLER", default_prompt="D")
        assert self._resolve(sources) == "Context: Roof: missing shingles"

    def test_caller_prompt_used_verbatim(self):
        sources = PromptSources(caller_prompt="Be brief {message}", default_prompt="D")
        assert self._resolve(sources) == "Be brief {message}"

    def test_default_prompt(self):
        assert self._resolve(PromptSources(default_prompt="D")) == "D"

    def test_blank_templates_are_skipped(self):
        sources = PromptSources(override="  ", configured_template="", default_prompt="D")
        assert self._resolve(sources) == "D"

    def test_system_prompt_variable(self):
        sources = PromptSources(configured_template="{systemPrompt}!", default_prompt="Stored")
        assert self._resolve(sources) == "Stored!"
        sources = PromptSources(configured_template="{systemPrompt}!", caller_prompt="Caller", default_prompt="S")
        assert self._resolve(sources) == "Caller!"

    def test_context_is_truncated_in_template(self):
        sources = PromptSources(override="{context}")
        result = resolve_system_prompt(sources, message="m", context="y" * 50, max_context_chars=10)
        assert result == "y" * 10 + TRUNCATION_MARKER
