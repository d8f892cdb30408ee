"""Tests for /skill command handling and auto-triggering."""

import skillregistry.skills.preprocessor as preprocessor
import skillregistry.skills.registry as registry


class TestExplicitCommand:
    """Tests for explicit /skill <id> commands."""

    def test_explicit_skill_injects_body(self, sample_registry: registry.SkillRegistry) -> None:
        """/skill <id> injects the skill and strips the command."""
        result = preprocessor.preprocess_for_skills(
            "/skill tall build a counter component", sample_registry
        )

        assert result.trigger_type == "explicit"
        assert result.skill_ids == ["tall"]
        assert result.user_message == "build a counter component"
        assert result.error is None
        assert result.skill_injection is not None
        assert result.skill_injection.startswith(
            "[Skill 'tall' activated - follow these instructions:]"
        )
        assert "Use Livewire v3 attributes." in result.skill_injection

    def test_command_without_message(self, sample_registry: registry.SkillRegistry) -> None:
        """The rest of the message is optional."""
        result = preprocessor.preprocess_for_skills("/skill SAIL", sample_registry)
        assert result.skill_ids == ["sail"]
        assert result.user_message == ""

    def test_unknown_skill_reports_error(self, sample_registry: registry.SkillRegistry) -> None:
        """Unknown ids produce an error listing the available skills."""
        result = preprocessor.preprocess_for_skills("/skill nope do it", sample_registry)

        assert result.skill_injection is None
        assert result.error == "Skill 'nope' not found. Available: tall, sail"
        assert result.user_message == "/skill nope do it"

    def test_explicit_wins_over_auto(self, sample_registry: registry.SkillRegistry) -> None:
        """An explicit command is honoured even with auto-triggering on."""
        result = preprocessor.preprocess_for_skills(
            "/skill sail livewire please", sample_registry, auto_trigger=True
        )
        assert result.trigger_type == "explicit"
        assert result.skill_ids == ["sail"]


class TestAutoTrigger:
    """Tests for automatic triggering."""

    def test_plain_message_unchanged_without_auto(
        self, sample_registry: registry.SkillRegistry
    ) -> None:
        """Without auto-triggering, plain messages pass through."""
        result = preprocessor.preprocess_for_skills("livewire session", sample_registry)
        assert result.skill_injection is None
        assert result.trigger_type is None
        assert result.user_message == "livewire session"

    def test_auto_trigger_injects_best_match(
        self, sample_registry: registry.SkillRegistry
    ) -> None:
        """With auto-triggering, the top match is injected."""
        message = "starting Livewire development session"
        result = preprocessor.preprocess_for_skills(message, sample_registry, auto_trigger=True)

        assert result.trigger_type == "auto"
        assert result.skill_ids == ["tall"]
        assert result.user_message == message
        assert result.skill_injection is not None
        assert "Use Livewire v3 attributes." in result.skill_injection

    def test_auto_limit(self, sample_registry: registry.SkillRegistry) -> None:
        """auto_limit controls how many skills are injected."""
        result = preprocessor.preprocess_for_skills(
            "starting Livewire development session",
            sample_registry,
            auto_trigger=True,
            auto_limit=2,
        )
        assert result.skill_ids == ["tall", "sail"]
        assert result.skill_injection is not None
        assert result.skill_injection.count("activated - follow these instructions") == 2

    def test_auto_trigger_without_match(self, sample_registry: registry.SkillRegistry) -> None:
        """Messages matching nothing are left alone."""
        result = preprocessor.preprocess_for_skills(
            "unrelated gibberish xyz", sample_registry, auto_trigger=True
        )
        assert result.skill_injection is None
        assert result.skill_ids == []

    def test_no_registry(self) -> None:
        """Without a registry the message is returned unchanged."""
        result = preprocessor.preprocess_for_skills("/skill tall", None)
        assert result.user_message == "/skill tall"
        assert result.skill_injection is None


class TestFormatting:
    """Tests for format_skill_injection_message."""

    def test_format(self) -> None:
        """Injection message names the skill and carries its content."""
        assert preprocessor.format_skill_injection_message("body", "php-style") == (
            "[Skill 'php-style' activated - follow these instructions:]\n\nbody"
        )
