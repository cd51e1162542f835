import pytest

from screening.moderation.domain.results import ContentFormat, FallbackPolicy
from screening.moderation.services.config import DEFAULT_PROMPT, ModerationConfig, ProviderConfig


@pytest.mark.unit
class TestModerationConfig:
    def test_provider_extra_keys_are_kept(self):
        config = ProviderConfig.from_dict(
            "yandexgpt", {"enabled": True, "api_key": "secret", "timeout": 12, "folder_id": "b1g"}
        )

        assert config.timeout_s == 12.0
        assert config.extra == {"folder_id": "b1g"}

    def test_redacted_hides_api_key(self):
        config = ProviderConfig.from_dict("chatgpt", {"enabled": True, "api_key": "sk-secret"})

        assert config.redacted()["api_key"] == "***"
        assert ProviderConfig.from_dict("local", {}).redacted()["api_key"] is None

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("approve", FallbackPolicy.APPROVE),
            ("REJECT", FallbackPolicy.REJECT),
            ("manual_review", FallbackPolicy.MANUAL_REVIEW),
            ("whatever", FallbackPolicy.MANUAL_REVIEW),
            (None, FallbackPolicy.MANUAL_REVIEW),
        ],
    )
    def test_fallback_policy_parse(self, value, expected):
        assert FallbackPolicy.parse(value) == expected

    def test_content_type_lookup(self, make_config):
        config = make_config(content_types={"catch_comments": {"enabled": False, "provider": "local"}})

        assert config.is_enabled_for("catch_comments") is False
        assert config.is_enabled_for("catch_descriptions") is True
        assert config.is_enabled_for("unknown_type") is False
        assert "catch_photos" in config.content_types_for(ContentFormat.IMAGE)
        assert "catch_photos" not in config.content_types_for(ContentFormat.TEXT)

    def test_global_switch_disables_everything(self, make_config):
        config = make_config(enabled=False)

        assert config.is_enabled_for("catch_comments") is False

    def test_unknown_prompt_key_uses_default_prompt(self, make_config):
        config = make_config(
            content_types={"catch_comments": {"enabled": True, "provider": "local", "prompt": "missing"}}
        )

        assert config.prompt_for("catch_comments") == DEFAULT_PROMPT

    def test_public_dict_has_no_secrets(self, make_config):
        public = make_config().as_public_dict()

        assert public["providers"]["chatgpt"]["api_key"] == "***"
        assert "sk-test" not in str(public)

    def test_from_settings_reads_ai_moderation(self, settings):
        settings.AI_MODERATION = {"enabled": True, "fallback": {"on_failure": "approve"}}

        config = ModerationConfig.from_settings()

        assert config.fallback == FallbackPolicy.APPROVE
        assert config.rate_limiting.max_requests_per_minute == 60
