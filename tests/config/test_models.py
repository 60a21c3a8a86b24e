"""Tests for model classification and call policy."""

import pytest

from loopbench.config import (
    MODEL_TIERS,
    TIMEOUT_CONFIG,
    ModelClass,
    WireProtocol,
    classify_model,
    effective_max_tokens,
    get_model_by_tier,
    get_model_policy,
    get_timeout,
    select_protocol,
)


class TestClassifyModel:
    @pytest.mark.parametrize("model_id", ["o1-mini", "o3-mini", "o4-mini", "o3", "gpt-5-mini", "gpt-5-nano", "gpt-5.1-codex-mini"])
    def test_reasoning_families(self, model_id: str) -> None:
        assert classify_model(model_id) is ModelClass.REASONING

    def test_codex_without_gpt5_is_large_output(self) -> None:
        assert classify_model("codex-mini-latest") is ModelClass.LARGE_OUTPUT

    @pytest.mark.parametrize("model_id", ["gpt-4.1", "gpt-4o-mini", "omni-moderation", "o10-preview", "brand-new-model"])
    def test_everything_else_is_standard(self, model_id: str) -> None:
        assert classify_model(model_id) is ModelClass.STANDARD


class TestSelectProtocol:
    @pytest.mark.parametrize("model_id", ["gpt-5.1-codex-mini", "codex-mini-latest", "gpt-5.1"])
    def test_responses_protocol(self, model_id: str) -> None:
        assert select_protocol(model_id) is WireProtocol.RESPONSES

    @pytest.mark.parametrize("model_id", ["gpt-5-mini", "gpt-4.1", "o3-mini"])
    def test_chat_protocol(self, model_id: str) -> None:
        assert select_protocol(model_id) is WireProtocol.CHAT


class TestTimeouts:
    def test_standard_timeout(self) -> None:
        assert get_timeout("gpt-4o") == 120_000

    @pytest.mark.parametrize("model_id", ["o1-mini", "gpt-5-nano", "codex-mini-latest"])
    def test_long_timeouts(self, model_id: str) -> None:
        assert get_timeout(model_id) == 300_000

    def test_every_class_has_a_timeout(self) -> None:
        assert set(TIMEOUT_CONFIG) == set(ModelClass)


class TestTokenBudget:
    def test_reasoning_budget_is_quadrupled(self) -> None:
        assert effective_max_tokens(2000, ModelClass.REASONING) == 8000

    def test_reasoning_budget_floor(self) -> None:
        assert effective_max_tokens(100, ModelClass.REASONING) == 6000

    @pytest.mark.parametrize("model_class", [ModelClass.STANDARD, ModelClass.LARGE_OUTPUT])
    def test_other_classes_keep_budget(self, model_class: ModelClass) -> None:
        assert effective_max_tokens(2000, model_class) == 2000


class TestModelPolicy:
    def test_policy_from_name(self) -> None:
        policy = get_model_policy("o3-mini")

        assert policy.model_class is ModelClass.REASONING
        assert policy.protocol is WireProtocol.CHAT
        assert policy.timeout_ms == 300_000
        assert policy.uses_hidden_reasoning is True

    def test_explicit_overrides_win(self) -> None:
        policy = get_model_policy(
            "gpt-4.1", model_class=ModelClass.LARGE_OUTPUT, protocol=WireProtocol.RESPONSES
        )

        assert policy.model_class is ModelClass.LARGE_OUTPUT
        assert policy.protocol is WireProtocol.RESPONSES
        assert policy.timeout_ms == 300_000
        assert policy.uses_hidden_reasoning is False


class TestTiers:
    def test_known_tiers(self) -> None:
        assert get_model_by_tier("lite")["id"] == "gpt-4o-mini"
        assert get_model_by_tier("pro")["id"] == "gpt-4.1"

    def test_unknown_tier_falls_back_to_regular(self) -> None:
        assert get_model_by_tier("ultra") == MODEL_TIERS["regular"]
