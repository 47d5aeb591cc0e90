"""Tests for the LLM configuration store"""

import json
import threading

import pytest

from homeinspect.domain.config.llm import LLMConfig
from homeinspect.domain.errors import ConfigValidationError
from homeinspect.infrastructure.config.config_store import ConfigStore, build_candidate

RESTRICTED_MODELS = ["o1", "o1-preview", "o1-mini", "o3", "o3-mini", "o3-pro", "o4-mini"]
NO_TOP_P_MODELS = ["gpt-5", "gpt-5-mini", "gpt-5-nano", "gpt-5-chat"]


@pytest.fixture
def config_path(tmp_path):
    return tmp_path / "llm-config.json"


class TestLoad:
    def test_defaults_when_file_missing(self, config_path):
        store = ConfigStore(config_path)
        assert store.get() == LLMConfig()
        assert not config_path.exists()

    def test_loads_saved_file(self, config_path):
        config_path.write_text(
            json.dumps({"modelName": "gpt-4o", "temperature": 0.8, "topP": 0.5, "streaming": False}),
            encoding="utf-8",
        )
        config = ConfigStore(config_path).get()
        assert config.model_name == "gpt-4o"
        assert config.temperature == 0.8
        assert config.top_p == 0.5
        assert config.streaming is False

    def test_invalid_json_falls_back_to_defaults(self, config_path):
        config_path.write_text("{not json", encoding="utf-8")
        assert ConfigStore(config_path).get() == LLMConfig()

    def test_out_of_range_file_falls_back_to_defaults(self, config_path):
        config_path.write_text(json.dumps({"temperature": 9}), encoding="utf-8")
        assert ConfigStore(config_path).get() == LLMConfig()

    def test_loaded_file_is_normalized_by_capabilities(self, config_path):
        config_path.write_text(json.dumps({"modelName": "gpt-5", "temperature": 1, "topP": 0.4}), encoding="utf-8")
        config = ConfigStore(config_path).get()
        assert config.top_p is None
        assert "topP" not in config.to_wire()


class TestUpdate:
    def test_round_trip(self, config_path):
        store = ConfigStore(config_path)
        store.update(
            {
                "modelName": "gpt-4o-mini",
                "temperature": 0.5,
                "topP": 0.9,
                "streaming": False,
                "systemPrompt": "X",
            }
        )
        reread = ConfigStore(config_path).get().to_wire()
        assert reread["modelName"] == "gpt-4o-mini"
        assert reread["temperature"] == 0.5
        assert reread["topP"] == 0.9
        assert reread["streaming"] is False
        assert reread["systemPrompt"] == "X"

    def test_partial_update_keeps_other_fields(self, config_path):
        store = ConfigStore(config_path)
        store.update({"systemPrompt": "Be brief"})
        store.update({"temperature": 1.2})
        config = store.get()
        assert config.system_prompt == "Be brief"
        assert config.temperature == 1.2

    def test_credential_is_never_persisted(self, config_path):
        store = ConfigStore(config_path)
        store.update({"openAIApiKey": "sk-secret", "temperature": 0.4})
        saved = config_path.read_text(encoding="utf-8")
        assert "sk-secret" not in saved
        assert "openAIApiKey" not in json.loads(saved)
        assert "openAIApiKey" not in store.get().to_wire()

    def test_unknown_fields_are_ignored(self, config_path):
        store = ConfigStore(config_path)
        store.update({"maxTokens": 10, "temperature": 0.4})
        assert "maxTokens" not in json.loads(config_path.read_text(encoding="utf-8"))

    @pytest.mark.parametrize(
        "changes",
        [
            {"temperature": 2.5},
            {"temperature": -0.1},
            {"temperature": "0.5"},
            {"temperature": True},
            {"topP": 1.5},
            {"topP": "high"},
            {"modelName": 42},
            {"modelName": ""},
            {"systemPrompt": ["not", "a", "string"]},
            {"chatPrompt": 7},
            {"streaming": "yes"},
        ],
    )
    def test_invalid_update_leaves_state_unchanged(self, config_path, changes):
        store = ConfigStore(config_path)
        store.update({"modelName": "gpt-4o", "temperature": 0.6, "topP": 0.8})
        before = store.get()
        saved_before = config_path.read_text(encoding="utf-8")

        with pytest.raises(ConfigValidationError):
            store.update(changes)

        assert store.get() == before
        assert config_path.read_text(encoding="utf-8") == saved_before

    def test_non_object_rejected(self, config_path):
        with pytest.raises(ConfigValidationError, match="JSON object"):
            ConfigStore(config_path).update(["temperature", 1])

    @pytest.mark.parametrize("model", RESTRICTED_MODELS)
    def test_restricted_family_defaults_to_one(self, config_path, model):
        store = ConfigStore(config_path)
        store.update({"temperature": 0.2, "topP": 0.3})
        config = store.update({"modelName": model})
        assert config.temperature == 1.0
        assert config.top_p == 1.0

    @pytest.mark.parametrize("model", RESTRICTED_MODELS)
    @pytest.mark.parametrize("changes", [{"temperature": 0.9}, {"topP": 0.9}])
    def test_restricted_family_rejects_other_values(self, config_path, model, changes):
        store = ConfigStore(config_path)
        before = store.get()
        with pytest.raises(ConfigValidationError):
            store.update({"modelName": model, **changes})
        assert store.get() == before

    @pytest.mark.parametrize("model", NO_TOP_P_MODELS)
    def test_no_top_p_family_drops_top_p(self, config_path, model):
        store = ConfigStore(config_path)
        config = store.update({"modelName": model, "topP": 0.7})
        assert config.top_p is None
        assert config.temperature == 1.0
        assert "topP" not in json.loads(config_path.read_text(encoding="utf-8"))

    @pytest.mark.parametrize("model", NO_TOP_P_MODELS)
    def test_no_top_p_family_rejects_temperature(self, config_path, model):
        store = ConfigStore(config_path)
        with pytest.raises(ConfigValidationError, match="temperature"):
            store.update({"modelName": model, "temperature": 0.5})

    def test_switching_back_to_standard_keeps_top_p_absent(self, config_path):
        store = ConfigStore(config_path)
        store.update({"modelName": "gpt-5"})
        config = store.update({"modelName": "gpt-4o-mini", "temperature": 0.4})
        assert config.top_p is None
        assert config.temperature == 0.4

    def test_listeners_receive_committed_config(self, config_path):
        store = ConfigStore(config_path)
        seen = []
        store.subscribe(seen.append)
        config = store.update({"temperature": 0.9})
        assert seen == [config]

    def test_listeners_not_called_on_rejected_update(self, config_path):
        store = ConfigStore(config_path)
        seen = []
        store.subscribe(seen.append)
        with pytest.raises(ConfigValidationError):
            store.update({"temperature": 5})
        assert seen == []

    def test_persist_failure_keeps_in_memory_commit(self, tmp_path, caplog):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory", encoding="utf-8")
        store = ConfigStore(blocker / "llm-config.json")

        config = store.update({"temperature": 1.1})

        assert config.temperature == 1.1
        assert store.get().temperature == 1.1
        assert "Failed to save LLM configuration" in caplog.text

    def test_store_without_path_is_memory_only(self):
        store = ConfigStore(None)
        assert store.update({"temperature": 0.1}).temperature == 0.1

    def test_concurrent_writers_are_serialized(self, config_path):
        store = ConfigStore(config_path)
        temperatures = [round(0.1 * i, 1) for i in range(1, 11)]
        threads = [
            threading.Thread(target=store.update, args=({"temperature": t},)) for t in temperatures
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        final = store.get()
        assert final.temperature in temperatures
        saved = json.loads(config_path.read_text(encoding="utf-8"))
        assert saved["temperature"] == final.temperature


class TestBuildCandidate:
    def test_reports_proposed_fields(self):
        candidate, proposed = build_candidate(LLMConfig(), {"modelName": "gpt-4o", "topP": None})
        assert candidate.model_name == "gpt-4o"
        assert proposed == {"model_name"}

    def test_int_temperature_accepted(self):
        candidate, _ = build_candidate(LLMConfig(), {"temperature": 1})
        assert candidate.temperature == 1.0

    @pytest.mark.parametrize(
        "changes, wire_name",
        [
            ({"topP": 1.5}, "topP"),
            ({"modelName": ""}, "modelName"),
            ({"systemPrompt": 42}, "systemPrompt"),
        ],
    )
    def test_errors_use_wire_names(self, changes, wire_name):
        with pytest.raises(ConfigValidationError) as exc_info:
            build_candidate(LLMConfig(), changes)
        assert exc_info.value.errors[0].startswith(f"{wire_name}: ")
        assert wire_name in str(exc_info.value)
