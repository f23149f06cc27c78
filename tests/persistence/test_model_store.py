"""
Model persistence tests.

Covers atomic JSON writes, the model file layout, and every way a
saved model can fail to load.
"""

import json

import pytest

from intentbot.conversation.corpus import TrainingExample
from intentbot.conversation.fallback import FallbackClassifier
from intentbot.conversation.network import IntentNetwork
from intentbot.errors import ModelLoadError, PersistenceError
from intentbot.persistence.model_store import ModelStore, TrainedModel
from intentbot.persistence.serialization import JsonSerializer


@pytest.fixture
def model(encoder, preprocessor):
    network = IntentNetwork(seed=2)
    network.train(
        [
            TrainingExample(encoder.encode("hello"), "greeting"),
            TrainingExample(encoder.encode("see you later"), "goodbye"),
        ],
        iterations=50,
    )
    classifier = FallbackClassifier(preprocessor)
    classifier.add_document("hello", "greeting")
    classifier.add_document("see you later", "goodbye")
    classifier.train()
    return TrainedModel(
        network=network,
        classifier=classifier,
        responses={"greeting": ["Hi there"], "goodbye": ["Bye"]},
        vocabulary={"hello", "see", "you", "later"},
    )


@pytest.fixture
def model_path(tmp_path):
    return tmp_path / "models" / "trained-model.json"


# =============================================================================
# JsonSerializer
# =============================================================================

class TestJsonSerializer:

    def test_save_creates_parent_and_leaves_no_temp_files(self, tmp_path):
        path = tmp_path / "nested" / "out.json"
        JsonSerializer.save({"a": [1, 2]}, path)

        assert JsonSerializer.load(path) == {"a": [1, 2]}
        assert [p.name for p in path.parent.iterdir()] == ["out.json"]

    def test_failed_write_keeps_previous_file(self, tmp_path):
        path = tmp_path / "out.json"
        JsonSerializer.save({"version": 1}, path)

        with pytest.raises(TypeError):
            JsonSerializer.save({"bad": object()}, path)

        assert JsonSerializer.load(path) == {"version": 1}
        assert [p.name for p in tmp_path.iterdir()] == ["out.json"]


# =============================================================================
# ModelStore
# =============================================================================

class TestModelStore:

    def test_file_layout(self, model, model_path, preprocessor):
        ModelStore(model_path, preprocessor).save(model)
        data = json.loads(model_path.read_text(encoding="utf-8"))

        assert set(data) == {"network", "classifier", "responses", "vocabulary"}
        assert data["vocabulary"] == ["hello", "later", "see", "you"]
        assert data["responses"] == {"greeting": ["Hi there"], "goodbye": ["Bye"]}
        assert data["classifier"]["documents"][0] == ["hello", "greeting"]

    def test_round_trip(self, model, model_path, encoder, preprocessor):
        store = ModelStore(model_path, preprocessor)
        store.save(model)
        restored = store.load()

        vector = encoder.encode("hello")
        assert restored.network.run(vector) == model.network.run(vector)
        assert restored.classifier.classify("see you") == "goodbye"
        assert restored.responses == model.responses
        assert restored.vocabulary == model.vocabulary

    def test_missing_classifier_key_loads_untrained_classifier(self, model, model_path):
        data = model.to_dict()
        del data["classifier"]
        JsonSerializer.save(data, model_path)

        restored = ModelStore(model_path).load()
        assert not restored.classifier.is_trained
        assert restored.network.is_trained

    def test_missing_file(self, model_path):
        store = ModelStore(model_path)
        assert not store.exists()
        with pytest.raises(ModelLoadError):
            store.load()

    @pytest.mark.parametrize("content", [
        "",
        "{truncated",
        "[]",
        '{"network": {}, "responses": {}, "vocabulary": []}',
        '{"responses": {}, "vocabulary": []}',
    ])
    def test_invalid_file(self, model_path, content):
        model_path.parent.mkdir(parents=True)
        model_path.write_text(content, encoding="utf-8")

        with pytest.raises(ModelLoadError):
            ModelStore(model_path).load()

    @pytest.mark.parametrize("classifier", [
        {"documents": [["only-one-field"]]},
        {"documents": [["hello", "greeting", "extra"]]},
        {"documents": 5},
        {"documents": [["hello", 3]]},
        "not-an-object",
    ])
    def test_malformed_classifier_section(self, model, model_path, classifier):
        data = model.to_dict()
        data["classifier"] = classifier
        JsonSerializer.save(data, model_path)

        with pytest.raises(ModelLoadError):
            ModelStore(model_path).load()

    def test_incompatible_weights(self, model, model_path):
        data = model.to_dict()
        data["network"]["layers"][0]["weights"] = [[0.0]]
        JsonSerializer.save(data, model_path)

        with pytest.raises(ModelLoadError):
            ModelStore(model_path).load()

    def test_unwritable_location(self, model, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")

        with pytest.raises(PersistenceError):
            ModelStore(blocker / "trained-model.json").save(model)
