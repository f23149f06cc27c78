"""
Intent network tests.

Covers:
- Training bookkeeping (tag order, early stopping, stats)
- Inference on trained and untrained networks
- Serialisation round trip and validation of saved data
"""

import json

import pytest

from intentbot.conversation.corpus import TrainingExample
from intentbot.conversation.network import IntentNetwork
from intentbot.errors import TrainingError


@pytest.fixture
def examples(encoder):
    return [
        TrainingExample(encoder.encode("hello"), "greeting"),
        TrainingExample(encoder.encode("good morning"), "greeting"),
        TrainingExample(encoder.encode("see you later"), "goodbye"),
        TrainingExample(encoder.encode("what are your opening hours"), "qa_response"),
    ]


@pytest.fixture
def trained(examples):
    network = IntentNetwork(seed=3)
    network.train(examples, iterations=300)
    return network


# =============================================================================
# Training
# =============================================================================

class TestTraining:

    def test_tags_follow_first_appearance(self, trained):
        assert trained.tags == ["greeting", "goodbye", "qa_response"]
        assert trained.is_trained

    def test_stats_respect_iteration_limit(self, examples):
        stats = IntentNetwork(seed=1).train(examples, iterations=25, error_threshold=0.0)
        assert stats.iterations == 25
        assert 0.0 <= stats.error <= 1.0

    def test_early_stop_on_error_threshold(self, encoder):
        network = IntentNetwork(seed=0)
        stats = network.train([TrainingExample(encoder.encode("hello"), "greeting")])

        assert stats.iterations < 2000
        assert stats.error < 0.005

    def test_single_intent_is_confident(self, encoder):
        network = IntentNetwork(seed=0)
        network.train([TrainingExample(encoder.encode("hello"), "greeting")])

        tag, score = network.resolve(encoder.encode("hello"))
        assert tag == "greeting"
        assert score > 0.9

    def test_no_examples_raises(self):
        with pytest.raises(TrainingError):
            IntentNetwork().train([])

    def test_wrong_vector_length_raises(self):
        with pytest.raises(ValueError):
            IntentNetwork().train([TrainingExample([0.1] * 5, "short")])

    def test_seeded_training_is_reproducible(self, examples, encoder):
        first = IntentNetwork(seed=11)
        second = IntentNetwork(seed=11)
        first.train(examples, iterations=50)
        second.train(examples, iterations=50)

        vector = encoder.encode("hello there")
        for tag, score in first.run(vector).items():
            assert second.run(vector)[tag] == pytest.approx(score)

    def test_custom_hidden_layers(self, examples):
        network = IntentNetwork(hidden_layers=(4,), seed=0)
        network.train(examples, iterations=10)
        assert network.to_dict()["sizes"] == [100, 4, 3]


# =============================================================================
# Inference
# =============================================================================

class TestInference:

    def test_untrained_network_returns_nothing(self, encoder):
        network = IntentNetwork()
        assert network.run(encoder.encode("hello")) == {}
        assert network.resolve(encoder.encode("hello")) == ("", 0.0)

    def test_scores_are_activations(self, trained, encoder):
        scores = trained.run(encoder.encode("hello"))
        assert set(scores) == {"greeting", "goodbye", "qa_response"}
        assert all(0.0 <= s <= 1.0 for s in scores.values())

    def test_resolve_picks_maximum(self, trained, encoder):
        vector = encoder.encode("see you")
        scores = trained.run(vector)
        tag, score = trained.resolve(vector)
        assert score == max(scores.values())
        assert scores[tag] == score

    def test_empty_text_still_scores(self, trained, encoder):
        # all-zero vector is a valid input
        assert len(trained.run(encoder.encode(""))) == 3

    def test_wrong_input_length_raises(self, trained):
        with pytest.raises(ValueError):
            trained.run([0.0] * 10)


# =============================================================================
# Serialisation
# =============================================================================

class TestSerialisation:

    def test_round_trip_preserves_outputs(self, trained, encoder):
        data = json.loads(json.dumps(trained.to_dict()))
        restored = IntentNetwork.from_dict(data)

        vector = encoder.encode("good morning")
        assert restored.tags == trained.tags
        assert restored.run(vector) == trained.run(vector)

    def test_layout(self, trained):
        data = trained.to_dict()
        assert data["type"] == "feedforward"
        assert data["activation"] == "sigmoid"
        assert data["sizes"] == [100, 10, 8, 6, 3]
        assert len(data["layers"]) == 4
        assert len(data["layers"][0]["weights"]) == 10
        assert len(data["layers"][0]["weights"][0]) == 100

    def test_untrained_round_trip(self):
        restored = IntentNetwork.from_dict(IntentNetwork().to_dict())
        assert not restored.is_trained
        assert restored.hidden_layers == [10, 8, 6]

    @pytest.mark.parametrize("mutate", [
        lambda d: d.update(type="recurrent"),
        lambda d: d.update(activation="relu"),
        lambda d: d.update(sizes=[100]),
        lambda d: d.update(outputs=["greeting"]),
        lambda d: d["layers"].pop(),
        lambda d: d["layers"][0].update(biases=[0.0]),
    ])
    def test_invalid_data_raises(self, trained, mutate):
        data = trained.to_dict()
        mutate(data)
        with pytest.raises(ValueError):
            IntentNetwork.from_dict(data)
