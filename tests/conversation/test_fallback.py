"""
Bayesian fallback classifier tests.
"""

import pytest

from intentbot.conversation.fallback import FallbackClassifier
from intentbot.errors import TrainingError


@pytest.fixture
def classifier(preprocessor):
    classifier = FallbackClassifier(preprocessor)
    classifier.add_document("hello there", "greeting")
    classifier.add_document("good morning", "greeting")
    classifier.add_document("see you later", "goodbye")
    classifier.train()
    return classifier


class TestFallbackClassifier:

    def test_classify(self, classifier):
        assert classifier.classify("hello") == "greeting"
        assert classifier.classify("see you soon") == "goodbye"

    def test_classifications_sorted_and_normalised(self, classifier):
        classifications = classifier.get_classifications("hello")
        assert [tag for tag, _ in classifications] == ["greeting", "goodbye"]
        assert sum(p for _, p in classifications) == pytest.approx(1.0)
        assert classifications[0][1] >= classifications[1][1]

    def test_unseen_words_fall_back_to_priors(self, classifier):
        classifications = dict(classifier.get_classifications("xyzzy qwerty"))
        assert classifications["greeting"] == pytest.approx(2 / 3)

    def test_classification_score(self, classifier):
        assert classifier.classification_score("hello", "greeting") > 0.5
        assert classifier.classification_score("hello", "missing") == 0.0

    def test_single_tag_is_certain(self, preprocessor):
        classifier = FallbackClassifier(preprocessor)
        classifier.add_document("hello", "greeting")
        classifier.train()
        assert classifier.get_classifications("anything") == [("greeting", pytest.approx(1.0))]

    def test_untrained(self):
        classifier = FallbackClassifier()
        assert not classifier.is_trained
        assert classifier.classify("hello") == "unknown"
        assert classifier.get_classifications("hello") == []

    def test_train_without_documents_raises(self):
        with pytest.raises(TrainingError):
            FallbackClassifier().train()

    def test_train_without_tokens_raises(self):
        classifier = FallbackClassifier()
        classifier.add_document("hi", "greeting")
        with pytest.raises(TrainingError):
            classifier.train()
        assert not classifier.is_trained


class TestPersistence:

    def test_round_trip_refits(self, classifier, preprocessor):
        restored = FallbackClassifier.from_dict(classifier.to_dict(), preprocessor)
        assert restored.is_trained
        assert restored.documents == classifier.documents
        assert restored.get_classifications("good day") == classifier.get_classifications("good day")

    def test_empty_documents_stay_untrained(self):
        restored = FallbackClassifier.from_dict({"documents": []})
        assert not restored.is_trained

    def test_unfittable_documents_stay_untrained(self):
        restored = FallbackClassifier.from_dict({"documents": [["?!", "noise"]]})
        assert not restored.is_trained
        assert restored.documents == [("?!", "noise")]
