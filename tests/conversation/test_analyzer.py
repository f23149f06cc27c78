"""
Entity and sentiment analysis tests.

spaCy-backed extraction is exercised through a fake pipeline so no
model download is needed.
"""

from types import SimpleNamespace

import pytest

from intentbot.conversation import analyzer as analyzer_module
from intentbot.conversation.analyzer import (
    AdvancedAnalyzer,
    Analysis,
    Entities,
    SpacyEntityExtractor,
)


def fake_pipeline(*ents):
    """Callable standing in for a loaded spaCy Language."""
    doc = SimpleNamespace(ents=[SimpleNamespace(text=t, label_=l) for t, l in ents])
    return lambda text: doc


class TestSentiment:

    @pytest.fixture
    def analyzer(self, stub_extractor):
        return AdvancedAnalyzer(entity_extractor=stub_extractor)

    @pytest.mark.parametrize("text,score,label", [
        ("I hate this", -1, "negative"),
        ("I love this, it is great!", 1, "positive"),  # "great!" is not a lexicon word
        ("I love it and it is great", 2, "positive"),
        ("good bad", 0, "neutral"),
        ("HATE hate Hate", -3, "negative"),
        ("", 0, "neutral"),
        ("the weather today", 0, "neutral"),
    ])
    def test_scores(self, analyzer, text, score, label):
        analysis = analyzer.analyze(text)
        assert analysis.sentiment_score == score
        assert analysis.sentiment == label

    def test_punctuation_blocks_match(self, analyzer):
        assert analyzer.sentiment_score("terrible!") == 0

    def test_custom_lexicon(self, stub_extractor):
        analyzer = AdvancedAnalyzer(stub_extractor, positive_words=["Yay"], negative_words=["boo"])
        assert analyzer.sentiment_score("yay yay boo") == 1

    def test_entities_come_from_extractor(self, stub_extractor):
        stub_extractor.entities = Entities(people=["Ada"])
        analysis = AdvancedAnalyzer(stub_extractor).analyze("Ada says hi")

        assert analysis.entities.people == ["Ada"]
        assert stub_extractor.calls == ["Ada says hi"]


class TestAnalysis:

    def test_to_dict_layout(self):
        analysis = Analysis(Entities(places=["Paris"]), "negative", -2)
        assert analysis.to_dict() == {
            "entities": {"people": [], "places": ["Paris"], "organizations": [], "dates": []},
            "sentiment": "negative",
            "sentimentScore": -2,
        }
        assert analysis.is_negative

    def test_label_boundaries(self):
        assert AdvancedAnalyzer.label(1) == "positive"
        assert AdvancedAnalyzer.label(0) == "neutral"
        assert AdvancedAnalyzer.label(-1) == "negative"


class TestSpacyEntityExtractor:

    def test_labels_map_to_buckets(self):
        extractor = SpacyEntityExtractor()
        extractor._nlp = fake_pipeline(
            ("Ada Lovelace", "PERSON"),
            ("London", "GPE"),
            ("the Alps", "LOC"),
            ("Acme", "ORG"),
            ("next Tuesday", "DATE"),
            ("five", "CARDINAL"),
        )

        entities = extractor.extract("Ada Lovelace flew from London to the Alps for Acme next Tuesday, five times")

        assert entities.people == ["Ada Lovelace"]
        assert entities.places == ["London", "the Alps"]
        assert entities.organizations == ["Acme"]
        assert entities.dates == ["next Tuesday"]

    def test_blank_text_skips_pipeline(self):
        extractor = SpacyEntityExtractor()
        assert extractor.extract("   ") == Entities()
        assert extractor._nlp is None

    def test_missing_model_falls_back_to_blank(self, monkeypatch):
        def missing(name):
            raise OSError(f"[E050] Can't find model '{name}'")

        monkeypatch.setattr(analyzer_module.spacy, "load", missing)
        extractor = SpacyEntityExtractor("not_a_model")

        assert extractor.extract("Ada visited London") == Entities()
        assert extractor._nlp is not None
