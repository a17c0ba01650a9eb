"""Tests for the keyword toxicity heuristic."""

from townsquare.services.toxicity import KeywordToxicityClassifier, get_toxicity_classifier


def test_clean_text_is_low_confidence() -> None:
    estimate = KeywordToxicityClassifier().analyze("Thanks for sharing, this was helpful.")
    assert estimate.toxicity_score == 0
    assert estimate.flagged_keywords == []
    assert estimate.confidence == "Low"


def test_empty_text() -> None:
    estimate = KeywordToxicityClassifier().analyze("")
    assert estimate.toxicity_score == 0
    assert estimate.confidence == "Low"


def test_single_keyword_is_medium() -> None:
    estimate = KeywordToxicityClassifier().analyze("you are all idiots")
    assert estimate.toxicity_score == 15
    assert estimate.flagged_keywords == ["idiot"]
    assert estimate.confidence == "Medium"


def test_caps_and_punctuation_penalties() -> None:
    estimate = KeywordToxicityClassifier().analyze("THIS IS A SCAM!!!")
    assert estimate.toxicity_score == 15 + 20 + 10
    assert estimate.flagged_keywords == ["scam", "EXCESSIVE CAPS"]
    assert estimate.confidence == "Medium"


def test_short_shouting_is_not_penalised() -> None:
    assert KeywordToxicityClassifier().analyze("WOW OK").toxicity_score == 0


def test_three_hits_is_high_confidence() -> None:
    estimate = KeywordToxicityClassifier().analyze("stupid idiot loser")
    assert estimate.confidence == "High"
    assert estimate.toxicity_score == 45


def test_score_and_reported_keywords_are_capped() -> None:
    estimate = KeywordToxicityClassifier().analyze(
        "stupid idiot dumb moron hate kill ugly loser"
    )
    assert estimate.toxicity_score == 100
    assert len(estimate.flagged_keywords) == 5
    assert estimate.confidence == "High"


def test_matching_is_case_insensitive() -> None:
    assert KeywordToxicityClassifier().analyze("Free Money here").flagged_keywords == ["free money"]


def test_custom_keywords() -> None:
    classifier = KeywordToxicityClassifier(["Pineapple"])
    assert classifier.analyze("pineapple on pizza").flagged_keywords == ["pineapple"]
    assert classifier.analyze("you idiot").flagged_keywords == []


def test_default_classifier_uses_keywords() -> None:
    assert isinstance(get_toxicity_classifier(), KeywordToxicityClassifier)
