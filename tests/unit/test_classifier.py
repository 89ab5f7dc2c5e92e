"""Tests for classification models and answer-lookup classifiers."""

import pytest

from ercluster.classifier import (
    Candidate,
    Classification,
    ClassificationResult,
    ClassifiedCandidate,
    LookupClassifier,
    OracleClassifier,
    classify_candidate,
)
from helpers import NameClassifier, Person, duplicate, non_duplicate, person_id


@pytest.mark.unit
def test_classification_result_constructors() -> None:
    """Test shortcut constructors and serialization."""
    assert ClassificationResult.duplicate(0.7).classification == Classification.DUPLICATE
    assert ClassificationResult.non_duplicate().confidence == 1.0
    unknown = ClassificationResult.unknown("no data")
    assert unknown.to_dict() == {"classification": "unknown", "confidence": 0.0, "explanation": "no data"}


@pytest.mark.unit
@pytest.mark.parametrize("confidence", [-0.1, 1.5])
def test_classification_result_rejects_confidence_out_of_range(confidence: float) -> None:
    """Test confidence must lie in [0, 1]."""
    with pytest.raises(ValueError, match="confidence"):
        ClassificationResult(Classification.DUPLICATE, confidence)


@pytest.mark.unit
def test_classified_candidate_shortcuts() -> None:
    """Test classification shortcuts on a classified candidate."""
    a, b = Person(1, "A"), Person(2, "B")

    assert duplicate(a, b).is_duplicate
    assert non_duplicate(a, b).classification == Classification.NON_DUPLICATE
    assert not non_duplicate(a, b).is_duplicate


@pytest.mark.unit
def test_classify_candidate_wraps_result() -> None:
    """Test classify_candidate pairs the candidate with the verdict."""
    candidate = Candidate(Person(1, "A"), Person(2, "A"))

    classified = classify_candidate(NameClassifier(), candidate)

    assert isinstance(classified, ClassifiedCandidate)
    assert classified.candidate is candidate
    assert classified.is_duplicate


@pytest.mark.unit
def test_oracle_classifier_is_symmetric() -> None:
    """Test gold pairs are duplicates in both directions, all else is not."""
    a, b, c = Person(1, "A"), Person(2, "B"), Person(3, "C")
    oracle = OracleClassifier([Candidate(a, b)], person_id)

    assert oracle.classify(a, b).classification == Classification.DUPLICATE
    assert oracle.classify(b, a).classification == Classification.DUPLICATE
    result = oracle.classify(a, c)
    assert result.classification == Classification.NON_DUPLICATE
    assert result.confidence == 1.0


@pytest.mark.unit
def test_lookup_classifier_answers_observed_pairs() -> None:
    """Test remembered results are returned symmetrically, others are unknown."""
    a, b, c = Person(1, "A"), Person(2, "B"), Person(3, "C")
    lookup = LookupClassifier(person_id, [duplicate(a, b, 0.8)])

    assert lookup.classify(b, a) == ClassificationResult.duplicate(0.8)
    assert lookup.classify(a, c).classification == Classification.UNKNOWN
    assert lookup.classify(a, c).confidence == 0.0

    lookup.update([non_duplicate(b, a, 0.6)])
    assert lookup.classify(a, b) == ClassificationResult.non_duplicate(0.6)
