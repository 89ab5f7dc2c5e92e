"""Pairwise classification contracts consumed by the clustering engine.

Classification itself (similarity measures, rules, models) lives outside this
package; only the result types, the classifier protocol and answer-lookup
classifiers are provided here.
"""

from ercluster.classifier.base import Classifier, classify_candidate
from ercluster.classifier.models import (
    Candidate,
    Classification,
    ClassificationResult,
    ClassifiedCandidate,
)
from ercluster.classifier.oracle import LookupClassifier, OracleClassifier

__all__ = [
    "Candidate",
    "Classification",
    "ClassificationResult",
    "ClassifiedCandidate",
    "Classifier",
    "LookupClassifier",
    "OracleClassifier",
    "classify_candidate",
]
