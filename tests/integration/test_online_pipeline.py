"""Integration tests for online duplicate detection with refinement.

Records arrive one at a time; every new record is compared against all
earlier ones by a classifier that gets exactly one pair wrong.
"""

import json
from collections.abc import Callable
from pathlib import Path

import jsonschema
import pytest

from ercluster.audit import AuditLogger
from ercluster.classifier import Candidate, ClassificationResult
from ercluster.clustering import (
    ConsistentClustering,
    RefineCluster,
    RefineConfig,
    RefinedTransitiveClosure,
    content_hash_generator,
)
from ercluster.detection import OnlineDuplicateDetection
from helpers import NameClassifier, Person, person_id

_SCHEMAS_DIR = Path(__file__).parent.parent.parent / "schemas"

PEOPLE = [
    Person(1, "Ann"),
    Person(2, "Ann"),
    Person(3, "Ann"),
    Person(4, "Bob"),
    Person(5, "Bob"),
]


class MislabelingClassifier(NameClassifier):
    """Name classifier that calls records 3 and 4 duplicates."""

    def classify(self, record1: Person, record2: Person) -> ClassificationResult:
        if {record1.id, record2.id} == {3, 4}:
            self.calls += 1
            return ClassificationResult.duplicate(1.0, "mislabel")
        return super().classify(record1, record2)


def _select_all_previous() -> Callable[[Person], list[Candidate[Person]]]:
    seen: list[Person] = []

    def select(new_record: Person) -> list[Candidate[Person]]:
        candidates = [Candidate(new_record, old) for old in seen]
        seen.append(new_record)
        return candidates

    return select


def _refined_closure(logger: AuditLogger | None = None) -> RefinedTransitiveClosure:
    refiner = RefineCluster(MislabelingClassifier(), content_hash_generator(), person_id, logger=logger)
    return RefinedTransitiveClosure(refiner, person_id, logger=logger)


@pytest.mark.integration
def test_refinement_recovers_entities_from_wrong_link(tmp_path: Path) -> None:
    """Test the final refined clusters match the true entities."""
    log_path = tmp_path / "events.jsonl"

    with AuditLogger("online", log_path) as logger:
        clustering = _refined_closure(logger)
        detection = OnlineDuplicateDetection(
            _select_all_previous(), MislabelingClassifier(), clustering, logger=logger
        )
        emitted = [detection.detect_duplicates(person) for person in PEOPLE]

    assert emitted[0] == []
    assert clustering.get_cluster(1).member_ids(person_id) == frozenset({1, 2, 3})
    assert clustering.get_cluster(4).member_ids(person_id) == frozenset({4, 5})
    assert clustering.get_cluster(3) is clustering.get_cluster(2)

    # the transitive closure itself never splits
    assert len(clustering.closure) == 1

    with (_SCHEMAS_DIR / "log_event.schema.json").open() as f:
        schema = json.load(f)
    events = [json.loads(line) for line in log_path.read_text().splitlines()]
    for event in events:
        jsonschema.validate(instance=event, schema=schema)
    modes = {e["data"]["mode"] for e in events if e["event"] == "cluster_refined"}
    assert modes == {"exact"}


@pytest.mark.integration
def test_consistent_clustering_never_exposes_split() -> None:
    """Test every step emits at most one cluster and the final one holds all records."""
    clustering = ConsistentClustering(_refined_closure(), person_id)
    detection = OnlineDuplicateDetection(_select_all_previous(), MislabelingClassifier(), clustering)

    emitted = [detection.detect_duplicates(person) for person in PEOPLE]

    assert all(len(step) <= 1 for step in emitted)
    assert emitted[-1][0].member_ids(person_id) == frozenset({1, 2, 3, 4, 5})


@pytest.mark.integration
@pytest.mark.slow
def test_heuristic_refinement_on_stream() -> None:
    """Test heuristic mode keeps every record in exactly one cluster."""
    people = [Person(i, ["Ann", "Bob", "Cid"][i % 3]) for i in range(1, 31)]
    refiner = RefineCluster(
        MislabelingClassifier(),
        content_hash_generator(),
        person_id,
        RefineConfig(max_small_cluster_size=4, seed=11),
    )
    clustering = RefinedTransitiveClosure(refiner, person_id)
    detection = OnlineDuplicateDetection(_select_all_previous(), MislabelingClassifier(), clustering)

    for person in people:
        detection.detect_duplicates(person)

    clusters = {id(clustering.get_cluster(p.id)): clustering.get_cluster(p.id) for p in people}
    members = sorted(p.id for cluster in clusters.values() for p in cluster)
    assert members == list(range(1, 31))
