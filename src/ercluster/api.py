"""Public API for clustering classified pairs stored as JSONL.

This module provides the high-level entry points used by the CLI:
- Reading classified candidate pairs from JSONL
- Writing clusters to JSONL
- Assembling a clustering pipeline from options
- Clustering a whole file batch by batch
"""

import itertools
import json
from collections.abc import Callable, Iterable, Iterator
from pathlib import Path
from typing import Any, TextIO

from ercluster.audit import AuditLogger
from ercluster.classifier.base import Classifier
from ercluster.classifier.models import (
    Candidate,
    Classification,
    ClassificationResult,
    ClassifiedCandidate,
)
from ercluster.classifier.oracle import LookupClassifier
from ercluster.clustering.base import Clustering
from ercluster.clustering.consistent import ConsistentClustering
from ercluster.clustering.ids import content_hash_generator
from ercluster.clustering.models import Cluster, ClusterIdGenerator, RefineConfig
from ercluster.clustering.refine import RefineCluster
from ercluster.clustering.refined import RefinedTransitiveClosure
from ercluster.clustering.transitive_closure import TransitiveClosure
from ercluster.clustering.union_find import UnionFind

__all__ = [
    "record_id",
    "read_classified_candidates",
    "write_clusters",
    "build_clustering",
    "cluster_file",
]

_REQUIRED_FIELDS = ("record1", "record2", "classification")


def record_id(record: Any) -> Any:
    """Id of a JSON record: its ``"id"`` field for objects, else the value itself."""
    if isinstance(record, dict):
        return record["id"]
    return record


def _parse_line(payload: dict[str, Any]) -> ClassifiedCandidate[Any]:
    missing = [name for name in _REQUIRED_FIELDS if name not in payload]
    if missing:
        raise ValueError(f"missing field(s): {', '.join(missing)}")

    classification = Classification(payload["classification"])
    default_confidence = 0.0 if classification == Classification.UNKNOWN else 1.0
    result = ClassificationResult(
        classification,
        float(payload.get("confidence", default_confidence)),
        str(payload.get("explanation", "")),
    )
    return ClassifiedCandidate(Candidate(payload["record1"], payload["record2"]), result)


def read_classified_candidates(path: str | Path) -> Iterator[ClassifiedCandidate[Any]]:
    """Stream classified pairs from a JSONL file.

    Each non-blank line is an object with ``record1``, ``record2``,
    ``classification`` (``duplicate``, ``non_duplicate`` or ``unknown``) and
    optionally ``confidence`` and ``explanation``. Records are ids or objects
    carrying an ``"id"`` field.

    Parameters
    ----------
    path : str | Path
        Input JSONL file.

    Yields
    ------
    ClassifiedCandidate[Any]
        One classified pair per line.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If a line is not valid JSON or misses required fields.
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    with file_path.open(encoding="utf-8") as f:
        for line_number, line in enumerate(f, start=1):
            if not line.strip():
                continue
            try:
                payload = json.loads(line)
                if not isinstance(payload, dict):
                    raise ValueError("expected a JSON object")
                yield _parse_line(payload)
            except ValueError as e:
                raise ValueError(f"{file_path.name}:{line_number}: {e}") from e


def write_clusters(
    clusters: Iterable[Cluster[Any, Any]],
    stream: TextIO,
    *,
    id_extractor: Callable[[Any], Any] | None = record_id,
) -> int:
    """Write clusters as JSONL (one cluster per line).

    Parameters
    ----------
    clusters : Iterable[Cluster[Any, Any]]
        Clusters to write.
    stream : TextIO
        Output text stream.
    id_extractor : Callable[[Any], Any] | None, optional
        Writes elements as ids; None writes full records.

    Returns
    -------
    int
        Number of clusters written.
    """
    count = 0
    for cluster in clusters:
        stream.write(json.dumps(cluster.to_dict(id_extractor), ensure_ascii=False, default=str) + "\n")
        count += 1
    return count


def build_clustering(
    classifier: Classifier[Any] | None = None,
    *,
    refine: bool = True,
    consistent: bool = False,
    config: RefineConfig | None = None,
    cluster_id_generator: ClusterIdGenerator | None = None,
    id_extractor: Callable[[Any], Any] = record_id,
    logger: AuditLogger | None = None,
) -> Clustering[Any, Any]:
    """Assemble a clustering from options.

    Parameters
    ----------
    classifier : Classifier[Any] | None, optional
        Classifier for refinement; required when ``refine`` is True.
    refine : bool, optional
        Refine transitive clusters, by default True.
    consistent : bool, optional
        Wrap the result in ``ConsistentClustering``, by default False.
    config : RefineConfig | None, optional
        Refinement settings.
    cluster_id_generator : ClusterIdGenerator | None, optional
        Cluster id generator, defaults to content hashes of member ids.
    id_extractor : Callable[[Any], Any], optional
        Maps a record to its id.
    logger : AuditLogger | None, optional
        Audit logger passed to every component.

    Returns
    -------
    Clustering[Any, Any]
        The assembled clustering.

    Raises
    ------
    ValueError
        If refinement is requested without a classifier.
    """
    generator = cluster_id_generator or content_hash_generator()

    clustering: Clustering[Any, Any]
    if refine:
        if classifier is None:
            raise ValueError("Refinement requires a classifier")
        refiner = RefineCluster(classifier, generator, id_extractor, config, logger=logger)
        clustering = RefinedTransitiveClosure(refiner, id_extractor, logger=logger)
    else:
        clustering = TransitiveClosure(id_extractor, generator, logger=logger)

    if consistent:
        clustering = ConsistentClustering(clustering, id_extractor, logger=logger)
    return clustering


def cluster_file(
    input_path: str | Path,
    stream: TextIO,
    *,
    refine: bool = True,
    consistent: bool = False,
    config: RefineConfig | None = None,
    batch_size: int = 1000,
    logger: AuditLogger | None = None,
) -> int:
    """Cluster a JSONL file of classified pairs batch by batch.

    Each batch is fed to the clustering as one online step and the clusters
    it changes are written immediately. Refinement looks up pair weights in
    all pairs read so far; pairs never read count as unknown.
    With ``consistent``, every batch is further split into groups of pairs
    connected by duplicates and each group is its own step, so unrelated
    entities of one batch are never merged.

    Parameters
    ----------
    input_path : str | Path
        Input JSONL file of classified pairs.
    stream : TextIO
        Output stream for cluster JSONL.
    refine : bool, optional
        Refine transitive clusters, by default True.
    consistent : bool, optional
        Keep emitted clusters from splitting, by default False.
    config : RefineConfig | None, optional
        Refinement settings.
    batch_size : int, optional
        Pairs per online step, by default 1000.
    logger : AuditLogger | None, optional
        Audit logger.

    Returns
    -------
    int
        Number of cluster lines written.

    Raises
    ------
    ValueError
        If ``batch_size`` is not positive or the input is malformed.
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be at least 1, got {batch_size}")

    lookup: LookupClassifier[Any, Any] = LookupClassifier(record_id)
    clustering = build_clustering(
        lookup,
        refine=refine,
        consistent=consistent,
        config=config,
        logger=logger,
    )

    written = 0
    pairs = read_classified_candidates(input_path)
    while batch := list(itertools.islice(pairs, batch_size)):
        lookup.update(batch)
        steps = _connected_groups(batch) if consistent else [batch]
        for step in steps:
            written += write_clusters(clustering.cluster(step), stream)
    return written


def _connected_groups(batch: list[ClassifiedCandidate[Any]]) -> list[list[ClassifiedCandidate[Any]]]:
    """Split a batch into groups of pairs linked by duplicates.

    Consistent clustering merges everything returned by one call, so each
    call must only see one entity. Other pairs join the group of one of
    their records, or are dropped when neither record is in a duplicate;
    refinement still finds them through the lookup classifier.
    """
    links: UnionFind[Any] = UnionFind()
    for classified in batch:
        if classified.is_duplicate:
            links.union(record_id(classified.candidate.record1), record_id(classified.candidate.record2))

    groups: dict[Any, list[ClassifiedCandidate[Any]]] = {}
    for classified in batch:
        left = record_id(classified.candidate.record1)
        right = record_id(classified.candidate.record2)
        anchor = left if left in links else right if right in links else None
        if anchor is not None:
            groups.setdefault(links.find(anchor), []).append(classified)
    return list(groups.values())
