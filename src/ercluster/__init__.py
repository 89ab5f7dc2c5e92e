"""Online clustering of classified duplicate pairs.

This package provides:
- Classification contracts (ercluster.classifier) — pair verdicts and classifiers
- Clustering (ercluster.clustering) — transitive closure, refinement, consistency
- Detection (ercluster.detection) — online pair-based duplicate detection
- Audit (ercluster.audit) — JSONL event logging
- CLI (ercluster.cli) — command-line interface
- Public API (ercluster.api) — JSONL adapters and pipeline assembly
"""

__version__ = "0.1.0"
__license__ = "MIT"

from ercluster.api import build_clustering, cluster_file, read_classified_candidates, write_clusters
from ercluster.classifier import (
    Candidate,
    Classification,
    ClassificationResult,
    ClassifiedCandidate,
    Classifier,
)
from ercluster.clustering import (
    Cluster,
    ConsistentClustering,
    RefineCluster,
    RefineConfig,
    RefinedTransitiveClosure,
    TransitiveClosure,
)
from ercluster.detection import OnlineDuplicateDetection
from ercluster.errors import ClassificationError, ClusteringError, ExceptionContext, InvariantError

__all__ = [
    "__version__",
    "__license__",
    "Candidate",
    "Classification",
    "ClassificationResult",
    "ClassifiedCandidate",
    "Classifier",
    "Cluster",
    "ConsistentClustering",
    "RefineCluster",
    "RefineConfig",
    "RefinedTransitiveClosure",
    "TransitiveClosure",
    "OnlineDuplicateDetection",
    "ClassificationError",
    "ClusteringError",
    "ExceptionContext",
    "InvariantError",
    "build_clustering",
    "cluster_file",
    "read_classified_candidates",
    "write_clusters",
]
