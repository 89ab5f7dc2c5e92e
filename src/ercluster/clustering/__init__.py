"""Online clustering of classified duplicate pairs.

This module turns pairwise duplicate decisions into clusters with an
incremental transitive closure, refines chained clusters by partition
scoring, and keeps emitted clusters stable for downstream consumers.
"""

from ercluster.clustering.base import (
    Clustering,
    ClusterSplitHandler,
    check_split,
    get_containing_cluster,
    ignore_splits,
)
from ercluster.clustering.consistent import ConsistentClustering
from ercluster.clustering.ids import (
    compute_cluster_id,
    content_hash_generator,
    int_generator,
    string_generator,
)
from ercluster.clustering.models import Cluster, ClusterIdGenerator, RefineConfig
from ercluster.clustering.oracle import OracleClustering
from ercluster.clustering.refine import RefineCluster, get_weight
from ercluster.clustering.refined import RefinedTransitiveClosure
from ercluster.clustering.transitive_closure import TransitiveClosure

__all__ = [
    "Cluster",
    "ClusterIdGenerator",
    "ClusterSplitHandler",
    "Clustering",
    "ConsistentClustering",
    "OracleClustering",
    "RefineCluster",
    "RefineConfig",
    "RefinedTransitiveClosure",
    "TransitiveClosure",
    "check_split",
    "compute_cluster_id",
    "content_hash_generator",
    "get_containing_cluster",
    "get_weight",
    "ignore_splits",
    "int_generator",
    "string_generator",
]
