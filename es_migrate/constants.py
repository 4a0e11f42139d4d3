"""Centralized constants for es-migrate to eliminate duplicate strings."""

# Elasticsearch custom resource (ECK)
ES_GROUP = "elasticsearch.k8s.elastic.co"
ES_VERSION = "v1"
ES_PLURAL = "elasticsearches"

# ECK labels and annotations
CLUSTER_NAME_LABEL = "elasticsearch.k8s.elastic.co/cluster-name"
CLUSTER_UUID_ANNOTATION = "elasticsearch.k8s.elastic.co/cluster-uuid"

# Core field values
RECLAIM_POLICY_RETAIN = "Retain"
POD_PHASE_RUNNING = "Running"

# Endpoint roles
SOURCE_ROLE = "source"
TARGET_ROLE = "target"

# Metadata fields assigned by the API server; never propagated to another cluster
SERVER_ASSIGNED_METADATA = (
    "creationTimestamp",
    "resourceVersion",
    "uid",
    "generation",
    "managedFields",
    "selfLink",
    "deletionTimestamp",
    "deletionGracePeriodSeconds",
)

# Default poll budget for the convergence and identity checks
DEFAULT_POLL_INTERVAL_SECONDS = 5.0
DEFAULT_POLL_MAX_ATTEMPTS = 30
