"""Move an ECK-managed Elasticsearch cluster and its volumes between Kubernetes clusters."""

__version__ = "0.1.0"
