"""Core building blocks: Kubernetes endpoints, polling, settings, logging."""
