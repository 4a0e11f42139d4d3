"""
Elasticsearch Migration Modules

The migration is a fixed sequence of focused, single-responsibility steps:
- collector: Snapshot the source Elasticsearch, Pods, PVCs and PVs
- guard: Set the Retain reclaim policy on source PVs
- deleter: Delete the source Elasticsearch resource and force-delete its Pods
- recreator: Recreate PVs and the Elasticsearch resource in the target
- convergence: Wait for Pods to run and for the cluster UUID to be preserved
- cleanup: Delete the stale source PVs

MigrationOrchestrator runs them in order and stops at the first failure.
"""

from .base import MigrationContext, MigrationStep
from .cleanup import Cleanup
from .collector import ResourceCollector
from .convergence import ConvergenceWaiter, IdentityVerifier
from .deleter import Deleter
from .guard import ReclaimPolicyGuard
from .orchestrator import MigrationOrchestrator, default_steps
from .recreator import Recreator, sanitize_elasticsearch, sanitize_volume

__all__ = [
    "MigrationContext",
    "MigrationStep",
    "MigrationOrchestrator",
    "default_steps",
    "ResourceCollector",
    "ReclaimPolicyGuard",
    "Deleter",
    "Recreator",
    "ConvergenceWaiter",
    "IdentityVerifier",
    "Cleanup",
    "sanitize_volume",
    "sanitize_elasticsearch",
]
