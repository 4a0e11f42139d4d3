"""Shared pytest fixtures for es-migrate tests."""

import pytest
import structlog

from es_migrate.core.polling import PollPolicy
from es_migrate.models import MigrationState, ResourceSnapshot
from es_migrate.services.migration import MigrationContext
from tests.fakes import (
    CLAIM_NAMES,
    POD_NAMES,
    PV_NAMES,
    FakeClusterEndpoint,
    make_elasticsearch,
    make_pod,
    make_pv,
    make_pvc,
)


@pytest.fixture(autouse=True)
def quiet_structlog():
    """Keep structlog output out of test runs."""
    structlog.configure(
        processors=[structlog.processors.KeyValueRenderer()],
        logger_factory=structlog.ReturnLoggerFactory(),
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()


@pytest.fixture
def fast_policy() -> PollPolicy:
    """Poll policy without waits between attempts."""
    return PollPolicy(interval_seconds=0, max_attempts=5)


@pytest.fixture
def source() -> FakeClusterEndpoint:
    """Source cluster holding es1 in ns: 3 running Pods, 3 PVCs bound to 3 PVs."""
    cluster = FakeClusterEndpoint("source")
    cluster.add(make_elasticsearch("ns", "es1", cluster_uuid="uuid-123"))
    for pod, claim, pv in zip(POD_NAMES, CLAIM_NAMES, PV_NAMES):
        cluster.add(make_pod(pod), make_pvc(claim, pv), make_pv(pv, claim))
    # unrelated cluster in the same namespace
    cluster.add(make_pod("other-es-default-0", cluster="other"), make_pvc("other-data", "pv-other", cluster="other"))
    return cluster


@pytest.fixture
def target() -> FakeClusterEndpoint:
    return FakeClusterEndpoint("target")


@pytest.fixture
def context(source, target, fast_policy) -> MigrationContext:
    return MigrationContext(source=source, target=target, namespace="ns", name="es1", poll_policy=fast_policy)


@pytest.fixture
def snapshot(source) -> ResourceSnapshot:
    """Snapshot equivalent to what the collector reads from the source fixture."""
    return ResourceSnapshot(
        elasticsearch=source.elasticsearches[("ns", "es1")],
        pods=[source.pods[("ns", name)] for name in POD_NAMES],
        claims=[source.pvcs[("ns", name)] for name in CLAIM_NAMES],
        volumes=[source.pvs[name] for name in PV_NAMES],
    )


@pytest.fixture
def state(snapshot) -> MigrationState:
    return MigrationState(snapshot=snapshot, completed_steps=("collect",))
