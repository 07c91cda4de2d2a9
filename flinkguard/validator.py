"""Admission validation for FlinkCluster create and update requests.

Checks stop at the first failure, so a rejected request always carries exactly
one error. The validator holds no state and never mutates its inputs.
"""
import copy
import logging
import math
from enum import Enum
from typing import Any, Optional, Type

from kubernetes.utils import parse_quantity

from .exceptions import (
    InvalidCleanupAction,
    InvalidIdentity,
    InvalidImageSpec,
    InvalidJobSpec,
    InvalidManagerSpec,
    InvalidMemoryConfig,
    InvalidPort,
    InvalidWorkerSpec,
    IrreversibleCancel,
    PrematureCancelFlag,
    SpecImmutable,
    SpecValidationError,
)
from .models import (
    AccessScope,
    CleanupAction,
    FlinkCluster,
    ImageSpec,
    JobSpec,
    ManagerSpec,
    PullPolicy,
    ResourceRequirements,
    RestartPolicy,
    WorkerSpec,
)

logger = logging.getLogger(__name__)

MIN_PORT = 1025
MEBIBYTE = 2 ** 20

_COMPONENT_KEYS = {"jobmanager": "jobManager", "taskmanager": "taskManager"}


def _is_member(enum_cls: Type[Enum], value: Any) -> bool:
    try:
        enum_cls(value)
    except ValueError:
        return False
    return True


def _allowed(enum_cls: Type[Enum]) -> str:
    return ", ".join(m.value for m in enum_cls)


def _show(value: Any) -> str:
    return value.value if isinstance(value, Enum) else repr(value)


class Validator:
    """Validates create and update requests for FlinkCluster resources."""

    def validate_create(self, cluster: FlinkCluster) -> None:
        """Validate a new cluster.

        Raises:
            SpecValidationError: The first failed check
        """
        logger.debug(f"Validating create of FlinkCluster {cluster.key}")
        try:
            self._validate_identity(cluster)
            self._validate_image(cluster.image)
            self._validate_manager(cluster.manager)
            self._validate_worker(cluster.worker)
            self._validate_job(cluster.job)
        except SpecValidationError as e:
            logger.info(f"Rejected create of FlinkCluster {cluster.key}: {e}")
            raise

    def validate_update(self, old: FlinkCluster, new: FlinkCluster) -> None:
        """Validate an update of an existing cluster.

        The spec is immutable except for requesting cancellation of the job,
        which is accepted only when nothing else changes.

        Raises:
            IrreversibleCancel: `cancelRequested` went from true to false
            SpecImmutable: Any other change
        """
        logger.debug(f"Validating update of FlinkCluster {new.key}")
        try:
            if self._is_cancel_request(old, new):
                logger.info(f"Accepted job cancellation request for FlinkCluster {new.key}")
                return
            if new != old:
                raise SpecImmutable("the cluster properties are not updatable")
        except SpecValidationError as e:
            logger.info(f"Rejected update of FlinkCluster {new.key}: {e}")
            raise

    def _is_cancel_request(self, old: FlinkCluster, new: FlinkCluster) -> bool:
        if old.job is None or new.job is None:
            return False

        old_cancel = bool(old.job.cancel_requested)
        new_cancel = bool(new.job.cancel_requested)
        if old_cancel and not new_cancel:
            raise IrreversibleCancel(
                "updating cancelRequested from true to false is not allowed",
                field="job.cancelRequested",
            )
        if old_cancel or not new_cancel:
            return False

        # Only `cancelRequested` may differ.
        old_copy = copy.deepcopy(old)
        old_copy.job.cancel_requested = new.job.cancel_requested
        return old_copy == new

    def _validate_identity(self, cluster: FlinkCluster) -> None:
        if not cluster.name:
            raise InvalidIdentity("cluster name is unspecified", field="metadata.name")
        if not cluster.namespace:
            raise InvalidIdentity("cluster namespace is unspecified", field="metadata.namespace")

    def _validate_image(self, image: ImageSpec) -> None:
        if not image.name:
            raise InvalidImageSpec("image name is unspecified", field="image.name")
        if not _is_member(PullPolicy, image.pull_policy):
            raise InvalidImageSpec(
                f"invalid image pullPolicy: {_show(image.pull_policy)}, "
                f"must be one of: {_allowed(PullPolicy)}",
                field="image.pullPolicy",
            )

    def _validate_manager(self, manager: ManagerSpec) -> None:
        if manager.replicas is None or manager.replicas != 1:
            raise InvalidManagerSpec(
                f"invalid JobManager replicas: {_show(manager.replicas)}, it must be 1",
                field="jobManager.replicas",
            )

        if not _is_member(AccessScope, manager.access_scope):
            raise InvalidManagerSpec(
                f"invalid JobManager access scope: {_show(manager.access_scope)}, "
                f"must be one of: {_allowed(AccessScope)}",
                field="jobManager.accessScope",
            )

        self._validate_port(manager.ports.rpc, "rpc", "jobmanager")
        self._validate_port(manager.ports.blob, "blob", "jobmanager")
        self._validate_port(manager.ports.query, "query", "jobmanager")
        self._validate_port(manager.ports.ui, "ui", "jobmanager")

        ratio = manager.memory_off_heap_ratio
        if ratio is None or ratio < 0 or ratio > 100:
            raise InvalidManagerSpec(
                f"invalid JobManager memoryOffHeapRatio: {_show(ratio)}, "
                "it must be between 0 and 100",
                field="jobManager.memoryOffHeapRatio",
            )

        if manager.memory_off_heap_min is None:
            raise InvalidMemoryConfig(
                "invalid JobManager memory configuration, memoryOffHeapMin is not specified",
                field="jobManager.memoryOffHeapMin",
            )
        limit_mib = self._memory_limit_mib(manager.resources)
        if manager.memory_off_heap_min > limit_mib:
            raise InvalidMemoryConfig(
                f"invalid JobManager memory configuration, memory limit ({limit_mib}Mi) "
                f"must be larger than memoryOffHeapMin ({manager.memory_off_heap_min}Mi)",
                field="jobManager.memoryOffHeapMin",
            )

    def _memory_limit_mib(self, resources: ResourceRequirements) -> int:
        """Memory limit in whole MiB; 0 when no limit is set."""
        limit = resources.limits.get('memory')
        if limit is None:
            return 0
        try:
            quantity = parse_quantity(limit)
        except ValueError as e:
            raise InvalidMemoryConfig(
                f"invalid JobManager memory limit: {limit!r}",
                field="jobManager.resources.limits.memory",
            ) from e
        if not quantity.is_finite():
            raise InvalidMemoryConfig(
                f"invalid JobManager memory limit: {limit!r}, it must be a finite quantity",
                field="jobManager.resources.limits.memory",
            )
        return math.floor(quantity / MEBIBYTE)

    def _validate_worker(self, worker: WorkerSpec) -> None:
        if worker.replicas is None or worker.replicas < 1:
            raise InvalidWorkerSpec(
                f"invalid TaskManager replicas: {_show(worker.replicas)}, it must be >= 1",
                field="taskManager.replicas",
            )

        self._validate_port(worker.ports.rpc, "rpc", "taskmanager")
        self._validate_port(worker.ports.data, "data", "taskmanager")
        self._validate_port(worker.ports.query, "query", "taskmanager")

    def _validate_job(self, job: Optional[JobSpec]) -> None:
        if job is None:
            return

        if not job.jar_file:
            raise InvalidJobSpec("job jarFile is unspecified", field="job.jarFile")

        if job.parallelism is None:
            raise InvalidJobSpec("job parallelism is unspecified", field="job.parallelism")
        if job.parallelism < 1:
            raise InvalidJobSpec(
                f"invalid job parallelism: {job.parallelism}, it must be >= 1",
                field="job.parallelism",
            )

        if job.restart_policy is None:
            raise InvalidJobSpec("job restartPolicy is unspecified", field="job.restartPolicy")
        if not _is_member(RestartPolicy, job.restart_policy):
            raise InvalidJobSpec(
                f"invalid job restartPolicy: {_show(job.restart_policy)}, "
                f"must be one of: {_allowed(RestartPolicy)}",
                field="job.restartPolicy",
            )

        if job.cleanup_policy is None:
            raise InvalidJobSpec("job cleanupPolicy is unspecified", field="job.cleanupPolicy")
        self._validate_cleanup_action(
            "cleanupPolicy.afterJobSucceeds", job.cleanup_policy.after_job_succeeds)
        self._validate_cleanup_action(
            "cleanupPolicy.afterJobFails", job.cleanup_policy.after_job_fails)

        if job.cancel_requested:
            raise PrematureCancelFlag(
                "property `cancelRequested` cannot be set to true for a new job",
                field="job.cancelRequested",
            )

    def _validate_port(self, port: Optional[int], name: str, component: str) -> None:
        prop = f"{_COMPONENT_KEYS[component]}.ports.{name}"
        if port is None:
            raise InvalidPort(f"{component} {name} port is unspecified", field=prop)
        if port < MIN_PORT:
            raise InvalidPort(f"invalid {component} {name} port: {port}, must be > 1024", field=prop)

    def _validate_cleanup_action(self, prop: str, value: Any) -> None:
        if not _is_member(CleanupAction, value):
            raise InvalidCleanupAction(
                f"invalid {prop}: {_show(value)}, must be one of: {_allowed(CleanupAction)}",
                field=f"job.{prop}",
            )
