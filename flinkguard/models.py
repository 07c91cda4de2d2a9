"""Data models for FlinkCluster resources.

A `FlinkCluster` is a value snapshot of the resource as the API server sees it.
Dataclass equality is structural, so two snapshots compare equal exactly when
every modelled field and every preserved unknown spec key is equal.
"""
import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Type, Union

from jsonschema import ValidationError, validate

from .exceptions import MalformedResource

GROUP = "flinkoperator.k8s.io"
VERSION = "v1alpha1"
KIND = "FlinkCluster"
API_VERSION = f"{GROUP}/{VERSION}"


class PullPolicy(str, Enum):
    """Image pull policies."""
    ALWAYS = 'Always'
    IF_NOT_PRESENT = 'IfNotPresent'
    NEVER = 'Never'


class AccessScope(str, Enum):
    """Reachability of the JobManager service."""
    CLUSTER = 'Cluster'
    VPC = 'VPC'
    EXTERNAL = 'External'


class RestartPolicy(str, Enum):
    """Restart policies accepted for a job."""
    NEVER = 'Never'
    ON_FAILURE = 'OnFailure'


class CleanupAction(str, Enum):
    """What to do with the cluster after the job finishes."""
    DELETE_CLUSTER = 'DeleteCluster'
    DELETE_TASK_MANAGER = 'DeleteTaskManager'
    KEEP_CLUSTER = 'KeepCluster'


# Integer fields of the resource are int32.
_NULLABLE_INT = {
    "type": ["integer", "null"],
    "minimum": -2147483648,
    "maximum": 2147483647,
}
_NULLABLE_STR = {"type": ["string", "null"]}
_NULLABLE_OBJ = {"type": ["object", "null"]}

_RESOURCES_SCHEMA = {
    "type": ["object", "null"],
    "properties": {
        "limits": _NULLABLE_OBJ,
        "requests": _NULLABLE_OBJ,
    },
}

# Structural shape only; value rules live in flinkguard.validator.
RESOURCE_SCHEMA = {
    "type": "object",
    "properties": {
        "metadata": {
            "type": ["object", "null"],
            "properties": {
                "name": _NULLABLE_STR,
                "namespace": _NULLABLE_STR,
            },
        },
        "spec": {
            "type": "object",
            "properties": {
                "image": {
                    "type": ["object", "null"],
                    "properties": {
                        "name": _NULLABLE_STR,
                        "pullPolicy": _NULLABLE_STR,
                    },
                },
                "jobManager": {
                    "type": ["object", "null"],
                    "properties": {
                        "replicas": _NULLABLE_INT,
                        "accessScope": _NULLABLE_STR,
                        "ports": {
                            "type": ["object", "null"],
                            "properties": {
                                "rpc": _NULLABLE_INT,
                                "blob": _NULLABLE_INT,
                                "query": _NULLABLE_INT,
                                "ui": _NULLABLE_INT,
                            },
                        },
                        "resources": _RESOURCES_SCHEMA,
                        "memoryOffHeapRatio": _NULLABLE_INT,
                        "memoryOffHeapMin": _NULLABLE_INT,
                    },
                },
                "taskManager": {
                    "type": ["object", "null"],
                    "properties": {
                        "replicas": _NULLABLE_INT,
                        "ports": {
                            "type": ["object", "null"],
                            "properties": {
                                "rpc": _NULLABLE_INT,
                                "data": _NULLABLE_INT,
                                "query": _NULLABLE_INT,
                            },
                        },
                        "resources": _RESOURCES_SCHEMA,
                    },
                },
                "job": {
                    "type": ["object", "null"],
                    "properties": {
                        "jarFile": _NULLABLE_STR,
                        "parallelism": _NULLABLE_INT,
                        "restartPolicy": _NULLABLE_STR,
                        "cleanupPolicy": {
                            "type": ["object", "null"],
                            "properties": {
                                "afterJobSucceeds": _NULLABLE_STR,
                                "afterJobFails": _NULLABLE_STR,
                            },
                        },
                        "cancelRequested": {"type": ["boolean", "null"]},
                    },
                },
            },
        },
    },
    "required": ["spec"],
}


def _enum_or_raw(enum_cls: Type[Enum], value: Any) -> Any:
    """Return the enum member for `value`, or `value` itself if it is not one."""
    if value is None:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        return value


def _extra(data: Dict[str, Any], known: tuple) -> Dict[str, Any]:
    return {k: copy.deepcopy(v) for k, v in data.items() if k not in known}


@dataclass
class ResourceRequirements:
    """Container resource limits and requests, as Kubernetes quantities."""
    limits: Dict[str, Any] = field(default_factory=dict)
    requests: Dict[str, Any] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'ResourceRequirements':
        data = data or {}
        return cls(
            limits=copy.deepcopy(data.get('limits') or {}),
            requests=copy.deepcopy(data.get('requests') or {}),
            extra=_extra(data, ('limits', 'requests')),
        )


@dataclass
class ImageSpec:
    name: str = ''
    pull_policy: Optional[Union[PullPolicy, str]] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'ImageSpec':
        data = data or {}
        return cls(
            name=data.get('name') or '',
            pull_policy=_enum_or_raw(PullPolicy, data.get('pullPolicy')),
            extra=_extra(data, ('name', 'pullPolicy')),
        )


@dataclass
class ManagerPorts:
    rpc: Optional[int] = None
    blob: Optional[int] = None
    query: Optional[int] = None
    ui: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'ManagerPorts':
        data = data or {}
        return cls(
            rpc=data.get('rpc'),
            blob=data.get('blob'),
            query=data.get('query'),
            ui=data.get('ui'),
            extra=_extra(data, ('rpc', 'blob', 'query', 'ui')),
        )


@dataclass
class WorkerPorts:
    rpc: Optional[int] = None
    data: Optional[int] = None
    query: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'WorkerPorts':
        data = data or {}
        return cls(
            rpc=data.get('rpc'),
            data=data.get('data'),
            query=data.get('query'),
            extra=_extra(data, ('rpc', 'data', 'query')),
        )


@dataclass
class ManagerSpec:
    """The JobManager: the single coordinating replica of the cluster."""
    replicas: Optional[int] = None
    access_scope: Optional[Union[AccessScope, str]] = None
    ports: ManagerPorts = field(default_factory=ManagerPorts)
    resources: ResourceRequirements = field(default_factory=ResourceRequirements)
    memory_off_heap_ratio: Optional[int] = None
    memory_off_heap_min: Optional[int] = None  # MiB
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'ManagerSpec':
        data = data or {}
        return cls(
            replicas=data.get('replicas'),
            access_scope=_enum_or_raw(AccessScope, data.get('accessScope')),
            ports=ManagerPorts.from_dict(data.get('ports')),
            resources=ResourceRequirements.from_dict(data.get('resources')),
            memory_off_heap_ratio=data.get('memoryOffHeapRatio'),
            memory_off_heap_min=data.get('memoryOffHeapMin'),
            extra=_extra(data, (
                'replicas', 'accessScope', 'ports', 'resources',
                'memoryOffHeapRatio', 'memoryOffHeapMin',
            )),
        )


@dataclass
class WorkerSpec:
    """The TaskManagers: the scaled-out execution replicas."""
    replicas: Optional[int] = None
    ports: WorkerPorts = field(default_factory=WorkerPorts)
    resources: ResourceRequirements = field(default_factory=ResourceRequirements)
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'WorkerSpec':
        data = data or {}
        return cls(
            replicas=data.get('replicas'),
            ports=WorkerPorts.from_dict(data.get('ports')),
            resources=ResourceRequirements.from_dict(data.get('resources')),
            extra=_extra(data, ('replicas', 'ports', 'resources')),
        )


@dataclass
class CleanupPolicy:
    after_job_succeeds: Optional[Union[CleanupAction, str]] = None
    after_job_fails: Optional[Union[CleanupAction, str]] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional['CleanupPolicy']:
        if data is None:
            return None
        return cls(
            after_job_succeeds=_enum_or_raw(CleanupAction, data.get('afterJobSucceeds')),
            after_job_fails=_enum_or_raw(CleanupAction, data.get('afterJobFails')),
            extra=_extra(data, ('afterJobSucceeds', 'afterJobFails')),
        )


@dataclass
class JobSpec:
    """A batch job attached to the cluster."""
    jar_file: str = ''
    parallelism: Optional[int] = None
    restart_policy: Optional[Union[RestartPolicy, str]] = None
    cleanup_policy: Optional[CleanupPolicy] = None
    cancel_requested: Optional[bool] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional['JobSpec']:
        if data is None:
            return None
        return cls(
            jar_file=data.get('jarFile') or '',
            parallelism=data.get('parallelism'),
            restart_policy=_enum_or_raw(RestartPolicy, data.get('restartPolicy')),
            cleanup_policy=CleanupPolicy.from_dict(data.get('cleanupPolicy')),
            cancel_requested=data.get('cancelRequested'),
            extra=_extra(data, (
                'jarFile', 'parallelism', 'restartPolicy', 'cleanupPolicy', 'cancelRequested',
            )),
        )


@dataclass
class FlinkCluster:
    """Snapshot of a FlinkCluster resource: its identity plus its spec."""
    name: str = ''
    namespace: str = ''
    image: ImageSpec = field(default_factory=ImageSpec)
    manager: ManagerSpec = field(default_factory=ManagerSpec)
    worker: WorkerSpec = field(default_factory=WorkerSpec)
    job: Optional[JobSpec] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"

    @classmethod
    def from_dict(cls, document: Dict[str, Any]) -> 'FlinkCluster':
        """Build a snapshot from a resource document (camelCase keys).

        Raises:
            MalformedResource: If the document does not have the resource's shape
        """
        try:
            validate(instance=document, schema=RESOURCE_SCHEMA)
        except ValidationError as e:
            path = ".".join(str(p) for p in e.absolute_path) or None
            raise MalformedResource(f"malformed {KIND} resource: {e.message}", field=path) from e

        metadata = document.get('metadata') or {}
        spec = document['spec']
        return cls(
            name=metadata.get('name') or '',
            namespace=metadata.get('namespace') or '',
            image=ImageSpec.from_dict(spec.get('image')),
            manager=ManagerSpec.from_dict(spec.get('jobManager')),
            worker=WorkerSpec.from_dict(spec.get('taskManager')),
            job=JobSpec.from_dict(spec.get('job')),
            extra=_extra(spec, ('image', 'jobManager', 'taskManager', 'job')),
        )
