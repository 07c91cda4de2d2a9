import pytest
import yaml

from flinkguard.exceptions import (
    InvalidCleanupAction,
    InvalidIdentity,
    InvalidImageSpec,
    InvalidJobSpec,
    InvalidManagerSpec,
    InvalidMemoryConfig,
    InvalidPort,
    InvalidWorkerSpec,
    PrematureCancelFlag,
)
from flinkguard.utils import load_manifest
from flinkguard.validator import Validator

PORT_FIELDS = [
    ("jobManager", "rpc"),
    ("jobManager", "blob"),
    ("jobManager", "query"),
    ("jobManager", "ui"),
    ("taskManager", "rpc"),
    ("taskManager", "data"),
    ("taskManager", "query"),
]

def set_in(doc, path, value):
    node = doc
    for key in path[:-1]:
        node = node[key]
    node[path[-1]] = value

def check(make_cluster, path, value):
    cluster = make_cluster(lambda doc: set_in(doc, path, value))
    Validator().validate_create(cluster)

def test_valid_cluster(make_cluster):
    Validator().validate_create(make_cluster())

def test_cluster_without_job(make_cluster):
    Validator().validate_create(make_cluster(lambda doc: doc["spec"].pop("job")))

@pytest.mark.parametrize("key", ["name", "namespace"])
def test_empty_identity(make_cluster, key):
    with pytest.raises(InvalidIdentity) as exc:
        check(make_cluster, ["metadata", key], "")
    assert exc.value.field == f"metadata.{key}"

def test_missing_metadata(make_cluster):
    with pytest.raises(InvalidIdentity):
        Validator().validate_create(make_cluster(lambda doc: doc.pop("metadata")))

def test_empty_image_name(make_cluster):
    with pytest.raises(InvalidImageSpec, match="image name is unspecified"):
        check(make_cluster, ["spec", "image", "name"], "")

@pytest.mark.parametrize("policy", ["Always", "IfNotPresent", "Never"])
def test_valid_pull_policies(make_cluster, policy):
    check(make_cluster, ["spec", "image", "pullPolicy"], policy)

@pytest.mark.parametrize("policy", ["Sometimes", "always", "", None])
def test_invalid_pull_policies(make_cluster, policy):
    with pytest.raises(InvalidImageSpec) as exc:
        check(make_cluster, ["spec", "image", "pullPolicy"], policy)
    assert "Always, IfNotPresent, Never" in str(exc.value)

@pytest.mark.parametrize("replicas", [0, 2, 3, None])
def test_manager_replicas_must_be_one(make_cluster, replicas):
    with pytest.raises(InvalidManagerSpec, match="it must be 1"):
        check(make_cluster, ["spec", "jobManager", "replicas"], replicas)

@pytest.mark.parametrize("scope", ["Cluster", "VPC", "External"])
def test_valid_access_scopes(make_cluster, scope):
    check(make_cluster, ["spec", "jobManager", "accessScope"], scope)

@pytest.mark.parametrize("scope", ["Internet", "", None])
def test_invalid_access_scopes(make_cluster, scope):
    with pytest.raises(InvalidManagerSpec, match="access scope"):
        check(make_cluster, ["spec", "jobManager", "accessScope"], scope)

@pytest.mark.parametrize("component,port", PORT_FIELDS)
@pytest.mark.parametrize("value", [0, 80, 1024])
def test_reserved_ports_rejected(make_cluster, component, port, value):
    with pytest.raises(InvalidPort, match="must be > 1024") as exc:
        check(make_cluster, ["spec", component, "ports", port], value)
    assert exc.value.field == f"{component}.ports.{port}"

@pytest.mark.parametrize("component,port", PORT_FIELDS)
def test_missing_port_rejected(make_cluster, component, port):
    with pytest.raises(InvalidPort, match="unspecified"):
        check(make_cluster, ["spec", component, "ports", port], None)

@pytest.mark.parametrize("component,port", PORT_FIELDS)
@pytest.mark.parametrize("value", [1025, 8081, 65535])
def test_unreserved_ports_accepted(make_cluster, component, port, value):
    check(make_cluster, ["spec", component, "ports", port], value)

@pytest.mark.parametrize("ratio", [0, 25, 100])
def test_off_heap_ratio_bounds_inclusive(make_cluster, ratio):
    check(make_cluster, ["spec", "jobManager", "memoryOffHeapRatio"], ratio)

@pytest.mark.parametrize("ratio", [-1, 101, None])
def test_off_heap_ratio_out_of_range(make_cluster, ratio):
    with pytest.raises(InvalidManagerSpec, match="between 0 and 100"):
        check(make_cluster, ["spec", "jobManager", "memoryOffHeapRatio"], ratio)

def test_off_heap_min_equal_to_limit(make_cluster):
    check(make_cluster, ["spec", "jobManager", "memoryOffHeapMin"], 1024)

def test_off_heap_min_above_limit(make_cluster):
    with pytest.raises(InvalidMemoryConfig, match="must be larger than memoryOffHeapMin"):
        check(make_cluster, ["spec", "jobManager", "memoryOffHeapMin"], 1025)

def test_off_heap_min_unspecified(make_cluster):
    with pytest.raises(InvalidMemoryConfig, match="not specified"):
        check(make_cluster, ["spec", "jobManager", "memoryOffHeapMin"], None)

def test_off_heap_min_without_memory_limit(make_cluster):
    def edit(doc):
        doc["spec"]["jobManager"]["resources"] = {}
        doc["spec"]["jobManager"]["memoryOffHeapMin"] = 1
    with pytest.raises(InvalidMemoryConfig):
        Validator().validate_create(make_cluster(edit))

def test_memory_limit_is_floored_to_mebibytes(make_cluster):
    def edit(doc):
        doc["spec"]["jobManager"]["resources"]["limits"]["memory"] = 1048576 * 600 + 1000
        doc["spec"]["jobManager"]["memoryOffHeapMin"] = 600
    Validator().validate_create(make_cluster(edit))

def test_unparseable_memory_limit(make_cluster):
    with pytest.raises(InvalidMemoryConfig, match="memory limit"):
        check(make_cluster, ["spec", "jobManager", "resources", "limits", "memory"], "lots")

@pytest.mark.parametrize("replicas", [0, -1, None])
def test_worker_replicas(make_cluster, replicas):
    with pytest.raises(InvalidWorkerSpec, match=">= 1"):
        check(make_cluster, ["spec", "taskManager", "replicas"], replicas)

def test_single_worker(make_cluster):
    check(make_cluster, ["spec", "taskManager", "replicas"], 1)

def test_job_jar_file_required(make_cluster):
    with pytest.raises(InvalidJobSpec, match="jarFile is unspecified"):
        check(make_cluster, ["spec", "job", "jarFile"], "")

@pytest.mark.parametrize("parallelism,message", [
    (None, "parallelism is unspecified"),
    (0, "must be >= 1"),
    (-3, "must be >= 1"),
])
def test_job_parallelism(make_cluster, parallelism, message):
    with pytest.raises(InvalidJobSpec, match=message):
        check(make_cluster, ["spec", "job", "parallelism"], parallelism)

@pytest.mark.parametrize("policy", ["Never", "OnFailure"])
def test_valid_restart_policies(make_cluster, policy):
    check(make_cluster, ["spec", "job", "restartPolicy"], policy)

@pytest.mark.parametrize("policy,message", [
    (None, "restartPolicy is unspecified"),
    ("Always", "invalid job restartPolicy"),
])
def test_invalid_restart_policies(make_cluster, policy, message):
    with pytest.raises(InvalidJobSpec, match=message):
        check(make_cluster, ["spec", "job", "restartPolicy"], policy)

def test_cleanup_policy_required(make_cluster):
    with pytest.raises(InvalidJobSpec, match="cleanupPolicy is unspecified"):
        check(make_cluster, ["spec", "job", "cleanupPolicy"], None)

@pytest.mark.parametrize("action", ["DeleteCluster", "DeleteTaskManager", "KeepCluster"])
@pytest.mark.parametrize("case", ["afterJobSucceeds", "afterJobFails"])
def test_valid_cleanup_actions(make_cluster, case, action):
    check(make_cluster, ["spec", "job", "cleanupPolicy", case], action)

@pytest.mark.parametrize("action", ["DeleteJob", "", None])
@pytest.mark.parametrize("case", ["afterJobSucceeds", "afterJobFails"])
def test_invalid_cleanup_actions(make_cluster, case, action):
    with pytest.raises(InvalidCleanupAction, match=f"cleanupPolicy.{case}") as exc:
        check(make_cluster, ["spec", "job", "cleanupPolicy", case], action)
    assert exc.value.field == f"job.cleanupPolicy.{case}"

def test_cancel_requested_on_new_job(make_cluster):
    with pytest.raises(PrematureCancelFlag):
        check(make_cluster, ["spec", "job", "cancelRequested"], True)

@pytest.mark.parametrize("cancel", [False, None])
def test_cancel_not_requested_on_new_job(make_cluster, cancel):
    check(make_cluster, ["spec", "job", "cancelRequested"], cancel)

def test_first_failure_is_reported(make_cluster):
    def edit(doc):
        doc["metadata"]["name"] = ""
        doc["spec"]["image"]["name"] = ""
        doc["spec"]["taskManager"]["replicas"] = 0
    with pytest.raises(InvalidIdentity):
        Validator().validate_create(make_cluster(edit))

def test_manager_checked_before_worker(make_cluster):
    def edit(doc):
        doc["spec"]["jobManager"]["replicas"] = 2
        doc["spec"]["taskManager"]["replicas"] = 0
    with pytest.raises(InvalidManagerSpec):
        Validator().validate_create(make_cluster(edit))

def test_create_is_idempotent(make_cluster):
    validator = Validator()
    valid = make_cluster()
    validator.validate_create(valid)
    validator.validate_create(valid)

    invalid = make_cluster(lambda doc: set_in(doc, ["spec", "image", "pullPolicy"], "Sometimes"))
    for _ in range(2):
        with pytest.raises(InvalidImageSpec):
            validator.validate_create(invalid)

@pytest.mark.parametrize("limit", [float("inf"), float("-inf"), float("nan")])
def test_non_finite_memory_limit(make_cluster, limit):
    with pytest.raises(InvalidMemoryConfig, match="memory limit") as exc:
        check(make_cluster, ["spec", "jobManager", "resources", "limits", "memory"], limit)
    assert exc.value.field == "jobManager.resources.limits.memory"

@pytest.mark.parametrize("limit", [".inf", ".nan"])
def test_non_finite_memory_limit_from_yaml(tmp_path, document, limit):
    path = tmp_path / "cluster.yaml"
    path.write_text(
        yaml.safe_dump(document).replace("memory: 1Gi", f"memory: {limit}", 1)
    )
    cluster = load_manifest(path)
    with pytest.raises(InvalidMemoryConfig):
        Validator().validate_create(cluster)
