import logging
from typing import Optional

from kubernetes import client
from kubernetes.client.rest import ApiException

from flinkguard.config import Config
from flinkguard.models import FlinkCluster
from flinkguard.utils import load_kubeconfig, load_manifest
from flinkguard.validator import Validator

logger = logging.getLogger(__name__)

def run_create(file: str) -> FlinkCluster:
    print(f"🧪 Validating new cluster from: {file}")
    cluster = load_manifest(file)
    Validator().validate_create(cluster)
    return cluster

def run_update(old_file: str, new_file: str) -> FlinkCluster:
    print(f"🧪 Validating update {old_file} -> {new_file}")
    old = load_manifest(old_file)
    new = load_manifest(new_file)
    Validator().validate_update(old, new)
    return new

def fetch_cluster(name: str, namespace: str) -> Optional[FlinkCluster]:
    """Fetch the persisted FlinkCluster, or None if it does not exist."""
    api = client.CustomObjectsApi()
    try:
        obj = api.get_namespaced_custom_object(
            group=Config.FLINK_GROUP,
            version=Config.FLINK_VERSION,
            namespace=namespace,
            plural=Config.FLINK_PLURAL,
            name=name
        )
    except ApiException as e:
        if e.status == 404:
            return None
        raise
    return FlinkCluster.from_dict(obj)

def run_live(file: str, kubeconfig: Optional[str] = None) -> str:
    """Validate FILE against the cluster state currently stored in Kubernetes.

    Returns "update" or "create", depending on which path was checked.
    """
    new = load_manifest(file)
    validator = Validator()
    if not new.name or not new.namespace:
        # Nothing to look up; the create checks reject the missing identity
        validator.validate_create(new)

    load_kubeconfig(kubeconfig)
    old = fetch_cluster(new.name, new.namespace)
    if old is None:
        logger.info(f"FlinkCluster {new.key} not found, validating as create")
        validator.validate_create(new)
        return "create"
    logger.info(f"Validating {file} as an update of FlinkCluster {new.key}")
    validator.validate_update(old, new)
    return "update"
