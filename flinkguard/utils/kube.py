import os
from pathlib import Path
from typing import Optional

from kubernetes import config
from kubernetes.config.config_exception import ConfigException

def load_kubeconfig(path: Optional[str] = None) -> Optional[str]:
    """
    Load the kubeconfig from a given path, from the KUBECONFIG_CONTENT env var,
    or from the in-cluster service account, falling back to ~/.kube/config.
    Returns the path used to load the kubeconfig, or None for in-cluster config.
    """
    # CI/CD secret-based loading
    if "KUBECONFIG_CONTENT" in os.environ:
        temp_path = "/tmp/ci-kubeconfig.yaml"
        with open(temp_path, "w") as f:
            f.write(os.environ["KUBECONFIG_CONTENT"])
        config.load_kube_config(config_file=temp_path)
        return temp_path

    # Local path loading
    if path:
        resolved = Path(os.path.expanduser(path)).resolve()
        if not resolved.exists():
            raise FileNotFoundError(f"❌ Kubeconfig not found: {resolved}")
        config.load_kube_config(config_file=str(resolved))
        return str(resolved)

    try:
        config.load_incluster_config()
        return None
    except ConfigException:
        config.load_kube_config()
        return os.path.expanduser(os.environ.get("KUBECONFIG", "~/.kube/config"))
