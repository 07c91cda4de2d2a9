from pathlib import Path
from typing import Any, Dict, Union

import yaml

from flinkguard.exceptions import MalformedResource
from flinkguard.models import FlinkCluster

def read_document(path: Union[str, Path]) -> Dict[str, Any]:
    """Read a single YAML or JSON resource document."""
    path = Path(path).expanduser()
    if not path.exists():
        raise FileNotFoundError(f"Manifest not found: {path}")
    with open(path) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise MalformedResource(f"invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise MalformedResource(f"{path} does not contain a resource document")
    return data

def load_manifest(path: Union[str, Path]) -> FlinkCluster:
    return FlinkCluster.from_dict(read_document(path))
