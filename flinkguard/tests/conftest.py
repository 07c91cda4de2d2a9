import copy

import pytest

from flinkguard.models import FlinkCluster

DOCUMENT = {
    "apiVersion": "flinkoperator.k8s.io/v1alpha1",
    "kind": "FlinkCluster",
    "metadata": {"name": "wordcount", "namespace": "default"},
    "spec": {
        "image": {"name": "flink:1.8.1", "pullPolicy": "IfNotPresent"},
        "jobManager": {
            "replicas": 1,
            "accessScope": "Cluster",
            "ports": {"rpc": 6123, "blob": 6124, "query": 6125, "ui": 8081},
            "resources": {"limits": {"memory": "1Gi", "cpu": "200m"}},
            "memoryOffHeapRatio": 25,
            "memoryOffHeapMin": 600,
        },
        "taskManager": {
            "replicas": 2,
            "ports": {"rpc": 6122, "data": 6121, "query": 6125},
            "resources": {"limits": {"memory": "2Gi", "cpu": "200m"}},
        },
        "job": {
            "jarFile": "./examples/streaming/WordCount.jar",
            "className": "org.apache.flink.streaming.examples.wordcount.WordCount",
            "args": ["--input", "./README.txt"],
            "parallelism": 2,
            "restartPolicy": "Never",
            "cleanupPolicy": {
                "afterJobSucceeds": "DeleteCluster",
                "afterJobFails": "KeepCluster",
            },
        },
        "flinkProperties": {"taskmanager.numberOfTaskSlots": "1"},
    },
}

@pytest.fixture
def make_document():
    """Return a factory for fresh, valid FlinkCluster documents."""
    def make():
        return copy.deepcopy(DOCUMENT)
    return make

@pytest.fixture
def document(make_document):
    return make_document()

@pytest.fixture
def make_cluster(make_document):
    """Return a factory that parses a valid document after applying `edit` to it."""
    def make(edit=None):
        doc = make_document()
        if edit:
            edit(doc)
        return FlinkCluster.from_dict(doc)
    return make
