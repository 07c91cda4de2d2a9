"""Helpers for loading FlinkCluster manifests and talking to Kubernetes."""
from .kube import load_kubeconfig
from .manifest import load_manifest, read_document

__all__ = ['load_kubeconfig', 'load_manifest', 'read_document']
