import os
import sys

# Ensure the 'src' directory is in the python path so we can import fnprotect
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

import pytest

from fnprotect.core.models import PROTECTION_LABEL, TargetResource


def _manifest(kind, name, namespace=None, labels=None, api_version="test.crossplane.io/v1"):
    metadata = {"name": name}
    if namespace:
        metadata["namespace"] = namespace
    if labels:
        metadata["labels"] = dict(labels)
    return {"apiVersion": api_version, "kind": kind, "metadata": metadata}


@pytest.fixture
def manifest():
    """Builder for unstructured Kubernetes objects."""
    return _manifest


@pytest.fixture
def target():
    """Builder for TargetResources."""
    def build(kind="TestComposed", name="my-test-composed", namespace=None, labels=None,
              api_version="test.crossplane.io/v1"):
        return TargetResource.from_manifest(_manifest(kind, name, namespace, labels, api_version))
    return build


@pytest.fixture
def protected_labels():
    return {PROTECTION_LABEL: "true"}
