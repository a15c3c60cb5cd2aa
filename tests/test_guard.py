import re

import pytest
from ruamel.yaml import YAML

from fnprotect.core.errors import SynthesisError
from fnprotect.core.models import GuardRecord, Reason, SchemaName, Scope
from fnprotect.guard.exporter import GuardExporter
from fnprotect.guard.naming import NameGenerator
from fnprotect.guard.schema import CURRENT_SCHEMA, LEGACY_SCHEMA, SchemaSelector
from fnprotect.guard.scope import ScopeResolver
from fnprotect.guard.synthesizer import GuardRecordSynthesizer
from fnprotect.validator.validator import GuardValidator

NAME_PATTERN = re.compile(r'^testxr-my-test-xr-[0-9a-f]{6}-fn-protection$')


# --- NameGenerator ---

def test_name_format_is_lowercase_with_hash_and_suffix():
    name = NameGenerator().derive_name("TestXR", "My-Test-XR")
    assert NAME_PATTERN.match(name), name


def test_name_is_deterministic():
    first = NameGenerator().derive_name("TestXR", "my-test-xr", "team-a")
    second = NameGenerator().derive_name("TestXR", "my-test-xr", "team-a")
    assert first == second


def test_namespace_disambiguates_names():
    names = NameGenerator()
    assert names.derive_name("TestXR", "my-test-xr", "team-a") != names.derive_name("TestXR", "my-test-xr", "team-b")
    assert names.derive_name("TestXR", "my-test-xr") != names.derive_name("TestXR", "my-test-xr", "team-a")


def test_empty_and_missing_namespace_hash_alike():
    names = NameGenerator()
    assert names.derive_name("TestXR", "my-test-xr", "") == names.derive_name("TestXR", "my-test-xr", None)


def test_field_boundaries_are_hashed():
    names = NameGenerator()
    assert names.short_hash("a-b", "c") != names.short_hash("a", "b-c")


# --- ScopeResolver / SchemaSelector ---

def test_scope_follows_namespace(target):
    resolver = ScopeResolver()
    assert resolver.resolve_scope(target()).scope is Scope.CLUSTER
    assert resolver.resolve_scope(target()).namespace is None

    namespaced = resolver.resolve_scope(target(namespace="team-a"))
    assert namespaced.scope is Scope.NAMESPACED
    assert namespaced.namespace == "team-a"


def test_schema_selection():
    selector = SchemaSelector()
    assert selector.select_schema(False) is CURRENT_SCHEMA
    assert selector.select_schema(True) is LEGACY_SCHEMA
    assert CURRENT_SCHEMA.api_version == "protection.crossplane.io/v1beta1"
    assert LEGACY_SCHEMA.api_version == "apiextensions.crossplane.io/v1beta1"
    assert (CURRENT_SCHEMA.cluster_kind, CURRENT_SCHEMA.namespaced_kind) == ("ClusterUsage", "Usage")
    assert (LEGACY_SCHEMA.cluster_kind, LEGACY_SCHEMA.namespaced_kind) == ("Usage", "Usage")


# --- GuardRecordSynthesizer ---

def test_cluster_scoped_record(target):
    record = GuardRecordSynthesizer().synthesize(target("TestXR", "my-test-xr"), Reason.LABEL_TRIGGERED)

    assert record.schema is SchemaName.CURRENT
    assert record.scope is Scope.CLUSTER
    assert record.api_version == "protection.crossplane.io/v1beta1"
    assert record.kind == "ClusterUsage"
    assert record.namespace is None
    assert NAME_PATTERN.match(record.name)
    assert (record.of_api_version, record.of_kind, record.of_name) == ("test.crossplane.io/v1", "TestXR", "my-test-xr")
    assert record.reason is Reason.LABEL_TRIGGERED


def test_namespaced_record(target):
    record = GuardRecordSynthesizer().synthesize(
        target("TestXR", "my-test-xr", namespace="test-namespace"), Reason.WATCH_TRIGGERED)

    assert record.scope is Scope.NAMESPACED
    assert record.kind == "Usage"
    assert record.namespace == "test-namespace"


@pytest.mark.parametrize("namespace", [None, "team-a"])
def test_legacy_mode_changes_only_schema(target, namespace):
    synthesizer = GuardRecordSynthesizer()
    resource = target("TestXR", "my-test-xr", namespace=namespace)
    current = synthesizer.synthesize(resource, Reason.LABEL_TRIGGERED, False)
    legacy = synthesizer.synthesize(resource, Reason.LABEL_TRIGGERED, True)

    assert legacy.schema is SchemaName.LEGACY
    assert legacy.api_version == "apiextensions.crossplane.io/v1beta1"
    assert legacy.kind == "Usage"
    for attr in ("name", "namespace", "scope", "of_api_version", "of_kind", "of_name", "reason"):
        assert getattr(legacy, attr) == getattr(current, attr)


def test_synthesis_is_deterministic(target):
    synthesizer = GuardRecordSynthesizer()
    resource = target("TestXR", "my-test-xr", namespace="team-a")
    assert synthesizer.synthesize(resource, Reason.OPERATION_TRIGGERED) == \
        synthesizer.synthesize(resource, Reason.OPERATION_TRIGGERED)


def test_unconvertible_record_raises(target):
    # A resource without a name cannot be referenced by a Usage
    with pytest.raises(SynthesisError, match="cannot convert usage to unstructured"):
        GuardRecordSynthesizer().synthesize(target("TestXR", ""), Reason.LABEL_TRIGGERED)


# --- GuardExporter / GuardValidator ---

def _record(namespace=None):
    return GuardRecord(
        schema=SchemaName.CURRENT,
        scope=Scope.NAMESPACED if namespace else Scope.CLUSTER,
        api_version="protection.crossplane.io/v1beta1",
        kind="Usage" if namespace else "ClusterUsage",
        name="testxr-my-test-xr-abcdef-fn-protection",
        namespace=namespace,
        of_api_version="test.crossplane.io/v1",
        of_kind="TestXR",
        of_name="my-test-xr",
        reason=Reason.CHILD_RESOURCE_TRIGGERED,
    )


def test_exported_document_shape():
    doc = GuardExporter().to_document(_record())
    assert list(doc.keys()) == ["apiVersion", "kind", "metadata", "spec"]
    assert doc == {
        "apiVersion": "protection.crossplane.io/v1beta1",
        "kind": "ClusterUsage",
        "metadata": {"name": "testxr-my-test-xr-abcdef-fn-protection"},
        "spec": {
            "of": {
                "apiVersion": "test.crossplane.io/v1",
                "kind": "TestXR",
                "resourceRef": {"name": "my-test-xr"},
            },
            "reason": "created by function-deletion-protection because a composed resource is protected",
        },
    }


def test_namespace_lives_in_metadata_not_reference():
    doc = GuardExporter().to_document(_record(namespace="team-a"))
    assert doc["metadata"]["namespace"] == "team-a"
    assert doc["spec"]["of"]["resourceRef"] == {"name": "my-test-xr"}


def test_export_multiple_documents_parses_back():
    text = GuardExporter().export([_record(), _record(namespace="team-a")])
    docs = list(YAML(typ='safe').load_all(text))
    assert [d["kind"] for d in docs] == ["ClusterUsage", "Usage"]
    assert text.count("---") == 1


def test_validator_accepts_exported_documents():
    exporter = GuardExporter()
    validator = GuardValidator()
    assert validator.validate(exporter.to_document(_record()))[0] is True
    assert validator.validate(exporter.to_document(_record(namespace="team-a")))[0] is True


def test_validator_rejects_malformed_documents():
    validator = GuardValidator()
    doc = GuardExporter().to_document(_record())

    assert validator.validate("not a map")[0] is False
    assert validator.validate({**doc, "kind": "Deployment"})[0] is False

    missing_spec = {k: v for k, v in doc.items() if k != "spec"}
    valid, err = validator.validate(missing_spec)
    assert valid is False and "spec" in err

    extra = dict(doc)
    extra["status"] = {}
    valid, err = validator.validate(extra)
    assert valid is False and "Unknown field 'status'" in err
