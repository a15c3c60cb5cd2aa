import json

import pytest
from ruamel.yaml import YAML

from fnprotect.cli.main import main
from fnprotect.core.models import PROTECTION_LABEL

REQUEST_YAML = """\
meta:
  tag: hello
input:
  apiVersion: template.fn.crossplane.io/v1beta1
  kind: Input
  cacheTTL: {ttl}
observed:
  composite:
    resource:
      apiVersion: test.crossplane.io/v1
      kind: TestXR
      metadata:
        name: my-test-xr
  resources:
    ready-composed-resource:
      resource:
        apiVersion: test.crossplane.io/v1
        kind: TestComposed
        metadata:
          name: my-test-composed
          labels:
            {label}: "True"
desired:
  resources:
    ready-composed-resource:
      resource:
        apiVersion: test.crossplane.io/v1
        kind: TestComposed
        metadata:
          name: my-test-composed
"""


@pytest.fixture
def request_file(tmp_path):
    def write(ttl="5m"):
        path = tmp_path / "request.yaml"
        path.write_text(REQUEST_YAML.format(ttl=ttl, label=PROTECTION_LABEL), encoding="utf-8")
        return str(path)
    return write


def test_run_prints_yaml_response(request_file, capsys):
    assert main(["run", request_file()]) == 0

    response = YAML(typ='safe').load(capsys.readouterr().out)
    assert response["meta"] == {"tag": "hello", "ttl": "300s"}
    resources = response["desired"]["resources"]
    assert set(resources) == {"ready-composed-resource", "ready-composed-resource-usage", "xr-my-test-xr-usage"}
    assert resources["xr-my-test-xr-usage"]["resource"]["kind"] == "ClusterUsage"


def test_run_json_with_legacy_flag(request_file, capsys):
    assert main(["run", request_file(), "--legacy", "--output", "json"]) == 0

    response = json.loads(capsys.readouterr().out)
    usage = response["desired"]["resources"]["ready-composed-resource-usage"]["resource"]
    assert usage["apiVersion"] == "apiextensions.crossplane.io/v1beta1"
    assert usage["kind"] == "Usage"


def test_run_reports_fatal_result(request_file, capsys):
    assert main(["run", request_file(ttl="5x")]) == 1
    response = YAML(typ='safe').load(capsys.readouterr().out)
    assert response["results"][0]["severity"] == "SEVERITY_FATAL"


def test_cache_ttl_flag_overrides_input(request_file, capsys):
    assert main(["run", request_file(ttl="5x"), "--cache-ttl", "90s"]) == 0
    response = YAML(typ='safe').load(capsys.readouterr().out)
    assert response["meta"]["ttl"] == "90s"


def test_missing_request_file(tmp_path):
    assert main(["run", str(tmp_path / "absent.yaml")]) == 2


def test_non_mapping_request(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    assert main(["inspect", str(path)]) == 2


def test_inspect_renders_report(request_file, capsys):
    assert main(["inspect", request_file()]) == 0
    out = capsys.readouterr().out
    assert "Deletion Protection Report" in out
    assert "Summary Report" in out


def test_no_command_prints_help(capsys):
    assert main([]) == 0
    assert "fnprotect" in capsys.readouterr().out


def test_inspect_documents_prints_guard_yaml(request_file, capsys):
    assert main(["inspect", request_file(), "--documents"]) == 0
    out = capsys.readouterr().out
    assert "Guard Records" in out
    assert "kind: ClusterUsage" in out
    assert "resourceRef:" in out
