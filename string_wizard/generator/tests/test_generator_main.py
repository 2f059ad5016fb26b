import json
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from string_wizard.generator.binder import BindingError
from string_wizard.generator.main import generate_files, load_config, main

SAM_TEMPLATE = """
AWSTemplateFormatVersion: '2010-09-09'
Transform: AWS::Serverless-2016-10-31
Parameters:
  Stage:
    Type: String
    Default: test
Resources:
  EchoFunction:
    Type: AWS::Serverless::Function
    Properties:
      FunctionName: !Sub "wizard-${Stage}-echo"
      CodeUri: string_wizard/functions/echo/
  LengthFunction:
    Type: AWS::Serverless::Function
    Properties:
      FunctionName: !Sub "wizard-${Stage}-length"
      CodeUri: string_wizard/functions/length/
"""


@pytest.fixture
def project(tmp_path):
    (tmp_path / "template.yaml").write_text(SAM_TEMPLATE)
    return tmp_path


def test_generate_writes_all_outputs(project):
    generate_files({}, project_root=project)

    out = project / ".wizard"
    routing = yaml.safe_load((out / "config" / "routing.yml").read_text())
    functions = yaml.safe_load((out / "config" / "functions.yml").read_text())
    openapi = json.loads((out / "openapi.json").read_text())
    policy = json.loads((out / "policy.json").read_text())

    assert [r["method"] for r in routing["routes"]] == ["OPTIONS", "POST", "GET"]
    assert set(functions["functions"]) == {"wizard-test-echo", "wizard-test-length"}
    assert openapi["paths"]["/echo"]["post"]["x-amazon-apigateway-integration"]["uri"].endswith(
        "function:wizard-test-echo/invocations"
    )
    assert len(policy["invokePermissions"]) == 2


def test_generate_is_deterministic(project):
    first = generate_files({}, project_root=project)
    second = generate_files({}, project_root=project)
    assert first == second


def test_dry_run_writes_nothing(project, capsys):
    outputs = generate_files({}, project_root=project, dry_run=True)
    assert not (project / ".wizard").exists()
    assert len(outputs) == 4
    assert "[DryRun]" in capsys.readouterr().out


def test_missing_handler_writes_nothing(project):
    (project / "template.yaml").write_text(SAM_TEMPLATE.split("  LengthFunction:")[0])
    with pytest.raises(BindingError):
        generate_files({}, project_root=project)
    assert not (project / ".wizard").exists()


def test_missing_template(tmp_path):
    with pytest.raises(FileNotFoundError):
        generate_files({}, project_root=tmp_path)


def test_custom_output_dir_and_parameters(project):
    config = {"paths": {"output_dir": "build/"}, "parameters": {"Stage": "prod"}}
    generate_files(config, project_root=project)
    functions = yaml.safe_load((project / "build" / "config" / "functions.yml").read_text())
    assert "wizard-prod-echo" in functions["functions"]


def test_load_config(tmp_path):
    assert load_config(tmp_path / "missing.yml") == {}
    config_file = tmp_path / "generator.yml"
    config_file.write_text("paths:\n  output_dir: out/\n")
    assert load_config(config_file) == {"paths": {"output_dir": "out/"}}


def test_main_exits_on_binding_error(project, monkeypatch, capsys):
    (project / "template.yaml").write_text(SAM_TEMPLATE.split("  LengthFunction:")[0])
    monkeypatch.chdir(project)
    with patch("sys.argv", ["string-wizard-generate", "--template", str(project / "template.yaml")]):
        with pytest.raises(SystemExit) as exc_info:
            main()
    assert exc_info.value.code == 1
    assert "Length" in capsys.readouterr().err


def test_main_writes_outputs(project, monkeypatch):
    monkeypatch.chdir(project)
    with patch(
        "sys.argv",
        ["string-wizard-generate", "--output-dir", str(project / "gen")],
    ):
        main()
    assert Path(project / "gen" / "config" / "routing.yml").exists()
