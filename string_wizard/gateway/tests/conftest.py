import os
import tempfile
from pathlib import Path

import pytest

# Config is initialized on import, so set environment variables at the top level.
_CONFIG_DIR = Path(tempfile.mkdtemp(prefix="string-wizard-gateway-"))
os.environ["ROUTING_CONFIG_PATH"] = str(_CONFIG_DIR / "config" / "routing.yml")
os.environ["FUNCTIONS_CONFIG_PATH"] = str(_CONFIG_DIR / "config" / "functions.yml")
os.environ["CALLER_HEADER"] = "x-caller-id"

SAM_TEMPLATE = """
AWSTemplateFormatVersion: '2010-09-09'
Transform: AWS::Serverless-2016-10-31
Globals:
  Function:
    Timeout: 5
Resources:
  EchoFunction:
    Type: AWS::Serverless::Function
    Properties:
      FunctionName: wizard-echo
      CodeUri: string_wizard/functions/echo/
  LengthFunction:
    Type: AWS::Serverless::Function
    Properties:
      FunctionName: wizard-length
      CodeUri: string_wizard/functions/length/
"""


@pytest.fixture(scope="session")
def generated_config():
    """
    Routing and function configuration generated from the packaged interface
    definition, at the paths the gateway config points to.
    """
    from string_wizard.generator.main import generate_files

    (_CONFIG_DIR / "template.yaml").write_text(SAM_TEMPLATE, encoding="utf-8")
    generate_files({"paths": {"output_dir": str(_CONFIG_DIR)}}, project_root=_CONFIG_DIR)
    return _CONFIG_DIR


@pytest.fixture
def client(generated_config):
    from fastapi.testclient import TestClient

    from string_wizard.gateway.main import app

    with TestClient(app) as test_client:
        yield test_client
