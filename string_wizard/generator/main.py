#!/usr/bin/env python3
"""
Routing Generator

Bind the interface definition to the functions declared in the SAM deployment
template and generate the gateway configuration.

Usage:
    string-wizard-generate [options]

Options:
    --config PATH       Generator config path (default: generator.yml)
    --template PATH     SAM template path (overrides config)
    --definition PATH   Interface definition path (overrides config)
    --output-dir PATH   Output directory (overrides config)
    --dry-run           Show what would be generated without writing files
    --verbose           Verbose output

Outputs (under the output directory):
    config/routing.yml    routing table consumed by the gateway
    config/functions.yml  function registry consumed by the gateway
    openapi.json          interface definition with integration URIs bound
    policy.json           trust policy and invoke permissions
"""

import argparse
import logging
import sys
from pathlib import Path

import yaml

from string_wizard.common.core.logging_config import setup_logging
from string_wizard.contract import ContractError, load_interface_definition

from .binder import (
    BindingError,
    bind_interface_definition,
    build_routing_table,
    collect_handler_bindings,
)
from .parser import parse_sam_template
from .policy import build_trust_policy
from .renderer import render_functions_yml, render_json, render_routing_yml

logger = logging.getLogger(__name__)


def load_config(config_path: Path) -> dict:
    """Load the configuration file."""
    if not config_path.exists():
        return {}

    with open(config_path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _resolve(raw: str | Path, base_dir: Path) -> Path:
    path = Path(raw)
    if not path.is_absolute():
        path = (base_dir / path).resolve()
    return path


def generate_files(
    config: dict,
    project_root: Path | None = None,
    dry_run: bool = False,
    verbose: bool = False,
) -> dict:
    """
    Generate the gateway configuration.

    Every binding check runs before anything is written, so a failed deployment
    leaves the previous output untouched.

    Args:
        config: generator config
        project_root: project root (default: current directory)
        dry_run: when True, show output without writing files
        verbose: verbose output

    Returns:
        {path: content} of the generated files

    Raises:
        FileNotFoundError: SAM template is missing
        ContractError: interface definition is missing or malformed
        BindingError: handler set does not satisfy the interface definition
    """
    if project_root is None:
        project_root = Path.cwd()

    paths = config.get("paths") or {}

    sam_template_path = _resolve(paths.get("sam_template", "template.yaml"), project_root)
    if not sam_template_path.exists():
        raise FileNotFoundError(f"SAM template not found: {sam_template_path}")

    # Relative paths are resolved from the template's directory.
    base_dir = sam_template_path.parent

    if verbose:
        logger.info(f"Loading SAM template: {sam_template_path}")

    with open(sam_template_path, encoding="utf-8") as f:
        parsed = parse_sam_template(f.read(), config.get("parameters") or {})
    functions = parsed["functions"]
    parameters = parsed["parameters"]

    definition_raw = paths.get("interface_definition")
    definition = load_interface_definition(
        _resolve(definition_raw, base_dir) if definition_raw else None
    )

    if verbose:
        logger.info(
            f"Found {len(functions)} function(s) for {len(definition.operations)} operation(s)"
        )

    bindings = collect_handler_bindings(functions, parameters)
    routing_table = build_routing_table(definition, bindings)
    bound_document = bind_interface_definition(definition.document, routing_table.addresses())
    policy = build_trust_policy(bindings, parameters, config.get("trust_policy"))

    output_dir = _resolve(paths.get("output_dir", ".wizard/"), base_dir)
    targets = {
        _resolve(paths.get("routing_yml", output_dir / "config" / "routing.yml"), base_dir): (
            render_routing_yml(routing_table)
        ),
        _resolve(paths.get("functions_yml", output_dir / "config" / "functions.yml"), base_dir): (
            render_functions_yml(functions, config.get("defaults"))
        ),
        _resolve(paths.get("openapi_json", output_dir / "openapi.json"), base_dir): (
            render_json(bound_document)
        ),
        _resolve(paths.get("policy_json", output_dir / "policy.json"), base_dir): render_json(policy),
    }

    for target, content in targets.items():
        if dry_run:
            print(f"\n[DryRun] Target: {target}")
            print("-" * 60)
            print(content.strip())
            print("-" * 60)
            continue

        if verbose:
            logger.info(f"Generating: {target}")
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "w", encoding="utf-8") as f:
            f.write(content)

    if not dry_run:
        print(f"Generated {len(routing_table.routes)} route(s) for {len(bindings)} function(s)")

    return {str(target): content for target, content in targets.items()}


def main():
    parser = argparse.ArgumentParser(
        description="Generate gateway routing from the interface definition and SAM template"
    )
    parser.add_argument("--config", default="generator.yml", help="Generator config path")
    parser.add_argument("--template", help="SAM template path (overrides config)")
    parser.add_argument("--definition", help="Interface definition path (overrides config)")
    parser.add_argument("--output-dir", help="Output directory (overrides config)")
    parser.add_argument(
        "--dry-run", action="store_true", help="Show what would be generated without writing files"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    args = parser.parse_args()

    setup_logging(log_level="DEBUG" if args.verbose else None)

    # Load configuration.
    config = load_config(Path(args.config))

    # Override with command-line options.
    paths = config.setdefault("paths", {})
    if args.template:
        paths["sam_template"] = str(Path(args.template).resolve())
    if args.definition:
        paths["interface_definition"] = str(Path(args.definition).resolve())
    if args.output_dir:
        paths["output_dir"] = str(Path(args.output_dir).resolve())

    try:
        generate_files(config, dry_run=args.dry_run, verbose=args.verbose)
    except (BindingError, ContractError, FileNotFoundError, yaml.YAMLError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
