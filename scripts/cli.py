"""
Command-line plumbing shared by `deploy-infra` and `deploy-code`.
"""

import argparse
from logging import basicConfig, getLevelName, getLogger
from pathlib import Path
from typing import Any, Mapping

from scripts.parameters import (
    DEFAULT_PARAMETERS_FILE,
    DeploymentParameters,
    load_parameters,
)
from utils.naming import NamingContext

log = getLogger("deploy")

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
SECRET_MASK = "********"


def configure_logging(level: str) -> None:
    basicConfig(level=getLevelName(level), format=LOG_FORMAT)


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--subscription-id",
        required=True,
        help="Azure subscription ID to deploy into (required)",
    )
    parser.add_argument(
        "--environment",
        required=True,
        help="Environment tag, e.g. dev, test, prod (required)",
    )
    parser.add_argument(
        "--parameters-file",
        type=Path,
        default=DEFAULT_PARAMETERS_FILE,
        help=f"Parameters file with baseName/location defaults "
        f"(default: {DEFAULT_PARAMETERS_FILE})",
    )
    parser.add_argument(
        "--base-name", help="Override the baseName from the parameters file"
    )
    parser.add_argument(
        "--resource-group",
        help="Override the derived resource group name (rg-{base}-{env})",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Set the log level (default: INFO)",
    )


def resolve_naming(
    args: argparse.Namespace,
    parameters: DeploymentParameters,
    location: str = "",
) -> NamingContext:
    naming = NamingContext(
        base_name=args.base_name or parameters.base_name,
        environment=args.environment,
        location=location or parameters.location,
        resource_group_override=args.resource_group,
        function_app_override=getattr(args, "function_app", None),
    )
    for kind, name in naming.as_dict().items():
        log.debug(f"{kind}: {name}")
    return naming


def read_parameters(args: argparse.Namespace) -> DeploymentParameters:
    log.info(f"Reading parameters from {args.parameters_file}")
    return load_parameters(args.parameters_file)


def report_outputs(outputs: Mapping[str, Any], secret_keys=()) -> None:
    log.info("Deployment outputs:")
    if not outputs:
        log.info("  (none)")
    for key in sorted(outputs):
        value = SECRET_MASK if key in secret_keys else outputs[key]
        log.info(f"  {key}: {value}")
