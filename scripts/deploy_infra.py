#!/usr/bin/env python3
"""
Provision the Function App infrastructure with the Pulumi program in
`func-app/`.

usage: deploy-infra --subscription-id SUBSCRIPTION_ID --environment ENVIRONMENT
                    [--parameters-file PARAMETERS_FILE] [--base-name BASE_NAME]
                    [--location LOCATION] [--resource-group RESOURCE_GROUP]
                    [--program-dir PROGRAM_DIR] [--hosting-plan-sku SKU]
                    [--worker-runtime RUNTIME] [--static-web-app]
                    [--validate-only] [--log-level {DEBUG,INFO,WARNING,ERROR}]

The resource group is created when it does not exist. The Pulumi stack is
named after the environment, previewed (validation) and then applied.
Exit code 0 on success, 1 on any failure.
"""

import argparse
import sys
from logging import getLogger
from pathlib import Path
from typing import Callable, Optional

from pulumi import automation as auto

from scripts.azcli import AzCmd, CommandFailed, CommandRunner
from scripts.cli import (
    add_common_arguments,
    configure_logging,
    read_parameters,
    report_outputs,
    resolve_naming,
)
from scripts.errors import DeploymentError, SubmissionError
from scripts.parameters import DeploymentParameters
from scripts import preconditions
from utils.naming import NamingContext

log = getLogger("deploy.infra")

PROJECT_NAMESPACE = "funcapp"
DEFAULT_PROGRAM_DIR = Path(__file__).resolve().parents[1] / "func-app"

StackFactory = Callable[[Path, str], auto.Stack]


def parse_arguments(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="deploy-infra",
        description="Provision the Function App infrastructure",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    add_common_arguments(parser)
    parser.add_argument(
        "--location", help="Override the location from the parameters file"
    )
    parser.add_argument(
        "--program-dir",
        type=Path,
        default=DEFAULT_PROGRAM_DIR,
        help="Directory of the Pulumi program (default: func-app/)",
    )
    parser.add_argument(
        "--hosting-plan-sku",
        help="App Service plan SKU, e.g. Y1, EP1, B1 (default: from parameters file)",
    )
    parser.add_argument(
        "--worker-runtime",
        help="FUNCTIONS_WORKER_RUNTIME value (default: from parameters file)",
    )
    parser.add_argument(
        "--static-web-app",
        action="store_true",
        default=None,
        help="Also provision the Static Web App",
    )
    parser.add_argument(
        "--validate-only",
        action="store_true",
        help="Preview the template without applying it",
    )
    return parser.parse_args(argv)


def select_stack(program_dir: Path, environment: str) -> auto.Stack:
    return auto.create_or_select_stack(
        stack_name=environment, work_dir=str(program_dir)
    )


def build_stack_config(
    naming: NamingContext,
    parameters: DeploymentParameters,
    args: argparse.Namespace,
) -> dict[str, auto.ConfigValue]:
    static_web_app = (
        args.static_web_app
        if args.static_web_app is not None
        else parameters.deploy_static_web_app
    )
    values = {
        "azure-native:location": naming.location,
        "azure-native:subscriptionId": args.subscription_id,
        f"{PROJECT_NAMESPACE}:baseName": naming.base_name,
        f"{PROJECT_NAMESPACE}:environment": naming.environment,
        f"{PROJECT_NAMESPACE}:resourceGroupName": naming.resource_group,
        f"{PROJECT_NAMESPACE}:hostingPlanSku": args.hosting_plan_sku
        or parameters.hosting_plan_sku,
        f"{PROJECT_NAMESPACE}:workerRuntime": args.worker_runtime
        or parameters.worker_runtime,
        f"{PROJECT_NAMESPACE}:deployStaticWebApp": str(static_web_app).lower(),
    }
    return {key: auto.ConfigValue(value=value) for key, value in values.items()}


def ensure_resource_group(runner: CommandRunner, naming: NamingContext) -> None:
    if preconditions.resource_group_exists(runner, naming.resource_group):
        log.info(f"Resource group {naming.resource_group} exists")
        return

    log.info(f"Creating resource group {naming.resource_group}...")
    try:
        runner.check_az(
            AzCmd("group", "create")
            .param("--name", naming.resource_group)
            .param("--location", naming.location)
            .param("--tags", f"environment={naming.environment}")
        )
    except CommandFailed as e:
        raise SubmissionError(
            f"Creating resource group {naming.resource_group} failed: "
            f"{e.result.stderr.strip()}"
        ) from e


def _engine_output(line: str) -> None:
    log.info(line.rstrip())


def apply_template(
    stack: auto.Stack,
    config: dict[str, auto.ConfigValue],
    validate_only: bool = False,
) -> dict[str, auto.OutputValue]:
    try:
        stack.set_all_config(config)

        log.info("Validating template (pulumi preview)...")
        stack.preview(on_output=_engine_output)
        if validate_only:
            return {}

        log.info("Applying template (pulumi up)...")
        result = stack.up(on_output=_engine_output)
    except auto.CommandError as e:
        raise SubmissionError(f"Pulumi deployment failed: {e}") from e

    if result.summary.result != "succeeded":
        raise SubmissionError(
            f"Pulumi deployment finished with result '{result.summary.result}'"
        )
    return result.outputs


def deploy(
    args: argparse.Namespace,
    runner: CommandRunner,
    stack_factory: StackFactory = select_stack,
) -> dict[str, auto.OutputValue]:
    parameters = read_parameters(args)
    naming = resolve_naming(args, parameters, location=args.location or "")

    log.info("STEP 1: Checking local tools...")
    preconditions.require_tools(runner, "az", "pulumi")

    log.info("STEP 2: Checking Azure login...")
    preconditions.ensure_login(runner, args.subscription_id)

    log.info(f"STEP 3: Ensuring resource group {naming.resource_group}...")
    ensure_resource_group(runner, naming)

    log.info(f"STEP 4: Selecting stack '{naming.environment}'...")
    try:
        stack = stack_factory(args.program_dir, naming.environment)
    except auto.CommandError as e:
        raise SubmissionError(f"Unable to select Pulumi stack: {e}") from e

    log.info("STEP 5: Deploying template...")
    outputs = apply_template(
        stack,
        build_stack_config(naming, parameters, args),
        validate_only=args.validate_only,
    )

    if args.validate_only:
        log.info("Validation succeeded, nothing was applied")
        return outputs

    log.info("STEP 6: Retrieving outputs...")
    report_outputs(
        {key: output.value for key, output in outputs.items()},
        secret_keys={key for key, output in outputs.items() if output.secret},
    )
    return outputs


def main(
    argv: Optional[list[str]] = None,
    runner: Optional[CommandRunner] = None,
    stack_factory: StackFactory = select_stack,
) -> int:
    args = parse_arguments(argv)
    configure_logging(args.log_level)

    try:
        deploy(args, runner or CommandRunner(), stack_factory)
    except (DeploymentError, ValueError) as e:
        log.error(f"Deployment failed: {e}")
        return 1

    log.info("Deployment completed successfully")
    return 0


if __name__ == "__main__":
    sys.exit(main())
