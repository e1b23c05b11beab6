#!/usr/bin/env python3
"""
Deploy Function App code to infrastructure provisioned by `deploy-infra`.

usage: deploy-code --subscription-id SUBSCRIPTION_ID --environment ENVIRONMENT
                   --project-path PROJECT_PATH [--parameters-file PARAMETERS_FILE]
                   [--base-name BASE_NAME] [--resource-group RESOURCE_GROUP]
                   [--function-app FUNCTION_APP] [--configuration CONFIGURATION]
                   [--runtime {dotnet,dotnet-isolated,python}]
                   [--output-dir OUTPUT_DIR] [--archive-path ARCHIVE_PATH]
                   [--log-level {DEBUG,INFO,WARNING,ERROR}]

The resource group and Function App must already exist. The project is
published, zipped and pushed with `az functionapp deployment source
config-zip`. Exit code 0 on success, 1 on any failure.
"""

import argparse
import sys
from logging import getLogger
from pathlib import Path
from typing import Optional

from scripts.azcli import AzCmd, CommandFailed, CommandRunner
from scripts.cli import (
    add_common_arguments,
    configure_logging,
    read_parameters,
    report_outputs,
    resolve_naming,
)
from scripts.errors import DeploymentError, SubmissionError
from scripts.package_builder import (
    DOTNET_RUNTIMES,
    PYTHON_RUNTIMES,
    PackageBuilder,
)
from scripts import preconditions

log = getLogger("deploy.code")

BUILD_DIR = Path(".build")


def parse_arguments(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="deploy-code",
        description="Build, package and deploy Function App code",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    add_common_arguments(parser)
    parser.add_argument(
        "--project-path",
        type=Path,
        required=True,
        help="Function App project file or directory (required)",
    )
    parser.add_argument(
        "--function-app",
        help="Override the derived Function App name ({base}-{env})",
    )
    parser.add_argument(
        "--configuration",
        default="Release",
        help="Build configuration passed to dotnet publish (default: Release)",
    )
    parser.add_argument(
        "--runtime",
        choices=DOTNET_RUNTIMES + PYTHON_RUNTIMES,
        help="Worker runtime of the project (default: from parameters file)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=BUILD_DIR / "publish",
        help=f"Publish output directory (default: {BUILD_DIR / 'publish'})",
    )
    parser.add_argument(
        "--archive-path",
        type=Path,
        help="Package archive path (default: .build/{function_app}.zip)",
    )
    return parser.parse_args(argv)


def submit_package(
    runner: CommandRunner, resource_group: str, function_app: str, package: Path
) -> None:
    try:
        runner.check_az(
            AzCmd("functionapp", "deployment source config-zip")
            .param("--resource-group", resource_group)
            .param("--name", function_app)
            .param("--src", str(package))
        )
    except CommandFailed as e:
        raise SubmissionError(
            f"Deploying {package} to {function_app} failed: "
            f"{e.result.stderr.strip()}"
        ) from e


def get_function_app_url(
    runner: CommandRunner, resource_group: str, function_app: str
) -> str:
    try:
        result = runner.check_az(
            AzCmd("functionapp", "show")
            .param("--resource-group", resource_group)
            .param("--name", function_app)
            .param("--query", "defaultHostName")
            .param("--output", "tsv")
        )
    except CommandFailed as e:
        raise SubmissionError(
            f"Unable to read the host name of {function_app}"
        ) from e
    return f"https://{result.stdout.strip()}"


def deploy(args: argparse.Namespace, runner: CommandRunner) -> dict[str, str]:
    parameters = read_parameters(args)
    naming = resolve_naming(args, parameters)
    runtime = args.runtime or parameters.worker_runtime
    builder = PackageBuilder(
        project_path=args.project_path,
        output_dir=args.output_dir,
        archive_path=args.archive_path
        or BUILD_DIR / f"{naming.function_app}.zip",
        configuration=args.configuration,
        runtime=runtime,
        runner=runner,
    )

    log.info("STEP 1: Checking local tools...")
    preconditions.require_tools(runner, "az", *builder.required_tools)

    log.info("STEP 2: Checking Azure login...")
    preconditions.ensure_login(runner, args.subscription_id)

    log.info(f"STEP 3: Checking resource group {naming.resource_group}...")
    preconditions.require_resource_group(runner, naming.resource_group)

    log.info(f"STEP 4: Checking Function App {naming.function_app}...")
    preconditions.require_function_app(
        runner, naming.resource_group, naming.function_app
    )

    log.info("STEP 5: Building package...")
    package = builder.build()

    log.info(f"STEP 6: Deploying {package.name} to {naming.function_app}...")
    submit_package(runner, naming.resource_group, naming.function_app, package)

    log.info("STEP 7: Retrieving outputs...")
    outputs = {
        "functionAppName": naming.function_app,
        "functionAppUrl": get_function_app_url(
            runner, naming.resource_group, naming.function_app
        ),
        "resourceGroupName": naming.resource_group,
        "package": str(package),
    }
    report_outputs(outputs)
    return outputs


def main(
    argv: Optional[list[str]] = None, runner: Optional[CommandRunner] = None
) -> int:
    args = parse_arguments(argv)
    configure_logging(args.log_level)

    try:
        deploy(args, runner or CommandRunner())
    except (DeploymentError, ValueError) as e:
        log.error(f"Deployment failed: {e}")
        return 1

    log.info("Deployment completed successfully")
    return 0


if __name__ == "__main__":
    sys.exit(main())
