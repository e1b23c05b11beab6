"""
Checks run before any billable or destructive operation.

Every `*_available` / `*_exists` / `is_*` check is independent, has no side
effects and returns a bool. The `require_*` / `ensure_*` helpers turn a
failed check into the matching `DeploymentError`.
"""

import shutil
from logging import getLogger
from typing import Optional

from scripts.azcli import AzCmd, CommandRunner
from scripts.errors import (
    AuthenticationError,
    MissingDependencyError,
    PreconditionError,
)

log = getLogger(__name__)

VERSION_ARGS = {
    "az": ["az", "--version"],
    "pulumi": ["pulumi", "version"],
    "dotnet": ["dotnet", "--version"],
}

INSTALL_HINTS = {
    "az": "https://learn.microsoft.com/cli/azure/install-azure-cli",
    "pulumi": "https://www.pulumi.com/docs/install/",
    "dotnet": "https://dotnet.microsoft.com/download",
}


def tool_available(runner: CommandRunner, tool: str) -> bool:
    if shutil.which(tool) is None:
        return False
    return runner.run(VERSION_ARGS.get(tool, [tool, "--version"])).ok


def is_logged_in(runner: CommandRunner) -> bool:
    return runner.az(AzCmd("account", "show")).ok


def resource_group_exists(runner: CommandRunner, name: str) -> bool:
    result = runner.az(AzCmd("group", "exists").param("--name", name))
    return result.ok and result.stdout.strip().lower() == "true"


def function_app_exists(
    runner: CommandRunner, resource_group: str, name: str
) -> bool:
    result = runner.az(
        AzCmd("functionapp", "show")
        .param("--resource-group", resource_group)
        .param("--name", name)
    )
    return result.ok


def require_tools(runner: CommandRunner, *tools: str) -> None:
    for tool in tools:
        if not tool_available(runner, tool):
            hint = INSTALL_HINTS.get(tool)
            message = f"Required tool '{tool}' is not installed or not callable"
            if hint:
                message += f". Install it from {hint}"
            raise MissingDependencyError(message)
        log.debug(f"Found {tool}")


def ensure_login(
    runner: CommandRunner, subscription_id: Optional[str] = None
) -> None:
    """
    Make sure the Azure CLI is authenticated, attempting a single interactive
    `az login` when it is not, then select the subscription.
    """
    if not is_logged_in(runner):
        log.warning("Not logged in to Azure, running 'az login'...")
        # login prompts go straight to the terminal
        login = runner.az(AzCmd("login", ""), capture=False)
        if not login.ok or not is_logged_in(runner):
            raise AuthenticationError("Azure login failed")

    if subscription_id:
        result = runner.az(
            AzCmd("account", "set").param("--subscription", subscription_id)
        )
        if not result.ok:
            raise AuthenticationError(
                f"Unable to select subscription {subscription_id}: "
                f"{result.stderr.strip()}"
            )
    log.info("Azure CLI authenticated")


def require_resource_group(runner: CommandRunner, name: str) -> None:
    if not resource_group_exists(runner, name):
        raise PreconditionError(
            f"Resource group '{name}' does not exist. "
            "Provision the infrastructure first."
        )


def require_function_app(
    runner: CommandRunner, resource_group: str, name: str
) -> None:
    if not function_app_exists(runner, resource_group, name):
        raise PreconditionError(
            f"Function App '{name}' does not exist in resource group "
            f"'{resource_group}'. Provision the infrastructure first."
        )
