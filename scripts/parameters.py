from pathlib import Path
from typing import Any

import yaml
from attr import dataclass

from scripts.errors import ParametersError

DEFAULT_PARAMETERS_FILE = Path("func-app") / "parameters.yaml"


@dataclass(frozen=True)
class DeploymentParameters:
    """
    Default values read from the parameters file at the start of each run.

    Args:
        base_name (str): Prefix for every derived resource name.
        location (str): Azure region of the resource group and resources.
        hosting_plan_sku (str): App Service plan SKU. Defaults to "Y1".
        worker_runtime (str): Functions worker runtime. Defaults to
            "dotnet-isolated".
        deploy_static_web_app (bool): Whether the template also creates the
            Static Web App. Defaults to False.
    """

    base_name: str
    location: str
    hosting_plan_sku: str = "Y1"
    worker_runtime: str = "dotnet-isolated"
    deploy_static_web_app: bool = False


def _parse_bool(value: Any, key: str, path: Path) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise ParametersError(
        f"Parameters file {path}: '{key}' must be true or false, got {value!r}"
    )


def load_parameters(path: Path) -> DeploymentParameters:
    path = Path(path)
    if not path.is_file():
        raise ParametersError(f"Parameters file not found: {path}")

    try:
        with path.open(encoding="utf-8") as handle:
            raw: Any = yaml.safe_load(handle) or {}
    except yaml.YAMLError as e:
        raise ParametersError(f"Parameters file {path} is not valid YAML: {e}") from e

    if not isinstance(raw, dict):
        raise ParametersError(f"Parameters file {path} must contain a mapping")

    for key in ("baseName", "location"):
        if not raw.get(key):
            raise ParametersError(f"Parameters file {path} is missing '{key}'")

    return DeploymentParameters(
        base_name=str(raw["baseName"]),
        location=str(raw["location"]),
        hosting_plan_sku=raw.get("hostingPlanSku", "Y1"),
        worker_runtime=raw.get("workerRuntime", "dotnet-isolated"),
        deploy_static_web_app=_parse_bool(
            raw.get("deployStaticWebApp", False), "deployStaticWebApp", path
        ),
    )
