from pulumi import Config


az_native_config = Config("azure-native")
location: str = az_native_config.require("location")

func_app_configs = Config()
base_name: str = func_app_configs.require("baseName")
environment: str = func_app_configs.get("environment") or "dev"
resource_group_name: str | None = func_app_configs.get("resourceGroupName")
# Function App settings
hosting_plan_sku: str = func_app_configs.get("hostingPlanSku") or "Y1"
worker_runtime: str = (
    func_app_configs.get("workerRuntime") or "dotnet-isolated"
)
extension_version: str = func_app_configs.get("extensionVersion") or "~4"
# Stack version for Linux-hosted runtimes (python)
python_version: str = func_app_configs.get("pythonVersion") or "3.11"
# Static Web App toggle, only a handful of regions host Static Web Apps
deploy_static_web_app: bool = (
    func_app_configs.get_bool("deployStaticWebApp") or False
)
static_web_app_location: str = (
    func_app_configs.get("staticWebAppLocation") or location
)
