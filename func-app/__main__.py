# __main__.py
"""
Pulumi program to create an Azure Function App with its Storage Account,
Log Analytics workspace, Application Insights, hosting plan and an optional
Static Web App.
"""

import modulepath_fixer  # noqa: F401

from configs import (
    base_name,
    deploy_static_web_app,
    environment,
    extension_version,
    hosting_plan_sku,
    location,
    python_version,
    resource_group_name,
    static_web_app_location,
    worker_runtime,
)
from pulumi import export

from modules.monitoring import Monitoring, MonitoringArgs
from modules.storage import StorageArgs, StorageChain
from modules.web import FunctionAppHost, FunctionAppHostArgs
from utils.module_dataclasses import FunctionAppSettings
from utils.naming import NamingContext

### Naming
naming = NamingContext(
    base_name=base_name,
    environment=environment,
    location=location,
    resource_group_override=resource_group_name,
)
# The resource group is created by deploy-infra, not managed by this stack
rg_name = naming.resource_group
default_tags = {
    "environment": environment,
    "application": naming.function_app,
    "managed-by": "pulumi",
}

### Setup Storage
storage = StorageChain(
    name="storage",
    args=StorageArgs(
        account_name=naming.storage_account,
        location=location,
        resource_group_name=rg_name,
        tags=default_tags,
    ),
)

### Create Log Analytics workspace and Application Insights
monitoring = Monitoring(
    name="monitoring",
    args=MonitoringArgs(
        workspace_name=naming.log_workspace,
        app_insights_name=naming.app_insights,
        location=location,
        resource_group_name=rg_name,
        tags=default_tags,
    ),
)

### Create App Service Plan, Function App and Static Web App
host = FunctionAppHost(
    name="host",
    args=FunctionAppHostArgs(
        function_app_name=naming.function_app,
        hosting_plan_name=naming.hosting_plan,
        hosting_plan_sku=hosting_plan_sku,
        python_version=python_version,
        location=location,
        resource_group_name=rg_name,
        settings=FunctionAppSettings(
            storage_connection_string=storage.storage_connection_string,
            instrumentation_key=monitoring.instrumentation_key,
            app_insights_connection_string=monitoring.connection_string,
            content_share=naming.content_share,
            worker_runtime=worker_runtime,
            extension_version=extension_version,
        ),
        static_site_name=naming.static_site if deploy_static_web_app else None,
        static_site_location=static_web_app_location,
        tags=default_tags,
    ),
)


export("functionAppName", host.func_app.name)
export("functionAppUrl", host.func_app_url)
export("resourceGroupName", rg_name)
export("storageAccountName", storage.storage_account.name)
export("appInsightsName", monitoring.app_insights.name)
export("appInsightsInstrumentationKey", monitoring.instrumentation_key)
export("appInsightsConnectionString", monitoring.connection_string)
export("logAnalyticsWorkspaceId", monitoring.log_analytics.id)

if host.static_site:
    export("staticWebAppName", host.static_site.name)
    export("staticWebAppUrl", host.static_site_url)
    export("staticWebAppId", host.static_site.id)
