from dataclasses import replace
from typing import Optional

from attr import dataclass, field
from pulumi import ComponentResource, Input, Output, ResourceOptions
from pulumi_azure_native import web

from utils.module_dataclasses import FunctionAppSettings

# App Service plan tier per SKU prefix, longest prefix first
SKU_TIERS = (
    ("Y", "Dynamic"),
    ("EP", "ElasticPremium"),
    ("B", "Basic"),
    ("S", "Standard"),
)
PREMIUM_SKU_TIERS = {"v2": "PremiumV2", "v3": "PremiumV3"}
CONTENT_SHARE_TIERS = ("Dynamic", "ElasticPremium")
# Worker runtimes that only run on Linux plans, with their stack prefix
LINUX_STACKS = {"python": "Python"}


def plan_tier(sku: str) -> str:
    """
    Map an App Service plan SKU (Y1, EP1, B1, S1, P1v3...) to its tier.
    """
    if sku.startswith("P") and not sku.startswith("EP"):
        return PREMIUM_SKU_TIERS.get(sku[-2:].lower(), "Premium")
    for prefix, tier in SKU_TIERS:
        if sku.startswith(prefix):
            return tier
    raise ValueError(f"Unsupported hosting plan sku: {sku}")


def linux_fx_version(worker_runtime: str, version: str) -> Optional[str]:
    """
    Return the `linuxFxVersion` stack string for runtimes hosted on Linux
    (e.g. "Python|3.11"), or None when the runtime runs on a Windows plan.
    """
    stack = LINUX_STACKS.get(worker_runtime)
    return f"{stack}|{version}" if stack else None


def build_app_settings(
    settings: FunctionAppSettings,
) -> list[web.NameValuePairArgs]:
    app_settings = {
        "AzureWebJobsStorage": settings.storage_connection_string,
        "FUNCTIONS_EXTENSION_VERSION": settings.extension_version,
        "FUNCTIONS_WORKER_RUNTIME": settings.worker_runtime,
        "APPINSIGHTS_INSTRUMENTATIONKEY": settings.instrumentation_key,
        "APPLICATIONINSIGHTS_CONNECTION_STRING": (
            settings.app_insights_connection_string
        ),
        "WEBSITE_RUN_FROM_PACKAGE": "1",
    }
    if settings.use_content_share:
        app_settings["WEBSITE_CONTENTAZUREFILECONNECTIONSTRING"] = (
            settings.storage_connection_string
        )
        app_settings["WEBSITE_CONTENTSHARE"] = settings.content_share
    if settings.worker_runtime == "dotnet-isolated":
        app_settings["WEBSITE_USE_PLACEHOLDER_DOTNETISOLATED"] = "1"

    return [
        web.NameValuePairArgs(name=key, value=value)
        for key, value in app_settings.items()
    ]


@dataclass
class FunctionAppHostArgs:
    function_app_name: str
    hosting_plan_name: str
    location: Input[str]
    resource_group_name: Input[str]
    settings: FunctionAppSettings
    hosting_plan_sku: str = "Y1"
    python_version: str = "3.11"
    static_site_name: Optional[str] = None
    static_site_location: Optional[Input[str]] = None
    tags: dict = field(factory=dict)


class FunctionAppHost(ComponentResource):
    """
    Create the App Service plan, the Function App running on it and, when
    `static_site_name` is set, a Free tier Static Web App.
    """

    def __init__(
        self,
        name: str,
        args: FunctionAppHostArgs,
        opts: ResourceOptions = None,
    ):
        super().__init__("funcapp:web:FunctionAppHost", name, None, opts)

        self.opts = ResourceOptions.merge(opts, ResourceOptions(parent=self))
        self.static_site: Optional[web.StaticSite] = None
        self.tier = plan_tier(args.hosting_plan_sku)
        self.linux_fx_version = linux_fx_version(
            args.settings.worker_runtime, args.python_version
        )
        self.is_linux = self.linux_fx_version is not None

        self.app_svc_plan = web.AppServicePlan(
            resource_name=f"{name}-plan",
            name=args.hosting_plan_name,
            kind="linux" if self.is_linux else "functionapp",
            location=args.location,
            reserved=self.is_linux,
            resource_group_name=args.resource_group_name,
            sku=web.SkuDescriptionArgs(
                name=args.hosting_plan_sku, tier=self.tier
            ),
            tags=args.tags,
            opts=self.opts,
        )

        settings = replace(
            args.settings, use_content_share=self.tier in CONTENT_SHARE_TIERS
        )

        self.func_app = web.WebApp(
            resource_name=f"{name}-app",
            name=args.function_app_name,
            https_only=True,
            kind="functionapp,linux" if self.is_linux else "functionapp",
            location=args.location,
            resource_group_name=args.resource_group_name,
            server_farm_id=self.app_svc_plan.id,
            site_config=web.SiteConfigArgs(
                app_settings=build_app_settings(settings),
                ftps_state=web.FtpsState.FTPS_ONLY,
                linux_fx_version=self.linux_fx_version,
                min_tls_version=web.SupportedTlsVersions.SUPPORTED_TLS_VERSIONS_1_2,
                use32_bit_worker_process=False,
            ),
            tags=args.tags,
            opts=ResourceOptions(parent=self.app_svc_plan),
        )
        self.func_app_url: Output[str] = Output.concat(
            "https://", self.func_app.default_host_name
        )

        if args.static_site_name:
            self.static_site = web.StaticSite(
                resource_name=f"{name}-static-site",
                name=args.static_site_name,
                location=args.static_site_location or args.location,
                resource_group_name=args.resource_group_name,
                sku=web.SkuDescriptionArgs(name="Free", tier="Free"),
                tags=args.tags,
                opts=self.opts,
            )
            self.static_site_url: Output[str] = Output.concat(
                "https://", self.static_site.default_hostname
            )

        self.register_outputs({"function_app_url": self.func_app_url})
