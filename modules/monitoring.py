from attr import dataclass, field
from pulumi import ComponentResource, Input, Output, ResourceOptions
from pulumi_azure_native import applicationinsights, operationalinsights


@dataclass
class MonitoringArgs:
    workspace_name: str
    app_insights_name: str
    location: Input[str]
    resource_group_name: Input[str]
    retention_in_days: int = 30
    tags: dict = field(factory=dict)


class Monitoring(ComponentResource):
    """
    Create a Log Analytics workspace and the workspace-based Application
    Insights component that reports into it.
    """

    def __init__(
        self,
        name: str,
        args: MonitoringArgs,
        opts: ResourceOptions = None,
    ):
        super().__init__("funcapp:monitoring:Monitoring", name, None, opts)

        self.opts = ResourceOptions.merge(opts, ResourceOptions(parent=self))

        self.log_analytics = operationalinsights.Workspace(
            resource_name=f"{name}-workspace",
            workspace_name=args.workspace_name,
            location=args.location,
            resource_group_name=args.resource_group_name,
            retention_in_days=args.retention_in_days,
            sku=operationalinsights.WorkspaceSkuArgs(name="PerGB2018"),
            tags=args.tags,
            opts=self.opts,
        )

        self.app_insights = applicationinsights.Component(
            resource_name=f"{name}-insights",
            resource_name_=args.app_insights_name,
            application_type="web",
            kind="web",
            ingestion_mode="LogAnalytics",
            location=args.location,
            resource_group_name=args.resource_group_name,
            workspace_resource_id=self.log_analytics.id,
            tags=args.tags,
            opts=ResourceOptions(parent=self.log_analytics),
        )

        self.instrumentation_key: Output[str] = Output.secret(
            self.app_insights.instrumentation_key
        )
        self.connection_string: Output[str] = Output.secret(
            self.app_insights.connection_string
        )

        self.register_outputs(
            {
                "log_analytics_workspace_id": self.log_analytics.id,
                "app_insights_name": self.app_insights.name,
            }
        )
