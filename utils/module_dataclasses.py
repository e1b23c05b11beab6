from dataclasses import dataclass

from pulumi import Input


@dataclass
class FunctionAppSettings:
    """
    Values materialized as application settings on the Function App.

    Args:
        storage_connection_string (Input[str]): Connection string of the
            backing Storage Account.
        instrumentation_key (Input[str]): Application Insights key.
        app_insights_connection_string (Input[str]): Application Insights
            connection string.
        content_share (str): Azure Files share holding the app content.
        worker_runtime (str): FUNCTIONS_WORKER_RUNTIME value.
        extension_version (str): FUNCTIONS_EXTENSION_VERSION value.
        use_content_share (bool): Consumption and Elastic Premium plans run
            from an Azure Files content share, dedicated plans do not.
    """

    storage_connection_string: Input[str]
    instrumentation_key: Input[str]
    app_insights_connection_string: Input[str]
    content_share: str
    worker_runtime: str = "dotnet-isolated"
    extension_version: str = "~4"
    use_content_share: bool = True
