"""
Resource naming convention shared by the Pulumi program and the deployment
scripts.

    Resource Group:   rg-{base}-{environment}
    Function App:     {base}-{environment}
    Storage Account:  {base}{environment}san (lowercase, alphanumeric, <= 24)
    Log Analytics:    {function_app}-law
    App Insights:     {function_app}-ai
    Hosting Plan:     {function_app}-asp
    Static Web App:   {function_app}-swa
"""

import re
from typing import Optional

from attr import dataclass

STORAGE_ACCOUNT_MAX_LENGTH = 24
STORAGE_ACCOUNT_SUFFIX = "san"


def storage_account_name(function_app_name: str) -> str:
    """
    Storage account names must be 3-24 characters, lowercase letters and
    numbers only.
    """
    candidate = f"{function_app_name}{STORAGE_ACCOUNT_SUFFIX}".lower()
    candidate = re.sub(r"[^a-z0-9]", "", candidate)
    return candidate[:STORAGE_ACCOUNT_MAX_LENGTH]


@dataclass(frozen=True)
class NamingContext:
    base_name: str
    environment: str
    location: str = ""
    resource_group_override: Optional[str] = None
    function_app_override: Optional[str] = None

    def __attrs_post_init__(self):
        if not self.base_name:
            raise ValueError("base_name must not be empty")
        if not self.environment:
            raise ValueError("environment must not be empty")

    @property
    def resource_group(self) -> str:
        if self.resource_group_override:
            return self.resource_group_override
        return f"rg-{self.base_name}-{self.environment}"

    @property
    def function_app(self) -> str:
        if self.function_app_override:
            return self.function_app_override
        return f"{self.base_name}-{self.environment}"

    @property
    def storage_account(self) -> str:
        return storage_account_name(self.function_app)

    @property
    def log_workspace(self) -> str:
        return f"{self.function_app}-law"

    @property
    def app_insights(self) -> str:
        return f"{self.function_app}-ai"

    @property
    def hosting_plan(self) -> str:
        return f"{self.function_app}-asp"

    @property
    def static_site(self) -> str:
        return f"{self.function_app}-swa"

    @property
    def content_share(self) -> str:
        return self.function_app.lower()

    def as_dict(self) -> dict[str, str]:
        return {
            "resource_group": self.resource_group,
            "function_app": self.function_app,
            "storage_account": self.storage_account,
            "log_workspace": self.log_workspace,
            "app_insights": self.app_insights,
            "hosting_plan": self.hosting_plan,
            "static_site": self.static_site,
        }
