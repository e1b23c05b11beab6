from typing import Type

from attr import dataclass, field
from pulumi import ComponentResource, Input, Output, ResourceOptions
from pulumi_azure_native import storage


@dataclass
class StorageArgs:
    account_name: str
    location: Input[str]
    resource_group_name: Input[str]
    storage_account_args: dict = field(factory=dict)
    tags: dict = field(factory=dict)


class StorageAccountDefaults:
    """
    A set of predefined Azure Storage Account property configurations for a
    Function App backing store. Values given in
    `StorageArgs.storage_account_args` take precedence.

    Shared key access stays enabled: the Functions host and the content share
    authenticate with the account key connection string.
    """

    access_tier: storage.AccessTier = storage.AccessTier.HOT
    allow_blob_public_access: bool = False
    allow_shared_key_access: bool = True
    enable_https_traffic_only: bool = True
    kind: storage.Kind = storage.Kind.STORAGE_V2
    minimum_tls_version: storage.MinimumTlsVersion = (
        storage.MinimumTlsVersion.TLS1_2
    )
    sku: storage.SkuArgs = storage.SkuArgs(name=storage.SkuName.STANDARD_LRS)


def get_defaults(
    defaults_class: Type[StorageAccountDefaults] = StorageAccountDefaults,
) -> dict:
    return {
        k: v
        for k, v in vars(defaults_class).items()
        if not k.startswith("__") and not callable(v)
    }


class StorageChain(ComponentResource):
    """
    Create the Storage Account backing a Function App and expose its
    connection string.
    """

    def __init__(
        self,
        name: str,
        args: StorageArgs,
        opts: ResourceOptions = None,
    ):
        super().__init__("funcapp:storage:StorageChain", name, None, opts)

        self.opts = ResourceOptions.merge(opts, ResourceOptions(parent=self))

        self.storage_account = storage.StorageAccount(
            resource_name=f"{name}-account",
            **{
                **get_defaults(),
                **args.storage_account_args,
                "account_name": args.account_name,
                "location": args.location,
                "resource_group_name": args.resource_group_name,
                "tags": args.tags,
            },
            opts=self.opts,
        )

        self.__get_and_set_secrets(
            account_name=self.storage_account.name,
            resource_group_name=args.resource_group_name,
        )

        self.register_outputs(
            {
                "storage_account_name": self.storage_account.name,
                "storage_connection_string": self.storage_connection_string,
            }
        )

    def __get_and_set_secrets(
        self,
        account_name: Output[str],
        resource_group_name: Input[str],
    ) -> None:
        account_keys = storage.list_storage_account_keys_output(
            account_name=account_name,
            resource_group_name=resource_group_name,
        )
        primary_key: Output[str] = Output.secret(
            account_keys.apply(lambda sak: sak.keys[0].value)
        )
        self.storage_connection_string: Output[str] = Output.secret(
            Output.concat(
                "DefaultEndpointsProtocol=https;AccountName=",
                account_name,
                ";EndpointSuffix=core.windows.net;AccountKey=",
                primary_key,
            )
        )
