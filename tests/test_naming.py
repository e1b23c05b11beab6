import pytest

from utils.naming import NamingContext, storage_account_name

NAMES = [
    ("azurefuncapp", "dev"),
    ("orders", "prod"),
    ("my-very-long-function-application", "staging"),
    ("Billing-API", "qa2"),
    ("x", "y"),
]


def test_reference_names():
    naming = NamingContext(base_name="azurefuncapp", environment="dev")

    assert naming.resource_group == "rg-azurefuncapp-dev"
    assert naming.function_app == "azurefuncapp-dev"
    assert naming.storage_account == "azurefuncappdevsan"


@pytest.mark.parametrize("base_name,environment", NAMES)
def test_function_app_and_resource_group(base_name, environment):
    naming = NamingContext(base_name=base_name, environment=environment)

    assert naming.function_app == f"{base_name}-{environment}"
    assert naming.resource_group == f"rg-{base_name}-{environment}"


@pytest.mark.parametrize("base_name,environment", NAMES)
def test_storage_account_constraints(base_name, environment):
    naming = NamingContext(base_name=base_name, environment=environment)
    name = naming.storage_account

    assert 0 < len(name) <= 24
    assert "-" not in name
    assert name == name.lower()
    assert name.isalnum()
    assert name == storage_account_name(naming.function_app)
    assert storage_account_name(naming.function_app) == name


def test_storage_account_truncated_to_24_characters():
    name = storage_account_name("my-very-long-function-application-staging")

    assert name == "myverylongfunctionapplic"
    assert len(name) == 24


def test_auxiliary_names_use_function_app_name():
    naming = NamingContext(base_name="azurefuncapp", environment="dev")

    assert naming.log_workspace == "azurefuncapp-dev-law"
    assert naming.app_insights == "azurefuncapp-dev-ai"
    assert naming.hosting_plan == "azurefuncapp-dev-asp"
    assert naming.static_site == "azurefuncapp-dev-swa"


def test_overrides():
    naming = NamingContext(
        base_name="azurefuncapp",
        environment="dev",
        resource_group_override="shared-rg",
        function_app_override="Orders-Api",
    )

    assert naming.resource_group == "shared-rg"
    assert naming.function_app == "Orders-Api"
    assert naming.hosting_plan == "Orders-Api-asp"
    assert naming.storage_account == "ordersapisan"
    assert naming.content_share == "orders-api"


@pytest.mark.parametrize(
    "base_name,environment", [("", "dev"), ("azurefuncapp", "")]
)
def test_empty_values_rejected(base_name, environment):
    with pytest.raises(ValueError):
        NamingContext(base_name=base_name, environment=environment)


def test_as_dict_lists_every_resource():
    names = NamingContext(base_name="azurefuncapp", environment="dev").as_dict()

    assert set(names) == {
        "resource_group",
        "function_app",
        "storage_account",
        "log_workspace",
        "app_insights",
        "hosting_plan",
        "static_site",
    }
