import click
import pytest
from ape.exceptions import ApeException

from chaintasks.constants import EIP1967_IMPLEMENTATION_SLOT, PROXY_CONTRACT_NAME
from chaintasks.exceptions import ContractNotFound, InvalidParameters, NotAProxy, VerificationError
from chaintasks.workflow import (
    Deploy,
    DeployOptions,
    DeployProxy,
    UpgradeProxy,
    deploy,
    plan_deployment,
)
from tests.conftest import DEPLOYER, address_slot

OWNER = "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC"


def test_plan_selection():
    assert plan_deployment(DeployOptions(contract="Box", params=[1])) == Deploy("Box", [1])
    assert plan_deployment(DeployOptions(contract="Box", upgradeable=True)) == DeployProxy("Box")
    plan = plan_deployment(DeployOptions(contract="BoxV2", address=OWNER, upgradeable=True))
    assert plan == UpgradeProxy(contract_name="BoxV2", proxy_address=OWNER)


def test_plan_rejects_address_without_upgradeable():
    with pytest.raises(click.BadOptionUsage, match="--upgradeable"):
        plan_deployment(DeployOptions(contract="Box", address=OWNER))


def test_plan_rejects_params_on_upgrade():
    options = DeployOptions(contract="BoxV2", address=OWNER, upgradeable=True, params=[1])
    with pytest.raises(click.BadOptionUsage, match="upgrading a proxy"):
        plan_deployment(options)


def test_plan_requires_contract():
    with pytest.raises(click.BadOptionUsage):
        plan_deployment(DeployOptions(contract=""))


def test_deploy_direct(context, capsys):
    options = DeployOptions(contract="Box", params=[2**80, OWNER.lower()])
    record = deploy(options, context)

    assert context.deployments == [("Box", [2**80, OWNER])]
    assert record.address
    assert record.implementation_address is None
    assert not record.upgradeable
    assert context.verified == []

    output = capsys.readouterr().out
    assert "Using network local" in output
    assert f"Box deployed to: {record.address}" in output
    assert output.strip().endswith("Deploy complete.")


def test_deploy_direct_with_string_encoded_integer(context):
    deploy(DeployOptions(contract="Box", params=["1000000000000000000000", OWNER]), context)
    assert context.deployments == [("Box", [10**21, OWNER])]


def test_deploy_direct_verifies_with_constructor_params(context):
    params = [42, OWNER]
    record = deploy(DeployOptions(contract="Box", params=params, verify=True), context)

    assert context.verified == [(record.address, params)]
    assert record.params == params


def test_deploy_invalid_constructor_params_sends_nothing(context):
    with pytest.raises(InvalidParameters, match="length mismatch"):
        deploy(DeployOptions(contract="Box", params=[1]), context)
    with pytest.raises(InvalidParameters, match="does not match expected ABI type"):
        deploy(DeployOptions(contract="Box", params=[-1, OWNER]), context)
    assert context.deployments == []


def test_deploy_unknown_contract(context):
    with pytest.raises(ContractNotFound):
        deploy(DeployOptions(contract="Missing"), context)
    assert context.deployments == []


def test_deploy_proxy(context, capsys):
    options = DeployOptions(contract="BoxUpgradeable", upgradeable=True, params=[7, OWNER])
    record = deploy(options, context)

    (impl_name, impl_args), (proxy_name, proxy_args) = context.deployments
    assert impl_name == "BoxUpgradeable"
    assert impl_args == []
    assert proxy_name == PROXY_CONTRACT_NAME
    implementation, owner, data = proxy_args
    assert owner == DEPLOYER
    assert data == f"initialize(7,{OWNER})".encode()

    assert record.upgradeable
    assert record.address != implementation
    assert record.implementation_address == implementation

    output = capsys.readouterr().out
    assert f"{record.address} (impl) deployed to: {implementation}" in output


def test_deploy_proxy_without_initializer(context):
    deploy(DeployOptions(contract="BoxUpgradeableV2", upgradeable=True), context)
    _, (_, proxy_args) = context.deployments
    assert proxy_args[2] == b""


def test_deploy_proxy_params_without_initializer(context):
    options = DeployOptions(contract="BoxUpgradeableV2", upgradeable=True, params=[1])
    with pytest.raises(InvalidParameters, match="no 'initialize' initializer"):
        deploy(options, context)
    assert context.deployments == []


def test_deploy_proxy_invalid_initializer_params(context):
    options = DeployOptions(contract="BoxUpgradeable", upgradeable=True, params=[1, "not-an-address"])
    with pytest.raises(InvalidParameters, match="Could not find ABI for 'initialize'"):
        deploy(options, context)
    assert context.deployments == []


def test_deploy_proxy_verifies_implementation_only(context):
    options = DeployOptions(contract="BoxUpgradeable", upgradeable=True, params=[7, OWNER], verify=True)
    record = deploy(options, context)

    assert context.verified == [(record.implementation_address, None)]
    verified_addresses = [address for address, _ in context.verified]
    assert record.address not in verified_addresses


def test_upgrade_proxy(context, capsys):
    deployed = deploy(DeployOptions(contract="BoxUpgradeable", upgradeable=True, params=[7, OWNER]), context)
    implementation_before = deployed.implementation_address

    options = DeployOptions(contract="BoxUpgradeableV2", address=deployed.address, upgradeable=True)
    upgraded = deploy(options, context)

    assert upgraded.address == deployed.address
    assert upgraded.implementation_address != implementation_before
    assert context.deployments[-1] == ("BoxUpgradeableV2", [])

    method_name, (proxy_address, implementation, data) = context.transactions[-1]
    assert method_name == "upgradeAndCall"
    assert proxy_address == deployed.address
    assert implementation == upgraded.implementation_address
    assert data == b""

    output = capsys.readouterr().out
    assert f"Upgrading BoxUpgradeableV2 at: {deployed.address}" in output


def test_upgrade_proxy_verifies_new_implementation(context):
    deployed = deploy(DeployOptions(contract="BoxUpgradeable", upgradeable=True, params=[7, OWNER]), context)
    options = DeployOptions(
        contract="BoxUpgradeableV2", address=deployed.address, upgradeable=True, verify=True
    )
    upgraded = deploy(options, context)
    assert context.verified == [(upgraded.implementation_address, None)]


def test_upgrade_non_proxy_fails_before_deploying(context):
    options = DeployOptions(contract="BoxUpgradeableV2", address=OWNER, upgradeable=True)
    with pytest.raises(NotAProxy, match="Admin slot"):
        deploy(options, context)
    assert context.deployments == []
    assert context.transactions == []


def test_failed_verification_keeps_deployment(context, capsys):
    context.verify_error = ApeException("Contract source code already verified")
    with pytest.raises(VerificationError, match="already verified") as error:
        deploy(DeployOptions(contract="Box", params=[1, OWNER], verify=True), context)

    assert len(context.deployments) == 1
    output = capsys.readouterr().out
    deployed_address = output.split("Box deployed to: ")[1].split()[0]
    assert error.value.address == deployed_address
    assert "Deploy complete." not in output


def test_implementation_is_read_from_slot(context):
    record = deploy(DeployOptions(contract="BoxUpgradeableV2", upgradeable=True), context)
    slot_value = context.get_storage(record.address, EIP1967_IMPLEMENTATION_SLOT)
    assert slot_value == address_slot(record.implementation_address)
