"""
Deploys and upgrades contracts.

Each invocation resolves to exactly one plan:

    * ``Deploy``: a direct instance, parameters go to the constructor.
    * ``DeployProxy``: an implementation behind a new TransparentUpgradeableProxy,
      parameters go to the initializer.
    * ``UpgradeProxy``: a new implementation for an existing proxy; no initializer runs.

Usage:

    # Deploy a contract with no constructor params
    chaintasks deploy --contract SignatureValidator --network ethereum:local:node

    # Deploy an upgradeable contract with no initializer params
    chaintasks deploy --contract ArtToken --upgradeable --network ethereum:local:node

    # Deploy a contract with constructor params
    chaintasks deploy \\
        --contract RoyaltySplitter \\
        --params '["0x6047Ac71f35aD757eBEc74aDA7Ee0Ae147740247", []]' \\
        --network ethereum:local:node

    # Upgrade a contract at a given address
    chaintasks deploy \\
        --contract ArtTokenV2 \\
        --upgradeable \\
        --address 0x0093b0c1a5df2711576A58942694E80BCC73CeDc \\
        --network ethereum:local:node
"""

import typing
from typing import Any, NamedTuple, Optional, Sequence, Union

import click
from ape.exceptions import ApeException
from eth_typing import ChecksumAddress

from chaintasks.constants import (
    DEFAULT_INITIALIZER,
    PROXY_ADMIN_CONTRACT_NAME,
    PROXY_CONTRACT_NAME,
)
from chaintasks.exceptions import InvalidParameters, VerificationError
from chaintasks.params import get_method_abis, match_method_abi
from chaintasks.proxy import get_admin_address, get_implementation_address


class DeployOptions(NamedTuple):
    contract: str
    address: Optional[str] = None
    params: Sequence[Any] = ()
    upgradeable: bool = False
    verify: bool = False
    initializer: str = DEFAULT_INITIALIZER


class DeploymentRecord(NamedTuple):
    contract_name: str
    address: ChecksumAddress
    implementation_address: Optional[ChecksumAddress]
    upgradeable: bool
    params: Sequence[Any]


class Deploy(NamedTuple):
    contract_name: str
    params: Sequence[Any] = ()

    def execute(self, context) -> ChecksumAddress:
        container = context.get_contract_container(self.contract_name)
        click.echo(f"Deploying contract {self.contract_name}")
        instance = context.deploy(container, *self.params)
        click.echo(f"{self.contract_name} deployed to: {instance.address}")
        return instance.address


class DeployProxy(NamedTuple):
    contract_name: str
    params: Sequence[Any] = ()
    initializer: str = DEFAULT_INITIALIZER

    def _initializer_args(self, container) -> typing.Optional[list]:
        """Checks the initializer params before anything is sent; None means no initializer."""
        initializer_abis = get_method_abis(container, self.initializer)
        if not initializer_abis:
            if self.params:
                raise InvalidParameters(
                    f"{self.contract_name} has no '{self.initializer}' initializer "
                    f"to receive {len(self.params)} parameter(s)."
                )
            return None
        _, initializer_args = match_method_abi(method_abis=initializer_abis, args=self.params)
        return initializer_args

    def execute(self, context) -> ChecksumAddress:
        container = context.get_contract_container(self.contract_name)
        initializer_args = self._initializer_args(container)
        proxy_container = context.get_contract_container(PROXY_CONTRACT_NAME)

        click.echo(f"Deploying contract {self.contract_name}")
        implementation = context.deploy(container)

        data = b""
        if initializer_args is not None:
            data = getattr(implementation, self.initializer).encode_input(*initializer_args)

        click.echo(f"Deploying {PROXY_CONTRACT_NAME} to proxy {self.contract_name}")
        proxy = context.deploy(proxy_container, implementation.address, context.deployer_address, data)
        click.echo(f"{self.contract_name} deployed to: {proxy.address}")
        return proxy.address


class UpgradeProxy(NamedTuple):
    contract_name: str
    proxy_address: str

    def execute(self, context) -> ChecksumAddress:
        container = context.get_contract_container(self.contract_name)
        click.echo(f"Upgrading {self.contract_name} at: {self.proxy_address}")

        # resolve the admin first so that a non-proxy address fails before deploying
        admin_address = get_admin_address(context, self.proxy_address)
        implementation = context.deploy(container)

        proxy_admin = context.get_contract_at(PROXY_ADMIN_CONTRACT_NAME, admin_address)
        context.transact(
            proxy_admin.upgradeAndCall, self.proxy_address, implementation.address, b""
        )
        return self.proxy_address


DeploymentPlan = Union[Deploy, DeployProxy, UpgradeProxy]


def plan_deployment(options: DeployOptions) -> DeploymentPlan:
    """Chooses a plan from the options, rejecting combinations that would do nothing."""
    if not options.contract:
        raise click.BadOptionUsage(option_name="--contract", message="--contract is required.")

    if options.address and not options.upgradeable:
        raise click.BadOptionUsage(
            option_name="--address",
            message=(
                f"--address is only used to upgrade a proxy; "
                f"pass --upgradeable to upgrade the contract at {options.address}."
            ),
        )

    if options.address:
        if options.params:
            raise click.BadOptionUsage(
                option_name="--params",
                message="Initializer parameters cannot be applied when upgrading a proxy.",
            )
        return UpgradeProxy(contract_name=options.contract, proxy_address=options.address)

    if options.upgradeable:
        return DeployProxy(
            contract_name=options.contract,
            params=options.params,
            initializer=options.initializer,
        )

    return Deploy(contract_name=options.contract, params=options.params)


def _verify(context, address: str, constructor_args: Optional[Sequence[Any]] = None) -> None:
    click.echo(f"Verifying contract at {address}")
    try:
        context.verify(address, constructor_args=constructor_args)
    except ApeException as e:
        raise VerificationError(address, str(e)) from e
    click.echo(f"Verified contract at {address}")


def deploy(options: DeployOptions, context) -> DeploymentRecord:
    click.echo(f"Using network {context.network_name}")
    plan = plan_deployment(options)
    address = plan.execute(context)

    implementation_address = None
    if options.upgradeable:
        implementation_address = get_implementation_address(context, address)
        click.echo(f"{address} (impl) deployed to: {implementation_address}")
        if options.verify:
            # verify the implementation, never the proxy
            _verify(context, implementation_address)
    elif options.verify:
        _verify(context, address, constructor_args=list(options.params))

    click.echo("Deploy complete.")
    return DeploymentRecord(
        contract_name=options.contract,
        address=address,
        implementation_address=implementation_address,
        upgradeable=options.upgradeable,
        params=list(options.params),
    )
