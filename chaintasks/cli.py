#!/usr/bin/python3
import functools

import click
from ape.cli import ConnectedProviderCommand, account_option, network_option

from chaintasks import tasks, workflow
from chaintasks.context import TaskContext
from chaintasks.exceptions import TaskError
from chaintasks.options import (
    address_option,
    auto_option,
    contract_option,
    count_option,
    initializer_option,
    mnemonic_option,
    params_file_option,
    params_option,
    passphrase_option,
    upgradeable_option,
    verify_option,
    words_option,
)
from chaintasks.params import load_params_file
from chaintasks.types import ChecksumAddress
from chaintasks.utils import check_plugins


def _task_errors(func):
    """Reports task failures as CLI errors; chain and toolchain errors propagate as is."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except TaskError as e:
            raise click.ClickException(str(e)) from e

    return wrapper


@click.group()
def cli():
    """Contract deployment and administration tasks."""


@cli.command(cls=ConnectedProviderCommand)
@network_option()
@account_option()
@contract_option
@address_option(required=False, help="Address of the proxy to upgrade")
@params_option
@params_file_option
@initializer_option
@upgradeable_option
@verify_option
@auto_option
@_task_errors
def deploy(
    network, account, contract, address, params, params_file, initializer, upgradeable, verify, auto
):
    """Deploys and upgrades contracts."""
    if params_file and params:
        raise click.BadOptionUsage(
            option_name="--params-file",
            message="Provide either --params or --params-file, not both.",
        )
    if params_file:
        params = load_params_file(params_file)

    check_plugins(verify=verify)
    options = workflow.DeployOptions(
        contract=contract,
        address=address,
        params=params,
        upgradeable=upgradeable,
        verify=verify,
        initializer=initializer,
    )
    context = TaskContext(network=network, account=account, autosign=auto)
    workflow.deploy(options, context)


@cli.command(cls=ConnectedProviderCommand)
@network_option()
@account_option()
@address_option(help="Address of the contract to grant access to")
@click.option(
    "--actor",
    help="Address of the actor to grant or revoke access",
    type=ChecksumAddress(),
    required=True,
)
@click.option(
    "--role",
    "-r",
    help="String to keccak256 to get the role identifier",
    type=click.STRING,
    required=True,
)
@click.option("--revoke", help="Revoke instead of granting a role", is_flag=True)
@upgradeable_option
@auto_option
@_task_errors
def grant(network, account, address, actor, role, revoke, upgradeable, auto):
    """Grants or revokes a role."""
    options = tasks.GrantOptions(
        address=address, actor=actor, role=role, revoke=revoke, upgradeable=upgradeable
    )
    context = TaskContext(network=network, account=account, autosign=auto)
    tasks.grant(options, context)


@cli.command(cls=ConnectedProviderCommand, name="transfer-ownership")
@network_option()
@account_option()
@address_option(help="Address of the owned contract")
@click.option("--renounce", help="Renounce instead of transferring ownership", is_flag=True)
@click.option(
    "--new-owner",
    help="Address that will receive ownership",
    type=ChecksumAddress(),
    required=False,
)
@upgradeable_option
@auto_option
@_task_errors
def transfer_ownership(network, account, address, renounce, new_owner, upgradeable, auto):
    """Transfers ownership of a contract, or renounces ownership."""
    options = tasks.TransferOwnershipOptions(
        address=address, renounce=renounce, new_owner=new_owner, upgradeable=upgradeable
    )
    tasks.validate_ownership_options(options)
    context = TaskContext(network=network, account=account, autosign=auto)
    tasks.transfer_ownership(options, context)


@cli.command(cls=ConnectedProviderCommand, name="get-impl")
@network_option()
@address_option(help="Address of the proxy")
@_task_errors
def get_impl(network, address):
    """Prints the proxy and impl addresses."""
    tasks.get_impl(address, TaskContext(network=network))


@cli.command(cls=ConnectedProviderCommand)
@network_option()
@account_option()
@contract_option
@address_option()
@click.option(
    "--method",
    "-m",
    help="Name of the method to call",
    type=click.STRING,
    required=True,
)
@params_option
@auto_option
@_task_errors
def call(network, account, contract, address, method, params, auto):
    """Calls a contract function."""
    options = tasks.CallOptions(contract=contract, address=address, method=method, params=params)
    context = TaskContext(network=network, account=account, autosign=auto)
    tasks.call(options, context)


@cli.command(name="gen-mnemonic")
@words_option
def gen_mnemonic(words):
    """Creates a new random wallet mnemonic."""
    tasks.gen_mnemonic(num_words=int(words))


@cli.command(name="list-addresses")
@mnemonic_option
@count_option
@passphrase_option
@click.option("--private-keys", help="Also print private keys", is_flag=True)
@click.option("--json", "as_json", help="Print one JSON object per address", is_flag=True)
def list_addresses(mnemonic, count, passphrase, private_keys, as_json):
    """Lists addresses associated with a mnemonic."""
    options = tasks.ListAddressesOptions(
        mnemonic=mnemonic,
        count=count,
        passphrase=passphrase,
        private_keys=private_keys,
        as_json=as_json,
    )
    tasks.list_addresses(options)


@cli.command()
@click.argument("text", metavar="INPUT")
def sha3(text):
    """Computes a keccak256 hash."""
    tasks.sha3(text)


if __name__ == "__main__":
    cli()
