"""
One-shot handlers for the contract administration and wallet tasks.

Every handler takes an options tuple and, when it touches the chain, a ``TaskContext``.
"""

import json
from typing import Any, List, NamedTuple, Optional, Sequence

import click
from eth_utils import keccak, to_hex

from chaintasks.constants import (
    ACCESS_CONTROL_CONTRACT_NAME,
    ACCESS_CONTROL_UPGRADEABLE_CONTRACT_NAME,
    DEFAULT_ADDRESS_COUNT,
    DEFAULT_MNEMONIC_WORD_COUNT,
    OWNABLE_CONTRACT_NAME,
    OWNABLE_UPGRADEABLE_CONTRACT_NAME,
)
from chaintasks.exceptions import InvalidParameters
from chaintasks.params import get_method_abis, match_method_abi
from chaintasks.proxy import get_implementation_address
from chaintasks.utils import keccak_text, to_json
from chaintasks.wallet import DerivedAccount, derive_accounts, generate_mnemonic

#
# Access control
#


class GrantOptions(NamedTuple):
    address: str
    actor: str
    role: str
    revoke: bool = False
    upgradeable: bool = False


def grant(options: GrantOptions, context) -> str:
    """Grants or revokes a role; returns the transaction hash."""
    click.echo(f"Using network {context.network_name}")
    contract_name = (
        ACCESS_CONTROL_UPGRADEABLE_CONTRACT_NAME
        if options.upgradeable
        else ACCESS_CONTROL_CONTRACT_NAME
    )
    contract = context.get_contract_at(contract_name, options.address)

    role_id = keccak(text=options.role)
    if options.revoke:
        receipt = context.transact(contract.revokeRole, role_id, options.actor)
        click.echo(
            f"Revoke role {options.role} ({to_hex(role_id)}) from address {options.actor} "
            f"(for contract at {options.address}), txn={receipt.txn_hash}"
        )
    else:
        receipt = context.transact(contract.grantRole, role_id, options.actor)
        click.echo(
            f"Grant role {options.role} ({to_hex(role_id)}) to address {options.actor} "
            f"(for contract at {options.address}), txn={receipt.txn_hash}"
        )
    return receipt.txn_hash


class TransferOwnershipOptions(NamedTuple):
    address: str
    renounce: bool = False
    new_owner: Optional[str] = None
    upgradeable: bool = False


def validate_ownership_options(options: TransferOwnershipOptions) -> None:
    if options.renounce and options.new_owner:
        raise click.BadOptionUsage(
            option_name="--new-owner",
            message="Cannot provide --new-owner when renouncing ownership.",
        )
    if not options.renounce and not options.new_owner:
        raise click.BadOptionUsage(
            option_name="--new-owner",
            message="Must provide --new-owner when transferring ownership.",
        )


def transfer_ownership(options: TransferOwnershipOptions, context) -> str:
    """Transfers or renounces ownership; returns the transaction hash."""
    validate_ownership_options(options)
    click.echo(f"Using network {context.network_name}")
    contract_name = (
        OWNABLE_UPGRADEABLE_CONTRACT_NAME if options.upgradeable else OWNABLE_CONTRACT_NAME
    )
    contract = context.get_contract_at(contract_name, options.address)

    if options.renounce:
        receipt = context.transact(contract.renounceOwnership)
        click.echo(
            f"Renounced ownership of contract at {options.address}, txn={receipt.txn_hash}"
        )
    else:
        receipt = context.transact(contract.transferOwnership, options.new_owner)
        click.echo(
            f"Transferred ownership of contract at {options.address} "
            f"to {options.new_owner}, txn={receipt.txn_hash}"
        )
    return receipt.txn_hash


#
# Proxies and calls
#


def get_impl(address: str, context) -> str:
    implementation_address = get_implementation_address(context, address)
    click.echo(f"Proxy {address} impl {implementation_address}")
    return implementation_address


class CallOptions(NamedTuple):
    contract: str
    address: str
    method: str
    params: Sequence[Any] = ()


def call(options: CallOptions, context) -> Any:
    """Calls a view method, or transacts a stateful one, and prints the result."""
    contract = context.get_contract_at(options.contract, options.address)
    # instance attributes such as 'address' are not contract methods
    method_abis = get_method_abis(contract, options.method)
    if not method_abis:
        raise InvalidParameters(f"{options.contract} has no method '{options.method}'.")

    method = getattr(contract, options.method)
    abi, args = match_method_abi(method_abis=method_abis, args=options.params)
    pretty_args = "\n".join(to_json(arg) for arg in args)
    click.echo(
        f"Calling method {options.method} on {options.contract} at {options.address} "
        f"with params:\n{pretty_args}"
    )
    if abi.is_stateful:
        receipt = context.transact(method, *args)
        result = receipt.txn_hash
    else:
        result = method(*args)
    click.echo(f"Result: {to_json(result)}")
    return result


#
# Wallets and hashing
#


def gen_mnemonic(num_words: int = DEFAULT_MNEMONIC_WORD_COUNT) -> str:
    mnemonic = generate_mnemonic(num_words=num_words)
    click.echo(f"Random mnemonic: {mnemonic}")
    return mnemonic


class ListAddressesOptions(NamedTuple):
    mnemonic: Optional[str] = None
    count: int = DEFAULT_ADDRESS_COUNT
    passphrase: str = ""
    private_keys: bool = False
    as_json: bool = False


def _format_account(account: DerivedAccount, private_keys: bool, as_json: bool) -> str:
    if as_json:
        entry = {"address": account.address}
        if private_keys:
            entry["privateKey"] = account.private_key
        return json.dumps(entry)
    line = f"Address[{account.index}] = {account.address}"
    if private_keys:
        line += f" key {account.private_key}"
    return line


def list_addresses(options: ListAddressesOptions) -> List[DerivedAccount]:
    mnemonic = options.mnemonic or generate_mnemonic()
    click.echo(f"Mnemonic: {mnemonic}")
    accounts = derive_accounts(mnemonic, options.count, passphrase=options.passphrase)
    for account in accounts:
        click.echo(_format_account(account, options.private_keys, options.as_json))
    return accounts


def sha3(text: str) -> str:
    digest = keccak_text(text)
    click.echo(f"keccak256({text}) = {digest}")
    return digest
