import json
import typing
from collections import OrderedDict
from decimal import Decimal
from pathlib import Path
from typing import Any, List

from ape.api import AccountAPI, ReceiptAPI
from ape.cli.choices import select_account
from ape.contracts.base import ContractContainer, ContractInstance, ContractTransactionHandler
from ape_accounts import KeyfileAccount
from eth_utils import is_address, to_checksum_address
from ethpm_types import MethodABI
from web3.auto import w3

from chaintasks.confirm import _confirm_resolution, _continue
from chaintasks.exceptions import InvalidParameters
from chaintasks.utils import _load_yaml

# Parsing


def parse_json_params(raw: str) -> List[Any]:
    """
    Parses a JSON list of parameters. Integers are kept as arbitrary precision ints and
    non-integer numbers as Decimals so that no value ever goes through a float.
    """
    try:
        params = json.loads(raw, parse_float=Decimal)
    except json.JSONDecodeError as e:
        raise InvalidParameters(f"Malformed JSON parameters: {e}")
    if not isinstance(params, list):
        raise InvalidParameters(f"Parameters must be a JSON list, got {type(params).__name__}.")
    return params


def load_params_file(filepath: Path) -> List[Any]:
    """Loads a list of parameters from a YAML (or JSON) file."""
    params = _load_yaml(filepath)
    if params is None:
        return list()
    if not isinstance(params, list):
        raise InvalidParameters(f"Parameters file {filepath} must contain a list.")
    return params


# Coercion


def _coerce_integer(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, Decimal) and value.is_finite() and value == value.to_integral_value():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value, 0)
        except ValueError:
            return value
    return value


def _coerce_value(abi_type: str, value: Any) -> Any:
    """Converts a JSON-decoded value to the python type expected for an ABI type."""
    if abi_type.endswith("]"):
        if not isinstance(value, (list, tuple)):
            return value
        item_type = abi_type[: abi_type.rindex("[")]
        return [_coerce_value(item_type, item) for item in value]

    if abi_type.startswith(("uint", "int")):
        return _coerce_integer(value)

    if abi_type == "address":
        if isinstance(value, str) and is_address(value):
            return to_checksum_address(value)
        # YAML reads unquoted hex addresses as integers
        if isinstance(value, int) and not isinstance(value, bool) and 0 <= value < 2**160:
            return to_checksum_address(value.to_bytes(20, "big"))

    return value


def _coerce_args(abi_inputs: typing.Sequence[Any], args: typing.Sequence[Any]):
    coerced_args = list()
    for arg, abi_input in zip(args, abi_inputs):
        value = _coerce_value(abi_input.canonical_type, arg)
        if not w3.is_encodable(abi_input.canonical_type, value):
            return None
        coerced_args.append(value)
    return coerced_args


def match_method_abi(
    method_abis: List[MethodABI], args: typing.Sequence[Any]
) -> typing.Tuple[MethodABI, List[Any]]:
    """
    Finds the overload matching the given arguments and returns it along with
    the arguments coerced to the types of its inputs.
    """
    if len(method_abis) == 0:
        raise InvalidParameters("No method abis provided for validation of args")

    abis_matching_args_length = [abi for abi in method_abis if len(abi.inputs) == len(args)]
    for abi in abis_matching_args_length:
        coerced_args = _coerce_args(abi.inputs, args)
        if coerced_args is not None:
            return abi, coerced_args
    raise InvalidParameters(
        f"Could not find ABI for '{method_abis[0].name}' with {len(args)} arg(s) and given type(s)"
    )


def validate_constructor_args(
    container: ContractContainer, args: typing.Sequence[Any]
) -> OrderedDict:
    """Validates the constructor parameters against the constructor ABI."""
    contract_name = container.contract_type.name
    abi_inputs = container.constructor.abi.inputs
    if len(args) != len(abi_inputs):
        raise InvalidParameters(
            f"Constructor parameters length mismatch - "
            f"{contract_name} ABI requires {len(abi_inputs)}, Got {len(args)}."
        )

    resolved_params = OrderedDict()
    for position, (abi_input, value) in enumerate(zip(abi_inputs, args)):
        value = _coerce_value(abi_input.canonical_type, value)
        if not w3.is_encodable(abi_input.canonical_type, value):
            raise InvalidParameters(
                f"{contract_name} constructor param '{abi_input.name}' at position {position} "
                f"has a value '{value}' whose type does not match expected ABI type "
                f"'{abi_input.canonical_type}'"
            )
        resolved_params[abi_input.name or f"arg{position}"] = value

    return resolved_params


def get_method_abis(
    container: typing.Union[ContractContainer, ContractInstance], method_name: str
) -> List[MethodABI]:
    """Returns all overloads of a method from a contract type."""
    return [abi for abi in container.contract_type.methods if abi.name == method_name]


class Transactor:
    """
    Represents an ape account plus validated/annotated transaction execution.
    """

    def __init__(self, account: typing.Optional[AccountAPI] = None, autosign: bool = False):
        if account is None:
            self._account = select_account()
        else:
            self._account = account
        if autosign:
            print("WARNING: Autosign is enabled. Transactions will be signed automatically.")
        self._autosign = autosign
        if isinstance(self._account, KeyfileAccount):
            # test accounts sign without prompting
            self._account.set_autosign(autosign)

    def get_account(self) -> AccountAPI:
        """Returns the transactor account."""
        return self._account

    def transact(self, method: ContractTransactionHandler, *args) -> ReceiptAPI:
        abi, coerced_args = match_method_abi(method_abis=method.abis, args=args)
        named_args = OrderedDict(
            (abi_input.name, arg) for abi_input, arg in zip(abi.inputs, coerced_args)
        )
        base_message = (
            f"\nTransacting {method.contract.contract_type.name}"
            f"[{method.contract.address[:10]}].{abi.name}"
        )
        if named_args:
            pretty_args = "\n\t".join(f"{k}={v}" for k, v in named_args.items())
            message = f"{base_message} with arguments:\n\t{pretty_args}"
        else:
            message = f"{base_message} with no arguments"
        print(message)
        if not self._autosign:
            _continue()

        return method(*coerced_args, sender=self._account)

    def deploy(self, container: ContractContainer, *args) -> ContractInstance:
        """Deploys a contract once the chain has confirmed the deployment transaction."""
        contract_name = container.contract_type.name
        resolved_params = validate_constructor_args(container, args)
        if not self._autosign:
            _confirm_resolution(resolved_params, contract_name)
        return self._account.deploy(container, *resolved_params.values())
