import json
import os
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml
from ape import networks, project
from ape.api.networks import LOCAL_NETWORK_NAME
from ape.contracts import ContractContainer
from ape_etherscan.utils import API_KEY_ENV_KEY_MAP
from eth_utils import keccak, to_hex

from chaintasks.exceptions import ContractNotFound, ExplorerUnavailable, VerificationError


def _load_yaml(filepath: Path) -> Any:
    """Loads a YAML file."""
    with open(filepath, "r") as file:
        return yaml.safe_load(file)


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else str(value)
    if isinstance(value, bytes):
        return to_hex(value)
    return str(value)


def to_json(value: Any) -> str:
    """Serializes call parameters and results; large ints are kept exact."""
    return json.dumps(value, default=_json_default)


def keccak_text(text: str) -> str:
    """Returns the hex encoded keccak256 hash of the UTF-8 encoded text."""
    return to_hex(keccak(text=text))


def is_local_network() -> bool:
    network_name = networks.provider.network.name
    return network_name == LOCAL_NETWORK_NAME or network_name.endswith("-fork")


def check_etherscan_plugin() -> None:
    """
    Checks that the ape-etherscan plugin is installed and that
    the appropriate API key environment variable is set.
    """
    if is_local_network():
        # unnecessary for local deployment
        return
    try:
        import ape_etherscan  # noqa: F401
    except ImportError:
        raise ImportError("Please install the ape-etherscan plugin to use this script.")
    ecosystem_name = networks.provider.network.ecosystem.name
    explorer_envvar = API_KEY_ENV_KEY_MAP.get(ecosystem_name)
    api_key = os.environ.get(explorer_envvar) if explorer_envvar else None
    if not api_key:
        raise ValueError(f"{explorer_envvar or 'Explorer API key'} is not set.")


def check_infura_plugin() -> None:
    """Checks that the ape-infura plugin is installed."""
    if is_local_network():
        return  # unnecessary for local deployment
    if networks.provider.name != "infura":
        return  # unnecessary when using a provider different than infura
    try:
        import ape_infura  # noqa: F401
        from ape_infura.provider import _ENVIRONMENT_VARIABLE_NAMES  # noqa: F401
    except ImportError:
        raise ImportError("Please install the ape-infura plugin to use this script.")
    for envvar in _ENVIRONMENT_VARIABLE_NAMES:
        api_key = os.environ.get(envvar)
        if api_key:
            break
    else:
        raise ValueError(
            f"No Infura API key found in "
            f"environment variables: {', '.join(_ENVIRONMENT_VARIABLE_NAMES)}"
        )


def check_explorer() -> None:
    """Checks that the connected network has a block explorer to publish sources to."""
    network = networks.provider.network
    if network.explorer is None:
        raise ExplorerUnavailable(
            f"No block explorer configured for network {network.name}, cannot verify contracts."
        )


def check_plugins(verify: bool = False) -> None:
    print("Checking plugins...")
    if verify:
        check_explorer()
        check_etherscan_plugin()
    check_infura_plugin()


def verify_contract(address: str) -> None:
    """Publishes the source of the contract at the given address to the network's explorer."""
    explorer = networks.provider.network.explorer
    if explorer is None:
        raise VerificationError(
            address, f"no block explorer configured for network {networks.provider.network.name}"
        )
    explorer.publish_contract(address)


def _get_dependency_contract_container(contract: str) -> ContractContainer:
    for dependency_name, dependency_versions in project.dependencies.items():
        if len(dependency_versions) > 1:
            raise ContractNotFound(f"Ambiguous {dependency_name} dependency for {contract}")
        try:
            dependency_api = list(dependency_versions.values())[0]
            contract_container = getattr(dependency_api, contract)
            return contract_container
        except AttributeError:
            continue
    raise ContractNotFound(f"No contract found with name '{contract}'.")


def get_contract_container(contract: str) -> ContractContainer:
    try:
        contract_container = getattr(project, contract)
    except AttributeError:
        # not in root project; check dependencies
        contract_container = _get_dependency_contract_container(contract)

    return contract_container
