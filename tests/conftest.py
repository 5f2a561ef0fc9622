from types import SimpleNamespace

import pytest
from eth_utils import to_checksum_address
from ethpm_types import ConstructorABI, MethodABI

from chaintasks.constants import (
    EIP1967_ADMIN_SLOT,
    EIP1967_IMPLEMENTATION_SLOT,
    PROXY_ADMIN_CONTRACT_NAME,
    PROXY_CONTRACT_NAME,
)
from chaintasks.exceptions import ContractNotFound
from chaintasks.params import validate_constructor_args

# Common constants
HARDHAT_MNEMONIC = "test test test test test test test test test test test junk"
DEPLOYER = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
ACTOR = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
EMPTY_SLOT = b"\x00" * 32


# Utility functions
def method_abi(name, inputs=(), state_mutability="nonpayable", outputs=()):
    return MethodABI.model_validate(
        {
            "type": "function",
            "name": name,
            "stateMutability": state_mutability,
            "inputs": [{"name": n, "type": t} for n, t in inputs],
            "outputs": [{"name": n, "type": t} for n, t in outputs],
        }
    )


def constructor_abi(inputs=()):
    return ConstructorABI.model_validate(
        {
            "type": "constructor",
            "stateMutability": "nonpayable",
            "inputs": [{"name": n, "type": t} for n, t in inputs],
        }
    )


def address_slot(address):
    return b"\x00" * 12 + bytes.fromhex(address[2:])


class FakeContainer:
    def __init__(self, name, constructor_inputs=(), methods=()):
        self.contract_type = SimpleNamespace(name=name, methods=list(methods))
        self.constructor = SimpleNamespace(abi=constructor_abi(constructor_inputs))


class FakeMethod:
    def __init__(self, contract, name, abis):
        self.contract = contract
        self.name = name
        self.abis = abis

    def encode_input(self, *args):
        return f"{self.name}({','.join(str(a) for a in args)})".encode()

    def __call__(self, *args):
        return self.contract.context.call_results.get(self.name)


class FakeInstance:
    def __init__(self, context, container, address):
        self.context = context
        self.contract_type = container.contract_type
        self.address = address

    def __getattr__(self, name):
        abis = [abi for abi in self.contract_type.methods if abi.name == name]
        if not abis:
            raise AttributeError(name)
        return FakeMethod(self, name, abis)


class FakeContext:
    """In-memory stand-in for a TaskContext connected to a chain."""

    network_name = "local"
    deployer_address = DEPLOYER

    def __init__(self, containers):
        self.containers = {c.contract_type.name: c for c in containers}
        self.storage = dict()
        self.deployments = list()
        self.transactions = list()
        self.verified = list()
        self.call_results = dict()
        self.verify_error = None
        self._nonce = 0

    def _next_address(self):
        self._nonce += 1
        return to_checksum_address(f"0x{0xC0DE0000 + self._nonce:040x}")

    def get_contract_container(self, contract_name):
        try:
            return self.containers[contract_name]
        except KeyError:
            raise ContractNotFound(f"No contract found with name '{contract_name}'.")

    def get_contract_at(self, contract_name, address):
        return FakeInstance(self, self.get_contract_container(contract_name), address)

    def get_storage(self, address, slot):
        return self.storage.get((address, slot), EMPTY_SLOT)

    def deploy(self, container, *args):
        resolved_params = validate_constructor_args(container, args)
        address = self._next_address()
        contract_name = container.contract_type.name
        self.deployments.append((contract_name, list(resolved_params.values())))
        if contract_name == PROXY_CONTRACT_NAME:
            self.storage[(address, EIP1967_IMPLEMENTATION_SLOT)] = address_slot(args[0])
            self.storage[(address, EIP1967_ADMIN_SLOT)] = address_slot(self._next_address())
        return FakeInstance(self, container, address)

    def transact(self, method, *args):
        self.transactions.append((method.name, list(args)))
        if method.name == "upgradeAndCall":
            proxy_address, implementation_address, _ = args
            self.storage[(proxy_address, EIP1967_IMPLEMENTATION_SLOT)] = address_slot(
                implementation_address
            )
        return SimpleNamespace(txn_hash=f"0x{len(self.transactions):064x}")

    def verify(self, address, constructor_args=None):
        self.verified.append((address, constructor_args))
        if self.verify_error:
            raise self.verify_error


# Fixtures
@pytest.fixture
def proxy_containers():
    return [
        FakeContainer(
            PROXY_CONTRACT_NAME,
            constructor_inputs=[("_logic", "address"), ("initialOwner", "address"), ("_data", "bytes")],
        ),
        FakeContainer(
            PROXY_ADMIN_CONTRACT_NAME,
            methods=[
                method_abi(
                    "upgradeAndCall",
                    [("proxy", "address"), ("implementation", "address"), ("data", "bytes")],
                    state_mutability="payable",
                )
            ],
        ),
    ]


@pytest.fixture
def box_containers():
    return [
        FakeContainer("Box", constructor_inputs=[("value", "uint256"), ("owner", "address")]),
        FakeContainer(
            "BoxUpgradeable",
            methods=[method_abi("initialize", [("value", "uint256"), ("owner", "address")])],
        ),
        FakeContainer("BoxUpgradeableV2", methods=[method_abi("version", state_mutability="pure")]),
    ]


@pytest.fixture
def admin_containers():
    access_control_methods = [
        method_abi("grantRole", [("role", "bytes32"), ("account", "address")]),
        method_abi("revokeRole", [("role", "bytes32"), ("account", "address")]),
    ]
    ownable_methods = [
        method_abi("transferOwnership", [("newOwner", "address")]),
        method_abi("renounceOwnership"),
    ]
    return [
        FakeContainer("AccessControl", methods=access_control_methods),
        FakeContainer("AccessControlUpgradeable", methods=access_control_methods),
        FakeContainer("Ownable", methods=ownable_methods),
        FakeContainer("OwnableUpgradeable", methods=ownable_methods),
        FakeContainer(
            "Counter",
            methods=[
                method_abi("count", state_mutability="view", outputs=[("", "uint256")]),
                method_abi("setCount", [("value", "uint256")]),
                method_abi("setCount", [("value", "uint256"), ("owner", "address")]),
            ],
        ),
    ]


@pytest.fixture
def context(proxy_containers, box_containers, admin_containers):
    return FakeContext(proxy_containers + box_containers + admin_containers)
