import typing
from typing import Any, Sequence

from ape import chain, networks
from ape.api import AccountAPI, NetworkAPI, ReceiptAPI
from ape.contracts.base import ContractContainer, ContractInstance, ContractTransactionHandler
from eth_typing import ChecksumAddress

from chaintasks.params import Transactor
from chaintasks.utils import get_contract_container, to_json, verify_contract


class TaskContext:
    """
    Runtime shared by the task handlers of a single invocation: the connected
    network, the signer and the contract artifact resolver.
    """

    def __init__(
        self,
        network: typing.Optional[NetworkAPI] = None,
        account: typing.Optional[AccountAPI] = None,
        autosign: bool = False,
    ):
        self.network = network
        self._account = account
        self._autosign = autosign
        self._transactor = None

    @property
    def network_name(self) -> str:
        network = self.network or networks.provider.network
        return network.name

    @property
    def transactor(self) -> Transactor:
        # the account is only selected once a task needs to sign
        if self._transactor is None:
            self._transactor = Transactor(account=self._account, autosign=self._autosign)
        return self._transactor

    @property
    def deployer_address(self) -> ChecksumAddress:
        return self.transactor.get_account().address

    def get_contract_container(self, contract_name: str) -> ContractContainer:
        return get_contract_container(contract_name)

    def get_contract_at(self, contract_name: str, address: str) -> ContractInstance:
        return self.get_contract_container(contract_name).at(address)

    def get_storage(self, address: str, slot: int) -> bytes:
        return chain.provider.get_storage(address, slot)

    def deploy(self, container: ContractContainer, *args) -> ContractInstance:
        return self.transactor.deploy(container, *args)

    def transact(self, method: ContractTransactionHandler, *args) -> ReceiptAPI:
        return self.transactor.transact(method, *args)

    def verify(self, address: str, constructor_args: typing.Optional[Sequence[Any]] = None) -> None:
        if constructor_args:
            print(f"(i) Constructor arguments: {to_json(list(constructor_args))}")
        verify_contract(address)
