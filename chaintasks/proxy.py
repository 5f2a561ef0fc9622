"""
Reads of the EIP-1967 proxy storage slots.

A proxy keeps its address across upgrades; only the value held in the implementation
slot changes. Both slots are fixed by the standard, so resolving the implementation or
the admin of a proxy only depends on the proxy address.
"""

from typing import Optional

from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address

from chaintasks.constants import EIP1967_ADMIN_SLOT, EIP1967_IMPLEMENTATION_SLOT
from chaintasks.exceptions import NotAProxy


def _address_from_slot(slot_value: bytes) -> Optional[ChecksumAddress]:
    """Returns the address stored in the low 20 bytes of a storage slot, if any."""
    slot_value = bytes(slot_value).rjust(32, b"\x00")
    if not any(slot_value):
        return None
    return to_checksum_address(slot_value[-20:])


def _read_address_slot(context, proxy_address: str, slot: int, slot_name: str) -> ChecksumAddress:
    slot_value = context.get_storage(proxy_address, slot)
    address = _address_from_slot(slot_value)
    if address is None:
        raise NotAProxy(
            f"{slot_name} slot for contract at {proxy_address} is empty. "
            "Are you sure this is an EIP1967-compatible proxy?"
        )
    return address


def get_implementation_address(context, proxy_address: str) -> ChecksumAddress:
    """Returns the address of the logic contract behind a proxy."""
    return _read_address_slot(
        context, proxy_address, EIP1967_IMPLEMENTATION_SLOT, slot_name="Implementation"
    )


def get_admin_address(context, proxy_address: str) -> ChecksumAddress:
    """Returns the address of the ProxyAdmin allowed to upgrade a proxy."""
    return _read_address_slot(context, proxy_address, EIP1967_ADMIN_SLOT, slot_name="Admin")
