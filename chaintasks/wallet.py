from typing import List, NamedTuple

from eth_account import Account
from eth_typing import ChecksumAddress
from eth_utils import to_hex

from chaintasks.constants import DEFAULT_MNEMONIC_WORD_COUNT, DERIVATION_PATH

Account.enable_unaudited_hdwallet_features()


class DerivedAccount(NamedTuple):
    index: int
    path: str
    address: ChecksumAddress
    private_key: str


def generate_mnemonic(num_words: int = DEFAULT_MNEMONIC_WORD_COUNT) -> str:
    """Returns a new random BIP-39 english mnemonic."""
    _, mnemonic = Account.create_with_mnemonic(num_words=num_words)
    return mnemonic


def derive_account(mnemonic: str, index: int, passphrase: str = "") -> DerivedAccount:
    path = DERIVATION_PATH.format(index)
    account = Account.from_mnemonic(mnemonic, passphrase=passphrase, account_path=path)
    return DerivedAccount(
        index=index,
        path=path,
        address=account.address,
        private_key=to_hex(account.key),
    )


def derive_accounts(mnemonic: str, count: int, passphrase: str = "") -> List[DerivedAccount]:
    """Derives the first `count` accounts of the standard ethereum path of a mnemonic."""
    return [derive_account(mnemonic, index, passphrase=passphrase) for index in range(count)]
