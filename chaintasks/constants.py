#
# Contracts
#

PROXY_CONTRACT_NAME = "TransparentUpgradeableProxy"
PROXY_ADMIN_CONTRACT_NAME = "ProxyAdmin"

ACCESS_CONTROL_CONTRACT_NAME = "AccessControl"
ACCESS_CONTROL_UPGRADEABLE_CONTRACT_NAME = "AccessControlUpgradeable"
OWNABLE_CONTRACT_NAME = "Ownable"
OWNABLE_UPGRADEABLE_CONTRACT_NAME = "OwnableUpgradeable"

DEFAULT_INITIALIZER = "initialize"

# EIP1967 Implementation slot - https://eips.ethereum.org/EIPS/eip-1967#logic-contract-address
EIP1967_IMPLEMENTATION_SLOT = 0x360894A13BA1A3210667C828492DB98DCA3E2076CC3735A920A3CA505D382BBC

# EIP1967 Admin slot - https://eips.ethereum.org/EIPS/eip-1967#admin-address
EIP1967_ADMIN_SLOT = 0xB53127684A568B3173AE13B9F8A6016E243E63B6E8EE1178D6A717850B5D6103

#
# Wallets
#

DERIVATION_PATH = "m/44'/60'/0'/0/{}"  # standard ethereum derivation path for accounts
DEFAULT_ADDRESS_COUNT = 10
MNEMONIC_WORD_COUNTS = [12, 15, 18, 21, 24]
DEFAULT_MNEMONIC_WORD_COUNT = 12
