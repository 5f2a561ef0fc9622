from pathlib import Path

import click

from chaintasks.constants import (
    DEFAULT_ADDRESS_COUNT,
    DEFAULT_INITIALIZER,
    DEFAULT_MNEMONIC_WORD_COUNT,
    MNEMONIC_WORD_COUNTS,
)
from chaintasks.types import ChecksumAddress, JsonParams, MinInt


def address_option(required: bool = True, help: str = "Address of the contract"):
    return click.option(
        "--address",
        "-a",
        help=help,
        type=ChecksumAddress(),
        required=required,
    )


contract_option = click.option(
    "--contract",
    "-c",
    help="Name of the contract",
    type=click.STRING,
    required=True,
)

params_option = click.option(
    "--params",
    "-p",
    help="JSON list of arguments, e.g. '[\"0x6047Ac71f35aD757eBEc74aDA7Ee0Ae147740247\", 100]'.",
    type=JsonParams(),
    default="[]",
    show_default=True,
)

params_file_option = click.option(
    "--params-file",
    "-f",
    help="YAML or JSON file holding the list of arguments.",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    required=False,
)

upgradeable_option = click.option(
    "--upgradeable",
    "-u",
    help="Indicates the contract is upgradeable (deployed behind a proxy).",
    is_flag=True,
)

verify_option = click.option(
    "--verify",
    help="Verify the contract source on the network's block explorer.",
    is_flag=True,
)

initializer_option = click.option(
    "--initializer",
    "-i",
    help="Name of the initializer called with the params of an upgradeable deployment.",
    type=click.STRING,
    default=DEFAULT_INITIALIZER,
    show_default=True,
)

auto_option = click.option(
    "--auto",
    help="Automatically sign transactions.",
    is_flag=True,
)

mnemonic_option = click.option(
    "--mnemonic",
    "-m",
    help="Mnemonic to derive addresses from; a random one is generated if omitted.",
    type=click.STRING,
    required=False,
)

count_option = click.option(
    "--count",
    "-c",
    help="Number of addresses to derive",
    type=MinInt(1),
    default=DEFAULT_ADDRESS_COUNT,
    show_default=True,
)

passphrase_option = click.option(
    "--passphrase",
    help="Optional passphrase for the mnemonic",
    type=click.STRING,
    default="",
)

words_option = click.option(
    "--words",
    "-w",
    help="Number of words of the mnemonic",
    type=click.Choice([str(count) for count in MNEMONIC_WORD_COUNTS]),
    default=str(DEFAULT_MNEMONIC_WORD_COUNT),
    show_default=True,
)
