import click
from eth_utils import to_checksum_address

from chaintasks.params import parse_json_params


class MinInt(click.ParamType):
    name = "minint"

    def __init__(self, min_value):
        self.min_value = min_value

    def convert(self, value, param, ctx):
        try:
            ivalue = int(value)
        except ValueError:
            self.fail(f"{value} is not a valid integer", param, ctx)
        if ivalue < self.min_value:
            self.fail(
                f"{value} is less than the minimum allowed value of {self.min_value}", param, ctx
            )
        return ivalue


class ChecksumAddress(click.ParamType):
    name = "checksum_address"

    def convert(self, value, param, ctx):
        try:
            value = to_checksum_address(value=value)
        except ValueError:
            self.fail(f"{value} is not a valid ethereum address", param, ctx)
        else:
            return value


class JsonParams(click.ParamType):
    """A JSON list of method arguments, e.g. '["0xAbC...", 1000, []]'."""

    name = "json_params"

    def convert(self, value, param, ctx):
        if isinstance(value, list):
            return value  # already converted (default value)
        try:
            return parse_json_params(value)
        except ValueError as e:
            self.fail(str(e), param, ctx)
