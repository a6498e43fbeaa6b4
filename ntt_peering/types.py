import click

from ntt_peering.constants import CHAINS, ChainInfo
from ntt_peering.exceptions import ConfigurationError
from ntt_peering.utils import parse_unsigned


def _flag(param, default: str) -> str:
    if param is not None and param.opts:
        return param.opts[0]
    return default


class InboundLimit(click.ParamType):
    """A non-negative integer of arbitrary size given as a decimal string."""

    name = "inbound_limit"

    def convert(self, value, param, ctx):
        flag = _flag(param, "--inbound-limit")
        try:
            ivalue = parse_unsigned(value)
        except ValueError:
            raise ConfigurationError(f"{flag}: '{value}' is not a valid integer", ctx)
        if ivalue < 0:
            raise ConfigurationError(f"{flag}: {value} must not be negative", ctx)
        return ivalue


class ChainName(click.ParamType):
    name = "chain"

    def convert(self, value, param, ctx):
        if isinstance(value, ChainInfo):
            return value
        try:
            return CHAINS[value]
        except KeyError:
            raise ConfigurationError(
                f"{_flag(param, '--chain')}: unknown chain '{value}'. "
                f"Supported chains: {', '.join(CHAINS)}",
                ctx,
            )
