import click

from ntt_peering.constants import (
    DEFAULT_SETTLE_DELAY,
    MAX_SETTLE_DELAY,
    SUPPORTED_NETWORKS,
    TESTNET,
)
from ntt_peering.types import ChainName, InboundLimit

TEXT_OUTPUT = "text"
JSON_OUTPUT = "json"


def rpc_option(flag: str = "--rpc", help: str = "RPC endpoint URL of the local chain."):
    return click.option(flag, help=help, type=str, required=True)


def private_key_option(
    flag: str = "--private-key",
    envvar: str = "NTT_PRIVATE_KEY",
    help: str = "Signing key (hex / base58) or path to a key file.",
):
    return click.option(flag, help=help, type=str, required=True, envvar=envvar, show_envvar=True)


def chain_option(flag: str, default=None, help: str = "Wormhole chain name."):
    return click.option(
        flag,
        help=help,
        type=ChainName(),
        default=default,
        required=default is None,
        show_default=default is not None,
    )


def address_option(flag: str, help: str, required: bool = True):
    return click.option(flag, help=help, type=str, required=required)


network_option = click.option(
    "--network",
    "-n",
    help="Wormhole network.",
    type=click.Choice(SUPPORTED_NETWORKS),
    default=TESTNET,
    show_default=True,
)

inbound_limit_option = click.option(
    "--inbound-limit",
    help="Inbound rate limit in base units of the local token.",
    type=InboundLimit(),
    required=True,
)

output_option = click.option(
    "--output",
    "-o",
    help="Report format; json writes progress to stderr.",
    type=click.Choice([TEXT_OUTPUT, JSON_OUTPUT]),
    default=TEXT_OUTPUT,
    show_default=True,
)

settle_delay_option = click.option(
    "--settle-delay",
    help="Seconds to wait between consecutive submissions on the same chain.",
    type=click.FloatRange(min=0, max=MAX_SETTLE_DELAY),
    default=DEFAULT_SETTLE_DELAY,
    show_default=True,
)

auto_option = click.option(
    "--auto",
    help="Automatically sign transactions.",
    is_flag=True,
)
