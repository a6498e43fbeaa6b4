#!/usr/bin/python3

import click

from ntt_peering.cli import PeeringCommand, client_for, print_header, run_workflow
from ntt_peering.constants import DEFAULT_EVM_LOCAL_CHAIN, ChainFamily
from ntt_peering.options import (
    address_option,
    chain_option,
    inbound_limit_option,
    network_option,
    output_option,
    rpc_option,
)
from ntt_peering.params import make_endpoint, make_peer, unidirectional_steps
from ntt_peering.types import ChainName
from ntt_peering.workflow import ExecutionMode, WorkflowConfig


@click.command(cls=PeeringCommand)
@rpc_option()
@click.option(
    "--local-chain",
    "--evm-chain",
    "local_chain",
    help="Local EVM chain.",
    type=ChainName(),
    default=DEFAULT_EVM_LOCAL_CHAIN,
    show_default=True,
)
@network_option
@address_option("--local-manager", help="NttManager address on the local chain.")
@address_option("--local-transceiver", help="WormholeTransceiver address on the local chain.")
@chain_option("--remote-chain", help="Chain of the peer deployment.")
@address_option("--remote-manager", help="Manager address of the peer deployment.")
@address_option("--remote-transceiver", help="Transceiver address of the peer deployment.")
@inbound_limit_option
@output_option
def cli(
    rpc,
    local_chain,
    network,
    local_manager,
    local_transceiver,
    remote_chain,
    remote_manager,
    remote_transceiver,
    inbound_limit,
    output,
):
    """
    Prints the unsigned calls that register a remote NTT deployment as a peer
    of an EVM NttManager, for execution through a multisig or governance process.
    Nothing is signed or broadcast.
    """
    local = make_endpoint(
        local_chain,
        network,
        rpc,
        local_manager,
        local_transceiver,
        chain_flag="--local-chain",
        family=ChainFamily.EVM,
    )
    peer = make_peer(
        remote_chain,
        network,
        remote_manager,
        remote_transceiver,
        inbound_limit,
        local_family=local.chain.family,
    )
    steps = unidirectional_steps(local, peer)

    print_header(
        "Extracting NTT peer registration calldata",
        {
            "Network": network,
            "Local chain": local.name,
            "Local manager": local.manager,
            "Local transceiver": local.transceiver,
            "Remote chain": peer.chain.name,
            "Remote manager": peer.manager,
            "Remote transceiver": peer.transceiver,
            "Inbound limit": peer.inbound_limit,
        },
        output=output,
    )
    run_workflow(
        steps,
        clients={local.name: client_for(local)},
        config=WorkflowConfig(mode=ExecutionMode.EXTRACT),
        output=output,
    )


if __name__ == "__main__":
    cli()
