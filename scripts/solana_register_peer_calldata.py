#!/usr/bin/python3

import click

from ntt_peering.cli import PeeringCommand, client_for, print_header, run_workflow
from ntt_peering.constants import DEFAULT_SOLANA_LOCAL_CHAIN, ChainFamily
from ntt_peering.options import (
    address_option,
    chain_option,
    inbound_limit_option,
    network_option,
    output_option,
    rpc_option,
)
from ntt_peering.params import make_endpoint, make_peer, parse_owner, unidirectional_steps
from ntt_peering.workflow import ExecutionMode, WorkflowConfig


@click.command(cls=PeeringCommand)
@rpc_option()
@chain_option("--local-chain", default=DEFAULT_SOLANA_LOCAL_CHAIN, help="Local Solana chain.")
@network_option
@address_option("--local-manager", help="NTT manager program id.")
@address_option("--local-transceiver", help="Wormhole transceiver program id.")
@address_option("--owner", help="Public key of the manager owner that will sign the instructions.")
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
    owner,
    remote_chain,
    remote_manager,
    remote_transceiver,
    inbound_limit,
    output,
):
    """
    Prints the unsigned instructions that register a remote NTT deployment as a
    peer of a Solana NTT manager, for signing by the owner (e.g. a multisig).
    The transceiver registration is included unless it is already registered.
    """
    local = make_endpoint(
        local_chain,
        network,
        rpc,
        local_manager,
        local_transceiver,
        family=ChainFamily.SOLANA,
    )
    sender = parse_owner(local, owner)
    peer = make_peer(
        remote_chain,
        network,
        remote_manager,
        remote_transceiver,
        inbound_limit,
        local_family=local.chain.family,
    )
    steps = unidirectional_steps(local, peer, register_transceiver=True)

    print_header(
        "Extracting NTT peer registration instructions",
        {
            "Network": network,
            "Local chain": local.name,
            "Local manager": local.manager,
            "Local transceiver": local.transceiver,
            "Owner": sender,
            "Remote chain": peer.chain.name,
            "Remote manager": peer.manager,
            "Remote transceiver": peer.transceiver,
            "Inbound limit": peer.inbound_limit,
        },
        output=output,
    )
    run_workflow(
        steps,
        clients={local.name: client_for(local, sender=sender)},
        config=WorkflowConfig(mode=ExecutionMode.EXTRACT),
        output=output,
    )


if __name__ == "__main__":
    cli()
