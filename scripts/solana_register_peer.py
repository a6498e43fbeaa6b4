#!/usr/bin/python3

import click

from ntt_peering.cli import PeeringCommand, client_for, print_header, run_workflow
from ntt_peering.constants import DEFAULT_SOLANA_LOCAL_CHAIN, ChainFamily
from ntt_peering.keys import credential_address, load_credential
from ntt_peering.options import (
    address_option,
    auto_option,
    chain_option,
    inbound_limit_option,
    network_option,
    output_option,
    private_key_option,
    rpc_option,
    settle_delay_option,
)
from ntt_peering.params import make_endpoint, make_peer, unidirectional_steps
from ntt_peering.workflow import WorkflowConfig


@click.command(cls=PeeringCommand)
@rpc_option()
@private_key_option(help="Base58 secret key or path to a JSON keypair file.")
@chain_option("--local-chain", default=DEFAULT_SOLANA_LOCAL_CHAIN, help="Local Solana chain.")
@network_option
@address_option("--local-manager", help="NTT manager program id.")
@address_option("--local-transceiver", help="Wormhole transceiver program id.")
@address_option("--local-token", help="Mint of the bridged token.", required=False)
@chain_option("--remote-chain", help="Chain of the peer deployment.")
@address_option("--remote-manager", help="Manager address of the peer deployment.")
@address_option("--remote-transceiver", help="Transceiver address of the peer deployment.")
@inbound_limit_option
@settle_delay_option
@auto_option
@output_option
def cli(
    rpc,
    private_key,
    local_chain,
    network,
    local_manager,
    local_transceiver,
    local_token,
    remote_chain,
    remote_manager,
    remote_transceiver,
    inbound_limit,
    settle_delay,
    auto,
    output,
):
    """
    Registers a remote NTT deployment as a peer of a Solana NTT manager.

    The wormhole transceiver is registered with the manager first unless
    it already is.
    """
    local = make_endpoint(
        local_chain,
        network,
        rpc,
        local_manager,
        local_transceiver,
        token=local_token,
        family=ChainFamily.SOLANA,
    )
    peer = make_peer(
        remote_chain,
        network,
        remote_manager,
        remote_transceiver,
        inbound_limit,
        local_family=local.chain.family,
    )
    steps = unidirectional_steps(local, peer, register_transceiver=True)
    keypair = load_credential(local.chain.family, private_key)
    sender = credential_address(local.chain.family, keypair)

    print_header(
        "Registering NTT peer",
        {
            "Network": network,
            "Local chain": local.name,
            "Local manager": local.manager,
            "Local transceiver": local.transceiver,
            "Local token": local.token,
            "Remote chain": peer.chain.name,
            "Remote manager": peer.manager,
            "Remote transceiver": peer.transceiver,
            "Inbound limit": peer.inbound_limit,
            "Signer": sender,
        },
        output=output,
    )
    run_workflow(
        steps,
        clients={local.name: client_for(local, sender=sender)},
        config=WorkflowConfig(settle_delay=settle_delay, autosign=auto),
        credentials={local.name: keypair},
        output=output,
    )


if __name__ == "__main__":
    cli()
