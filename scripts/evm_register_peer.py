#!/usr/bin/python3

import click

from ntt_peering.cli import PeeringCommand, client_for, print_header, run_workflow
from ntt_peering.constants import DEFAULT_EVM_LOCAL_CHAIN, ChainFamily
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
@private_key_option()
@chain_option("--local-chain", default=DEFAULT_EVM_LOCAL_CHAIN, help="Local EVM chain.")
@network_option
@address_option("--local-manager", help="NttManager address on the local chain.")
@address_option("--local-transceiver", help="WormholeTransceiver address on the local chain.")
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
    remote_chain,
    remote_manager,
    remote_transceiver,
    inbound_limit,
    settle_delay,
    auto,
    output,
):
    """Registers a remote NTT deployment as a peer of an EVM NttManager."""
    local = make_endpoint(
        local_chain, network, rpc, local_manager, local_transceiver, family=ChainFamily.EVM
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
    account = load_credential(local.chain.family, private_key)

    print_header(
        "Registering NTT peer",
        {
            "Network": network,
            "Local chain": local.name,
            "Local manager": local.manager,
            "Local transceiver": local.transceiver,
            "Remote chain": peer.chain.name,
            "Remote manager": peer.manager,
            "Remote transceiver": peer.transceiver,
            "Inbound limit": peer.inbound_limit,
            "Signer": account.address,
        },
        output=output,
    )
    sender = credential_address(local.chain.family, account)
    run_workflow(
        steps,
        clients={local.name: client_for(local, sender=sender)},
        config=WorkflowConfig(settle_delay=settle_delay, autosign=auto),
        credentials={local.name: account},
        output=output,
    )


if __name__ == "__main__":
    cli()
