#!/usr/bin/python3

import click

from ntt_peering.cli import PeeringCommand, client_for, print_header, run_workflow
from ntt_peering.constants import DEFAULT_SOLANA_LOCAL_CHAIN, ChainFamily
from ntt_peering.keys import credential_address, load_credential
from ntt_peering.options import (
    address_option,
    auto_option,
    chain_option,
    network_option,
    output_option,
    private_key_option,
    rpc_option,
)
from ntt_peering.params import claim_ownership_steps, make_endpoint
from ntt_peering.workflow import WorkflowConfig


@click.command(cls=PeeringCommand)
@rpc_option()
@private_key_option(help="New owner: base58 secret key or path to a JSON keypair file.")
@chain_option("--local-chain", default=DEFAULT_SOLANA_LOCAL_CHAIN, help="Local Solana chain.")
@network_option
@address_option("--local-manager", help="NTT manager program id.")
@address_option("--local-transceiver", help="Wormhole transceiver program id.")
@auto_option
@output_option
def cli(rpc, private_key, local_chain, network, local_manager, local_transceiver, auto, output):
    """Completes a pending ownership transfer of a Solana NTT manager."""
    local = make_endpoint(
        local_chain, network, rpc, local_manager, local_transceiver, family=ChainFamily.SOLANA
    )
    steps = claim_ownership_steps(local)
    keypair = load_credential(local.chain.family, private_key)
    sender = credential_address(local.chain.family, keypair)

    print_header(
        "Claiming NTT manager ownership",
        {"Network": network, "Manager": local.manager, "New owner": sender},
        output=output,
    )
    run_workflow(
        steps,
        clients={local.name: client_for(local, sender=sender)},
        config=WorkflowConfig(autosign=auto),
        credentials={local.name: keypair},
        output=output,
    )


if __name__ == "__main__":
    cli()
