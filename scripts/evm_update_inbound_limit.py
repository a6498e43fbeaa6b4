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
)
from ntt_peering.params import inbound_limit_steps, make_endpoint, resolve_chain
from ntt_peering.workflow import WorkflowConfig


@click.command(cls=PeeringCommand)
@rpc_option()
@private_key_option()
@chain_option("--local-chain", default=DEFAULT_EVM_LOCAL_CHAIN, help="Local EVM chain.")
@network_option
@address_option("--local-manager", help="NttManager address on the local chain.")
@address_option("--local-transceiver", help="WormholeTransceiver address on the local chain.")
@chain_option("--remote-chain", help="Chain whose inbound transfers are limited.")
@inbound_limit_option
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
    inbound_limit,
    auto,
    output,
):
    """Updates the inbound rate limit an EVM NttManager applies to one peer chain."""
    local = make_endpoint(
        local_chain, network, rpc, local_manager, local_transceiver, family=ChainFamily.EVM
    )
    remote_chain = resolve_chain(remote_chain, network, flag="--remote-chain")
    steps = inbound_limit_steps(local, remote_chain, inbound_limit)
    account = load_credential(local.chain.family, private_key)

    print_header(
        "Updating NTT inbound limit",
        {
            "Network": network,
            "Local chain": local.name,
            "Local manager": local.manager,
            "Remote chain": remote_chain.name,
            "Inbound limit": inbound_limit,
            "Signer": account.address,
        },
        output=output,
    )
    sender = credential_address(local.chain.family, account)
    run_workflow(
        steps,
        clients={local.name: client_for(local, sender=sender)},
        config=WorkflowConfig(autosign=auto),
        credentials={local.name: account},
        output=output,
    )


if __name__ == "__main__":
    cli()
