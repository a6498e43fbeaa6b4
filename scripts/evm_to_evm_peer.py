#!/usr/bin/python3

import click

from ntt_peering.cli import PeeringCommand, client_for, print_header, run_workflow
from ntt_peering.constants import DEFAULT_CHAIN_A, DEFAULT_CHAIN_B, ChainFamily
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
from ntt_peering.params import bidirectional_steps, make_endpoint
from ntt_peering.workflow import WorkflowConfig


def _endpoint(side, chain, network, rpc, manager, transceiver):
    return make_endpoint(
        chain,
        network,
        rpc,
        manager,
        transceiver,
        chain_flag=f"--chain-{side}",
        rpc_flag=f"--rpc-{side}",
        manager_flag=f"--manager-{side}",
        transceiver_flag=f"--transceiver-{side}",
        family=ChainFamily.EVM,
    )


@click.command(cls=PeeringCommand)
@rpc_option("--rpc-a", help="RPC endpoint URL of chain A.")
@rpc_option("--rpc-b", help="RPC endpoint URL of chain B.")
@private_key_option("--private-key-a", envvar="NTT_PRIVATE_KEY_A", help="Signing key on chain A.")
@private_key_option("--private-key-b", envvar="NTT_PRIVATE_KEY_B", help="Signing key on chain B.")
@chain_option("--chain-a", default=DEFAULT_CHAIN_A, help="EVM chain A.")
@chain_option("--chain-b", default=DEFAULT_CHAIN_B, help="EVM chain B.")
@network_option
@address_option("--manager-a", help="NttManager address on chain A.")
@address_option("--manager-b", help="NttManager address on chain B.")
@address_option("--transceiver-a", help="WormholeTransceiver address on chain A.")
@address_option("--transceiver-b", help="WormholeTransceiver address on chain B.")
@inbound_limit_option
@settle_delay_option
@auto_option
@output_option
def cli(
    rpc_a,
    rpc_b,
    private_key_a,
    private_key_b,
    chain_a,
    chain_b,
    network,
    manager_a,
    manager_b,
    transceiver_a,
    transceiver_b,
    inbound_limit,
    settle_delay,
    auto,
    output,
):
    """Peers two EVM NTT deployments with each other, chain A first."""
    endpoint_a = _endpoint("a", chain_a, network, rpc_a, manager_a, transceiver_a)
    endpoint_b = _endpoint("b", chain_b, network, rpc_b, manager_b, transceiver_b)
    steps = bidirectional_steps(endpoint_a, endpoint_b, inbound_limit)
    account_a = load_credential(ChainFamily.EVM, private_key_a, flag="--private-key-a")
    account_b = load_credential(ChainFamily.EVM, private_key_b, flag="--private-key-b")

    print_header(
        "Peering EVM NTT deployments",
        {
            "Network": network,
            "Chain A": f"{endpoint_a.name} manager={endpoint_a.manager} "
            f"transceiver={endpoint_a.transceiver} signer={account_a.address}",
            "Chain B": f"{endpoint_b.name} manager={endpoint_b.manager} "
            f"transceiver={endpoint_b.transceiver} signer={account_b.address}",
            "Inbound limit": inbound_limit,
        },
        output=output,
    )
    clients = {
        endpoint_a.name: client_for(
            endpoint_a, sender=credential_address(ChainFamily.EVM, account_a)
        ),
        endpoint_b.name: client_for(
            endpoint_b, sender=credential_address(ChainFamily.EVM, account_b)
        ),
    }
    run_workflow(
        steps,
        clients=clients,
        config=WorkflowConfig(settle_delay=settle_delay, autosign=auto),
        credentials={endpoint_a.name: account_a, endpoint_b.name: account_b},
        output=output,
    )


if __name__ == "__main__":
    cli()
