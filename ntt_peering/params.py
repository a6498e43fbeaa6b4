"""
Resolution of operator input into ordered registration steps.

Every builder validates all of its input up front and raises
`ConfigurationError` naming the offending flag; a step list is
never returned from partial data.
"""

from typing import List, Optional, Union

from ntt_peering.addresses import Address, parse_address
from ntt_peering.constants import (
    CHAINS,
    MAX_INBOUND_LIMIT,
    SUPPORTED_NETWORKS,
    WORMHOLE_TRANSCEIVER_INDEX,
    ChainFamily,
    ChainInfo,
)
from ntt_peering.exceptions import ConfigurationError
from ntt_peering.steps import (
    ChainEndpoint,
    ClaimOwnership,
    PeerDescriptor,
    RegisterTransceiver,
    RegistrationStep,
    SetInboundLimit,
    SetManagerPeer,
    SetTransceiverPeer,
    TransferOwnership,
)
from ntt_peering.utils import parse_unsigned


def _require(value, flag: str):
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ConfigurationError(f"Missing {flag}.")
    return value


def _address(family: ChainFamily, value, flag: str) -> Address:
    return parse_address(family, _require(value, flag), flag)


def resolve_chain(chain: Union[str, ChainInfo], network: str, flag: str) -> ChainInfo:
    """Looks up a chain by name and checks it exists on the selected network."""
    _require(chain, flag)
    if network not in SUPPORTED_NETWORKS:
        raise ConfigurationError(
            f"--network: '{network}' is not one of {', '.join(SUPPORTED_NETWORKS)}."
        )
    if not isinstance(chain, ChainInfo):
        try:
            chain = CHAINS[chain]
        except KeyError:
            raise ConfigurationError(f"{flag}: unknown chain '{chain}'.")
    if network not in chain.networks:
        raise ConfigurationError(f"{flag}: {chain.name} is not available on {network}.")
    return chain


def check_inbound_limit(limit, local_family: ChainFamily, flag: str = "--inbound-limit") -> int:
    """The limit must be a non-negative integer the local manager can store."""
    _require(limit, flag)
    try:
        limit = parse_unsigned(limit)
    except ValueError:
        raise ConfigurationError(f"{flag}: '{limit}' is not a valid integer.")
    if limit < 0:
        raise ConfigurationError(f"{flag}: {limit} must not be negative.")
    maximum = MAX_INBOUND_LIMIT[local_family]
    if limit > maximum:
        raise ConfigurationError(
            f"{flag}: {limit} exceeds the {local_family.value} maximum of {maximum}."
        )
    return limit


def check_decimals(peer: PeerDescriptor) -> PeerDescriptor:
    expected = peer.chain.decimals
    if peer.decimals != expected:
        raise ConfigurationError(
            f"{peer.chain.name} peers use {expected} decimals, got {peer.decimals}."
        )
    return peer


def make_endpoint(
    chain: Union[str, ChainInfo],
    network: str,
    rpc: str,
    manager: str,
    transceiver: str,
    token: Optional[str] = None,
    prefix: str = "local",
    chain_flag: Optional[str] = None,
    rpc_flag: str = "--rpc",
    manager_flag: Optional[str] = None,
    transceiver_flag: Optional[str] = None,
    family: Optional[ChainFamily] = None,
) -> ChainEndpoint:
    """The local side of a workflow, optionally restricted to one chain family."""
    chain_flag = chain_flag or f"--{prefix}-chain"
    manager_flag = manager_flag or f"--{prefix}-manager"
    transceiver_flag = transceiver_flag or f"--{prefix}-transceiver"
    chain = resolve_chain(chain, network, flag=chain_flag)
    if family is not None and chain.family is not family:
        raise ConfigurationError(f"{chain_flag}: {chain.name} is not in the {family.value} family.")
    _require(rpc, rpc_flag)
    family = chain.family
    return ChainEndpoint(
        chain=chain,
        network=network,
        rpc=rpc,
        manager=_address(family, manager, manager_flag),
        transceiver=_address(family, transceiver, transceiver_flag),
        token=parse_address(family, token, f"--{prefix}-token") if token else None,
    )


def make_peer(
    chain: Union[str, ChainInfo],
    network: str,
    manager: str,
    transceiver: str,
    inbound_limit,
    local_family: ChainFamily,
    prefix: str = "remote",
    chain_flag: Optional[str] = None,
) -> PeerDescriptor:
    """Describes a remote deployment; token decimals follow the remote chain family."""
    chain = resolve_chain(chain, network, flag=chain_flag or f"--{prefix}-chain")
    family = chain.family
    peer = PeerDescriptor(
        chain=chain,
        manager=_address(family, manager, f"--{prefix}-manager"),
        transceiver=_address(family, transceiver, f"--{prefix}-transceiver"),
        decimals=chain.decimals,
        inbound_limit=check_inbound_limit(inbound_limit, local_family),
    )
    return check_decimals(peer)


def _check_distinct(local: ChainEndpoint, remote: ChainInfo) -> None:
    if local.chain == remote:
        raise ConfigurationError(f"A chain cannot be its own peer ({remote.name}).")


#
# Workflow variants
#


def unidirectional_steps(
    local: ChainEndpoint, peer: PeerDescriptor, register_transceiver: bool = False
) -> List[RegistrationStep]:
    """Registers one remote deployment as a peer of the local one."""
    _check_distinct(local, peer.chain)
    check_decimals(peer)
    check_inbound_limit(peer.inbound_limit, local.chain.family)
    steps: List[RegistrationStep] = list()
    if register_transceiver:
        steps.append(RegisterTransceiver(endpoint=local, transceiver=local.transceiver))
    steps.append(SetManagerPeer(endpoint=local, peer=peer))
    steps.append(
        SetTransceiverPeer(
            endpoint=local,
            transceiver_index=WORMHOLE_TRANSCEIVER_INDEX,
            remote_chain=peer.chain,
            remote_transceiver=peer.transceiver,
        )
    )
    return steps


def as_peer(
    endpoint: ChainEndpoint, inbound_limit: int, local_family: ChainFamily
) -> PeerDescriptor:
    """Describes a local deployment as seen from another chain."""
    return check_decimals(
        PeerDescriptor(
            chain=endpoint.chain,
            manager=endpoint.manager,
            transceiver=endpoint.transceiver,
            decimals=endpoint.chain.decimals,
            inbound_limit=check_inbound_limit(inbound_limit, local_family),
        )
    )


def bidirectional_steps(
    chain_a: ChainEndpoint, chain_b: ChainEndpoint, inbound_limit
) -> List[RegistrationStep]:
    """All of chain A's steps (trusting B) followed by all of chain B's steps (trusting A)."""
    if chain_a.chain == chain_b.chain:
        raise ConfigurationError(
            f"--chain-a and --chain-b must differ (both are {chain_a.name})."
        )
    peer_b = as_peer(chain_b, inbound_limit, local_family=chain_a.chain.family)
    peer_a = as_peer(chain_a, inbound_limit, local_family=chain_b.chain.family)
    return unidirectional_steps(chain_a, peer_b) + unidirectional_steps(chain_b, peer_a)


def inbound_limit_steps(
    local: ChainEndpoint, remote_chain: ChainInfo, inbound_limit
) -> List[RegistrationStep]:
    _check_distinct(local, remote_chain)
    limit = check_inbound_limit(inbound_limit, local.chain.family)
    return [SetInboundLimit(endpoint=local, remote_chain=remote_chain, limit=limit)]


def transfer_ownership_steps(local: ChainEndpoint, new_owner: str) -> List[RegistrationStep]:
    owner = _address(local.chain.family, new_owner, "--new-owner")
    return [TransferOwnership(endpoint=local, new_owner=owner)]


def claim_ownership_steps(local: ChainEndpoint) -> List[RegistrationStep]:
    if local.chain.family is not ChainFamily.SOLANA:
        raise ConfigurationError(
            f"Ownership claims are only supported on Solana, not {local.name}."
        )
    return [ClaimOwnership(endpoint=local)]


def parse_owner(local: ChainEndpoint, owner: Optional[str], flag: str = "--owner") -> Address:
    return _address(local.chain.family, owner, flag)
