from typing import NamedTuple, Optional, Tuple, Union

from ntt_peering.addresses import Address
from ntt_peering.constants import ChainInfo


class ChainEndpoint(NamedTuple):
    """The local chain being configured. Credentials are held separately."""

    chain: ChainInfo
    network: str
    rpc: str
    manager: Address
    transceiver: Address
    token: Optional[Address] = None

    @property
    def name(self) -> str:
        return self.chain.name


class PeerDescriptor(NamedTuple):
    """A remote NTT deployment to be trusted by the local side."""

    chain: ChainInfo
    manager: Address
    transceiver: Address
    decimals: int
    inbound_limit: int


#
# Registration steps
#


class SetManagerPeer(NamedTuple):
    endpoint: ChainEndpoint
    peer: PeerDescriptor

    kind = "set-manager-peer"

    def describe(self) -> str:
        return f"Registering {self.peer.chain.name} manager as peer on {self.endpoint.name} manager"


class SetTransceiverPeer(NamedTuple):
    endpoint: ChainEndpoint
    transceiver_index: int
    remote_chain: ChainInfo
    remote_transceiver: Address

    kind = "set-transceiver-peer"

    def describe(self) -> str:
        return (
            f"Registering {self.remote_chain.name} transceiver as peer "
            f"on {self.endpoint.name} transceiver #{self.transceiver_index}"
        )


class SetInboundLimit(NamedTuple):
    endpoint: ChainEndpoint
    remote_chain: ChainInfo
    limit: int

    kind = "set-inbound-limit"

    def describe(self) -> str:
        return (
            f"Updating inbound limit for {self.remote_chain.name} "
            f"on {self.endpoint.name} to {self.limit}"
        )


class RegisterTransceiver(NamedTuple):
    endpoint: ChainEndpoint
    transceiver: Address

    kind = "register-transceiver"

    def describe(self) -> str:
        return f"Registering transceiver {self.transceiver} with {self.endpoint.name} manager"


class TransferOwnership(NamedTuple):
    endpoint: ChainEndpoint
    new_owner: Address

    kind = "transfer-ownership"

    def describe(self) -> str:
        return f"Transferring {self.endpoint.name} manager ownership to {self.new_owner}"


class ClaimOwnership(NamedTuple):
    endpoint: ChainEndpoint

    kind = "claim-ownership"

    def describe(self) -> str:
        return f"Claiming {self.endpoint.name} manager ownership"


RegistrationStep = Union[
    SetManagerPeer,
    SetTransceiverPeer,
    SetInboundLimit,
    RegisterTransceiver,
    TransferOwnership,
    ClaimOwnership,
]

#
# Step results
#


class Submitted(NamedTuple):
    transaction_ids: Tuple[str, ...]

    status = "submitted"
    ok = True

    @property
    def transaction_id(self) -> str:
        return self.transaction_ids[-1]

    def detail(self) -> str:
        return ", ".join(self.transaction_ids)


class Skipped(NamedTuple):
    reason: str

    status = "skipped"
    ok = True

    def detail(self) -> str:
        return self.reason


class ExtractedCalldata(NamedTuple):
    target: str
    data: str
    value: int
    accounts: Tuple[Tuple[str, bool, bool], ...] = ()

    status = "extracted"
    ok = True

    def detail(self) -> str:
        return f"target={self.target} value={self.value} data={self.data}"


class Failed(NamedTuple):
    cause: str
    logs: Tuple[str, ...] = ()

    status = "failed"
    ok = False

    def detail(self) -> str:
        return self.cause


StepResult = Union[Submitted, Skipped, ExtractedCalldata, Failed]
