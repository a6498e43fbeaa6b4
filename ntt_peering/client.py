from abc import ABC, abstractmethod
from typing import Any, Optional, Tuple

from ntt_peering.addresses import Address
from ntt_peering.constants import ChainInfo
from ntt_peering.exceptions import ConfigurationError, ExtractionError
from ntt_peering.payloads import Payload, PayloadGenerator
from ntt_peering.steps import ChainEndpoint, PeerDescriptor


class ChainClient(ABC):
    """
    Produces unsigned NTT governance payloads for one local chain and
    submits them on behalf of a credential.

    `sender` is the public address that will sign; it is only needed where
    the payload itself references the signer (Solana account metas).
    """

    def __init__(self, endpoint: ChainEndpoint, sender: Optional[Address] = None):
        self.endpoint = endpoint
        self.sender = sender

    # Payload builders

    @abstractmethod
    def build_manager_peer_payload(
        self, remote: PeerDescriptor, decimals: int, limit: int
    ) -> PayloadGenerator:
        raise NotImplementedError

    @abstractmethod
    def build_transceiver_peer_payload(
        self, transceiver_index: int, remote_chain: ChainInfo, remote_transceiver: Address
    ) -> PayloadGenerator:
        raise NotImplementedError

    @abstractmethod
    def build_inbound_limit_payload(self, remote_chain: ChainInfo, limit: int) -> PayloadGenerator:
        raise NotImplementedError

    @abstractmethod
    def build_register_transceiver_payload(
        self, payer: Optional[Address] = None, owner: Optional[Address] = None
    ) -> PayloadGenerator:
        raise NotImplementedError

    @abstractmethod
    def build_transfer_ownership_payload(self, new_owner: Address) -> PayloadGenerator:
        raise NotImplementedError

    @abstractmethod
    def build_claim_ownership_payload(self) -> PayloadGenerator:
        raise NotImplementedError

    # State

    @abstractmethod
    def is_transceiver_registered(self, transceiver: Address) -> bool:
        raise NotImplementedError

    # Terminal actions

    @abstractmethod
    def sign_and_submit(self, payloads: PayloadGenerator, credential: Any) -> Tuple[str, ...]:
        """Signs, broadcasts and waits for every payload; returns transaction ids."""
        raise NotImplementedError

    def extract_first_payload(self, payloads: PayloadGenerator) -> Payload:
        """Returns the first unsigned payload without signing or broadcasting it."""
        payload = payloads.next_payload()
        if payload is None or not payload.data:
            raise ExtractionError(f"{payloads.description} produced no transaction data")
        return payload

    def _require_sender(self, role: str) -> Address:
        if self.sender is None:
            raise ConfigurationError(f"A {role} address is required to build this payload.")
        return self.sender
