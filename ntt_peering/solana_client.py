import hashlib
import struct
from typing import List, Optional, Tuple

import httpx
from solana.exceptions import SolanaRpcException
from solana.rpc.api import Client
from solana.rpc.commitment import Confirmed
from solana.rpc.core import (
    RPCException,
    TransactionExpiredBlockheightExceededError,
    UnconfirmedTxError,
)
from solana.rpc.types import TxOpts
from solders.instruction import AccountMeta, Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.system_program import ID as SYSTEM_PROGRAM_ID
from solders.transaction import Transaction

from ntt_peering.addresses import Address
from ntt_peering.client import ChainClient
from ntt_peering.constants import (
    CONFIRMATION_TIMEOUT,
    WORMHOLE_TRANSCEIVER_INDEX,
    ChainFamily,
    ChainInfo,
)
from ntt_peering.exceptions import (
    PreconditionQueryError,
    SubmissionError,
    UnsupportedStepError,
)
from ntt_peering.payloads import Payload, PayloadGenerator
from ntt_peering.steps import ChainEndpoint, PeerDescriptor
from ntt_peering.utils import format_hex

BPF_LOADER_UPGRADEABLE_PROGRAM_ID = Pubkey.from_string(
    "BPFLoaderUpgradeab1e11111111111111111111111"
)

# errors raised by solana-py while talking to a node
NODE_ERRORS = (
    RPCException,
    SolanaRpcException,
    UnconfirmedTxError,
    TransactionExpiredBlockheightExceededError,
    httpx.HTTPError,
)

#
# PDA seeds
#

CONFIG_SEED = b"config"
PEER_SEED = b"peer"
INBOX_RATE_LIMIT_SEED = b"inbox_rate_limit"
REGISTERED_TRANSCEIVER_SEED = b"registered_transceiver"
TRANSCEIVER_PEER_SEED = b"transceiver_peer"
UPGRADE_LOCK_SEED = b"upgrade_lock"


def instruction_discriminator(name: str) -> bytes:
    """Anchor's 8 byte instruction selector."""
    return hashlib.sha256(f"global:{name}".encode()).digest()[:8]


def _chain_seed(chain: ChainInfo) -> bytes:
    return struct.pack(">H", chain.wormhole_chain_id)


def _chain_id(chain: ChainInfo) -> bytes:
    return struct.pack("<H", chain.wormhole_chain_id)


def _logs_from_rpc_error(error: Exception) -> List[str]:
    """Digs the program logs out of a preflight failure, if there are any."""
    for arg in error.args:
        data = getattr(arg, "data", None)
        logs = getattr(data, "logs", None)
        if logs:
            return list(logs)
    return []


class NttPdas:
    """Program derived addresses of an NTT manager and its wormhole transceiver."""

    def __init__(self, manager: Pubkey, transceiver: Pubkey):
        self.manager = manager
        self.transceiver = transceiver

    def _find(self, seeds, program: Pubkey) -> Pubkey:
        address, _bump = Pubkey.find_program_address(seeds, program)
        return address

    def config(self) -> Pubkey:
        return self._find([CONFIG_SEED], self.manager)

    def peer(self, chain: ChainInfo) -> Pubkey:
        return self._find([PEER_SEED, _chain_seed(chain)], self.manager)

    def inbox_rate_limit(self, chain: ChainInfo) -> Pubkey:
        return self._find([INBOX_RATE_LIMIT_SEED, _chain_seed(chain)], self.manager)

    def registered_transceiver(self, transceiver: Pubkey) -> Pubkey:
        return self._find([REGISTERED_TRANSCEIVER_SEED, bytes(transceiver)], self.manager)

    def transceiver_peer(self, chain: ChainInfo) -> Pubkey:
        return self._find([TRANSCEIVER_PEER_SEED, _chain_seed(chain)], self.transceiver)

    def upgrade_lock(self) -> Pubkey:
        return self._find([UPGRADE_LOCK_SEED], self.manager)

    def program_data(self) -> Pubkey:
        return self._find([bytes(self.manager)], BPF_LOADER_UPGRADEABLE_PROGRAM_ID)


def _meta(pubkey: Pubkey, signer: bool = False, writable: bool = False) -> Tuple[str, bool, bool]:
    return str(pubkey), signer, writable


class SolanaNttClient(ChainClient):
    """NTT manager program instructions on Solana."""

    def __init__(
        self,
        endpoint: ChainEndpoint,
        sender: Optional[Address] = None,
        connection: Optional[Client] = None,
        timeout: int = CONFIRMATION_TIMEOUT,
    ):
        if endpoint.chain.family is not ChainFamily.SOLANA:
            raise ValueError(f"{endpoint.name} is not a Solana chain")
        super().__init__(endpoint=endpoint, sender=sender)
        self.connection = connection or Client(endpoint.rpc, commitment=Confirmed, timeout=timeout)
        self.timeout = timeout
        self.program_id = endpoint.manager.to_pubkey()
        self.transceiver_program_id = endpoint.transceiver.to_pubkey()
        self.pdas = NttPdas(manager=self.program_id, transceiver=self.transceiver_program_id)

    def _instruction(self, program: Pubkey, name: str, args: bytes, accounts) -> Payload:
        data = instruction_discriminator(name) + args
        return Payload(
            target=str(program), data=format_hex(data), value=0, accounts=tuple(accounts)
        )

    def _signer(self, role: str) -> Pubkey:
        return self._require_sender(role).to_pubkey()

    # Payload builders

    def build_manager_peer_payload(
        self, remote: PeerDescriptor, decimals: int, limit: int
    ) -> PayloadGenerator:
        def build():
            owner = self._signer("owner")
            args = (
                _chain_id(remote.chain)
                + remote.manager.to_universal()
                + struct.pack("<QB", limit, decimals)
            )
            accounts = [
                _meta(owner, signer=True, writable=True),  # payer
                _meta(owner, signer=True),
                _meta(self.pdas.config()),
                _meta(self.pdas.peer(remote.chain), writable=True),
                _meta(self.pdas.inbox_rate_limit(remote.chain), writable=True),
                _meta(SYSTEM_PROGRAM_ID),
            ]
            yield self._instruction(self.program_id, "set_peer", args, accounts)

        return PayloadGenerator(f"NttManager[{self.program_id}].set_peer", build)

    def build_transceiver_peer_payload(
        self, transceiver_index: int, remote_chain: ChainInfo, remote_transceiver: Address
    ) -> PayloadGenerator:
        if transceiver_index != WORMHOLE_TRANSCEIVER_INDEX:
            raise UnsupportedStepError(
                f"Only the wormhole transceiver (index 0) is configurable, got {transceiver_index}"
            )

        def build():
            owner = self._signer("owner")
            args = _chain_id(remote_chain) + remote_transceiver.to_universal()
            accounts = [
                _meta(self.pdas.config()),
                _meta(owner, signer=True),
                _meta(owner, signer=True, writable=True),  # payer
                _meta(self.pdas.transceiver_peer(remote_chain), writable=True),
                _meta(SYSTEM_PROGRAM_ID),
            ]
            yield self._instruction(
                self.transceiver_program_id, "set_wormhole_peer", args, accounts
            )

        return PayloadGenerator(
            f"WormholeTransceiver[{self.transceiver_program_id}].set_wormhole_peer", build
        )

    def build_inbound_limit_payload(self, remote_chain: ChainInfo, limit: int) -> PayloadGenerator:
        def build():
            owner = self._signer("owner")
            args = struct.pack("<Q", limit) + _chain_id(remote_chain)
            accounts = [
                _meta(owner, signer=True),
                _meta(self.pdas.config()),
                _meta(self.pdas.inbox_rate_limit(remote_chain), writable=True),
            ]
            yield self._instruction(self.program_id, "set_inbound_limit", args, accounts)

        return PayloadGenerator(f"NttManager[{self.program_id}].set_inbound_limit", build)

    def build_register_transceiver_payload(
        self, payer: Optional[Address] = None, owner: Optional[Address] = None
    ) -> PayloadGenerator:
        def build():
            payer_key = payer.to_pubkey() if payer else self._signer("payer")
            owner_key = owner.to_pubkey() if owner else self._signer("owner")
            accounts = [
                _meta(self.pdas.config(), writable=True),
                _meta(owner_key, signer=True),
                _meta(payer_key, signer=True, writable=True),
                _meta(self.transceiver_program_id),
                _meta(
                    self.pdas.registered_transceiver(self.transceiver_program_id), writable=True
                ),
                _meta(SYSTEM_PROGRAM_ID),
            ]
            yield self._instruction(self.program_id, "register_transceiver", b"", accounts)

        return PayloadGenerator(f"NttManager[{self.program_id}].register_transceiver", build)

    def build_transfer_ownership_payload(self, new_owner: Address) -> PayloadGenerator:
        def build():
            owner = self._signer("owner")
            accounts = [
                _meta(self.pdas.config(), writable=True),
                _meta(owner, signer=True),
                _meta(new_owner.to_pubkey()),
                _meta(self.pdas.upgrade_lock()),
                _meta(self.pdas.program_data(), writable=True),
                _meta(BPF_LOADER_UPGRADEABLE_PROGRAM_ID),
            ]
            yield self._instruction(self.program_id, "transfer_ownership", b"", accounts)

        return PayloadGenerator(f"NttManager[{self.program_id}].transfer_ownership", build)

    def build_claim_ownership_payload(self) -> PayloadGenerator:
        def build():
            new_owner = self._signer("new owner")
            accounts = [
                _meta(self.pdas.config(), writable=True),
                _meta(self.pdas.upgrade_lock()),
                _meta(new_owner, signer=True),
                _meta(self.pdas.program_data(), writable=True),
                _meta(BPF_LOADER_UPGRADEABLE_PROGRAM_ID),
            ]
            yield self._instruction(self.program_id, "claim_ownership", b"", accounts)

        return PayloadGenerator(f"NttManager[{self.program_id}].claim_ownership", build)

    # State

    def is_transceiver_registered(self, transceiver: Address) -> bool:
        pda = self.pdas.registered_transceiver(transceiver.to_pubkey())
        try:
            response = self.connection.get_account_info(pda)
        except NODE_ERRORS as e:
            raise PreconditionQueryError(
                f"Could not read registered transceiver account {pda} on {self.endpoint.name}: {e}"
            ) from e
        return response.value is not None

    # Terminal actions

    def sign_and_submit(self, payloads: PayloadGenerator, credential: Keypair) -> Tuple[str, ...]:
        signatures = list()
        for payload in payloads:
            signatures.append(self._send(payload, credential))
        return tuple(signatures)

    def _send(self, payload: Payload, keypair: Keypair) -> str:
        signer = str(keypair.pubkey())
        for pubkey, is_signer, _writable in payload.accounts:
            if is_signer and pubkey != signer:
                raise SubmissionError(f"{payload.target} requires a signature from {pubkey}")

        instruction = Instruction(
            program_id=Pubkey.from_string(payload.target),
            data=payload.data_bytes,
            accounts=[
                AccountMeta(Pubkey.from_string(pubkey), is_signer, is_writable)
                for pubkey, is_signer, is_writable in payload.accounts
            ],
        )
        try:
            blockhash = self.connection.get_latest_blockhash().value.blockhash
            transaction = Transaction.new_signed_with_payer(
                [instruction], keypair.pubkey(), [keypair], blockhash
            )
            response = self.connection.send_raw_transaction(
                bytes(transaction), opts=TxOpts(preflight_commitment=Confirmed)
            )
        except NODE_ERRORS as e:
            raise SubmissionError(
                f"Could not submit to {self.endpoint.name}: {e}", _logs_from_rpc_error(e)
            ) from e

        signature = response.value
        try:
            confirmation = self.connection.confirm_transaction(signature, commitment=Confirmed)
        except NODE_ERRORS as e:
            raise SubmissionError(f"Could not confirm {signature}: {e}") from e

        statuses = confirmation.value
        if statuses and statuses[0] is not None and statuses[0].err is not None:
            raise SubmissionError(f"Transaction {signature} failed: {statuses[0].err}")
        return str(signature)
