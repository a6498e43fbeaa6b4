import pytest
from solders.pubkey import Pubkey

from ntt_peering.client import ChainClient
from ntt_peering.constants import TESTNET, ChainFamily
from ntt_peering.exceptions import PreconditionQueryError, SubmissionError
from ntt_peering.params import make_endpoint, make_peer
from ntt_peering.payloads import Payload, PayloadGenerator
from ntt_peering.utils import format_hex

# Common constants
INBOUND_LIMIT = 10**24
# fits the u64 limit of a Solana manager
SOLANA_INBOUND_LIMIT = 10**15
RPC = "http://localhost:8545"

EVM_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
EVM_ADDRESS = "0x2c7536E3605D9C16a7a3D7b1898e529396a65c23"

MANAGER_A = "0x" + "a1" * 20
TRANSCEIVER_A = "0x" + "a2" * 20
MANAGER_B = "0x" + "b1" * 20
TRANSCEIVER_B = "0x" + "b2" * 20


# Utility functions
def solana_address(seed: int) -> str:
    return str(Pubkey.from_bytes(bytes([seed]) * 32))


SOLANA_MANAGER = solana_address(7)
SOLANA_TRANSCEIVER = solana_address(8)
SOLANA_TOKEN = solana_address(9)


class FakeChainClient(ChainClient):
    """Records payload requests and submissions instead of talking to a chain."""

    def __init__(
        self,
        endpoint,
        sender=None,
        registered=False,
        revert_on=(),
        query_error=False,
    ):
        super().__init__(endpoint=endpoint, sender=sender)
        self.registered = registered
        self.revert_on = set(revert_on)
        self.query_error = query_error
        self.built = list()
        self.submitted = list()
        self.queries = 0
        self._methods = dict()

    def _generator(self, method, *args):
        self.built.append(method)
        data = format_hex(repr((self.endpoint.name, method) + args).encode())
        self._methods[data] = method
        payload = Payload(target=str(self.endpoint.manager), data=data, value=0)
        return PayloadGenerator.single(f"{self.endpoint.name}.{method}", lambda: payload)

    def build_manager_peer_payload(self, remote, decimals, limit):
        return self._generator("setPeer", remote.chain.name, decimals, limit)

    def build_transceiver_peer_payload(self, transceiver_index, remote_chain, remote_transceiver):
        return self._generator(
            "setWormholePeer", transceiver_index, remote_chain.name, str(remote_transceiver)
        )

    def build_inbound_limit_payload(self, remote_chain, limit):
        return self._generator("setInboundLimit", remote_chain.name, limit)

    def build_register_transceiver_payload(self, payer=None, owner=None):
        return self._generator("registerTransceiver", str(payer), str(owner))

    def build_transfer_ownership_payload(self, new_owner):
        return self._generator("transferOwnership", str(new_owner))

    def build_claim_ownership_payload(self):
        return self._generator("claimOwnership")

    def is_transceiver_registered(self, transceiver):
        self.queries += 1
        if self.query_error:
            raise PreconditionQueryError(f"{self.endpoint.name} RPC unreachable")
        return self.registered

    def sign_and_submit(self, payloads, credential):
        transaction_ids = list()
        for payload in payloads:
            method = self._methods[payload.data]
            if method in self.revert_on:
                raise SubmissionError(
                    f"{method} reverted on {self.endpoint.name}", logs=[f"revert: {method}"]
                )
            self.submitted.append((method, payload, credential))
            transaction_ids.append(f"0x{len(self.submitted):064x}")
        return tuple(transaction_ids)

    @property
    def submitted_methods(self):
        return [method for method, _payload, _credential in self.submitted]


# Fixtures
@pytest.fixture
def evm_local():
    return make_endpoint("ArbitrumSepolia", TESTNET, RPC, MANAGER_A, TRANSCEIVER_A)


@pytest.fixture
def evm_remote():
    return make_endpoint("Sepolia", TESTNET, RPC, MANAGER_B, TRANSCEIVER_B)


@pytest.fixture
def solana_local():
    return make_endpoint(
        "Solana", TESTNET, RPC, SOLANA_MANAGER, SOLANA_TRANSCEIVER, token=SOLANA_TOKEN
    )


@pytest.fixture
def evm_peer():
    return make_peer(
        "Sepolia", TESTNET, MANAGER_B, TRANSCEIVER_B, INBOUND_LIMIT, local_family=ChainFamily.EVM
    )


@pytest.fixture
def solana_peer():
    return make_peer(
        "Solana",
        TESTNET,
        SOLANA_MANAGER,
        SOLANA_TRANSCEIVER,
        INBOUND_LIMIT,
        local_family=ChainFamily.EVM,
    )


@pytest.fixture
def evm_peer_of_solana():
    return make_peer(
        "Sepolia",
        TESTNET,
        MANAGER_B,
        TRANSCEIVER_B,
        SOLANA_INBOUND_LIMIT,
        local_family=ChainFamily.SOLANA,
    )


@pytest.fixture
def sleeps():
    return list()


@pytest.fixture
def echoed():
    return list()
