from typing import Optional, Tuple

import requests
from eth_account.signers.local import LocalAccount
from eth_utils import to_checksum_address, to_hex
from web3 import Web3
from web3.exceptions import ContractLogicError, TimeExhausted, Web3Exception

from ntt_peering.addresses import Address
from ntt_peering.client import ChainClient
from ntt_peering.constants import CONFIRMATION_TIMEOUT, ChainFamily, ChainInfo
from ntt_peering.exceptions import (
    PreconditionQueryError,
    SubmissionError,
    UnsupportedStepError,
)
from ntt_peering.payloads import Payload, PayloadGenerator
from ntt_peering.steps import ChainEndpoint, PeerDescriptor
from ntt_peering.utils import load_abi

RPC_REQUEST_TIMEOUT = 30

# errors raised by web3 while talking to a node
NODE_ERRORS = (Web3Exception, requests.RequestException, ValueError)


class EvmNttClient(ChainClient):
    """NttManager / WormholeTransceiver governance calls on an EVM chain."""

    def __init__(
        self,
        endpoint: ChainEndpoint,
        sender: Optional[Address] = None,
        w3: Optional[Web3] = None,
        timeout: int = CONFIRMATION_TIMEOUT,
    ):
        if endpoint.chain.family is not ChainFamily.EVM:
            raise ValueError(f"{endpoint.name} is not an EVM chain")
        super().__init__(endpoint=endpoint, sender=sender)
        if w3 is None:
            provider = Web3.HTTPProvider(
                endpoint.rpc, request_kwargs={"timeout": RPC_REQUEST_TIMEOUT}
            )
            w3 = Web3(provider)
        self.w3 = w3
        self.timeout = timeout
        self.manager = w3.eth.contract(
            address=to_checksum_address(endpoint.manager.raw), abi=load_abi("NttManager")
        )
        self.transceiver = w3.eth.contract(
            address=to_checksum_address(endpoint.transceiver.raw),
            abi=load_abi("WormholeTransceiver"),
        )

    def _call(self, contract, method: str, *args, value: int = 0) -> Payload:
        data = contract.encode_abi(method, args=list(args))
        return Payload(target=contract.address, data=data, value=value)

    # Payload builders

    def build_manager_peer_payload(
        self, remote: PeerDescriptor, decimals: int, limit: int
    ) -> PayloadGenerator:
        return PayloadGenerator.single(
            f"NttManager[{self.manager.address[:10]}].setPeer",
            lambda: self._call(
                self.manager,
                "setPeer",
                remote.chain.wormhole_chain_id,
                remote.manager.to_universal(),
                decimals,
                limit,
            ),
        )

    def build_transceiver_peer_payload(
        self, transceiver_index: int, remote_chain: ChainInfo, remote_transceiver: Address
    ) -> PayloadGenerator:
        if transceiver_index != 0:
            raise UnsupportedStepError(
                f"Only the wormhole transceiver (index 0) is configurable, got {transceiver_index}"
            )
        return PayloadGenerator.single(
            f"WormholeTransceiver[{self.transceiver.address[:10]}].setWormholePeer",
            lambda: self._call(
                self.transceiver,
                "setWormholePeer",
                remote_chain.wormhole_chain_id,
                remote_transceiver.to_universal(),
            ),
        )

    def build_inbound_limit_payload(self, remote_chain: ChainInfo, limit: int) -> PayloadGenerator:
        return PayloadGenerator.single(
            f"NttManager[{self.manager.address[:10]}].setInboundLimit",
            lambda: self._call(
                self.manager, "setInboundLimit", limit, remote_chain.wormhole_chain_id
            ),
        )

    def build_register_transceiver_payload(
        self, payer: Optional[Address] = None, owner: Optional[Address] = None
    ) -> PayloadGenerator:
        # payer and owner are implied by the transaction sender on EVM
        return PayloadGenerator.single(
            f"NttManager[{self.manager.address[:10]}].setTransceiver",
            lambda: self._call(self.manager, "setTransceiver", self.transceiver.address),
        )

    def build_transfer_ownership_payload(self, new_owner: Address) -> PayloadGenerator:
        return PayloadGenerator.single(
            f"NttManager[{self.manager.address[:10]}].transferOwnership",
            lambda: self._call(
                self.manager, "transferOwnership", to_checksum_address(new_owner.raw)
            ),
        )

    def build_claim_ownership_payload(self) -> PayloadGenerator:
        raise UnsupportedStepError(
            "EVM NttManager ownership transfers take effect immediately; there is nothing to claim"
        )

    # State

    def is_transceiver_registered(self, transceiver: Address) -> bool:
        try:
            registered = self.manager.functions.getTransceivers().call()
        except NODE_ERRORS as e:
            raise PreconditionQueryError(
                f"Could not read transceivers of {self.manager.address} "
                f"on {self.endpoint.name}: {e}"
            ) from e
        target = to_checksum_address(transceiver.raw)
        return any(to_checksum_address(address) == target for address in registered)

    # Terminal actions

    def sign_and_submit(
        self, payloads: PayloadGenerator, credential: LocalAccount
    ) -> Tuple[str, ...]:
        transaction_ids = list()
        for payload in payloads:
            transaction_ids.append(self._send(payload, credential))
        return tuple(transaction_ids)

    def _send(self, payload: Payload, account: LocalAccount) -> str:
        eth = self.w3.eth
        try:
            tx = {
                "from": account.address,
                "to": to_checksum_address(payload.target),
                "data": payload.data,
                "value": payload.value,
                "nonce": eth.get_transaction_count(account.address, "pending"),
                "chainId": eth.chain_id,
            }
            tx["gas"] = eth.estimate_gas(tx)
            tx["gasPrice"] = eth.gas_price
            signed = account.sign_transaction(tx)
            tx_hash = eth.send_raw_transaction(signed.raw_transaction)
        except ContractLogicError as e:
            logs = [e.data] if getattr(e, "data", None) else []
            raise SubmissionError(f"Execution reverted on {self.endpoint.name}: {e}", logs) from e
        except NODE_ERRORS as e:
            raise SubmissionError(f"Could not submit to {self.endpoint.name}: {e}") from e

        transaction_id = to_hex(tx_hash)
        try:
            receipt = eth.wait_for_transaction_receipt(tx_hash, timeout=self.timeout)
        except TimeExhausted as e:
            raise SubmissionError(
                f"Transaction {transaction_id} was not confirmed within {self.timeout}s"
            ) from e
        except NODE_ERRORS as e:
            raise SubmissionError(f"Could not confirm {transaction_id}: {e}") from e

        if receipt["status"] != 1:
            raise SubmissionError(
                f"Transaction {transaction_id} reverted on {self.endpoint.name}",
                logs=[str(log) for log in receipt.get("logs", [])],
            )
        return transaction_id
