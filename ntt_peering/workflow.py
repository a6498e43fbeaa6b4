import time
from enum import Enum
from typing import Any, Callable, List, Mapping, NamedTuple, Optional, Tuple

import click

from ntt_peering.client import ChainClient
from ntt_peering.constants import DEFAULT_SETTLE_DELAY, MAX_SETTLE_DELAY
from ntt_peering.exceptions import ConfigurationError, WorkflowError
from ntt_peering.payloads import Payload, PayloadGenerator
from ntt_peering.steps import (
    ChainEndpoint,
    ClaimOwnership,
    ExtractedCalldata,
    Failed,
    RegisterTransceiver,
    RegistrationStep,
    SetInboundLimit,
    SetManagerPeer,
    SetTransceiverPeer,
    Skipped,
    StepResult,
    Submitted,
    TransferOwnership,
)

ALREADY_REGISTERED = "already registered"
DECLINED = "declined by operator"


class ExecutionMode(Enum):
    SUBMIT = "submit"
    EXTRACT = "extract"


class WorkflowConfig(NamedTuple):
    """Run-wide policy, fixed for the lifetime of a sequencer."""

    mode: ExecutionMode = ExecutionMode.SUBMIT
    settle_delay: float = DEFAULT_SETTLE_DELAY
    autosign: bool = False


class WorkflowRun:
    """The planned steps and, in execution order, the result of each attempted one."""

    def __init__(self, steps):
        self.steps: Tuple[RegistrationStep, ...] = tuple(steps)
        self._results: List[StepResult] = list()

    def record(self, step: RegistrationStep, result: StepResult) -> None:
        position = len(self._results)
        if position >= len(self.steps) or self.steps[position] is not step:
            raise RuntimeError(f"Out of order result for {step.kind}")
        if self.failed:
            raise RuntimeError("Cannot record results after a failure")
        self._results.append(result)

    @property
    def results(self) -> Tuple[StepResult, ...]:
        return tuple(self._results)

    @property
    def entries(self) -> Tuple[Tuple[RegistrationStep, StepResult], ...]:
        return tuple(zip(self.steps, self._results))

    @property
    def pending(self) -> Tuple[RegistrationStep, ...]:
        """Steps that were never attempted."""
        return self.steps[len(self._results) :]

    @property
    def failed(self) -> bool:
        return any(not result.ok for result in self._results)

    @property
    def succeeded(self) -> bool:
        return not self.failed and not self.pending


def build_payloads(client: ChainClient, step: RegistrationStep) -> PayloadGenerator:
    """The single step -> payload mapping shared by both execution modes."""
    if isinstance(step, SetManagerPeer):
        return client.build_manager_peer_payload(
            step.peer, step.peer.decimals, step.peer.inbound_limit
        )
    if isinstance(step, SetTransceiverPeer):
        return client.build_transceiver_peer_payload(
            step.transceiver_index, step.remote_chain, step.remote_transceiver
        )
    if isinstance(step, SetInboundLimit):
        return client.build_inbound_limit_payload(step.remote_chain, step.limit)
    if isinstance(step, RegisterTransceiver):
        return client.build_register_transceiver_payload(payer=client.sender, owner=client.sender)
    if isinstance(step, TransferOwnership):
        return client.build_transfer_ownership_payload(step.new_owner)
    if isinstance(step, ClaimOwnership):
        return client.build_claim_ownership_payload()
    raise TypeError(f"Unknown registration step {step!r}")


class IdempotencyGuard:
    """
    Decides whether a step is already satisfied on-chain.

    Only transceiver registration is checked; peer and limit writes
    overwrite on-chain state and are always resubmitted.
    """

    def check(self, client: ChainClient, step: RegistrationStep) -> Optional[str]:
        if isinstance(step, RegisterTransceiver):
            if client.is_transceiver_registered(step.transceiver):
                return ALREADY_REGISTERED
        return None


class Sequencer:
    """
    Executes registration steps strictly in order, one at a time,
    halting at the first failure. Completed steps are never rolled back.
    """

    def __init__(
        self,
        clients: Mapping[str, ChainClient],
        config: WorkflowConfig = WorkflowConfig(),
        credentials: Optional[Mapping[str, Any]] = None,
        guard: Optional[IdempotencyGuard] = None,
        confirm: Optional[Callable[[RegistrationStep, Payload], None]] = None,
        echo: Callable[[str], None] = click.echo,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.clients = clients
        self.config = config
        self.credentials = dict(credentials or {})
        self.guard = guard or IdempotencyGuard()
        self.confirm = confirm
        self.echo = echo
        self.sleep = sleep
        # also rejects nan and inf
        if not 0 <= config.settle_delay <= MAX_SETTLE_DELAY:
            raise ConfigurationError(
                f"--settle-delay must be between 0 and {MAX_SETTLE_DELAY:g} seconds."
            )
        if config.mode is ExecutionMode.EXTRACT and self.credentials:
            raise ConfigurationError("Calldata extraction does not take signing credentials.")

    def _client(self, endpoint: ChainEndpoint) -> ChainClient:
        try:
            return self.clients[endpoint.name]
        except KeyError:
            raise ConfigurationError(f"No chain client configured for {endpoint.name}.")

    def _check(self, steps) -> None:
        """Resolves every client and credential before anything touches a chain."""
        if self.config.mode is not ExecutionMode.SUBMIT:
            for step in steps:
                self._client(step.endpoint)
            return
        for step in steps:
            self._client(step.endpoint)
            if step.endpoint.name not in self.credentials:
                raise ConfigurationError(
                    f"No signing credential configured for {step.endpoint.name}."
                )

    def run(self, steps) -> WorkflowRun:
        workflow = WorkflowRun(steps)
        self._check(workflow.steps)

        last_submitted: Optional[str] = None
        for step in workflow.steps:
            self.echo(f"{step.describe()}...")
            result = self._execute(step, settle_after=last_submitted)
            workflow.record(step, result)
            self._announce(step, result)
            if isinstance(result, Submitted):
                last_submitted = step.endpoint.name
            if not result.ok:
                break

        return workflow

    def _execute(self, step: RegistrationStep, settle_after: Optional[str]) -> StepResult:
        client = self._client(step.endpoint)
        try:
            reason = self.guard.check(client, step)
            if reason is not None:
                return Skipped(reason=reason)

            payloads = build_payloads(client, step)
            if self.config.mode is ExecutionMode.EXTRACT:
                return self._extract(client, payloads)

            if settle_after == step.endpoint.name and self.config.settle_delay > 0:
                self.echo(f"Waiting {self.config.settle_delay:g}s for {settle_after} to settle...")
                self.sleep(self.config.settle_delay)
            return self._submit(client, step, payloads)
        except WorkflowError as e:
            return Failed(cause=str(e), logs=e.logs)
        except click.Abort:
            return Failed(cause=DECLINED)

    def _extract(self, client: ChainClient, payloads: PayloadGenerator) -> ExtractedCalldata:
        payload = client.extract_first_payload(payloads)
        return ExtractedCalldata(
            target=payload.target,
            data=payload.data,
            value=payload.value,
            accounts=payload.accounts,
        )

    def _submit(
        self, client: ChainClient, step: RegistrationStep, payloads: PayloadGenerator
    ) -> Submitted:
        if self.confirm is not None and not self.config.autosign:
            payloads = self._confirmed(step, payloads)
        credential = self.credentials[step.endpoint.name]
        transaction_ids = client.sign_and_submit(payloads, credential)
        return Submitted(transaction_ids=tuple(transaction_ids))

    def _confirmed(self, step: RegistrationStep, payloads: PayloadGenerator) -> PayloadGenerator:
        """Asks the operator about each payload just before it is signed."""

        def build():
            for payload in payloads:
                self.confirm(step, payload)
                yield payload

        return PayloadGenerator(payloads.description, build)

    def _announce(self, step: RegistrationStep, result: StepResult) -> None:
        if isinstance(result, Failed):
            self.echo(f"x {step.kind} on {step.endpoint.name} failed: {result.cause}")
            if result.logs:
                self.echo("Transaction logs:")
                for line in result.logs:
                    self.echo(f"\t{line}")
        elif isinstance(result, Skipped):
            self.echo(f"(i) {step.kind} on {step.endpoint.name} skipped: {result.reason}")
        elif isinstance(result, Submitted):
            self.echo(f"✓ {step.kind} on {step.endpoint.name}: {result.detail()}")
        else:
            self.echo(f"✓ {step.kind} on {step.endpoint.name} target: {result.target}")
            self.echo(f"  calldata: {result.data}")
            self.echo(f"  value: {result.value}")
