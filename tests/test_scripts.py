import json

import base58
import pytest
from click.testing import CliRunner
from solders.keypair import Keypair

from scripts import (
    evm_register_peer,
    evm_register_peer_calldata,
    evm_to_evm_peer,
    evm_update_inbound_limit,
    solana_claim_ownership,
    solana_register_peer,
    solana_register_peer_calldata,
    solana_transfer_ownership,
)
from tests.conftest import (
    EVM_KEY,
    MANAGER_A,
    MANAGER_B,
    RPC,
    SOLANA_MANAGER,
    SOLANA_TOKEN,
    SOLANA_TRANSCEIVER,
    TRANSCEIVER_A,
    TRANSCEIVER_B,
    FakeChainClient,
    solana_address,
)

# fmt: off
EVM_PEER_ARGS = [
    "--rpc", RPC,
    "--local-manager", MANAGER_A,
    "--local-transceiver", TRANSCEIVER_A,
    "--remote-chain", "Sepolia",
    "--remote-manager", MANAGER_B,
    "--remote-transceiver", TRANSCEIVER_B,
    "--inbound-limit", "1000000000000000000000",
]

SOLANA_ARGS = [
    "--rpc", RPC,
    "--local-manager", SOLANA_MANAGER,
    "--local-transceiver", SOLANA_TRANSCEIVER,
]
# fmt: on


# Fixtures
@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def install_clients(monkeypatch):
    """Replaces the chain client factory of a script with recording fakes."""
    created = list()

    def install(script, **options):
        def client_for(endpoint, sender=None):
            client = FakeChainClient(endpoint, sender=sender, **options)
            created.append(client)
            return client

        monkeypatch.setattr(script, "client_for", client_for)
        return created

    return install


@pytest.fixture
def solana_key():
    keypair = Keypair()
    return keypair, base58.b58encode(bytes(keypair)).decode()


def test_evm_register_peer(runner, install_clients):
    clients = install_clients(evm_register_peer)
    args = EVM_PEER_ARGS + ["--private-key", EVM_KEY, "--auto", "--settle-delay", "0"]

    result = runner.invoke(evm_register_peer.cli, args)

    assert 0 == result.exit_code, result.output
    (client,) = clients
    assert "ArbitrumSepolia" == client.endpoint.name
    assert ["setPeer", "setWormholePeer"] == client.submitted_methods
    assert "Summary" in result.output
    assert "All 2 step(s) completed." in result.output


def test_private_key_from_environment(runner, install_clients):
    clients = install_clients(evm_register_peer)
    args = EVM_PEER_ARGS + ["--auto", "--settle-delay", "0"]

    result = runner.invoke(evm_register_peer.cli, args, env={"NTT_PRIVATE_KEY": EVM_KEY})

    assert 0 == result.exit_code, result.output
    assert 2 == len(clients[0].submitted)


def test_json_output(runner, install_clients):
    install_clients(evm_register_peer)
    args = EVM_PEER_ARGS + ["--private-key", EVM_KEY, "--auto", "--settle-delay", "0", "-o", "json"]

    result = runner.invoke(evm_register_peer.cli, args)

    assert 0 == result.exit_code, result.output
    report = json.loads(result.stdout)
    assert report["success"]
    assert ["submitted", "submitted"] == [step["status"] for step in report["steps"]]
    # progress goes to stderr
    assert "Registering" in result.stderr


@pytest.mark.parametrize("limit", ["ten", "-1", "1e18", "1_000", "+5", " 7"])
def test_malformed_inbound_limit(runner, install_clients, limit):
    clients = install_clients(evm_register_peer)
    args = EVM_PEER_ARGS + ["--private-key", EVM_KEY, "--inbound-limit", limit]

    result = runner.invoke(evm_register_peer.cli, args)

    assert 1 == result.exit_code
    assert "--inbound-limit" in result.output
    assert [] == clients


def test_missing_option_is_a_configuration_error(runner, install_clients):
    clients = install_clients(evm_register_peer)
    args = [arg for arg in EVM_PEER_ARGS if arg not in ("--remote-chain", "Sepolia")]

    result = runner.invoke(evm_register_peer.cli, args + ["--private-key", EVM_KEY])

    assert 1 == result.exit_code
    assert "--remote-chain" in result.output
    assert [] == clients


@pytest.mark.parametrize(
    "extra,message",
    [
        (["--local-chain", "Atlantis"], "unknown chain"),
        (["--network", "Mainnet"], "not available on Mainnet"),
        (["--local-chain", "Solana"], "not in the evm family"),
        (["--private-key", "0x1234"], "--private-key"),
    ],
)
def test_invalid_configuration(runner, install_clients, extra, message):
    clients = install_clients(evm_register_peer)

    args = EVM_PEER_ARGS + ["--private-key", EVM_KEY] + extra
    result = runner.invoke(evm_register_peer.cli, args)

    assert 1 == result.exit_code
    assert message in result.output
    assert [] == clients


def test_step_failure_exits_non_zero(runner, install_clients):
    install_clients(evm_register_peer, revert_on={"setWormholePeer"})
    args = EVM_PEER_ARGS + ["--private-key", EVM_KEY, "--auto", "--settle-delay", "0"]

    result = runner.invoke(evm_register_peer.cli, args)

    assert 1 == result.exit_code
    assert "setWormholePeer reverted on ArbitrumSepolia" in result.output
    assert "revert: setWormholePeer" in result.output
    assert "halted" in result.output


def test_interactive_confirmation(runner, install_clients):
    clients = install_clients(evm_register_peer)
    args = EVM_PEER_ARGS + ["--private-key", EVM_KEY, "--settle-delay", "0"]

    result = runner.invoke(evm_register_peer.cli, args, input="y\ny\n")

    assert 0 == result.exit_code, result.output
    assert 2 == result.output.count("Continue?")
    assert 2 == len(clients[0].submitted)


def test_declined_confirmation_aborts(runner, install_clients):
    clients = install_clients(evm_register_peer)
    args = EVM_PEER_ARGS + ["--private-key", EVM_KEY, "--settle-delay", "0"]

    result = runner.invoke(evm_register_peer.cli, args, input="n\n")

    assert 1 == result.exit_code
    assert [] == clients[0].submitted
    assert "declined by operator" in result.output
    assert "not attempted" in result.output


def test_declined_confirmation_still_reports_the_run(runner, install_clients):
    clients = install_clients(evm_register_peer)
    args = EVM_PEER_ARGS + ["--private-key", EVM_KEY, "--settle-delay", "0", "-o", "json"]

    result = runner.invoke(evm_register_peer.cli, args, input="y\nn\n")

    assert 1 == result.exit_code
    assert ["setPeer"] == clients[0].submitted_methods
    # the runner echoes typed answers to stdout ahead of the report
    report = json.loads(result.stdout[result.stdout.index("{") :])
    assert not report["success"]
    first, second = report["steps"]
    assert "submitted" == first["status"]
    assert 1 == len(first["transaction_ids"])
    assert "failed" == second["status"]
    assert "declined by operator" == second["cause"]


@pytest.mark.parametrize("delay", ["inf", "nan", "-1", "3601"])
def test_settle_delay_must_be_finite_and_bounded(runner, install_clients, delay):
    clients = install_clients(evm_register_peer)
    args = EVM_PEER_ARGS + ["--private-key", EVM_KEY, "--auto", "--settle-delay", delay]

    result = runner.invoke(evm_register_peer.cli, args)

    assert 1 == result.exit_code
    assert "--settle-delay" in result.output
    assert not any(client.submitted for client in clients)
    assert not isinstance(result.exception, OverflowError)


def test_calldata_extraction(runner, install_clients):
    clients = install_clients(evm_register_peer_calldata)
    args = EVM_PEER_ARGS + ["--evm-chain", "BaseSepolia", "-o", "json"]

    result = runner.invoke(evm_register_peer_calldata.cli, args)

    assert 0 == result.exit_code, result.output
    (client,) = clients
    assert "BaseSepolia" == client.endpoint.name
    assert client.sender is None
    assert [] == client.submitted
    report = json.loads(result.stdout)
    assert ["extracted", "extracted"] == [step["status"] for step in report["steps"]]
    assert all(step["data"].startswith("0x") for step in report["steps"])


def test_solana_peer_calldata_on_evm(runner, install_clients):
    clients = install_clients(evm_register_peer_calldata)
    # fmt: off
    args = [
        "--rpc", RPC,
        "--evm-chain", "Sepolia",
        "--local-manager", MANAGER_A,
        "--local-transceiver", TRANSCEIVER_A,
        "--remote-chain", "Solana",
        "--remote-manager", SOLANA_MANAGER,
        "--remote-transceiver", SOLANA_TRANSCEIVER,
        "--inbound-limit", "1000000000",
    ]
    # fmt: on

    result = runner.invoke(evm_register_peer_calldata.cli, args)

    assert 0 == result.exit_code, result.output
    (client,) = clients
    assert ["setPeer", "setWormholePeer"] == client.built
    assert "All 2 step(s) completed." in result.output


def test_calldata_extraction_takes_no_private_key(runner, install_clients):
    install_clients(evm_register_peer_calldata)

    result = runner.invoke(
        evm_register_peer_calldata.cli, EVM_PEER_ARGS + ["--private-key", EVM_KEY]
    )

    assert 1 == result.exit_code
    assert "--private-key" in result.output


def test_evm_to_evm_peer(runner, install_clients):
    clients = install_clients(evm_to_evm_peer)
    # fmt: off
    args = [
        "--rpc-a", RPC,
        "--rpc-b", RPC,
        "--manager-a", MANAGER_A,
        "--transceiver-a", TRANSCEIVER_A,
        "--manager-b", MANAGER_B,
        "--transceiver-b", TRANSCEIVER_B,
        "--inbound-limit", "500",
        "--auto",
        "--settle-delay", "0",
    ]
    # fmt: on
    env = {"NTT_PRIVATE_KEY_A": EVM_KEY, "NTT_PRIVATE_KEY_B": EVM_KEY}

    result = runner.invoke(evm_to_evm_peer.cli, args, env=env)

    assert 0 == result.exit_code, result.output
    client_a, client_b = clients
    assert "Sepolia" == client_a.endpoint.name
    assert "ArbitrumSepolia" == client_b.endpoint.name
    assert ["setPeer", "setWormholePeer"] == client_a.submitted_methods
    assert ["setPeer", "setWormholePeer"] == client_b.submitted_methods
    assert "All 4 step(s) completed." in result.output


def test_evm_to_evm_peer_rejects_identical_chains(runner, install_clients):
    clients = install_clients(evm_to_evm_peer)
    # fmt: off
    args = [
        "--rpc-a", RPC,
        "--rpc-b", RPC,
        "--chain-a", "Sepolia",
        "--chain-b", "Sepolia",
        "--manager-a", MANAGER_A,
        "--transceiver-a", TRANSCEIVER_A,
        "--manager-b", MANAGER_B,
        "--transceiver-b", TRANSCEIVER_B,
        "--inbound-limit", "500",
        "--private-key-a", EVM_KEY,
        "--private-key-b", EVM_KEY,
    ]
    # fmt: on

    result = runner.invoke(evm_to_evm_peer.cli, args)

    assert 1 == result.exit_code
    assert "must differ" in result.output
    assert [] == clients


def test_evm_update_inbound_limit(runner, install_clients):
    clients = install_clients(evm_update_inbound_limit)
    # fmt: off
    args = [
        "--rpc", RPC,
        "--private-key", EVM_KEY,
        "--local-manager", MANAGER_A,
        "--local-transceiver", TRANSCEIVER_A,
        "--remote-chain", "Sepolia",
        "--inbound-limit", "42",
        "--auto",
    ]
    # fmt: on

    result = runner.invoke(evm_update_inbound_limit.cli, args)

    assert 0 == result.exit_code, result.output
    (client,) = clients
    assert ["setInboundLimit"] == client.submitted_methods


def test_solana_register_peer(runner, install_clients, solana_key):
    keypair, encoded = solana_key
    clients = install_clients(solana_register_peer, registered=True)
    # fmt: off
    args = SOLANA_ARGS + [
        "--private-key", encoded,
        "--local-token", SOLANA_TOKEN,
        "--remote-chain", "Sepolia",
        "--remote-manager", MANAGER_B,
        "--remote-transceiver", TRANSCEIVER_B,
        "--inbound-limit", "1000000000",
        "--auto",
        "--settle-delay", "0",
    ]
    # fmt: on

    result = runner.invoke(solana_register_peer.cli, args)

    assert 0 == result.exit_code, result.output
    (client,) = clients
    assert keypair.pubkey() == client.sender.to_pubkey()
    assert ["setPeer", "setWormholePeer"] == client.submitted_methods
    assert "already registered" in result.output


def test_solana_register_peer_rejects_u64_overflow(runner, install_clients, solana_key):
    _keypair, encoded = solana_key
    clients = install_clients(solana_register_peer)
    # fmt: off
    args = SOLANA_ARGS + [
        "--private-key", encoded,
        "--remote-chain", "Sepolia",
        "--remote-manager", MANAGER_B,
        "--remote-transceiver", TRANSCEIVER_B,
        "--inbound-limit", str(2**64),
    ]
    # fmt: on

    result = runner.invoke(solana_register_peer.cli, args)

    assert 1 == result.exit_code
    assert "maximum" in result.output
    assert [] == clients


def test_solana_ownership_transfer_and_claim(runner, install_clients, solana_key):
    _keypair, encoded = solana_key
    new_owner = solana_address(11)

    clients = install_clients(solana_transfer_ownership)
    args = SOLANA_ARGS + ["--private-key", encoded, "--new-owner", new_owner, "--auto"]
    result = runner.invoke(solana_transfer_ownership.cli, args)

    assert 0 == result.exit_code, result.output
    assert ["transferOwnership"] == clients[0].submitted_methods

    clients = install_clients(solana_claim_ownership)
    args = SOLANA_ARGS + ["--private-key", encoded, "--auto"]
    result = runner.invoke(solana_claim_ownership.cli, args)

    assert 0 == result.exit_code, result.output
    assert "claimOwnership" in clients[-1].submitted_methods


def test_solana_register_peer_calldata(runner, install_clients):
    owner = solana_address(12)
    clients = install_clients(solana_register_peer_calldata)
    # fmt: off
    args = SOLANA_ARGS + [
        "--owner", owner,
        "--remote-chain", "Sepolia",
        "--remote-manager", MANAGER_B,
        "--remote-transceiver", TRANSCEIVER_B,
        "--inbound-limit", "1000000000",
        "-o", "json",
    ]
    # fmt: on

    result = runner.invoke(solana_register_peer_calldata.cli, args)

    assert 0 == result.exit_code, result.output
    (client,) = clients
    assert owner == str(client.sender)
    assert [] == client.submitted
    assert ["registerTransceiver", "setPeer", "setWormholePeer"] == client.built
    report = json.loads(result.stdout)
    assert ["extracted"] * 3 == [step["status"] for step in report["steps"]]


def test_solana_calldata_requires_a_valid_owner(runner, install_clients):
    clients = install_clients(solana_register_peer_calldata)
    # fmt: off
    args = SOLANA_ARGS + [
        "--owner", MANAGER_A,
        "--remote-chain", "Sepolia",
        "--remote-manager", MANAGER_B,
        "--remote-transceiver", TRANSCEIVER_B,
        "--inbound-limit", "1000000000",
    ]
    # fmt: on

    result = runner.invoke(solana_register_peer_calldata.cli, args)

    assert 1 == result.exit_code
    assert "--owner" in result.output
    assert [] == clients


def test_solana_transfer_rejects_invalid_owner(runner, install_clients, solana_key):
    _keypair, encoded = solana_key
    clients = install_clients(solana_transfer_ownership)
    args = SOLANA_ARGS + ["--private-key", encoded, "--new-owner", MANAGER_A, "--auto"]

    result = runner.invoke(solana_transfer_ownership.cli, args)

    assert 1 == result.exit_code
    assert "--new-owner" in result.output
    assert [] == clients
