import json
from pathlib import Path

import base58
from eth_account import Account
from eth_account.signers.local import LocalAccount
from solders.keypair import Keypair

from ntt_peering.addresses import Address
from ntt_peering.constants import ChainFamily
from ntt_peering.exceptions import ConfigurationError


def _is_file(value: str) -> bool:
    try:
        return Path(value).expanduser().is_file()
    except OSError:  # e.g. a key too long to be a path
        return False


def load_evm_account(value: str, flag: str = "--private-key") -> LocalAccount:
    """Loads an EVM signer from a hex private key or a file containing one."""
    if not value:
        raise ConfigurationError(f"Missing {flag}.")
    key = value
    if _is_file(value):
        key = Path(value).expanduser().read_text().strip()
    try:
        return Account.from_key(key)
    except (ValueError, TypeError):
        raise ConfigurationError(f"{flag} is not a valid EVM private key or key file.")


def load_solana_keypair(value: str, flag: str = "--private-key") -> Keypair:
    """
    Loads a Solana signer from either a base58 encoded secret key or the
    path of a JSON keypair file (a list of 64 integers, as written by solana-keygen).
    """
    if not value:
        raise ConfigurationError(f"Missing {flag}.")
    if _is_file(value):
        try:
            secret = json.loads(Path(value).expanduser().read_text())
            return Keypair.from_bytes(bytes(secret))
        except (ValueError, TypeError):
            raise ConfigurationError(f"{flag}: {value} is not a valid Solana keypair file.")
    try:
        return Keypair.from_bytes(base58.b58decode(value.strip()))
    except (ValueError, TypeError):
        raise ConfigurationError(f"{flag} is not a valid base58 Solana secret key or keypair file.")


def load_credential(family: ChainFamily, value: str, flag: str = "--private-key"):
    if family is ChainFamily.EVM:
        return load_evm_account(value, flag=flag)
    return load_solana_keypair(value, flag=flag)


def credential_address(family: ChainFamily, credential) -> Address:
    """The public address of a loaded credential."""
    if family is ChainFamily.EVM:
        return Address(family=family, raw=bytes.fromhex(credential.address[2:]))
    return Address(family=family, raw=bytes(credential.pubkey()))
