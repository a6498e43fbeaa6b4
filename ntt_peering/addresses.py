from typing import NamedTuple

from eth_utils import is_address, to_canonical_address, to_checksum_address
from solders.pubkey import Pubkey

from ntt_peering.constants import ChainFamily
from ntt_peering.exceptions import ConfigurationError

UNIVERSAL_ADDRESS_LENGTH = 32


class Address(NamedTuple):
    """A chain address tagged with the family that determines its encoding."""

    family: ChainFamily
    raw: bytes

    def to_universal(self) -> bytes:
        """Returns the left-padded 32 byte form used for cross-chain peers."""
        return self.raw.rjust(UNIVERSAL_ADDRESS_LENGTH, b"\x00")

    def to_pubkey(self) -> Pubkey:
        if self.family is not ChainFamily.SOLANA:
            raise ValueError(f"{self} is not a Solana address")
        return Pubkey.from_bytes(self.raw)

    def __str__(self) -> str:
        if self.family is ChainFamily.EVM:
            return to_checksum_address(self.raw)
        return str(Pubkey.from_bytes(self.raw))


def parse_address(family: ChainFamily, value: str, flag: str = "address") -> Address:
    """Parses an operator supplied address for the given chain family."""
    if not value or not value.strip():
        raise ConfigurationError(f"{flag} must not be empty.")
    value = value.strip()

    if family is ChainFamily.EVM:
        if not is_address(value):
            raise ConfigurationError(f"{flag}: '{value}' is not a valid EVM address.")
        return Address(family=family, raw=to_canonical_address(value))

    try:
        pubkey = Pubkey.from_string(value)
    except ValueError:
        raise ConfigurationError(f"{flag}: '{value}' is not a valid Solana public key.")
    return Address(family=family, raw=bytes(pubkey))
