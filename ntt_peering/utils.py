import json
from pathlib import Path
from typing import List

from ntt_peering.constants import ABI_DIR


def _load_json(filepath: Path):
    """Loads a JSON file."""
    with open(filepath, "r") as file:
        return json.load(file)


def load_abi(contract_name: str) -> List[dict]:
    """Returns the bundled ABI of an NTT contract."""
    filepath = ABI_DIR / f"{contract_name}.json"
    if not filepath.exists():
        raise ValueError(f"No ABI found for contract '{contract_name}'.")
    return _load_json(filepath)


def format_hex(data: bytes) -> str:
    return "0x" + bytes(data).hex()


def parse_unsigned(value) -> int:
    """Accepts ints and plain ASCII decimal strings ("1000", never "1_000" or "+5")."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and value.isascii() and value.isdigit():
        return int(value)
    raise ValueError(f"'{value}' is not a decimal integer")
