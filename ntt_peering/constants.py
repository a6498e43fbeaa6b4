from enum import Enum
from pathlib import Path
from typing import NamedTuple, Tuple


#
# Filesystem
#

PACKAGE_DIR = Path(__file__).parent
ABI_DIR = PACKAGE_DIR / "abi"

#
# Networks
#

TESTNET = "Testnet"
MAINNET = "Mainnet"

SUPPORTED_NETWORKS = [TESTNET, MAINNET]


class ChainFamily(Enum):
    EVM = "evm"
    SOLANA = "solana"


# native token decimal convention per chain family
NATIVE_DECIMALS = {
    ChainFamily.EVM: 18,
    ChainFamily.SOLANA: 9,
}

# largest inbound limit the local manager can store
MAX_INBOUND_LIMIT = {
    ChainFamily.EVM: 2**256 - 1,
    ChainFamily.SOLANA: 2**64 - 1,
}

#
# Chains
#


class ChainInfo(NamedTuple):
    name: str
    wormhole_chain_id: int
    family: ChainFamily
    networks: Tuple[str, ...]

    @property
    def decimals(self) -> int:
        return NATIVE_DECIMALS[self.family]


BOTH = (TESTNET, MAINNET)

CHAINS = {
    info.name: info
    for info in (
        ChainInfo("Solana", 1, ChainFamily.SOLANA, BOTH),
        ChainInfo("Ethereum", 2, ChainFamily.EVM, (MAINNET,)),
        ChainInfo("Bsc", 4, ChainFamily.EVM, BOTH),
        ChainInfo("Polygon", 5, ChainFamily.EVM, (MAINNET,)),
        ChainInfo("Avalanche", 6, ChainFamily.EVM, BOTH),
        ChainInfo("Fantom", 10, ChainFamily.EVM, BOTH),
        ChainInfo("Celo", 14, ChainFamily.EVM, BOTH),
        ChainInfo("Moonbeam", 16, ChainFamily.EVM, BOTH),
        ChainInfo("Arbitrum", 23, ChainFamily.EVM, (MAINNET,)),
        ChainInfo("Optimism", 24, ChainFamily.EVM, (MAINNET,)),
        ChainInfo("Base", 30, ChainFamily.EVM, (MAINNET,)),
        ChainInfo("Scroll", 34, ChainFamily.EVM, BOTH),
        ChainInfo("Mantle", 35, ChainFamily.EVM, BOTH),
        ChainInfo("Linea", 38, ChainFamily.EVM, BOTH),
        ChainInfo("Sepolia", 10002, ChainFamily.EVM, (TESTNET,)),
        ChainInfo("ArbitrumSepolia", 10003, ChainFamily.EVM, (TESTNET,)),
        ChainInfo("BaseSepolia", 10004, ChainFamily.EVM, (TESTNET,)),
        ChainInfo("OptimismSepolia", 10005, ChainFamily.EVM, (TESTNET,)),
        ChainInfo("Holesky", 10006, ChainFamily.EVM, (TESTNET,)),
        ChainInfo("PolygonSepolia", 10007, ChainFamily.EVM, (TESTNET,)),
    )
}

#
# NTT
#

# the wormhole transceiver is always registered first
WORMHOLE_TRANSCEIVER_INDEX = 0

DEFAULT_EVM_LOCAL_CHAIN = "ArbitrumSepolia"
DEFAULT_SOLANA_LOCAL_CHAIN = "Solana"
DEFAULT_CHAIN_A = "Sepolia"
DEFAULT_CHAIN_B = "ArbitrumSepolia"

#
# Pacing
#

# seconds to wait between consecutive submissions on the same chain
DEFAULT_SETTLE_DELAY = 3.0
MAX_SETTLE_DELAY = 3600.0

# seconds to wait for a transaction receipt / signature confirmation
CONFIRMATION_TIMEOUT = 120
