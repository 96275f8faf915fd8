"""Static network descriptors for the supported testnets."""

from dataclasses import asdict, dataclass

from core.paths import BSC_TESTNET_RPC_URL, SEPOLIA_RPC_URL


@dataclass(frozen=True)
class NetworkDescriptor:
    id: str
    name: str
    display_name: str
    chain_id: int
    rpc_url: str
    explorer_url: str
    native_name: str
    native_symbol: str
    native_decimals: int
    testnet: bool
    address_key: str  # which SecretRecord.public_addresses entry this network queries

    def to_dict(self) -> dict:
        return asdict(self)


TESTNET_NETWORKS: dict[str, NetworkDescriptor] = {
    "sepolia": NetworkDescriptor(
        id="sepolia",
        name="ethereum-sepolia",
        display_name="Ethereum Sepolia",
        chain_id=11155111,
        rpc_url=SEPOLIA_RPC_URL,
        explorer_url="https://sepolia.etherscan.io",
        native_name="Sepolia Ether",
        native_symbol="ETH",
        native_decimals=18,
        testnet=True,
        address_key="ethereum",
    ),
    "bsc-testnet": NetworkDescriptor(
        id="bsc-testnet",
        name="bsc-testnet",
        display_name="BSC Testnet",
        chain_id=97,
        rpc_url=BSC_TESTNET_RPC_URL,
        explorer_url="https://testnet.bscscan.com",
        native_name="Test BNB",
        native_symbol="BNB",
        native_decimals=18,
        testnet=True,
        address_key="bnbchain",
    ),
}


def get_all_networks() -> list[NetworkDescriptor]:
    """All configured networks, in configuration order."""
    return list(TESTNET_NETWORKS.values())


def get_network_by_id(network_id: str) -> NetworkDescriptor | None:
    return TESTNET_NETWORKS.get(network_id)
