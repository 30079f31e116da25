"""Hardcoded whale and exchange address book."""
from smartwhale.providers.core import normalize_address
from smartwhale.utils import short_address

# Large Ethereum holders followed by default (order = default ranking input).
KNOWN_WHALE_ADDRESSES: list[str] = [
    "0xBE0eB53F46cd790Cd13851d5EFf43D12404d33E8",
    "0x8315177aB297bA92A06054cE80a67Ed4DBd7ed3a",
    "0x28C6c06298d514Db089934071355E5743bf21d60",
    "0x56Eddb7aa87536c09CCc2793473599fD21A8b17F",
    "0xDFd5293D8e347dFe59E90eFd55b2956a1343963d",
    "0x4976A4A02f38326660D17bf34b431dC6e2eb2327",
    "0x9696f59E4d72E237BE84fFD425DCaD154Bf96976",
    "0x3f5CE5FBFe3E9af3971dD833D26bA9b5C936f0bE",
    "0x742d35Cc6634C0532925a3b844Bc454e4438f44e",
    "0x53d284357ec70cE289D6D64134DfAc8E511c8a3D",
    "0xF977814e90dA44bFA03b6295A0616a897441aceC",
    "0x0548F59fEE79f8832C299e01dCA5c76F034F558e",
    "0x267be1C1D684F78cb4F6a176C4911b741E4Ffdc0",
    "0xE92d1A43df510F82C66382592a047d288f85226f",
    "0xA929022c9107643515F5c777cE9a910F0D1e490C",
    "0x36A9ACA50E9e84D74eABAd96cC7c9950cAe16297",
    "0x0681d8Db095565FE8A346fA0277bFfdE9C0eDBBF",
    "0x73BCEb1Cd57C711feaC4224D062b0F6ff338501e",
    "0x21a31Ee1afC51d94C2eFcCAa2092aD1028285549",
    "0x220866B1A2219f40e72f5c628B65D54268cA3A9D",
    "0xDD4c48C0B24039969fC16D1cdF626eaB821d3384",
    "0xD551234Ae421e3BCBA99A0Da6d736074f22192FF",
    "0xC098B2a3Aa256D2140208C3de6543aAEf5cd3A94",
    "0x4E9ce36E442e55EcD9025B9a6E0D88485d628A67",
    "0x40B38765696e3d5d8d9d834D8AaD4bB6e418E489",
    "0x8d12A197cB00D4747a1fe03395095ce2A5CC6819",
    "0xAb5801a7D398351b8bE11C439e05C5B3259aeC9B",
    "0xDA9dfA130Df4dE4673b89022EE50ff26f6EA73Cf",
    "0x00000000219ab540356cBB839Cbe05303d7705Fa",
    "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2",
]

WHALE_LABELS: dict[str, str] = {
    "0xBE0eB53F46cd790Cd13851d5EFf43D12404d33E8": "Binance Hot Wallet",
    "0x8315177aB297bA92A06054cE80a67Ed4DBd7ed3a": "Bitfinex Cold Storage",
    "0x28C6c06298d514Db089934071355E5743bf21d60": "Binance Cold Wallet 2",
    "0x56Eddb7aa87536c09CCc2793473599fD21A8b17F": "Binance Cold Wallet 3",
    "0xDFd5293D8e347dFe59E90eFd55b2956a1343963d": "Binance Cold Wallet 4",
    "0x4976A4A02f38326660D17bf34b431dC6e2eb2327": "Bitfinex Cold Wallet 2",
    "0x9696f59E4d72E237BE84fFD425DCaD154Bf96976": "Kraken Hot Wallet",
    "0xF977814e90dA44bFA03b6295A0616a897441aceC": "Binance Cold Wallet 5",
    "0x220866B1A2219f40e72f5c628B65D54268cA3A9D": "Binance Cold Wallet 8",
    "0xDA9dfA130Df4dE4673b89022EE50ff26f6EA73Cf": "Kraken Exchange",
    "0x00000000219ab540356cBB839Cbe05303d7705Fa": "ETH 2.0 Staking Contract",
    "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2": "Wrapped Ether (WETH)",
    "0xAb5801a7D398351b8bE11C439e05C5B3259aeC9B": "Vitalik Buterin",
}

# Centralized exchange deposit/hot/cold wallets. Transfers into one of these
# count as selling, transfers out of one as buying.
EXCHANGE_ADDRESSES: frozenset[str] = frozenset(
    normalize_address(a)
    for a in (
        "0x28C6c06298d514Db089934071355E5743bf21d60",  # Binance 14
        "0x21a31Ee1afC51d94C2eFcCAa2092aD1028285549",  # Binance 15
        "0xBE0eB53F46cd790Cd13851d5EFf43D12404d33E8",  # Binance 7
        "0x56Eddb7aa87536c09CCc2793473599fD21A8b17F",  # Binance 17
        "0xDFd5293D8e347dFe59E90eFd55b2956a1343963d",  # Binance 16
        "0xF977814e90dA44bFA03b6295A0616a897441aceC",  # Binance 8
        "0x3f5CE5FBFe3E9af3971dD833D26bA9b5C936f0bE",  # Binance 1
        "0xD551234Ae421e3BCBA99A0Da6d736074f22192FF",  # Binance 2
        "0x220866B1A2219f40e72f5c628B65D54268cA3A9D",  # Binance
        "0x8315177aB297bA92A06054cE80a67Ed4DBd7ed3a",  # Bitfinex
        "0x4976A4A02f38326660D17bf34b431dC6e2eb2327",  # Bitfinex
        "0x9696f59E4d72E237BE84fFD425DCaD154Bf96976",  # Kraken
        "0xDA9dfA130Df4dE4673b89022EE50ff26f6EA73Cf",  # Kraken
        "0x267be1C1D684F78cb4F6a176C4911b741E4Ffdc0",  # Kraken 4
        "0xA910f92ACdAf488fa6eF02174fb86208Ad7722ba",  # Poloniex
        "0x71660c4005BA85c37ccec55d0C4493E66Fe775d3",  # Coinbase 1
        "0x503828976D22510aad0201ac7EC88293211D23Da",  # Coinbase 2
        "0xddfAbCdc4D8FfC6d5beaf154f18B778f892A0740",  # Coinbase 3
        "0x3cD751E6b0078Be393132286c442345e5DC49699",  # Coinbase 4
        "0xb5d85CBf7cB3EE0D56b3bB207D5Fc4B82f43F511",  # Coinbase 5
        "0xeB2629a2734e272Bcc07BDA959863f316F4bD4Cf",  # Coinbase 6
    )
)

# Wallets polled by the activity feed and the sync job.
ACTIVITY_WHALES: list[str] = [
    "0xF977814e90dA44bFA03b6295A0616a897441aceC",
    "0x28C6c06298d514Db089934071355E5743bf21d60",
    "0x742d35Cc6634C0532925a3b844Bc454e4438f44e",
    "0x21a31Ee1afC51d94C2eFcCAa2092aD1028285549",
    "0x220866B1A2219f40e72f5c628B65D54268cA3A9D",
]

_LABELS_BY_ADDRESS = {normalize_address(a): label for a, label in WHALE_LABELS.items()}


def whale_label(address: str) -> str:
    """Known label for an address, else the short form 'Whale 0x1234...'."""
    return _LABELS_BY_ADDRESS.get(normalize_address(address)) or f"Whale {short_address(address)}"


def is_exchange(address: str | None) -> bool:
    return bool(address) and normalize_address(address) in EXCHANGE_ADDRESSES
