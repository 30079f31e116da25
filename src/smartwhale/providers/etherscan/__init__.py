"""Etherscan provider."""
from smartwhale.providers.etherscan.models import (EtherscanTokenTransfer,
                                                   EtherscanTx)
from smartwhale.providers.etherscan.provider import EtherscanProvider

__all__ = ["EtherscanProvider", "EtherscanTokenTransfer", "EtherscanTx"]
