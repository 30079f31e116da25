"""Models for the Etherscan provider (API params and result rows)."""
from pydantic import BaseModel, ConfigDict, Field


class EtherscanTxListParams(BaseModel):
    """Params for account/txlist and account/tokentx. Merge with 'address' at call site."""

    startblock: int = 0
    endblock: int = 99999999
    page: int = 1
    offset: int = 20
    sort: str = "desc"


class EtherscanTx(BaseModel):
    """Normal transaction row of account/txlist."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    hash: str
    block_number: int = Field(alias="blockNumber")
    time_stamp: int = Field(alias="timeStamp")
    from_address: str = Field(alias="from")
    to_address: str = Field(default="", alias="to")
    value: int  # wei
    is_error: str = Field(default="0", alias="isError")


class EtherscanTokenTransfer(BaseModel):
    """ERC-20 transfer row of account/tokentx."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    hash: str
    time_stamp: int = Field(alias="timeStamp")
    from_address: str = Field(alias="from")
    to_address: str = Field(default="", alias="to")
    contract_address: str = Field(alias="contractAddress")
    token_name: str = Field(default="Unknown Token", alias="tokenName")
    token_symbol: str = Field(default="UNKNOWN", alias="tokenSymbol")
    token_decimal: int = Field(default=18, alias="tokenDecimal")
    value: int
