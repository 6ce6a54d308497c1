"""
Typed argument records, one per tool.

The executor decodes resolved arguments into the record registered for the
tool before calling its handler, so handlers never inspect raw dicts.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ToolArguments(BaseModel):
    """Base record: camelCase on the wire, snake_case in Python"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class NoArgs(ToolArguments):
    pass


# Info tools

class WalletArgs(ToolArguments):
    wallet_address: str


class TokenBalanceArgs(ToolArguments):
    token_address: str
    wallet_address: str


class MultipleTokenBalancesArgs(ToolArguments):
    token_addresses: List[str] = Field(min_length=1)
    wallet_address: str


class WalletOverviewArgs(ToolArguments):
    wallet_address: str
    token_addresses: List[str] = Field(default_factory=list)


class TokenPriceArgs(ToolArguments):
    token_address: str


class Erc721BalanceArgs(ToolArguments):
    nft_address: str
    wallet_address: str


class Erc1155BalanceArgs(ToolArguments):
    nft_address: str
    wallet_address: str
    token_id: int = Field(ge=0)


class SwapQuoteArgs(ToolArguments):
    token_in: str
    token_out: str
    amount_in: str
    slippage_percentage: float = Field(default=0.5, ge=0, lt=100)


class EduAllowanceArgs(ToolArguments):
    owner_address: str
    amount: str


class EduBalanceArgs(ToolArguments):
    wallet_address: str
    amount: str


class BnbBalanceArgs(ToolArguments):
    wallet_address: str
    fee: str


class BscBridgeArgs(ToolArguments):
    amount: str
    address: str
    gas_on_destination: str = "0.0005"


# Transaction-prep tools

class SendEduArgs(ToolArguments):
    recipient: str
    amount: str


class SendErc20Args(ToolArguments):
    token_address: str
    recipient: str
    amount: str
    chain_id: Optional[int] = None


class ApproveTokenArgs(ToolArguments):
    token_address: str
    spender_address: str
    amount: str


class AmountArgs(ToolArguments):
    amount: str


class SwapEduForTokensArgs(ToolArguments):
    token_out: str
    amount_in: str
    recipient: str
    slippage_percentage: float = Field(default=0.5, ge=0, lt=100)
    deadline_minutes: int = Field(default=20, ge=1, le=180)


class SwapTokensForEduArgs(ToolArguments):
    token_in: str
    amount_in: str
    recipient: str
    slippage_percentage: float = Field(default=0.5, ge=0, lt=100)
    deadline_minutes: int = Field(default=20, ge=1, le=180)


class SwapTokensArgs(ToolArguments):
    token_in: str
    token_out: str
    amount_in: str
    recipient: str
    slippage_percentage: float = Field(default=0.5, ge=0, lt=100)
    deadline_minutes: int = Field(default=20, ge=1, le=180)


# Bridge backend tools

class BridgeBackendArgs(ToolArguments):
    address: str
    amount: str
