"""
Tool Registry and Executor for LLM-driven tool calling.

This module provides the infrastructure for defining, registering, and executing
tools that the LLM can call. Each registry entry carries its oracle-facing
definition, a typed argument record, a namespace (info, transaction, bridge)
and the handler that talks to the chain collaborators.
"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Coroutine, Dict, Iterable, List, Optional, Type

from pydantic import ValidationError

from ...config import settings
from ...providers.bridge_api import BridgeBackendResult
from ...providers.llm.base import (
    ParameterRole,
    ToolCall,
    ToolDefinition,
    ToolParameter,
    ToolParameterType,
    ToolResult,
)
from ...services.chains import (
    ARBITRUM_CHAIN_ID,
    BSC_CHAIN_ID,
    EDUCHAIN_CHAIN_ID,
    chain_for_address,
    infer_target_chain,
)
from ...services.tokens import TOKEN_REGISTRY
from ...tools import balances, bridge, swap, transfers
from ...tools.clients import ChainClients, build_chain_clients
from ...types.transactions import TransactionDescriptor
from . import arguments as a
from .errors import InvalidTransactionError, ToolArgumentError, ToolExecutionError
from .resolver import ADDRESS_ROLES, ArgumentResolver
from .serialization import to_transport

if TYPE_CHECKING:  # pragma: no cover
    from .profiles import AgentProfile


class ToolCategory(str, Enum):
    """Namespace a tool belongs to"""
    INFO = "info"
    TRANSACTION = "transaction"
    BRIDGE = "bridge"

    @property
    def is_action(self) -> bool:
        return self is not ToolCategory.INFO


@dataclass
class RegisteredTool:
    """A tool registered in the registry with its definition and handler."""
    definition: ToolDefinition
    handler: Callable[..., Coroutine[Any, Any, Any]]
    category: ToolCategory
    args_model: Type[a.ToolArguments]
    chain_id: Optional[int] = None

    @property
    def name(self) -> str:
        return self.definition.name


def _param(
    name: str,
    description: str,
    role: Optional[ParameterRole] = None,
    type: ToolParameterType = ToolParameterType.STRING,
    required: bool = True,
    default: Any = None,
) -> ToolParameter:
    return ToolParameter(
        name=name,
        type=type,
        description=description,
        required=required,
        default=default,
        role=role,
    )


_SLIPPAGE = _param(
    "slippagePercentage",
    "Maximum accepted slippage in percent (default 0.5)",
    type=ToolParameterType.NUMBER,
    required=False,
    default=0.5,
)
_DEADLINE = _param(
    "deadlineMinutes",
    "Minutes until the swap expires (default 20)",
    type=ToolParameterType.INTEGER,
    required=False,
    default=20,
)


class ToolRegistry:
    """
    Registry of available tools that the LLM can call.

    Handlers receive the tool's typed argument record and the injected chain
    clients; nothing here reads module-level provider singletons.
    """

    def __init__(
        self,
        clients: Optional[ChainClients] = None,
        logger: Optional[logging.Logger] = None,
        register_defaults: bool = True,
    ):
        self._tools: Dict[str, RegisteredTool] = {}
        self.clients = clients or build_chain_clients()
        self.logger = logger or logging.getLogger(__name__)
        if register_defaults:
            self._register_default_tools()

    def register(
        self,
        definition: ToolDefinition,
        handler: Callable[..., Coroutine[Any, Any, Any]],
        category: ToolCategory,
        args_model: Type[a.ToolArguments],
        chain_id: Optional[int] = None,
    ) -> None:
        """Register a tool with its definition and handler."""
        if definition.name in self._tools:
            raise ValueError(f"Tool already registered: {definition.name}")
        self._tools[definition.name] = RegisteredTool(
            definition=definition,
            handler=handler,
            category=category,
            args_model=args_model,
            chain_id=chain_id,
        )

    def get_definitions(self, names: Optional[Iterable[str]] = None) -> List[ToolDefinition]:
        """Tool definitions for the oracle, restricted to ``names`` in their order."""
        if names is None:
            return [tool.definition for tool in self._tools.values()]
        return [self._tools[name].definition for name in names if name in self._tools]

    def get_tool(self, name: str) -> Optional[RegisteredTool]:
        """Get a registered tool by name."""
        return self._tools.get(name)

    def has_tool(self, name: str) -> bool:
        """Check if a tool is registered."""
        return name in self._tools

    def _register_default_tools(self) -> None:
        """Register the default set of tools."""

        # ------------------------------------------------------------------
        # Info tools
        # ------------------------------------------------------------------
        self.register(
            ToolDefinition(
                name="get_edu_balance",
                description=(
                    "Get the native EDU balance of a wallet on EDU Chain. "
                    "Use this when the user asks how much EDU they have or before sending EDU."
                ),
                parameters=[
                    _param("walletAddress", "Wallet address to check (defaults to the user's wallet)", ParameterRole.WALLET),
                ],
            ),
            self._handle_get_edu_balance,
            ToolCategory.INFO,
            a.WalletArgs,
        )

        self.register(
            ToolDefinition(
                name="get_token_balance",
                description=(
                    "Get a wallet's balance of one ERC-20 token on EDU Chain, with its USD value "
                    "when a SailFish price is available."
                ),
                parameters=[
                    _param("tokenAddress", "Token symbol (e.g. USDC) or contract address", ParameterRole.TOKEN),
                    _param("walletAddress", "Wallet address to check (defaults to the user's wallet)", ParameterRole.WALLET),
                ],
            ),
            self._handle_get_token_balance,
            ToolCategory.INFO,
            a.TokenBalanceArgs,
        )

        self.register(
            ToolDefinition(
                name="get_multiple_token_balances",
                description="Get a wallet's balances for several ERC-20 tokens on EDU Chain at once.",
                parameters=[
                    _param(
                        "tokenAddresses",
                        "Token symbols or contract addresses",
                        ParameterRole.TOKEN,
                        type=ToolParameterType.ARRAY,
                    ),
                    _param("walletAddress", "Wallet address to check (defaults to the user's wallet)", ParameterRole.WALLET),
                ],
            ),
            self._handle_get_multiple_token_balances,
            ToolCategory.INFO,
            a.MultipleTokenBalancesArgs,
        )

        self.register(
            ToolDefinition(
                name="get_wallet_overview",
                description=(
                    "Summarise a wallet on EDU Chain: native EDU balance, balances of the given "
                    "tokens and total USD value. Use for 'what's in my wallet' style questions."
                ),
                parameters=[
                    _param("walletAddress", "Wallet address to summarise (defaults to the user's wallet)", ParameterRole.WALLET),
                    _param(
                        "tokenAddresses",
                        "Token symbols or contract addresses to include (defaults to USDC and USDT)",
                        ParameterRole.TOKEN,
                        type=ToolParameterType.ARRAY,
                        required=False,
                    ),
                ],
            ),
            self._handle_get_wallet_overview,
            ToolCategory.INFO,
            a.WalletOverviewArgs,
        )

        self.register(
            ToolDefinition(
                name="get_token_price",
                description="Get the current USD price of a token traded on the SailFish DEX.",
                parameters=[
                    _param("tokenAddress", "Token symbol (e.g. EDU, USDC) or contract address", ParameterRole.TOKEN),
                ],
            ),
            self._handle_get_token_price,
            ToolCategory.INFO,
            a.TokenPriceArgs,
        )

        self.register(
            ToolDefinition(
                name="get_erc721_balance",
                description=(
                    "Get how many NFTs a wallet owns in an ERC-721 collection on EDU Chain, "
                    "with their token ids when the collection is enumerable."
                ),
                parameters=[
                    _param("nftAddress", "ERC-721 collection contract address", ParameterRole.ADDRESS),
                    _param("walletAddress", "Wallet address to check (defaults to the user's wallet)", ParameterRole.WALLET),
                ],
            ),
            self._handle_get_erc721_balance,
            ToolCategory.INFO,
            a.Erc721BalanceArgs,
        )

        self.register(
            ToolDefinition(
                name="get_erc1155_balance",
                description=(
                    "Get a wallet's balance of one token id in an ERC-1155 contract on EDU Chain, "
                    "with the token's metadata URI when available."
                ),
                parameters=[
                    _param("nftAddress", "ERC-1155 contract address", ParameterRole.ADDRESS),
                    _param("walletAddress", "Wallet address to check (defaults to the user's wallet)", ParameterRole.WALLET),
                    _param("tokenId", "Token id, as a decimal string"),
                ],
            ),
            self._handle_get_erc1155_balance,
            ToolCategory.INFO,
            a.Erc1155BalanceArgs,
        )

        self.register(
            ToolDefinition(
                name="get_swap_quote",
                description=(
                    "Quote a swap on the SailFish DEX: expected output, minimum output after "
                    "slippage, route and price impact. Always quote before preparing a swap."
                ),
                parameters=[
                    _param("tokenIn", "Token to sell: symbol (EDU, USDC) or contract address", ParameterRole.TOKEN),
                    _param("tokenOut", "Token to buy: symbol or contract address", ParameterRole.TOKEN),
                    _param("amountIn", "Amount of tokenIn to sell, in human units (e.g. '0.1')", ParameterRole.AMOUNT),
                    _SLIPPAGE,
                ],
            ),
            self._handle_get_swap_quote,
            ToolCategory.INFO,
            a.SwapQuoteArgs,
        )

        self.register(
            ToolDefinition(
                name="check_arb_edu_allowance",
                description=(
                    "Check whether the Arbitrum -> EDU Chain bridge is already approved to move "
                    "the given amount of EDU from the owner's wallet on Arbitrum."
                ),
                parameters=[
                    _param("ownerAddress", "Owner of the EDU on Arbitrum (defaults to the user's wallet)", ParameterRole.OWNER),
                    _param("amount", "EDU amount to bridge, in human units", ParameterRole.AMOUNT),
                ],
            ),
            self._handle_check_arb_edu_allowance,
            ToolCategory.INFO,
            a.EduAllowanceArgs,
            chain_id=ARBITRUM_CHAIN_ID,
        )

        self.register(
            ToolDefinition(
                name="check_arb_edu_balance",
                description="Check whether a wallet holds at least the given amount of EDU on Arbitrum.",
                parameters=[
                    _param("walletAddress", "Wallet on Arbitrum (defaults to the user's wallet)", ParameterRole.WALLET),
                    _param("amount", "EDU amount needed, in human units", ParameterRole.AMOUNT),
                ],
            ),
            self._handle_check_arb_edu_balance,
            ToolCategory.INFO,
            a.EduBalanceArgs,
            chain_id=ARBITRUM_CHAIN_ID,
        )

        self.register(
            ToolDefinition(
                name="get_bnb_price",
                description="Get the current USD price of BNB, to express the BSC bridge fee in dollars.",
                parameters=[],
            ),
            self._handle_get_bnb_price,
            ToolCategory.INFO,
            a.NoArgs,
        )

        gas_on_destination = _param(
            "gasOnDestination",
            "ETH airdropped to the wallet on Arbitrum for gas (default 0.0005)",
            ParameterRole.AMOUNT,
            required=False,
            default="0.0005",
        )
        self.register(
            ToolDefinition(
                name="estimate_bsc_bridge_fee",
                description=(
                    "Estimate the BNB fee for bridging EDU from BSC to Arbitrum One through "
                    "the LayerZero OFT adapter."
                ),
                parameters=[
                    _param("amount", "EDU amount to bridge, in human units", ParameterRole.AMOUNT),
                    _param("address", "Wallet sending and receiving the EDU (defaults to the user's wallet)", ParameterRole.WALLET),
                    gas_on_destination,
                ],
            ),
            self._handle_estimate_bsc_bridge_fee,
            ToolCategory.INFO,
            a.BscBridgeArgs,
            chain_id=BSC_CHAIN_ID,
        )

        self.register(
            ToolDefinition(
                name="check_bsc_bnb_balance",
                description="Check whether a wallet holds enough BNB on BSC to pay the given bridge fee.",
                parameters=[
                    _param("walletAddress", "Wallet on BSC (defaults to the user's wallet)", ParameterRole.WALLET),
                    _param("fee", "BNB fee from estimate_bsc_bridge_fee, in human units", ParameterRole.AMOUNT),
                ],
            ),
            self._handle_check_bsc_bnb_balance,
            ToolCategory.INFO,
            a.BnbBalanceArgs,
            chain_id=BSC_CHAIN_ID,
        )

        self.register(
            ToolDefinition(
                name="check_bsc_edu_balance",
                description="Check whether a wallet holds at least the given amount of EDU on BSC.",
                parameters=[
                    _param("walletAddress", "Wallet on BSC (defaults to the user's wallet)", ParameterRole.WALLET),
                    _param("amount", "EDU amount needed, in human units", ParameterRole.AMOUNT),
                ],
            ),
            self._handle_check_bsc_edu_balance,
            ToolCategory.INFO,
            a.EduBalanceArgs,
            chain_id=BSC_CHAIN_ID,
        )

        self.register(
            ToolDefinition(
                name="check_bsc_edu_allowance",
                description=(
                    "Check whether the BSC -> Arbitrum OFT adapter is already approved to move "
                    "the given amount of EDU from the owner's wallet on BSC."
                ),
                parameters=[
                    _param("ownerAddress", "Owner of the EDU on BSC (defaults to the user's wallet)", ParameterRole.OWNER),
                    _param("amount", "EDU amount to bridge, in human units", ParameterRole.AMOUNT),
                ],
            ),
            self._handle_check_bsc_edu_allowance,
            ToolCategory.INFO,
            a.EduAllowanceArgs,
            chain_id=BSC_CHAIN_ID,
        )

        # ------------------------------------------------------------------
        # Transaction-prep tools
        # ------------------------------------------------------------------
        self.register(
            ToolDefinition(
                name="send_edu",
                description="Prepare a transaction sending native EDU to a recipient on EDU Chain.",
                parameters=[
                    _param("recipient", "Recipient address", ParameterRole.RECIPIENT),
                    _param("amount", "EDU amount in human units (e.g. '1.5')", ParameterRole.AMOUNT),
                ],
            ),
            self._handle_send_edu,
            ToolCategory.TRANSACTION,
            a.SendEduArgs,
        )

        self.register(
            ToolDefinition(
                name="send_erc20_token",
                description=(
                    "Prepare an ERC-20 token transfer. Defaults to EDU Chain; pass chainId 42161 "
                    "for tokens on Arbitrum One."
                ),
                parameters=[
                    _param("tokenAddress", "Token symbol or contract address", ParameterRole.TOKEN),
                    _param("recipient", "Recipient address", ParameterRole.RECIPIENT),
                    _param("amount", "Token amount in human units", ParameterRole.AMOUNT),
                    _param(
                        "chainId",
                        "Chain id of the token (41923 EDU Chain, 42161 Arbitrum One, 56 BSC)",
                        type=ToolParameterType.INTEGER,
                        required=False,
                    ),
                ],
            ),
            self._handle_send_erc20_token,
            ToolCategory.TRANSACTION,
            a.SendErc20Args,
        )

        self.register(
            ToolDefinition(
                name="approve_token",
                description=(
                    "Prepare an ERC-20 approval letting a spender (e.g. the SailFish SwapRouter) "
                    "move up to the given amount of a token."
                ),
                parameters=[
                    _param("tokenAddress", "Token symbol or contract address", ParameterRole.TOKEN),
                    _param("spenderAddress", "Contract allowed to spend the token", ParameterRole.SPENDER),
                    _param("amount", "Allowance in human units", ParameterRole.AMOUNT),
                ],
            ),
            self._handle_approve_token,
            ToolCategory.TRANSACTION,
            a.ApproveTokenArgs,
        )

        self.register(
            ToolDefinition(
                name="wrap_edu",
                description="Prepare a transaction wrapping native EDU into WEDU.",
                parameters=[_param("amount", "EDU amount to wrap", ParameterRole.AMOUNT)],
            ),
            self._handle_wrap_edu,
            ToolCategory.TRANSACTION,
            a.AmountArgs,
        )

        self.register(
            ToolDefinition(
                name="unwrap_wedu",
                description="Prepare a transaction unwrapping WEDU back into native EDU.",
                parameters=[_param("amount", "WEDU amount to unwrap", ParameterRole.AMOUNT)],
            ),
            self._handle_unwrap_wedu,
            ToolCategory.TRANSACTION,
            a.AmountArgs,
        )

        self.register(
            ToolDefinition(
                name="swap_edu_for_tokens",
                description="Prepare a SailFish swap selling native EDU for a token.",
                parameters=[
                    _param("tokenOut", "Token to buy: symbol or contract address", ParameterRole.TOKEN),
                    _param("amountIn", "EDU amount to sell", ParameterRole.AMOUNT),
                    _param("recipient", "Receiver of the bought tokens (defaults to the user's wallet)", ParameterRole.RECIPIENT),
                    _SLIPPAGE,
                    _DEADLINE,
                ],
            ),
            self._handle_swap_edu_for_tokens,
            ToolCategory.TRANSACTION,
            a.SwapEduForTokensArgs,
        )

        self.register(
            ToolDefinition(
                name="swap_tokens_for_edu",
                description=(
                    "Prepare a SailFish swap selling a token for native EDU. The SwapRouter must "
                    "already be approved for the token."
                ),
                parameters=[
                    _param("tokenIn", "Token to sell: symbol or contract address", ParameterRole.TOKEN),
                    _param("amountIn", "Amount of tokenIn to sell", ParameterRole.AMOUNT),
                    _param("recipient", "Receiver of the EDU (defaults to the user's wallet)", ParameterRole.RECIPIENT),
                    _SLIPPAGE,
                    _DEADLINE,
                ],
            ),
            self._handle_swap_tokens_for_edu,
            ToolCategory.TRANSACTION,
            a.SwapTokensForEduArgs,
        )

        self.register(
            ToolDefinition(
                name="swap_tokens",
                description=(
                    "Prepare a SailFish swap between two ERC-20 tokens. The SwapRouter must "
                    "already be approved for tokenIn."
                ),
                parameters=[
                    _param("tokenIn", "Token to sell: symbol or contract address", ParameterRole.TOKEN),
                    _param("tokenOut", "Token to buy: symbol or contract address", ParameterRole.TOKEN),
                    _param("amountIn", "Amount of tokenIn to sell", ParameterRole.AMOUNT),
                    _param("recipient", "Receiver of tokenOut (defaults to the user's wallet)", ParameterRole.RECIPIENT),
                    _SLIPPAGE,
                    _DEADLINE,
                ],
            ),
            self._handle_swap_tokens,
            ToolCategory.TRANSACTION,
            a.SwapTokensArgs,
        )

        self.register(
            ToolDefinition(
                name="approve_edu_on_arb",
                description=(
                    "Prepare the Arbitrum transaction approving the EDU bridge to move the user's "
                    "EDU. Needed once before bridge_edu_arb_to_edu."
                ),
                parameters=[],
            ),
            self._handle_approve_edu_on_arb,
            ToolCategory.TRANSACTION,
            a.NoArgs,
            chain_id=ARBITRUM_CHAIN_ID,
        )

        self.register(
            ToolDefinition(
                name="bridge_edu_arb_to_edu",
                description="Prepare the Arbitrum transaction bridging EDU to EDU Chain.",
                parameters=[_param("amount", "EDU amount to bridge", ParameterRole.AMOUNT)],
            ),
            self._handle_bridge_edu_arb_to_edu,
            ToolCategory.TRANSACTION,
            a.AmountArgs,
            chain_id=ARBITRUM_CHAIN_ID,
        )

        self.register(
            ToolDefinition(
                name="approve_edu_on_bsc",
                description=(
                    "Prepare the BSC transaction approving the OFT adapter to move the user's EDU. "
                    "Needed once before bridge_edu_bsc_to_arb."
                ),
                parameters=[],
            ),
            self._handle_approve_edu_on_bsc,
            ToolCategory.TRANSACTION,
            a.NoArgs,
            chain_id=BSC_CHAIN_ID,
        )

        self.register(
            ToolDefinition(
                name="bridge_edu_bsc_to_arb",
                description=(
                    "Prepare the BSC transaction bridging EDU to Arbitrum One. The BNB messaging "
                    "fee is attached as the transaction value."
                ),
                parameters=[
                    _param("amount", "EDU amount to bridge", ParameterRole.AMOUNT),
                    _param("address", "Wallet sending and receiving the EDU (defaults to the user's wallet)", ParameterRole.WALLET),
                    gas_on_destination,
                ],
            ),
            self._handle_bridge_edu_bsc_to_arb,
            ToolCategory.TRANSACTION,
            a.BscBridgeArgs,
            chain_id=BSC_CHAIN_ID,
        )

        # ------------------------------------------------------------------
        # Bridge backend tools
        # ------------------------------------------------------------------
        bridge_params = [
            _param("address", "Wallet that will sign (defaults to the user's wallet)", ParameterRole.WALLET),
            _param("amount", "EDU amount in human units", ParameterRole.AMOUNT),
        ]
        self.register(
            ToolDefinition(
                name="bridge_approve",
                description="Get the approval transaction for bridging EDU from Arbitrum to EDU Chain.",
                parameters=bridge_params,
            ),
            self._handle_bridge_approve,
            ToolCategory.BRIDGE,
            a.BridgeBackendArgs,
            chain_id=ARBITRUM_CHAIN_ID,
        )
        self.register(
            ToolDefinition(
                name="bridge_deposit",
                description="Get the deposit transaction bridging EDU from Arbitrum to EDU Chain.",
                parameters=bridge_params,
            ),
            self._handle_bridge_deposit,
            ToolCategory.BRIDGE,
            a.BridgeBackendArgs,
            chain_id=ARBITRUM_CHAIN_ID,
        )
        self.register(
            ToolDefinition(
                name="bridge_withdraw",
                description="Get the withdrawal transaction bridging EDU from EDU Chain back to Arbitrum.",
                parameters=bridge_params,
            ),
            self._handle_bridge_withdraw,
            ToolCategory.BRIDGE,
            a.BridgeBackendArgs,
            chain_id=EDUCHAIN_CHAIN_ID,
        )

    # ======================================================================
    # Handlers
    # ======================================================================

    async def _handle_get_edu_balance(self, args: a.WalletArgs) -> Dict[str, Any]:
        return await balances.get_edu_balance(self.clients.educhain, args.wallet_address)

    async def _handle_get_token_balance(self, args: a.TokenBalanceArgs) -> Dict[str, Any]:
        return await balances.get_token_balance(
            self.clients.educhain, self.clients.sailfish, args.token_address, args.wallet_address
        )

    async def _handle_get_multiple_token_balances(self, args: a.MultipleTokenBalancesArgs) -> List[Dict[str, Any]]:
        return await balances.get_multiple_token_balances(
            self.clients.educhain, self.clients.sailfish, args.token_addresses, args.wallet_address
        )

    async def _handle_get_wallet_overview(self, args: a.WalletOverviewArgs) -> Dict[str, Any]:
        tokens = args.token_addresses or [
            TOKEN_REGISTRY["USDC"]["address"],
            TOKEN_REGISTRY["USDT"]["address"],
        ]
        return await balances.get_wallet_overview(
            self.clients.educhain, self.clients.sailfish, args.wallet_address, tokens
        )

    async def _handle_get_token_price(self, args: a.TokenPriceArgs) -> Dict[str, Any]:
        return await balances.get_token_price(self.clients.sailfish, args.token_address)

    async def _handle_get_swap_quote(self, args: a.SwapQuoteArgs) -> Dict[str, Any]:
        return await swap.get_swap_quote(
            self.clients.educhain,
            self.clients.sailfish,
            args.token_in,
            args.token_out,
            args.amount_in,
            args.slippage_percentage,
        )

    async def _handle_check_arb_edu_allowance(self, args: a.EduAllowanceArgs) -> Dict[str, Any]:
        return await bridge.check_arb_edu_allowance(self.clients.arbitrum, args.owner_address, args.amount)

    async def _handle_check_arb_edu_balance(self, args: a.EduBalanceArgs) -> Dict[str, Any]:
        return await bridge.check_arb_edu_balance(self.clients.arbitrum, args.wallet_address, args.amount)

    async def _handle_get_erc721_balance(self, args: a.Erc721BalanceArgs) -> Dict[str, Any]:
        return await balances.get_erc721_balance(self.clients.educhain, args.nft_address, args.wallet_address)

    async def _handle_get_erc1155_balance(self, args: a.Erc1155BalanceArgs) -> Dict[str, Any]:
        return await balances.get_erc1155_balance(
            self.clients.educhain, args.nft_address, args.wallet_address, args.token_id
        )

    async def _handle_get_bnb_price(self, args: a.NoArgs) -> Dict[str, Any]:
        return await bridge.get_bnb_price(self.clients.prices)

    async def _handle_estimate_bsc_bridge_fee(self, args: a.BscBridgeArgs) -> Dict[str, Any]:
        return await bridge.estimate_bsc_bridge_fee(
            self.clients.bsc, args.amount, args.address, args.gas_on_destination
        )

    async def _handle_check_bsc_bnb_balance(self, args: a.BnbBalanceArgs) -> Dict[str, Any]:
        return await bridge.check_bsc_bnb_balance(self.clients.bsc, args.wallet_address, args.fee)

    async def _handle_check_bsc_edu_balance(self, args: a.EduBalanceArgs) -> Dict[str, Any]:
        return await bridge.check_bsc_edu_balance(self.clients.bsc, args.wallet_address, args.amount)

    async def _handle_check_bsc_edu_allowance(self, args: a.EduAllowanceArgs) -> Dict[str, Any]:
        return await bridge.check_bsc_edu_allowance(self.clients.bsc, args.owner_address, args.amount)

    async def _handle_send_edu(self, args: a.SendEduArgs) -> Dict[str, Any]:
        return transfers.prepare_send_edu_tx(args.recipient, args.amount)

    def _rpc_for_token(self, token_address: str, chain_id: Optional[int]):
        return self.clients.rpc_for_chain(chain_id or chain_for_address(token_address) or EDUCHAIN_CHAIN_ID)

    async def _handle_send_erc20_token(self, args: a.SendErc20Args) -> Dict[str, Any]:
        rpc = self._rpc_for_token(args.token_address, args.chain_id)
        return await transfers.prepare_send_erc20_tx(rpc, args.token_address, args.recipient, args.amount)

    async def _handle_approve_token(self, args: a.ApproveTokenArgs) -> Dict[str, Any]:
        rpc = self._rpc_for_token(args.token_address, None)
        return await transfers.prepare_approve_tx(rpc, args.token_address, args.spender_address, args.amount)

    async def _handle_wrap_edu(self, args: a.AmountArgs) -> Dict[str, Any]:
        return swap.prepare_wrap_edu_tx(args.amount)

    async def _handle_unwrap_wedu(self, args: a.AmountArgs) -> Dict[str, Any]:
        return swap.prepare_unwrap_wedu_tx(args.amount)

    async def _handle_swap_edu_for_tokens(self, args: a.SwapEduForTokensArgs) -> Dict[str, Any]:
        return await swap.prepare_swap_edu_for_tokens_tx(
            self.clients.educhain,
            self.clients.sailfish,
            args.token_out,
            args.amount_in,
            args.recipient,
            args.slippage_percentage,
            args.deadline_minutes,
        )

    async def _handle_swap_tokens_for_edu(self, args: a.SwapTokensForEduArgs) -> Dict[str, Any]:
        return await swap.prepare_swap_tokens_for_edu_tx(
            self.clients.educhain,
            self.clients.sailfish,
            args.token_in,
            args.amount_in,
            args.recipient,
            args.slippage_percentage,
            args.deadline_minutes,
        )

    async def _handle_swap_tokens(self, args: a.SwapTokensArgs) -> Dict[str, Any]:
        return await swap.prepare_swap_tokens_tx(
            self.clients.educhain,
            self.clients.sailfish,
            args.token_in,
            args.token_out,
            args.amount_in,
            args.recipient,
            args.slippage_percentage,
            args.deadline_minutes,
        )

    async def _handle_approve_edu_on_arb(self, args: a.NoArgs) -> Dict[str, Any]:
        return bridge.prepare_approve_edu_on_arb()

    async def _handle_bridge_edu_arb_to_edu(self, args: a.AmountArgs) -> Dict[str, Any]:
        return await bridge.prepare_bridge_arb_to_edu(self.clients.arbitrum, args.amount)

    async def _handle_approve_edu_on_bsc(self, args: a.NoArgs) -> Dict[str, Any]:
        return bridge.prepare_approve_edu_on_bsc()

    async def _handle_bridge_edu_bsc_to_arb(self, args: a.BscBridgeArgs) -> Dict[str, Any]:
        return await bridge.prepare_bridge_bsc_to_arb(
            self.clients.bsc, args.amount, args.address, args.gas_on_destination
        )

    async def _handle_bridge_approve(self, args: a.BridgeBackendArgs) -> BridgeBackendResult:
        return await self.clients.bridge.approve(args.address, args.amount)

    async def _handle_bridge_deposit(self, args: a.BridgeBackendArgs) -> BridgeBackendResult:
        return await self.clients.bridge.deposit(args.address, args.amount)

    async def _handle_bridge_withdraw(self, args: a.BridgeBackendArgs) -> BridgeBackendResult:
        return await self.clients.bridge.withdraw(args.address, args.amount)


@dataclass
class ToolExecution:
    """Outcome of one tool call plus what the response assembler needs from it."""
    tool_call: ToolCall
    result: ToolResult
    category: Optional[ToolCategory] = None
    arguments: Dict[str, Any] = field(default_factory=dict)
    transaction: Optional[TransactionDescriptor] = None
    target_chain_id: Optional[int] = None

    @property
    def is_error(self) -> bool:
        return self.result.is_error

    @property
    def is_action(self) -> bool:
        return self.category is not None and self.category.is_action


def _summarize_validation(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ())) or "value"
        parts.append(f"{location}: {item.get('msg')}")
    return "; ".join(parts)


_WRAPPED_TX_KEYS = ("transactionData", "transaction", "tx")


class ToolExecutor:
    """
    Executes tool calls requested by the LLM.

    Every failure (permission, argument resolution, collaborator error,
    timeout, malformed transaction) comes back as an error ToolResult.
    The executor keeps no state between calls.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        resolver: Optional[ArgumentResolver] = None,
        timeout_s: Optional[float] = None,
        default_chain_id: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.registry = registry
        self.resolver = resolver or ArgumentResolver()
        self.timeout_s = timeout_s or settings.tool_timeout_seconds
        self.default_chain_id = default_chain_id or settings.default_chain_id
        self.logger = logger or logging.getLogger(__name__)

    async def execute(
        self,
        tool_call: ToolCall,
        profile: "AgentProfile",
        caller_address: Optional[str] = None,
    ) -> ToolExecution:
        """Execute a single tool call on behalf of ``profile``."""
        name = tool_call.name

        if not profile.allows(name):
            return self._failure(tool_call, f"Tool '{name}' is not permitted for the {profile.name} agent")

        tool = self.registry.get_tool(name)
        if not tool:
            return self._failure(tool_call, f"Unknown tool: {name}")

        try:
            resolved = self.resolver.resolve(tool.definition, tool_call.arguments, caller_address)
            args = tool.args_model.model_validate(resolved)
        except ToolArgumentError as e:
            return self._failure(tool_call, f"{name}: {e}", tool, tool_call.arguments, profile)
        except ValidationError as e:
            return self._failure(
                tool_call, f"Invalid arguments for {name}: {_summarize_validation(e)}", tool, tool_call.arguments, profile
            )

        try:
            raw = await asyncio.wait_for(tool.handler(args), timeout=self.timeout_s)
        except asyncio.TimeoutError:
            self.logger.warning(f"Tool {name} timed out after {self.timeout_s}s")
            return self._failure(tool_call, f"{name} timed out after {self.timeout_s:g} seconds", tool, resolved, profile)
        except Exception as e:
            self.logger.error(f"Tool execution error for {name}: {e}")
            return self._failure(tool_call, f"{name} failed: {e}", tool, resolved, profile)

        transaction = None
        if tool.category.is_action:
            try:
                transaction = self._to_transaction(tool, raw)
            except ToolExecutionError as e:
                self.logger.warning(f"Rejected output of {name}: {e}")
                return self._failure(tool_call, str(e), tool, resolved, profile)
            payload = transaction.to_wire()
        else:
            payload = to_transport(raw)

        self.logger.info(f"Tool {name} ({tool.category.value}) succeeded")
        return ToolExecution(
            tool_call=tool_call,
            result=ToolResult(tool_call_id=tool_call.id, result=payload),
            category=tool.category,
            arguments=resolved,
            transaction=transaction,
            target_chain_id=self._target_chain(tool, resolved, profile, transaction),
        )

    def _to_transaction(self, tool: RegisteredTool, raw: Any) -> TransactionDescriptor:
        if tool.category == ToolCategory.BRIDGE:
            raw = self._unwrap_bridge_result(tool.name, raw)

        if isinstance(raw, TransactionDescriptor):
            return raw
        if isinstance(raw, dict) and "to" not in raw:
            for key in _WRAPPED_TX_KEYS:
                if key in raw:
                    raw = self._decode_json(tool.name, raw[key])
                    break
        if not isinstance(raw, dict):
            raise InvalidTransactionError(f"{tool.name} did not return a transaction")

        try:
            return TransactionDescriptor.model_validate(raw)
        except ValidationError as e:
            raise InvalidTransactionError(
                f"{tool.name} returned an invalid transaction: {_summarize_validation(e)}"
            ) from e

    def _unwrap_bridge_result(self, name: str, raw: Any) -> Any:
        if isinstance(raw, dict):
            try:
                raw = BridgeBackendResult.model_validate(raw)
            except ValidationError as e:
                raise InvalidTransactionError(
                    f"{name} returned an unexpected bridge response: {_summarize_validation(e)}"
                ) from e
        if not isinstance(raw, BridgeBackendResult):
            raise InvalidTransactionError(f"{name} returned an unexpected bridge response")
        if raw.error:
            raise ToolExecutionError(f"{name} failed: {raw.error}")
        if raw.data is None:
            raise InvalidTransactionError(f"{name} returned no transaction data")
        return self._decode_json(name, raw.data)

    @staticmethod
    def _decode_json(name: str, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return json.loads(value)
            except json.JSONDecodeError as e:
                raise InvalidTransactionError(f"{name} returned unparseable transaction data: {e}") from e
        return value

    def _target_chain(
        self,
        tool: RegisteredTool,
        arguments: Dict[str, Any],
        profile: "AgentProfile",
        transaction: Optional[TransactionDescriptor] = None,
    ) -> int:
        addresses: List[Any] = []
        for param in tool.definition.parameters:
            if param.role not in ADDRESS_ROLES and param.role != ParameterRole.TOKEN:
                continue
            value = arguments.get(param.name)
            if isinstance(value, list):
                addresses.extend(value)
            elif value is not None:
                addresses.append(value)
        return infer_target_chain(
            descriptor_chain_id=transaction.chain_id if transaction else None,
            tool_chain_id=tool.chain_id,
            addresses=addresses,
            profile_chain_id=profile.default_chain_id,
            default_chain_id=self.default_chain_id,
        )

    def _failure(
        self,
        tool_call: ToolCall,
        message: str,
        tool: Optional[RegisteredTool] = None,
        arguments: Optional[Dict[str, Any]] = None,
        profile: Optional["AgentProfile"] = None,
    ) -> ToolExecution:
        arguments = dict(arguments if arguments is not None else tool_call.arguments)
        target = self._target_chain(tool, arguments, profile) if tool and profile else None
        return ToolExecution(
            tool_call=tool_call,
            result=ToolResult(tool_call_id=tool_call.id, result=None, error=message),
            category=tool.category if tool else None,
            arguments=arguments,
            target_chain_id=target,
        )
