"""Provider handles shared by every chain tool."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..config import Settings, settings as default_settings
from ..providers.base import ProviderError
from ..providers.bridge_api import YuzuBridgeProvider
from ..providers.cryptocompare import CryptoCompareProvider
from ..providers.rpc import EvmRpcProvider
from ..providers.sailfish import SailfishSubgraphProvider
from ..services.chains import ARBITRUM_CHAIN_ID, BSC_CHAIN_ID, EDUCHAIN_CHAIN_ID


@dataclass
class ChainClients:
    educhain: EvmRpcProvider
    arbitrum: EvmRpcProvider
    bsc: EvmRpcProvider
    sailfish: SailfishSubgraphProvider
    bridge: YuzuBridgeProvider
    prices: CryptoCompareProvider

    def rpc_for_chain(self, chain_id: int) -> EvmRpcProvider:
        if chain_id == EDUCHAIN_CHAIN_ID:
            return self.educhain
        if chain_id == ARBITRUM_CHAIN_ID:
            return self.arbitrum
        if chain_id == BSC_CHAIN_ID:
            return self.bsc
        raise ProviderError(f"Unsupported chain id: {chain_id}")


def build_chain_clients(config: Optional[Settings] = None) -> ChainClients:
    config = config or default_settings
    return ChainClients(
        educhain=EvmRpcProvider(
            "educhain", EDUCHAIN_CHAIN_ID, config.educhain_rpc_url, timeout_s=config.rpc_timeout_seconds
        ),
        arbitrum=EvmRpcProvider(
            "arbitrum", ARBITRUM_CHAIN_ID, config.arbitrum_rpc_url, timeout_s=config.rpc_timeout_seconds
        ),
        bsc=EvmRpcProvider("bsc", BSC_CHAIN_ID, config.bsc_rpc_url, timeout_s=config.rpc_timeout_seconds),
        sailfish=SailfishSubgraphProvider(config.sailfish_subgraph_url, timeout_s=config.rpc_timeout_seconds),
        bridge=YuzuBridgeProvider(base_url=config.bridge_api_base_url),
        prices=CryptoCompareProvider(config.bnb_price_url, timeout_s=config.rpc_timeout_seconds),
    )
