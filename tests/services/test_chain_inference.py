from app.services.chains import (
    ARB_EDU_TOKEN_ADDRESS,
    ARBITRUM_CHAIN_ID,
    BSC_CHAIN_ID,
    BSC_EDU_OFT_ADDRESS,
    EDUCHAIN_CHAIN_ID,
    WEDU_ADDRESS,
    chain_for_address,
    chain_name,
    infer_target_chain,
)


def test_descriptor_chain_wins():
    assert infer_target_chain(
        descriptor_chain_id=EDUCHAIN_CHAIN_ID,
        tool_chain_id=ARBITRUM_CHAIN_ID,
        addresses=[ARB_EDU_TOKEN_ADDRESS],
        profile_chain_id=ARBITRUM_CHAIN_ID,
    ) == EDUCHAIN_CHAIN_ID


def test_tool_chain_beats_addresses_and_profile():
    assert infer_target_chain(
        tool_chain_id=EDUCHAIN_CHAIN_ID,
        addresses=[ARB_EDU_TOKEN_ADDRESS],
        profile_chain_id=ARBITRUM_CHAIN_ID,
    ) == EDUCHAIN_CHAIN_ID


def test_known_arbitrum_address_routes_to_arbitrum():
    assert infer_target_chain(addresses=[WEDU_ADDRESS, ARB_EDU_TOKEN_ADDRESS.lower()]) == ARBITRUM_CHAIN_ID


def test_known_bsc_address_routes_to_bsc():
    assert infer_target_chain(addresses=[BSC_EDU_OFT_ADDRESS], profile_chain_id=ARBITRUM_CHAIN_ID) == BSC_CHAIN_ID


def test_profile_chain_then_default():
    assert infer_target_chain(addresses=[WEDU_ADDRESS], profile_chain_id=ARBITRUM_CHAIN_ID) == ARBITRUM_CHAIN_ID
    assert infer_target_chain(addresses=[WEDU_ADDRESS]) == EDUCHAIN_CHAIN_ID
    assert infer_target_chain(default_chain_id=1) == 1


def test_chain_for_address_ignores_non_strings():
    assert chain_for_address(None) is None
    assert chain_for_address(["0x"]) is None
    assert chain_for_address(ARB_EDU_TOKEN_ADDRESS.upper().replace("0X", "0x")) == ARBITRUM_CHAIN_ID


def test_chain_names():
    assert chain_name(EDUCHAIN_CHAIN_ID) == "EDU Chain"
    assert chain_name(ARBITRUM_CHAIN_ID) == "Arbitrum One"
    assert chain_name(BSC_CHAIN_ID) == "BNB Smart Chain"
    assert chain_name(10) == "chain 10"
