"""
Agent Profile Management

Each profile names an agent, its system prompt, the tools it may use and the
chain its actions default to. Profiles are loaded from YAML files in the
profiles directory; unknown agent ids fall back to the default profile.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from ...config import settings
from ...services.chains import ARBITRUM_CHAIN_ID, EDUCHAIN_CHAIN_ID, chain_name
from .tools import ToolRegistry

AUTO_PROGRESS_INSTRUCTION = (
    "When a check you just ran shows a prerequisite is satisfied (for example the bridge "
    "is already approved, or the balance is sufficient), continue straight to the next "
    "action tool instead of stopping to ask the user. When a prerequisite is missing, "
    "prepare the transaction that satisfies it first."
)


class AgentProfile(BaseModel):
    """Agent profile definition with system prompt and tool allow-list"""

    name: str = Field(description="Agent identifier")
    display_name: str = Field(description="Human-readable agent name")
    description: str = Field(default="", description="Brief description of what the agent does")
    system_prompt: str = Field(description="Core system prompt for this agent")
    tools: List[str] = Field(default_factory=list, description="Tools this agent may call")
    default_chain_id: Optional[int] = Field(default=None, description="Chain actions default to")
    auto_progress: bool = Field(default=False, description="Continue to follow-up actions after checks pass")

    def allows(self, tool_name: str) -> bool:
        return tool_name in self.tools

    @property
    def prompt(self) -> str:
        """System prompt with the profile's standing instructions appended"""
        parts = [self.system_prompt.strip()]
        if self.default_chain_id:
            parts.append(
                f"Unless the user says otherwise, actions happen on {chain_name(self.default_chain_id)} "
                f"(chain id {self.default_chain_id})."
            )
        if self.auto_progress:
            parts.append(AUTO_PROGRESS_INSTRUCTION)
        return "\n\n".join(parts)


_FALLBACK_PROFILES = {
    "utility": dict(
        name="utility",
        display_name="EDU Chain Assistant",
        description="Balances, prices and swap quotes on EDU Chain",
        system_prompt=(
            "You are a helpful assistant for EDU Chain. Use the available tools to look up "
            "balances, token prices and swap quotes, and explain the results plainly."
        ),
        tools=[
            "get_edu_balance",
            "get_token_balance",
            "get_multiple_token_balances",
            "get_wallet_overview",
            "get_token_price",
            "get_swap_quote",
            "get_erc721_balance",
            "get_erc1155_balance",
        ],
        default_chain_id=EDUCHAIN_CHAIN_ID,
    ),
    "bridging": dict(
        name="bridging",
        display_name="Bridge Assistant",
        description="Moves EDU from BSC to Arbitrum One and between Arbitrum One and EDU Chain",
        system_prompt=(
            "You help users bridge EDU from BSC to Arbitrum One and between Arbitrum One and "
            "EDU Chain. Check the user's balance, allowance and fee funds on the source chain "
            "before preparing bridge transactions."
        ),
        tools=[
            "check_arb_edu_allowance",
            "check_arb_edu_balance",
            "approve_edu_on_arb",
            "bridge_edu_arb_to_edu",
            "bridge_approve",
            "bridge_deposit",
            "bridge_withdraw",
            "get_bnb_price",
            "estimate_bsc_bridge_fee",
            "check_bsc_bnb_balance",
            "check_bsc_edu_balance",
            "check_bsc_edu_allowance",
            "approve_edu_on_bsc",
            "bridge_edu_bsc_to_arb",
            "get_edu_balance",
        ],
        default_chain_id=ARBITRUM_CHAIN_ID,
        auto_progress=True,
    ),
}


class AgentProfileManager:
    """Loads agent profiles and resolves agent ids to them"""

    def __init__(
        self,
        registry: Optional[ToolRegistry] = None,
        profiles_dir: Optional[Path] = None,
        profiles: Optional[Iterable[AgentProfile]] = None,
        default_profile: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.logger = logger or logging.getLogger(__name__)
        self.registry = registry
        self.default_profile = default_profile or settings.default_agent_id
        self._profiles: Dict[str, AgentProfile] = {}

        if profiles is not None:
            for profile in profiles:
                self.add_profile(profile)
        else:
            self._load_profiles(Path(profiles_dir or settings.profiles_dir))

        if self.default_profile not in self._profiles:
            raise ValueError(f"Default agent profile '{self.default_profile}' is not defined")

    def _load_profiles(self, profiles_dir: Path) -> None:
        """Initialize profiles by loading from YAML configuration files"""
        self.logger.info(f"Loading agent profiles from: {profiles_dir}")

        if profiles_dir.exists():
            for yaml_file in sorted(profiles_dir.glob("*.yaml")):
                profile = self._load_profile_from_yaml(yaml_file)
                if profile:
                    self.add_profile(profile)
                    self.logger.info(f"Loaded agent profile: {profile.name} ({profile.display_name})")
        else:
            self.logger.warning(f"Profiles directory not found: {profiles_dir}")

        if not self._profiles:
            self.logger.warning("No agent profiles loaded, using built-in fallback profiles")
            for data in _FALLBACK_PROFILES.values():
                self.add_profile(AgentProfile(**data))

    def _load_profile_from_yaml(self, yaml_file: Path) -> Optional[AgentProfile]:
        """Load a single profile from a YAML file"""
        try:
            with open(yaml_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            return AgentProfile(**data)
        except (OSError, yaml.YAMLError, ValidationError, TypeError) as e:
            self.logger.error(f"Error loading agent profile from {yaml_file}: {e}")
            return None

    def add_profile(self, profile: AgentProfile) -> None:
        if self.registry is not None:
            unknown = [name for name in profile.tools if not self.registry.has_tool(name)]
            if unknown:
                raise ValueError(f"Agent profile '{profile.name}' references unknown tools: {', '.join(unknown)}")
        self._profiles[profile.name] = profile

    def get_profile(self, agent_id: Optional[str]) -> AgentProfile:
        """Get profile by agent id, defaulting when unknown or empty"""
        if agent_id and agent_id in self._profiles:
            return self._profiles[agent_id]
        if agent_id:
            self.logger.info(f"Unknown agent id '{agent_id}', using '{self.default_profile}'")
        return self._profiles[self.default_profile]

    def has_profile(self, agent_id: str) -> bool:
        return agent_id in self._profiles

    def list_profiles(self) -> Dict[str, str]:
        """Available profiles with their display names"""
        return {name: profile.display_name for name, profile in self._profiles.items()}
