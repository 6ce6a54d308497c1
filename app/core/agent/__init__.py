"""
Lilikoi Agent System

This package contains the tool orchestration loop that mediates between the
LLM and the DeFi tool registry: argument resolution, tool execution, agent
profiles and response assembly.
"""

from .assembler import ResponseAssembler
from .base import Agent
from .profiles import AgentProfile, AgentProfileManager
from .resolver import ArgumentResolver
from .tools import RegisteredTool, ToolCategory, ToolExecution, ToolExecutor, ToolRegistry

__all__ = [
    "Agent",
    "AgentProfile",
    "AgentProfileManager",
    "ArgumentResolver",
    "RegisteredTool",
    "ResponseAssembler",
    "ToolCategory",
    "ToolExecution",
    "ToolExecutor",
    "ToolRegistry",
]
