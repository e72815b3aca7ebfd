from functools import lru_cache
from typing import Iterable, List, Optional

from agent_rpc.models import AgentDescriptor

DEFAULT_MODEL = "mixtral-8x7b-32768"

SEED_AGENTS = (
    AgentDescriptor(
        id="agent_001",
        name="General Assistant",
        description="A helpful general-purpose AI assistant powered by Groq",
        capabilities=("text", "conversation", "reasoning"),
        model=DEFAULT_MODEL,
        system_prompt=(
            "You are a helpful, friendly, and knowledgeable AI assistant. "
            "Provide clear, accurate, and concise responses."
        ),
    ),
    AgentDescriptor(
        id="agent_002",
        name="Web3 Expert",
        description="Specialized in blockchain, Web3, and cryptocurrency technologies",
        capabilities=("web3", "crypto", "blockchain", "nft"),
        model=DEFAULT_MODEL,
        system_prompt=(
            "You are a Web3 and blockchain expert. Help users understand cryptocurrency, "
            "NFTs, smart contracts, DeFi, and related technologies. Provide accurate "
            "technical information and practical guidance."
        ),
    ),
    AgentDescriptor(
        id="agent_003",
        name="Voice Specialist",
        description="Optimized for natural voice conversations and audio interactions",
        capabilities=("voice", "audio", "conversation"),
        model=DEFAULT_MODEL,
        system_prompt=(
            "You are an AI assistant optimized for voice interactions. Respond in a natural, "
            "conversational tone suitable for speech. Keep responses concise and easy to "
            "understand when spoken aloud."
        ),
    ),
    AgentDescriptor(
        id="agent_004",
        name="Code Assistant",
        description="Expert in programming, software development, and technical problem-solving",
        capabilities=("coding", "debugging", "technical"),
        model=DEFAULT_MODEL,
        system_prompt=(
            "You are an expert programming assistant. Help users with code, debugging, "
            "architecture, and technical decisions. Provide clear explanations and working "
            "code examples."
        ),
    ),
)


class AgentCatalog:
    """Read-only, ordered table of agents keyed by id."""

    def __init__(self, agents: Iterable[AgentDescriptor]):
        self._agents = tuple(agents)
        if not self._agents:
            raise ValueError("agent catalog must not be empty")
        self._by_id = {}
        for agent in self._agents:
            if agent.id in self._by_id:
                raise ValueError(f"duplicate agent id: {agent.id}")
            self._by_id[agent.id] = agent

    def list(self) -> List[AgentDescriptor]:
        return list(self._agents)

    def find(self, agent_id: str) -> Optional[AgentDescriptor]:
        return self._by_id.get(agent_id)

    def __len__(self) -> int:
        return len(self._agents)


@lru_cache(maxsize=1)
def default_catalog() -> AgentCatalog:
    return AgentCatalog(SEED_AGENTS)
