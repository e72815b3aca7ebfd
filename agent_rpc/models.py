from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Any, Optional, List, Dict


# JSON-RPC 2.0 envelopes
class JSONRPCRequest(BaseModel):
    jsonrpc: str
    method: str
    params: Optional[Any] = None
    # echoed back untouched; any JSON value is allowed
    id: Any = None


class JSONRPCError(BaseModel):
    code: int
    message: str
    data: Optional[Any] = None


class JSONRPCResponse(BaseModel):
    jsonrpc: str = "2.0"
    result: Optional[Any] = None
    error: Optional[JSONRPCError] = None
    id: Any = None

    @model_validator(mode="after")
    def _one_of_result_or_error(self):
        if (self.result is None) == (self.error is None):
            raise ValueError("exactly one of result or error must be set")
        return self

    def to_wire(self) -> Dict[str, Any]:
        """Serialize with only the populated member of result/error, keeping id even when null."""
        body: Dict[str, Any] = {"jsonrpc": self.jsonrpc}
        if self.error is not None:
            body["error"] = self.error.model_dump(exclude_none=True)
        else:
            body["result"] = self.result
        body["id"] = self.id
        return body


# Agent catalog
class AgentDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    capabilities: tuple[str, ...]
    model: str
    system_prompt: str


class ListAgentsResult(BaseModel):
    agents: List[AgentDescriptor]


# process_text
class ConversationMessage(BaseModel):
    role: str  # "user" | "assistant"; other roles are tolerated and left to the provider
    content: str


class ProcessTextParams(BaseModel):
    agent_id: str
    user_text: str
    conversation_history: Optional[List[ConversationMessage]] = None


class CompletionOutcome(BaseModel):
    reply_text: str
    tokens_used: Optional[int] = Field(default=None, ge=0)
    # set when the backend returned no candidates at all
    empty: bool = False


class ProcessingMetadata(BaseModel):
    model: str
    tokens_used: Optional[int] = None
    processing_time_ms: int
    confidence: float


class ProcessTextResult(BaseModel):
    agent_id: str
    reply_text: str
    metadata: ProcessingMetadata


# Groq / OpenAI-compatible chat completion response (only the fields we read)
class ChatCompletionMessage(BaseModel):
    content: str


class ChatCompletionChoice(BaseModel):
    message: ChatCompletionMessage


class ChatCompletionUsage(BaseModel):
    total_tokens: Optional[int] = None


class ChatCompletionResponse(BaseModel):
    choices: List[ChatCompletionChoice]
    usage: Optional[ChatCompletionUsage] = None


# Gemini generateContent response
class GeminiPart(BaseModel):
    text: str


class GeminiContent(BaseModel):
    role: Optional[str] = None
    parts: List[GeminiPart] = []


class GeminiCandidate(BaseModel):
    content: GeminiContent


class GeminiUsageMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    prompt_token_count: Optional[int] = Field(default=None, alias="promptTokenCount")
    candidates_token_count: Optional[int] = Field(default=None, alias="candidatesTokenCount")
    total_token_count: Optional[int] = Field(default=None, alias="totalTokenCount")


class GeminiResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    candidates: List[GeminiCandidate] = []
    usage_metadata: Optional[GeminiUsageMetadata] = Field(default=None, alias="usageMetadata")
