import time
from typing import Any, Optional

from loguru import logger
from pydantic import ValidationError

from agent_rpc.agents import AgentCatalog
from agent_rpc.errors import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    ProviderError,
    RPCError,
    describe_validation_error,
)
from agent_rpc.models import (
    JSONRPCError,
    JSONRPCRequest,
    JSONRPCResponse,
    ListAgentsResult,
    ProcessingMetadata,
    ProcessTextParams,
    ProcessTextResult,
)
from agent_rpc.providers import CompletionProvider

# placeholder until a real scoring signal exists
CONFIDENCE = 0.95


class Dispatcher:
    """
    Dispatch JSON-RPC methods here.
    Supported methods:
      - list_agents  -> { agents: [...] }
      - process_text -> params: { agent_id, user_text, conversation_history? }
    Every call returns an envelope carrying the request id; nothing is raised to the transport.
    """

    def __init__(self, catalog: AgentCatalog, provider: CompletionProvider):
        self.catalog = catalog
        self.provider = provider
        self._methods = {
            "list_agents": self.list_agents,
            "process_text": self.process_text,
        }

    async def handle_jsonrpc(self, req: JSONRPCRequest) -> JSONRPCResponse:
        logger.info("Received JSON-RPC request: method={} id={!r}", req.method, req.id)
        try:
            if req.jsonrpc != "2.0":
                raise RPCError(INVALID_REQUEST, "Invalid Request: jsonrpc must be '2.0'")
            handler = self._methods.get(req.method)
            if handler is None:
                raise RPCError(METHOD_NOT_FOUND, f"Method not found: {req.method}")
            result = await handler(req.params)
        except RPCError as e:
            if e.code == INTERNAL_ERROR:
                logger.error("JSON-RPC {} failed: {}", req.method, e.data)
            else:
                logger.warning("JSON-RPC {} rejected ({}): {}", req.method, e.code, e.message)
            return _error(req.id, e)
        except Exception as e:
            logger.exception("Unhandled error in JSON-RPC method {}", req.method)
            return _error(req.id, RPCError(INTERNAL_ERROR, "Internal error", {"details": repr(e)}))
        return JSONRPCResponse(id=req.id, result=result)

    async def list_agents(self, params: Optional[Any] = None) -> dict:
        return ListAgentsResult(agents=self.catalog.list()).model_dump(mode="json")

    async def process_text(self, params: Optional[Any]) -> dict:
        if params is None:
            raise RPCError(INVALID_PARAMS, "Invalid params: agent_id and user_text are required")
        try:
            p = ProcessTextParams.model_validate(params)
        except ValidationError as e:
            raise RPCError(INVALID_PARAMS, f"Invalid params: {describe_validation_error(e)}") from e

        agent = self.catalog.find(p.agent_id)
        if agent is None:
            raise RPCError(INVALID_PARAMS, f"Agent not found: {p.agent_id}")

        start = time.perf_counter()
        try:
            outcome = await self.provider.complete(agent, p.user_text, p.conversation_history)
        except ProviderError as e:
            raise RPCError(
                INTERNAL_ERROR,
                "Internal error: processing failed",
                {"details": str(e)},
            ) from e
        elapsed_ms = int((time.perf_counter() - start) * 1000)

        if outcome.empty:
            logger.info("Agent {} produced no candidates; returning fallback reply", agent.id)
        result = ProcessTextResult(
            agent_id=p.agent_id,
            reply_text=outcome.reply_text,
            metadata=ProcessingMetadata(
                model=agent.model,
                tokens_used=outcome.tokens_used,
                processing_time_ms=elapsed_ms,
                confidence=CONFIDENCE,
            ),
        )
        return result.model_dump(mode="json")


def _error(req_id: Any, e: RPCError) -> JSONRPCResponse:
    return JSONRPCResponse(id=req_id, error=JSONRPCError(**e.to_dict()))

