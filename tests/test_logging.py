"""Tests for loguru setup."""

import logging

from loguru import logger

from agent_rpc.logging_config import setup_logging


def test_stdlib_records_reach_loguru():
    setup_logging("DEBUG")
    messages = []
    sink_id = logger.add(messages.append, level="DEBUG", format="{level}|{message}")
    try:
        logging.getLogger("uvicorn.error").warning("server is %s", "up")
        logging.getLogger("httpx").info("HTTP Request: POST https://example.com")
    finally:
        logger.remove(sink_id)
    assert any(m.startswith("WARNING|server is up") for m in messages)
    # client libraries are capped at WARNING
    assert not any("HTTP Request" in m for m in messages)
