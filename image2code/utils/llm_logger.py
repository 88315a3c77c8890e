"""
LLM Debug Logger for tracking remote generation calls.

Supports configurable log levels (NONE, INFO, DEBUG, TRACE) and dual output:
- Console: Human-readable formatted output on stderr
- File: JSON Lines format for parsing and analysis

Inline image payloads are never written out; they are replaced with a short
placeholder naming the image type and encoded size.
"""

import json
import os
import sys
import time
import uuid
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv


class LogLevel(Enum):
    """Logging levels for LLM debug output."""

    NONE = 0
    INFO = 1
    DEBUG = 2
    TRACE = 3


def _console(message: str):
    """Write a console log line to stderr."""
    print(message, file=sys.stderr)


def _describe_data_uri(uri: str) -> str:
    try:
        header, payload = uri.split("base64,", 1)
        image_type = header.split("image/")[1].split(";")[0]
        return f"[IMAGE_DATA: {image_type}, base64 encoded, {len(payload):,} bytes]"
    except (IndexError, ValueError):
        return "[IMAGE_DATA: base64 encoded image]"


class LLMLogger:
    """Centralized logger for LLM API calls with configurable levels."""

    _instance: Optional["LLMLogger"] = None

    def __new__(cls):
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Initialize the logger with configuration from environment."""
        if self._initialized:
            return

        load_dotenv()

        level_str = os.getenv("LLM_DEBUG_LEVEL", "NONE").upper()
        try:
            self.level = LogLevel[level_str]
        except KeyError:
            self.level = LogLevel.NONE

        self.log_to_file = os.getenv("LLM_LOG_TO_FILE", "false").lower() == "true"
        self.log_dir = Path(os.getenv("LLM_LOG_DIR", "logs"))

        self._initialized = True

    def configure(
        self,
        level: Optional[LogLevel] = None,
        log_to_file: Optional[bool] = None,
        log_dir: Optional[Path] = None,
    ):
        """Override the environment configuration at runtime."""
        if level is not None:
            self.level = level
        if log_to_file is not None:
            self.log_to_file = log_to_file
        if log_dir is not None:
            self.log_dir = Path(log_dir)

    def _should_log(self, min_level: LogLevel) -> bool:
        return self.level.value >= min_level.value

    def _format_timestamp(self) -> str:
        return datetime.now().isoformat()

    def _truncate_content(self, content: str, max_len: int = 200) -> str:
        if len(content) <= max_len:
            return content
        return content[:max_len] + "... [truncated]"

    def strip_images(self, content: Any) -> Any:
        """Replace inline image payloads in message content with placeholders."""
        if isinstance(content, str):
            if "data:image/" in content and "base64," in content:
                return _describe_data_uri(content)
            return content

        if isinstance(content, list):
            return [self.strip_images(item) for item in content]

        if isinstance(content, dict):
            item_type = content.get("type")
            if item_type == "image_url":
                url = content.get("image_url", "")
                if isinstance(url, dict):
                    url = url.get("url", "")
                return {"type": "text", "text": _describe_data_uri(str(url))}
            if item_type == "image":
                source = content.get("source", {})
                data = source.get("data", "") if isinstance(source, dict) else ""
                media_type = source.get("media_type", "image/unknown") if isinstance(source, dict) else "image/unknown"
                return {
                    "type": "text",
                    "text": _describe_data_uri(f"data:{media_type};base64,{data}")
                }
            return content

        return content

    def _content_text(self, content: Any) -> str:
        content = self.strip_images(content)
        if isinstance(content, str):
            return content
        return json.dumps(content, ensure_ascii=False)

    def _serialize_message(self, msg: Any) -> Dict[str, Any]:
        content = msg.content if hasattr(msg, "content") else str(msg)
        return {
            "type": msg.__class__.__name__,
            "content": self.strip_images(content),
        }

    def _write_to_file(self, request_id: Optional[str], log_entry: Dict[str, Any]):
        """Append a log entry to the request's JSON Lines file."""
        if not self.log_to_file or not request_id:
            return

        log_file = self.log_dir / request_id / "llm_calls.jsonl"
        log_file.parent.mkdir(parents=True, exist_ok=True)

        with open(log_file, "a", encoding="utf-8") as f:
            f.write(json.dumps(log_entry, ensure_ascii=False) + "\n")

    def log_invocation(
        self,
        component: str,
        provider: str,
        model: str,
        request_id: Optional[str] = None,
    ) -> str:
        """
        Log the start of an LLM invocation.

        Returns:
            Invocation ID (UUID string), or "" when logging is disabled
        """
        if not self._should_log(LogLevel.INFO):
            return ""

        invocation_id = str(uuid.uuid4())
        console_msg = f"[{self._format_timestamp()}] 🔵 LLM Call: [{component}] {provider}/{model}"
        if request_id:
            console_msg += f" | request_id: {request_id}"
        _console(console_msg)

        return invocation_id

    def log_request(
        self,
        invocation_id: str,
        component: str,
        provider: str,
        model: str,
        messages: List[Any],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        request_id: Optional[str] = None,
    ):
        """Log LLM request details."""
        if not self._should_log(LogLevel.DEBUG):
            return

        _console(f"  Messages: {len(messages)}")
        for i, msg in enumerate(messages):
            content = msg.content if hasattr(msg, "content") else msg
            preview = self._truncate_content(self._content_text(content), 150)
            _console(f"    {i+1}. [{msg.__class__.__name__}] {preview}")

        self._write_to_file(request_id, {
            "timestamp": self._format_timestamp(),
            "level": self.level.name,
            "event": "request",
            "component": component,
            "invocation_id": invocation_id,
            "provider": provider,
            "model": model,
            "request": {
                "messages": (
                    [self._serialize_message(msg) for msg in messages]
                    if self.level == LogLevel.TRACE
                    else []
                ),
                "message_count": len(messages),
                "temperature": temperature,
                "max_tokens": max_tokens,
            },
        })

    def log_response(
        self,
        invocation_id: str,
        component: str,
        provider: str,
        model: str,
        response: Any,
        start_time: float,
        end_time: float,
        request_id: Optional[str] = None,
    ):
        """Log LLM response with timing and token usage."""
        if not self._should_log(LogLevel.INFO):
            return

        latency_ms = (end_time - start_time) * 1000
        content = self._content_text(getattr(response, "content", response))

        token_usage = extract_token_usage(response)
        total_tokens = token_usage.get("total_tokens")

        parts = [f"[{component}]", f"{provider}/{model}", f"{latency_ms:.1f}ms"]
        if total_tokens is not None:
            parts.append(f"{total_tokens} tokens")
        _console(f"[{self._format_timestamp()}] ✅ LLM Response: " + " | ".join(parts))

        if self.level == LogLevel.DEBUG:
            _console(f"  Response: {self._truncate_content(content, 200)}")
        elif self.level == LogLevel.TRACE:
            _console("  RESPONSE:")
            for line in content.split("\n"):
                _console(f"    {line}")

        self._write_to_file(request_id, {
            "timestamp": self._format_timestamp(),
            "level": self.level.name,
            "event": "response",
            "component": component,
            "invocation_id": invocation_id,
            "provider": provider,
            "model": model,
            "response": {
                "content": content if self.level == LogLevel.TRACE else None,
                "content_preview": (
                    self._truncate_content(content, 200)
                    if self._should_log(LogLevel.DEBUG)
                    else None
                ),
                "content_length": len(content),
            },
            "timing": {
                "latency_ms": latency_ms,
                "start_time": datetime.fromtimestamp(start_time).isoformat(),
                "end_time": datetime.fromtimestamp(end_time).isoformat(),
            },
            "usage": token_usage or None,
        })

    def log_error(
        self,
        component: str,
        error: BaseException,
        request_id: Optional[str] = None,
    ):
        """Log a failed LLM call."""
        if not self._should_log(LogLevel.INFO):
            return

        _console(f"[{self._format_timestamp()}] ❌ LLM Error: [{component}] {type(error).__name__}: {error}")
        self._write_to_file(request_id, {
            "timestamp": self._format_timestamp(),
            "level": self.level.name,
            "event": "error",
            "component": component,
            "error_type": type(error).__name__,
            "error": str(error),
        })

    def log_event(self, component: str, message: str, request_id: Optional[str] = None):
        """Log a pipeline event outside of an LLM call (parse failures, timeouts)."""
        if not self._should_log(LogLevel.INFO):
            return

        console_msg = f"[{self._format_timestamp()}] ℹ️  [{component}] {message}"
        if request_id:
            console_msg += f" | request_id: {request_id}"
        _console(console_msg)


def extract_token_usage(response: Any) -> Dict[str, Optional[int]]:
    """
    Read token counts from a LangChain message.

    Prefers ``usage_metadata`` and falls back to the provider's raw
    ``response_metadata`` usage block.
    """
    usage_metadata = getattr(response, "usage_metadata", None)
    if usage_metadata:
        return {
            "prompt_tokens": usage_metadata.get("input_tokens"),
            "completion_tokens": usage_metadata.get("output_tokens"),
            "total_tokens": usage_metadata.get("total_tokens"),
        }

    response_metadata = getattr(response, "response_metadata", None)
    if isinstance(response_metadata, dict):
        usage = response_metadata.get("usage") or response_metadata.get("token_usage") or {}
        if usage:
            return {
                "prompt_tokens": usage.get("prompt_tokens", usage.get("input_tokens")),
                "completion_tokens": usage.get("completion_tokens", usage.get("output_tokens")),
                "total_tokens": usage.get("total_tokens"),
            }
    return {}


def get_logger() -> LLMLogger:
    """Get the singleton logger instance."""
    return LLMLogger()


class LoggedLLM:
    """
    Wrapper around LangChain chat models to add debug logging.

    Intercepts invoke() and ainvoke() calls and logs requests, responses,
    timing and failures.
    """

    def __init__(
        self,
        llm_instance: Any,
        component: str,
        provider: str,
        model: str,
        request_id: Optional[str] = None,
    ):
        self.llm = llm_instance
        self.component = component
        self.provider = provider
        self.model = model
        self.request_id = request_id
        self.logger = get_logger()

    def __getattr__(self, name: str):
        """Delegate all other attributes to wrapped LLM instance."""
        return getattr(self.llm, name)

    def with_request_id(self, request_id: str) -> "LoggedLLM":
        """Return a wrapper around the same model that tags logs with ``request_id``."""
        return LoggedLLM(
            llm_instance=self.llm,
            component=self.component,
            provider=self.provider,
            model=self.model,
            request_id=request_id,
        )

    def _before(self, messages: List[Any]) -> str:
        invocation_id = self.logger.log_invocation(
            component=self.component,
            provider=self.provider,
            model=self.model,
            request_id=self.request_id,
        )
        if invocation_id:
            self.logger.log_request(
                invocation_id=invocation_id,
                component=self.component,
                provider=self.provider,
                model=self.model,
                messages=messages,
                temperature=getattr(self.llm, "temperature", None),
                max_tokens=getattr(self.llm, "max_tokens", None),
                request_id=self.request_id,
            )
        return invocation_id

    def _after(self, invocation_id: str, response: Any, start_time: float):
        if invocation_id:
            self.logger.log_response(
                invocation_id=invocation_id,
                component=self.component,
                provider=self.provider,
                model=self.model,
                response=response,
                start_time=start_time,
                end_time=time.time(),
                request_id=self.request_id,
            )

    def invoke(self, messages: List[Any], **kwargs) -> Any:
        """Invoke the wrapped model with logging."""
        invocation_id = self._before(messages)
        start_time = time.time()
        try:
            response = self.llm.invoke(messages, **kwargs)
        except Exception as e:
            self.logger.log_error(self.component, e, self.request_id)
            raise
        self._after(invocation_id, response, start_time)
        return response

    async def ainvoke(self, messages: List[Any], **kwargs) -> Any:
        """Asynchronously invoke the wrapped model with logging."""
        invocation_id = self._before(messages)
        start_time = time.time()
        try:
            response = await self.llm.ainvoke(messages, **kwargs)
        except Exception as e:
            self.logger.log_error(self.component, e, self.request_id)
            raise
        self._after(invocation_id, response, start_time)
        return response
