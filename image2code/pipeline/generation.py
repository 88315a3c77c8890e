"""
LangChain-based generation pipeline turning one image into HTML and CSS.
"""

import asyncio
import uuid
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from typing import Any, Optional, Protocol, Union

from langchain_core.messages import HumanMessage

from image2code.config import Settings
from image2code.errors import GenerationError
from image2code.io.image_loader import ImageValidator
from image2code.models import (
    CodeArtifactPair,
    GenerationReply,
    GenerationRequest,
    ImageAsset,
)
from image2code.providers import build_content, create_chat_model
from image2code.utils.llm_logger import LoggedLLM, extract_token_usage, get_logger


CSS_SENTINEL = "CSS:"

INSTRUCTION = """Given the uploaded image, please generate the complete HTML and CSS code separately required to replicate its visual design. Follow these guidelines:
1. Start with the HTML code.
2. The HTML should not have any inline styling.
3. Immediately below, on a new line provide the CSS code prefixed with 'CSS:'.

Please provide the code and also comment on where adjustments are needed. Prioritize achieving a visually accurate representation of the design elements from the image."""


class ResponseParser:
    """Splits a model reply into markup and stylesheet on the CSS: sentinel."""

    @staticmethod
    def parse(reply: str) -> CodeArtifactPair:
        """
        Parse a raw reply into a CodeArtifactPair.

        Only the first sentinel delimits the halves; later occurrences stay in
        the stylesheet. Both halves are whitespace-trimmed and otherwise
        returned verbatim.

        Args:
            reply: Full reply text.

        Returns:
            CodeArtifactPair with non-empty markup and stylesheet.

        Raises:
            GenerationError: malformed-reply when the sentinel is missing or
                either half is empty.
        """
        markup, sentinel, stylesheet = reply.partition(CSS_SENTINEL)
        if not sentinel:
            raise GenerationError.malformed_reply(f"Reply has no '{CSS_SENTINEL}' section")

        markup = markup.strip()
        stylesheet = stylesheet.strip()
        if not markup:
            raise GenerationError.malformed_reply("Reply has no HTML before the CSS section")
        if not stylesheet:
            raise GenerationError.malformed_reply("Reply has an empty CSS section")

        return CodeArtifactPair(markup=markup, stylesheet=stylesheet)


class RemoteCapability(Protocol):
    """Anything that turns an instruction plus one image into reply text."""

    def complete(self, request: GenerationRequest) -> Union[str, GenerationReply]:
        ...


def _flatten_content(content: Any) -> str:
    """Join the text parts of a chat message's content."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for item in content:
            if isinstance(item, str):
                parts.append(item)
            elif isinstance(item, dict) and item.get("type") == "text":
                parts.append(item.get("text", ""))
        return "".join(parts)
    raise TypeError(f"Unexpected reply content type: {type(content).__name__}")


class LangChainCapability:
    """Remote capability backed by a LangChain chat model."""

    def __init__(self, llm: Any, provider: str, model_name: Optional[str] = None):
        """
        Args:
            llm: LangChain chat model, optionally already wrapped in LoggedLLM.
            provider: Provider name, selects the image content format.
            model_name: Model name reported on replies and in logs.
        """
        self.provider = provider
        self.model_name = model_name or getattr(llm, "model", None) or "unknown"
        if isinstance(llm, LoggedLLM):
            self.llm = llm
        else:
            self.llm = LoggedLLM(llm, component="generator", provider=provider, model=self.model_name)

    @classmethod
    def from_settings(cls, settings: Settings) -> "LangChainCapability":
        return cls(create_chat_model(settings), settings.provider, settings.resolved_model)

    def _messages(self, request: GenerationRequest):
        return [HumanMessage(content=build_content(request, self.provider))]

    def _to_reply(self, response: Any) -> GenerationReply:
        usage = extract_token_usage(response)
        return GenerationReply(
            text=_flatten_content(response.content),
            model_name=self.model_name,
            prompt_tokens=usage.get("prompt_tokens"),
            completion_tokens=usage.get("completion_tokens"),
            reply_metadata={"provider": self.provider}
        )

    def complete(self, request: GenerationRequest) -> GenerationReply:
        llm = self.llm.with_request_id(request.request_id)
        return self._to_reply(llm.invoke(self._messages(request)))

    async def acomplete(self, request: GenerationRequest) -> GenerationReply:
        llm = self.llm.with_request_id(request.request_id)
        return self._to_reply(await llm.ainvoke(self._messages(request)))


class CodeGenerator:
    """Generates an HTML/CSS pair from a single image asset."""

    def __init__(
        self,
        capability: RemoteCapability,
        timeout: float = 60.0,
        validator: Optional[ImageValidator] = None
    ):
        """
        Initialize the generator.

        Args:
            capability: Remote model used to produce the reply text.
            timeout: Deadline in seconds for the remote call.
            validator: Validator used to re-check incoming assets.
        """
        self.capability = capability
        self.timeout = timeout
        self.validator = validator or ImageValidator()
        self.parser = ResponseParser()
        self.logger = get_logger()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "CodeGenerator":
        settings = settings or Settings.from_env()
        return cls(LangChainCapability.from_settings(settings), timeout=settings.timeout)

    def build_request(self, asset: Optional[ImageAsset]) -> GenerationRequest:
        """
        Wrap an asset and the fixed instruction into a request.

        Raises:
            GenerationError: missing-input when no asset is given.
            ValidationError: When the asset breaks the upload policy.
        """
        if asset is None:
            raise GenerationError.missing_input()
        self.validator.check(asset.media_type, asset.byte_length)

        return GenerationRequest(
            asset=asset,
            instruction=INSTRUCTION,
            request_id=uuid.uuid4().hex[:12]
        )

    def _upstream_failure(self, request: GenerationRequest, error: BaseException) -> GenerationError:
        self.logger.log_event("generator", f"Upstream failure: {error}", request.request_id)
        return GenerationError.upstream(error)

    def _finish(self, request: GenerationRequest, reply: Any) -> CodeArtifactPair:
        if isinstance(reply, str):
            reply = GenerationReply(text=reply)
        elif not isinstance(reply, GenerationReply):
            error = TypeError(f"Remote capability returned {type(reply).__name__}, expected text")
            raise self._upstream_failure(request, error) from error

        try:
            return self.parser.parse(reply.text)
        except GenerationError as e:
            self.logger.log_event("generator", f"Malformed reply: {e.detail}", request.request_id)
            raise

    def _complete(self, request: GenerationRequest) -> Any:
        try:
            return self.capability.complete(request)
        except GenerationError:
            raise
        except Exception as e:
            raise self._upstream_failure(request, e) from e

    async def _acomplete(self, request: GenerationRequest) -> Any:
        try:
            if hasattr(self.capability, "acomplete"):
                return await self.capability.acomplete(request)
            return await asyncio.to_thread(self.capability.complete, request)
        except GenerationError:
            raise
        except Exception as e:
            raise self._upstream_failure(request, e) from e

    def _deadline_exceeded(self, request: GenerationRequest) -> GenerationError:
        error = TimeoutError(f"Remote generation timed out after {self.timeout:g}s")
        failure = self._upstream_failure(request, error)
        failure.__cause__ = error
        return failure

    def generate(self, asset: Optional[ImageAsset]) -> CodeArtifactPair:
        """
        Generate markup and stylesheet for an image.

        The remote call runs in a worker thread so the deadline holds even if
        the underlying client blocks. Nothing is retried.

        Args:
            asset: Validated image asset.

        Returns:
            CodeArtifactPair.

        Raises:
            GenerationError: missing-input, upstream-failure or malformed-reply.
            ValidationError: When the asset breaks the upload policy.
        """
        request = self.build_request(asset)

        pool = ThreadPoolExecutor(max_workers=1)
        try:
            future = pool.submit(self._complete, request)
            try:
                reply = future.result(timeout=self.timeout)
            except FuturesTimeoutError:
                raise self._deadline_exceeded(request)
        finally:
            # the worker may still be blocked on the remote call
            pool.shutdown(wait=False)

        return self._finish(request, reply)

    async def agenerate(self, asset: Optional[ImageAsset]) -> CodeArtifactPair:
        """
        Async variant of ``generate``.

        Uses the capability's ``acomplete`` when it has one, otherwise runs
        ``complete`` in a thread.
        """
        request = self.build_request(asset)

        try:
            reply = await asyncio.wait_for(self._acomplete(request), timeout=self.timeout)
        except asyncio.TimeoutError:
            raise self._deadline_exceeded(request)

        return self._finish(request, reply)
