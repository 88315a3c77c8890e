"""
Chat model construction for the supported multimodal providers.
"""

from typing import Any, Dict, List

from image2code.config import Settings
from image2code.models import GenerationRequest
from image2code.utils.llm_logger import LoggedLLM


def create_chat_model(settings: Settings) -> LoggedLLM:
    """
    Build a LangChain chat model for the configured provider.

    Provider packages are imported lazily, so only the selected provider's
    integration has to be importable.

    Args:
        settings: Generation settings.

    Returns:
        The chat model wrapped in a LoggedLLM.
    """
    provider = settings.provider
    model_name = settings.resolved_model
    # provider clients fall back to their own environment variable when no key is given
    credentials = {"api_key": settings.api_key} if settings.api_key else {}

    if provider == "google":
        from langchain_google_genai import ChatGoogleGenerativeAI

        llm = ChatGoogleGenerativeAI(
            model=model_name,
            temperature=settings.temperature,
            max_output_tokens=settings.max_tokens,
            timeout=settings.timeout,
            **credentials,
        )
    elif provider == "openai":
        from langchain_openai import ChatOpenAI

        llm = ChatOpenAI(
            model=model_name,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
            timeout=settings.timeout,
            **credentials,
        )
    elif provider == "anthropic":
        from langchain_anthropic import ChatAnthropic

        llm = ChatAnthropic(
            model=model_name,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
            timeout=settings.timeout,
            **credentials,
        )
    else:
        raise ValueError(f"Unsupported provider: {provider}")

    return LoggedLLM(llm, component="generator", provider=provider, model=model_name)


def build_content(request: GenerationRequest, provider: str) -> List[Dict[str, Any]]:
    """
    Build the multimodal content parts of the single user message.

    The instruction always comes first, followed by the inline image tagged
    with its declared media type.
    """
    if provider == "anthropic":
        image_part = {
            "type": "image",
            "source": {
                "type": "base64",
                "media_type": request.media_type,
                "data": request.encoded_image(),
            },
        }
    else:
        image_part = {
            "type": "image_url",
            "image_url": {"url": request.asset.to_data_uri()},
        }

    return [{"type": "text", "text": request.instruction}, image_part]
