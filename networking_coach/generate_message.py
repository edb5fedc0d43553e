"""
Message generation using OpenAI.

Forwards the form data as a chat-completion request and relays the
generated text. Every failure surfaces as a :class:`GenerationError`
carrying the HTTP status the API should answer with.
"""

import logging
from typing import Optional

from openai import OpenAI, APIError, APIStatusError

from .config import config
from .message_templates import MessageData
from .models import MessageType
from .prompt_components import SYSTEM_PROMPTS, build_user_prompt

# Configure logging
logger = logging.getLogger(__name__)

_client: Optional[OpenAI] = None


class GenerationError(Exception):
    """Message generation failed."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def get_client() -> OpenAI:
    """Return the shared OpenAI client, creating it on first use."""
    global _client
    if _client is None:
        _client = OpenAI(api_key=config.OPENAI_API_KEY)
    return _client


def validate_request(data: MessageData) -> None:
    """Reject requests that cannot produce a sensible prompt."""
    if data.message_type not in MessageType.values():
        raise GenerationError(f"Unknown message type: {data.message_type}", status_code=400)
    if not data.recipient_name:
        raise GenerationError("recipientName is required", status_code=400)
    if not data.company:
        raise GenerationError("company is required", status_code=400)


def generate_networking_message(
    data: MessageData,
    client: Optional[OpenAI] = None,
) -> str:
    """
    Generate a personalized networking message.

    Args:
        data: Recipient, company, purpose and message type from the form
        client: OpenAI client to use (defaults to the shared one)

    Returns:
        The generated message text, trimmed.

    Raises:
        GenerationError: invalid input (400) or any upstream failure (500)
    """
    validate_request(data)

    logger.info(
        "Generating message with params: type=%s recipient=%s company=%s",
        data.message_type, data.recipient_name, data.company,
    )

    if not config.OPENAI_API_KEY:
        raise GenerationError("OpenAI API key not configured")

    client = client or get_client()

    try:
        response = client.chat.completions.create(
            model=config.OPENAI_MODEL,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPTS[data.message_type]},
                {"role": "user", "content": build_user_prompt(data)},
            ],
            max_completion_tokens=config.OPENAI_MAX_COMPLETION_TOKENS,
        )
    except APIStatusError as e:
        logger.error(f"OpenAI API error: {e.status_code} {e.message}")
        raise GenerationError(f"OpenAI API error: {e.status_code} {e.message}") from e
    except APIError as e:
        logger.error(f"OpenAI API error: {e}")
        raise GenerationError(f"OpenAI API error: {e}") from e

    if not response.choices or response.choices[0].message is None:
        logger.error(f"Unexpected OpenAI response structure: {response}")
        raise GenerationError("Invalid response structure from OpenAI")

    content = response.choices[0].message.content
    if not content or not content.strip():
        logger.error("Empty message generated")
        raise GenerationError("OpenAI returned an empty message")

    logger.debug(f"Extracted message: {content}")
    return content.strip()
