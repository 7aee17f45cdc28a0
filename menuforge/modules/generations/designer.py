import re
import logging
from typing import List, Optional

import anthropic

from menuforge.config import settings
from menuforge.modules.generations.prompts import build_system_prompt, build_user_prompt
from menuforge.modules.generations.schemas import GenerateRequest

logger = logging.getLogger(__name__)

_FENCED_HTML = re.compile(r"```(?:html)?\s*\n?([\s\S]*?)```", re.IGNORECASE)


class DesignerUnavailable(RuntimeError):
    """No Anthropic API key configured"""


class DesignerError(RuntimeError):
    """The model call failed or returned no text"""


def clean_html(raw: str) -> str:
    """Unwrap a fenced code block and drop any preamble before <!DOCTYPE or <html>."""
    html = (raw or "").strip()
    fenced = _FENCED_HTML.search(html)
    if fenced:
        html = fenced.group(1).strip()
    lowered = html.lower()
    if not lowered.startswith("<!doctype") and not lowered.startswith("<html"):
        starts = [i for i in (lowered.find("<!doctype"), lowered.find("<html")) if i >= 0]
        if starts:
            html = html[min(starts):]
    return html


def is_provider_credit_error(error: Exception) -> bool:
    message = str(error).lower()
    return "credit balance" in message or "too low" in message


class MenuDesigner:
    """Turns menu text plus style choices into HTML via the Anthropic messages API."""

    def __init__(self, client: Optional[anthropic.Anthropic] = None):
        self._client = client

    @property
    def client(self) -> anthropic.Anthropic:
        if self._client is None:
            if not settings.anthropic_api_key:
                raise DesignerUnavailable("ANTHROPIC_API_KEY is not configured")
            self._client = anthropic.Anthropic(api_key=settings.anthropic_api_key)
        return self._client

    def generate(self, request: GenerateRequest) -> List[str]:
        """Return the generated designs. A single variation today, kept as a list for the stored html_variations column."""
        system_prompt = build_system_prompt(request)
        user_prompt = build_user_prompt(request)
        try:
            message = self.client.messages.create(
                model=settings.anthropic_model,
                max_tokens=settings.anthropic_max_tokens,
                system=system_prompt,
                messages=[{"role": "user", "content": user_prompt}],
            )
        except anthropic.APIError as e:
            logger.error(f"Anthropic request failed: {e}")
            raise DesignerError(str(e)) from e

        text = next((block.text for block in message.content if block.type == "text"), "")
        if not text.strip():
            raise DesignerError("Model returned no text content")
        return [clean_html(text)]
