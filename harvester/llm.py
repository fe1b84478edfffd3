import asyncio
import logging
import os
from typing import Optional
import httpx
from dotenv import load_dotenv
from .config import DEFAULT_MODEL, MAX_SUGGESTION_HTML_CHARS
from .errors import SuggestionError

load_dotenv()

logger = logging.getLogger("harvester")

SYSTEM_PROMPT = """You are an expert web scraping analyst with deep knowledge of HTML structures and CSS selectors.

Given an HTML snippet and a description of the elements a user wants, you answer with a single CSS selector that matches every one of those repeated elements and nothing else."""


class LLMSelectorInference:
    """Asks an OpenAI chat model for a CSS selector matching a description."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        max_html_chars: int = MAX_SUGGESTION_HTML_CHARS,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not self.api_key:
            raise ValueError("OPENAI_API_KEY environment variable not set")
        self.model = model
        self.max_html_chars = max_html_chars
        self.base_url = "https://api.openai.com/v1/chat/completions"
        self._transport = transport

    async def suggest_selector(
        self,
        html: str,
        description: str,
        max_retries: int = 5,
        base_delay: float = 2
    ) -> str:
        """Return a CSS selector for the elements described by the user."""
        prompt = self._build_prompt(self._truncate(html), description)

        async with httpx.AsyncClient(timeout=60.0, transport=self._transport) as client:
            for attempt in range(max_retries):
                try:
                    response = await client.post(
                        self.base_url,
                        headers={
                            "Authorization": f"Bearer {self.api_key}",
                            "Content-Type": "application/json"
                        },
                        json={
                            "model": self.model,
                            "messages": [
                                {"role": "system", "content": SYSTEM_PROMPT},
                                {"role": "user", "content": prompt}
                            ],
                            "temperature": 0.1
                        }
                    )
                    response.raise_for_status()
                    break

                except httpx.HTTPStatusError as e:
                    if e.response.status_code == 429 and attempt < max_retries - 1:
                        delay = base_delay * (2 ** attempt)
                        logger.warning(
                            "Rate limited by OpenAI. Retrying in %ss (attempt %d/%d)",
                            delay, attempt + 1, max_retries
                        )
                        await asyncio.sleep(delay)
                        continue
                    raise SuggestionError(
                        f"Selector suggestion failed with HTTP {e.response.status_code}"
                    ) from e
                except httpx.HTTPError as e:
                    raise SuggestionError(f"Selector suggestion failed: {e}") from e

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise SuggestionError("Unexpected response from the language model") from e

        selector = self._clean_selector(content or "")
        if not selector:
            raise SuggestionError("The language model returned an empty selector")

        logger.info("Suggested selector: %s", selector)
        return selector

    def _truncate(self, html: str) -> str:
        if len(html) > self.max_html_chars:
            return html[:self.max_html_chars] + "...(truncated)"
        return html

    @staticmethod
    def _clean_selector(content: str) -> str:
        """Strip markdown fences and quotes the model sometimes adds."""
        text = content.strip()
        if text.startswith("```"):
            lines = [line for line in text.splitlines() if not line.strip().startswith("```")]
            text = "\n".join(lines).strip()
        if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'`":
            text = text[1:-1].strip()
        return text

    def _build_prompt(self, html: str, description: str) -> str:
        return f"""I have an HTML snippet and I need a CSS selector to extract specific elements.

User's goal: "{description}"

Rules:
1. Return ONLY the CSS selector string. Do not add markdown, quotes, or explanations.
2. The selector should be specific enough to target the repeated items described.
3. Use classes or tag combinations present in the HTML.
4. For DYNAMIC/HASHED classes (e.g. styles__Name-sc-xyz) prefer [class*="Name"] wildcards.

HTML Snippet:
```html
{html}
```"""
