"""
Celebrity name-normalization client.

Asks an OpenAI-compatible chat completion endpoint to normalize a drafted
name and report date of birth, Wikipedia URL and life status. The lookup
is best-effort: any failure yields None and never blocks a pick.
"""

import json
import logging
from typing import Dict, Optional

import requests

from src.validation.config import (
    LOOKUP_API_URL,
    LOOKUP_MODEL,
    LOOKUP_TIMEOUT_SECONDS,
    get_lookup_api_key,
)

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a precise data extraction assistant for a celebrity draft game. "
    "Given a person name, you MUST reply with a single JSON object only, no extra text. "
    "If the name is clearly a public figure / celebrity, return their canonical full "
    "name, date of birth, and whether they are currently alive or deceased. "
    "If you are not confident, leave values empty but still return valid JSON and "
    "set isDeceased to false."
)

USER_PROMPT_TEMPLATE = (
    'Celebrity name: "{name}".\n\n'
    "Reply with ONLY a JSON object of the shape:\n"
    '{{ "fullName": string, "dateOfBirth": string, "wikipediaUrl": string, '
    '"isDeceased": boolean, "notes": string }}\n'
    '- "dateOfBirth" should be ISO 8601 formatted (YYYY-MM-DD) if you know it '
    "confidently, otherwise an empty string.\n"
    '- "wikipediaUrl" should be the canonical English Wikipedia URL for this person '
    "if you know it, otherwise an empty string.\n"
    '- "isDeceased" should be true ONLY if you are confident the person is no longer '
    "alive; otherwise false.\n"
    '- "notes" can briefly explain any ambiguity.'
)


def _clean(value) -> str:
    return value.strip() if isinstance(value, str) else ""


class CelebrityLookup:
    """Client for the external name-normalization service."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: str = LOOKUP_API_URL,
        model: str = LOOKUP_MODEL,
        timeout: int = LOOKUP_TIMEOUT_SECONDS,
    ):
        self.api_key = api_key if api_key is not None else get_lookup_api_key()
        self.api_url = api_url
        self.model = model
        self.timeout = timeout

        # Session for connection pooling
        self.session = requests.Session()
        if self.api_key:
            self.session.headers["Authorization"] = f"Bearer {self.api_key}"

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def lookup(self, name: str) -> Optional[Dict]:
        """
        Normalize a celebrity name.

        Args:
            name: Name as typed by the drafter

        Returns:
            Dict with fullName, dateOfBirth, wikipediaUrl, isDeceased, notes;
            None when the service is not configured or the call fails
        """
        if not self.is_configured:
            logger.warning("Lookup API key is not set; skipping lookup for %s", name)
            return None

        body = {
            "model": self.model,
            "temperature": 0,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": USER_PROMPT_TEMPLATE.format(name=name)},
            ],
        }

        try:
            response = self.session.post(self.api_url, json=body, timeout=self.timeout)
            response.raise_for_status()
            content = response.json()["choices"][0]["message"]["content"]
        except requests.RequestException as e:
            logger.error("Lookup request failed for %s: %s", name, e)
            return None
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.error("Unexpected lookup response shape for %s: %s", name, e)
            return None

        try:
            parsed = json.loads(content)
        except (TypeError, json.JSONDecodeError) as e:
            logger.error("Failed to parse lookup JSON for %s: %s", name, e)
            return None
        if not isinstance(parsed, dict):
            return None

        return {
            "fullName": _clean(parsed.get("fullName")),
            "dateOfBirth": _clean(parsed.get("dateOfBirth")),
            "wikipediaUrl": _clean(parsed.get("wikipediaUrl")),
            "isDeceased": parsed.get("isDeceased") is True,
            "notes": _clean(parsed.get("notes")),
        }

    def close(self) -> None:
        """Close the HTTP session."""
        self.session.close()
