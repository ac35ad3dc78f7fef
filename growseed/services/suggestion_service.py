# growseed/services/suggestion_service.py
"""
Productivity suggestions from Gemini with a local fallback.
Any API problem (quota, HTTP error, odd response) degrades to templated text.
"""

from collections.abc import Sequence

import httpx

from growseed.config import settings
from growseed.infrastructure.observability.logging import get_logger
from growseed.models.domain.growth_domain import round_percent
from growseed.services.errors import ValidationFailure

logger = get_logger(__name__)

REQUEST_TIMEOUT = 30  # seconds

GENERATION_CONFIG = {
    "temperature": 0.7,
    "maxOutputTokens": 500,
    "topP": 0.8,
    "topK": 40,
}


def build_prompt(whitelist: Sequence[str], growth_percent: float) -> str:
    sites = ", ".join(whitelist) if whitelist else "no websites yet"
    return f"""You are a productivity coach. Based on the following information, provide 3-4 actionable productivity suggestions:

Current Productivity Stats:
- Growth Level: {round_percent(growth_percent)}%
- Productive Websites: {sites}

Please provide:
1. Specific tips to improve productivity
2. Website recommendations that could be added to the whitelist
3. Time management suggestions
4. A motivational message

Keep the response concise and actionable (under 300 words)."""


def local_fallback_suggestions(whitelist: Sequence[str], growth_percent: float) -> str:
    suggestions = [
        "1. **Focus Sessions**: Try the Pomodoro Technique - 25 minutes focused work, "
        "5-minute breaks.",
        "2. **Website Rotation**: You're whitelisting productive sites. Add documentation "
        "sites for your tech stack.",
        "3. **Peak Hours**: Identify your most productive hours and schedule deep work "
        "during that time.",
        f"4. **Keep Growing**: Your productivity is at {round_percent(growth_percent)}% - "
        "you're doing great!",
    ]

    if len(whitelist) == 0:
        suggestions.append(
            "5. **Get Started**: Add your first productive website to the whitelist "
            "to begin tracking!"
        )
    elif len(whitelist) > 5:
        suggestions.append(
            f"5. **Quality over Quantity**: You have {len(whitelist)} whitelisted sites. "
            "Focus on the most impactful ones."
        )

    if growth_percent > 80:
        suggestions.append(
            "**Excellent Progress**: You're in the top tier! Maintain this momentum."
        )
    elif growth_percent > 50:
        suggestions.append(
            "**Good Pace**: Keep consistent - small daily improvements add up!"
        )
    else:
        suggestions.append(
            "**Room to Grow**: Every productive session counts. Build the habit gradually."
        )

    return "\n\n".join(suggestions)


def _extract_text(data: dict) -> str | None:
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    return text if isinstance(text, str) and text else None


async def get_suggestions(
    api_key: str,
    whitelist: Sequence[str],
    growth_percent: float,
    http_client: httpx.AsyncClient | None = None,
) -> str:
    """
    Ask Gemini for suggestions.

    Raises:
        ValidationFailure: If api_key is empty (before any request)
    """
    if not api_key:
        raise ValidationFailure("API key is required")

    body = {
        "contents": [{"parts": [{"text": build_prompt(whitelist, growth_percent)}]}],
        "generationConfig": GENERATION_CONFIG,
    }

    owns_client = http_client is None
    client = http_client or httpx.AsyncClient(timeout=httpx.Timeout(REQUEST_TIMEOUT))
    try:
        response = await client.post(
            settings.GEMINI_API_ENDPOINT,
            params={"key": api_key},
            headers={"Content-Type": "application/json"},
            json=body,
        )

        if not response.is_success:
            logger.warning(
                "Gemini request failed, using fallback suggestions",
                status_code=response.status_code,
                quota_exceeded="quota" in response.text.lower(),
            )
            return local_fallback_suggestions(whitelist, growth_percent)

        text = _extract_text(response.json())
        if text is None:
            logger.warning("Unexpected Gemini response format, using fallback suggestions")
            return local_fallback_suggestions(whitelist, growth_percent)
        return text

    except (httpx.HTTPError, ValueError) as e:
        logger.warning("Gemini API error, using fallback suggestions", error=str(e))
        return local_fallback_suggestions(whitelist, growth_percent)
    finally:
        if owns_client:
            await client.aclose()
