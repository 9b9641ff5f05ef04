"""Generate text in the user's style through the text-generation service."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from anthropic import APIError

from notestyle.exceptions import PromptTooShortError
from notestyle.llm.client import ClaudeClient
from notestyle.llm.prompts import render
from notestyle.style.applier import StyleApplier
from notestyle.style.profile import StyleProfile

logger = logging.getLogger(__name__)

MIN_PROMPT_CHARS = 5
FALLBACK_PREFIX = "[AI unavailable] Here's a basic version:\n\n"
FALLBACK_NOTE = "Fallback mode: the generation service could not be reached"


@dataclass
class StyledText:
    """Output of a styled generation call."""

    text: str
    style_prompt: str
    fallback: bool = False
    notes: list[str] = field(default_factory=list)


class StyleWriter:
    """Prepends the synthesized style block to generation requests."""

    def __init__(
        self,
        client: ClaudeClient,
        profile: StyleProfile,
        applier: StyleApplier | None = None,
    ) -> None:
        self._client = client
        self._profile = profile
        self._applier = applier or StyleApplier()

    def get_system_prompt(self) -> str:
        return render(
            "write_in_style.j2",
            style_instruction=self._applier.build_style_instruction(self._profile),
            custom_instructions=self._profile.user_overrides.custom_instructions.strip(),
        )

    def write(self, prompt: str) -> StyledText:
        """Write ``prompt`` in the profile's style.

        Falls back to echoing the prompt when the service fails, so callers
        always get text back.
        """
        prompt = (prompt or "").strip()
        if len(prompt) < MIN_PROMPT_CHARS:
            raise PromptTooShortError(
                f"Prompt too short (minimum {MIN_PROMPT_CHARS} characters)"
            )

        style_prompt = self._applier.build_style_instruction(self._profile)
        try:
            text = self._client.generate(
                system=self.get_system_prompt(),
                messages=[{"role": "user", "content": prompt}],
                temperature=self._applier.suggest_temperature(self._profile),
            )
        except APIError as exc:
            logger.warning("Style generation unavailable, using fallback: %s", exc)
            return StyledText(
                text=f"{FALLBACK_PREFIX}{prompt}",
                style_prompt=style_prompt,
                fallback=True,
                notes=[FALLBACK_NOTE],
            )

        return StyledText(text=text.strip(), style_prompt=style_prompt)
