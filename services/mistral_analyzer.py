"""
Mistral AI Analyzer - LLM completions for filter extraction
"""

import logging
from mistralai import Mistral

logger = logging.getLogger(__name__)


class MistralAnalyzer:
    """Thin wrapper over Mistral chat completions returning the reply text"""

    def __init__(self, api_key: str, model: str = "mistral-large-latest", max_tokens: int = 1000):
        self.mistral = Mistral(api_key=api_key)
        self.model = model
        self.max_tokens = max_tokens
        logger.info("✅ Mistral Analyzer initialized")

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        """
        Send one system + user exchange and return the first choice's text

        Raises whatever the Mistral SDK raises on transport or auth failure;
        callers decide whether that is fatal.
        """
        logger.debug(f"Full prompt:\n{user_prompt}")

        response = self.mistral.chat.complete(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=0.1,
            max_tokens=self.max_tokens,
            response_format={"type": "json_object"},
        )

        content = response.choices[0].message.content
        if isinstance(content, list):
            content = "".join(getattr(chunk, "text", "") or "" for chunk in content)
        result_text = (content or "").strip()
        logger.info(f"📨 Received response from Mistral ({len(result_text)} chars)")
        logger.debug(f"Raw Mistral response:\n{result_text}")
        return result_text
