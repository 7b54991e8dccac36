"""
Core AI client module - unified AI call wrapper.

One AIClient per process. Provider order comes from config:
OpenAI is primary by default, Claude the alternative; whichever is not
selected acts as fallback when its key is configured.
"""

import os
from typing import Optional

from dotenv import load_dotenv

from config import AIConf
from utils_logging import log_debug, log_info, log_warning

# Cost constants (rough per-call estimates)
COST_OPENAI_MINI = 0.0005
COST_CLAUDE_HAIKU = 0.002


class AIClient:
    """
    Chat-completion capability used by the extraction step.

    complete(system, user, max_tokens) returns the raw model text, or None
    when no provider produced an answer.
    """

    def __init__(self, conf: Optional[AIConf] = None, openai_client=None, claude_client=None):
        self.conf = conf or AIConf()
        self.openai_client = openai_client
        self.claude_client = claude_client
        self.run_cost_usd: float = 0.0
        self.calls: int = 0

    @property
    def available(self) -> bool:
        return self.openai_client is not None or self.claude_client is not None

    def add_cost(self, amount: float):
        self.run_cost_usd += amount

    def get_run_cost(self) -> float:
        return self.run_cost_usd

    def _call_openai(self, system: str, user: str, max_tokens: int, step: str) -> Optional[str]:
        if not self.openai_client:
            return None

        model = self.conf.openai_model
        log_debug(f"AI_CALL step={step} provider=openai model={model}")
        try:
            response = self.openai_client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
                temperature=self.conf.temperature,
                max_tokens=max_tokens,
            )
        except Exception as e:
            log_warning(f"AI_FAILURE step={step} model={model}: {str(e)[:100]}")
            return None

        self.add_cost(COST_OPENAI_MINI)
        self.calls += 1
        if not response.choices:
            return None
        content = response.choices[0].message.content
        return content.strip() if content else None

    def _call_claude(self, system: str, user: str, max_tokens: int, step: str) -> Optional[str]:
        if not self.claude_client:
            return None

        model = self.conf.claude_model
        log_debug(f"AI_CALL step={step} provider=claude model={model}")
        try:
            response = self.claude_client.messages.create(
                model=model,
                system=system,
                max_tokens=max_tokens,
                temperature=self.conf.temperature,
                messages=[{"role": "user", "content": user}],
            )
        except Exception as e:
            log_warning(f"AI_FAILURE step={step} model={model}: {str(e)[:100]}")
            return None

        self.add_cost(COST_CLAUDE_HAIKU)
        self.calls += 1

        result_parts = []
        for block in response.content:
            if hasattr(block, 'text'):
                result_parts.append(block.text)
        return "\n".join(result_parts) if result_parts else None

    def complete(
        self,
        system: str,
        user: str,
        max_tokens: Optional[int] = None,
        step: str = "extract",
    ) -> Optional[str]:
        """
        Unified AI call with automatic provider selection.

        Primary provider first, the other one as fallback.
        """
        max_tokens = max_tokens or self.conf.max_tokens

        if self.conf.provider == "claude":
            order = (self._call_claude, self._call_openai)
        else:
            order = (self._call_openai, self._call_claude)

        for call in order:
            result = call(system, user, max_tokens, step)
            if result:
                return result
        return None


def create_ai_client(conf: Optional[AIConf] = None) -> AIClient:
    """
    Builds an AIClient from environment keys (.env supported).

    OPENAI_API_KEY / ANTHROPIC_API_KEY; a missing key simply disables that
    provider.
    """
    load_dotenv()
    conf = conf or AIConf()

    openai_client = None
    claude_client = None

    openai_key = os.getenv("OPENAI_API_KEY")
    if openai_key:
        from openai import OpenAI
        openai_client = OpenAI(api_key=openai_key)

    anthropic_key = os.getenv("ANTHROPIC_API_KEY")
    if anthropic_key:
        import anthropic
        claude_client = anthropic.Anthropic(api_key=anthropic_key)

    client = AIClient(conf, openai_client=openai_client, claude_client=claude_client)
    if not client.available:
        log_warning("No AI API key configured (OPENAI_API_KEY / ANTHROPIC_API_KEY)")
    else:
        providers = [name for name, c in (("openai", openai_client), ("claude", claude_client)) if c]
        log_info(f"AI providers: {', '.join(providers)} (primary: {conf.provider})")

    return client
