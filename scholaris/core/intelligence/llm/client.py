# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Chat completion client backed by LiteLLM.

Every generator in scholaris.core.generation talks to the model through
LLMClient.complete(). The model string selects the provider the LiteLLM
way ("gemini/...", "gpt-...", "ollama/..."), and the matching key or
base URL from LLMSettings is passed per call instead of being exported
to the environment.

Example:
    client = LLMClient()
    reply = await client.complete(
        "List four weekly topics for Algebra I",
        system_prompt="You are a curriculum designer",
        response_format={"type": "json_object"},
    )
    print(reply.content)
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import litellm
from litellm import acompletion

from scholaris.core.config.settings import LLMSettings, get_settings

logger = logging.getLogger(__name__)


@dataclass
class LLMResponse:
    """Text and usage figures of one completion.

    Attributes:
        content: Assistant message text, empty when the provider sent none.
        model: Model string the request was routed with.
        tokens_input: Prompt tokens reported by the provider.
        tokens_output: Completion tokens reported by the provider.
        finish_reason: Provider stop reason, "stop" when absent.
        raw_response: The LiteLLM ModelResponse.
    """

    content: str
    model: str
    tokens_input: int = 0
    tokens_output: int = 0
    finish_reason: str = "stop"
    raw_response: Optional[object] = field(default=None, repr=False)

    @property
    def total_tokens(self) -> int:
        return self.tokens_input + self.tokens_output


class LLMError(Exception):
    """A completion request failed at the provider or in transport.

    Attributes:
        message: Human readable failure.
        model: Model string of the failed request.
        original_error: Exception raised by LiteLLM.
    """

    def __init__(
        self,
        message: str,
        model: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        self.message = message
        self.model = model
        self.original_error = original_error
        super().__init__(message)


class LLMClient:
    """Async completion client.

    Construction arguments override the configured model, timeout and
    retry count; anything left as None comes from LLMSettings.
    """

    def __init__(
        self,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        llm_settings: Optional[LLMSettings] = None,
    ):
        self._settings = llm_settings or get_settings().llm
        self._model = model or self._settings.get_default_model()
        self._timeout = timeout or self._settings.request_timeout
        self._max_retries = (
            self._settings.max_retries if max_retries is None else max_retries
        )

        # Providers reject parameters they do not know, e.g. response_format
        litellm.drop_params = True

        logger.debug(
            "LLM client ready: model=%s timeout=%.1fs retries=%d",
            self._model,
            self._timeout,
            self._max_retries,
        )

    @property
    def model(self) -> str:
        return self._model

    def _provider_kwargs(self, model: str) -> dict[str, Any]:
        """Credentials and endpoint for the provider serving ``model``."""
        if model.startswith("ollama/"):
            return {"api_base": self._settings.ollama_base_url}
        api_key = self._settings.get_api_key(model)
        return {"api_key": api_key} if api_key else {}

    async def complete(
        self,
        prompt: str,
        model: Optional[str] = None,
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
        response_format: Optional[dict[str, Any]] = None,
        **kwargs,
    ) -> LLMResponse:
        """Send a single-turn chat and return the assistant reply.

        Args:
            prompt: User message. Must contain non-whitespace text.
            model: Model for this call only.
            system_prompt: Optional system message placed first.
            temperature: Sampling temperature.
            max_tokens: Completion length cap.
            response_format: Structured output request such as
                {"type": "json_object"}; dropped for providers without it.
            **kwargs: Passed through to litellm.acompletion.

        Returns:
            The reply text with token usage.

        Raises:
            ValueError: The prompt is blank.
            LLMError: LiteLLM raised for any reason.
        """
        if not prompt or not prompt.strip():
            raise ValueError("Prompt cannot be empty")

        target = model or self._model
        messages = [{"role": "user", "content": prompt}]
        if system_prompt:
            messages.insert(0, {"role": "system", "content": system_prompt})
        if response_format is not None:
            kwargs["response_format"] = response_format

        try:
            response = await acompletion(
                model=target,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
                timeout=self._timeout,
                num_retries=self._max_retries,
                **self._provider_kwargs(target),
                **kwargs,
            )
        except Exception as e:
            logger.error(
                "Completion failed: model=%s prompt_chars=%d error=%s",
                target,
                len(prompt),
                str(e),
            )
            raise LLMError(
                message=f"Completion failed: {str(e)}",
                model=target,
                original_error=e,
            ) from e

        choice = response.choices[0]
        usage = getattr(response, "usage", None)
        result = LLMResponse(
            content=choice.message.content or "",
            model=target,
            tokens_input=getattr(usage, "prompt_tokens", 0) or 0,
            tokens_output=getattr(usage, "completion_tokens", 0) or 0,
            finish_reason=choice.finish_reason or "stop",
            raw_response=response,
        )
        logger.debug(
            "Completion done: model=%s tokens_in=%d tokens_out=%d",
            target,
            result.tokens_input,
            result.tokens_output,
        )
        return result
