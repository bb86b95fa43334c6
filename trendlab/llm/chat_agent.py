"""OpenAI chat wrapper used for AI market commentary.

This module centralizes:
  * A lightweight, stateful chat client with a trimmed context window.
  * Default sampling parameters with per-call overrides.
  * Conversation capture and JSON export.

Requirements:
    openai >= 1.0.0
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from openai import OpenAI, OpenAIError
from openai._types import NOT_GIVEN

logger = logging.getLogger(__name__)

_PARAM_KEYS = ("temperature", "top_p", "max_tokens", "seed")


# --------------------------------------------------------------------------- #
#                                  Data types                                 #
# --------------------------------------------------------------------------- #
@dataclass(slots=True)
class ChatMessage:
    """One message in the OpenAI chat schema."""

    role: str
    content: str

    def as_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


# --------------------------------------------------------------------------- #
#                                   ChatAgent                                 #
# --------------------------------------------------------------------------- #
class ChatAgent:
    """Stateful chat wrapper with sampling defaults and conversation export.

    Example:
        agent = ChatAgent(system_prompt="You are a crypto market analyst.")
        reply = agent.send('{"symbol":"SOL","signals":[...]}')

    Notes:
        * Replies are free text; the analyst prompts ask for prose.
        * Per-call overrides are supported, e.g.
          ``agent.send(msg, temperature=0.0, max_tokens=64)``.
        * ``client`` may be injected (tests, proxies, alternative gateways).
    """

    def __init__(
        self,
        system_prompt: str,
        *,
        model: str = "gpt-4o-mini",
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        client: Optional[OpenAI] = None,
        max_history: int = 10,
        temperature: float = 0.4,
        top_p: float = 1.0,
        max_tokens: int = 600,
        seed: Optional[int] = None,
    ) -> None:
        """Initialize a ChatAgent.

        Args:
            system_prompt: First "system" message that frames the assistant.
            model: Chat model name.
            api_key: API key; defaults to ``OPENAI_API_KEY`` env var.
            base_url: Optional OpenAI-compatible endpoint; defaults to
                ``OPENAI_BASE_URL`` when set.
            client: Pre-built client; when given, ``api_key``/``base_url``
                are ignored.
            max_history: Max messages kept in the trimmed context (>=3).
            temperature: Sampling temperature.
            top_p: Nucleus sampling parameter.
            max_tokens: Maximum completion tokens to request.
            seed: Optional sampling seed.
        """
        self._client = client or OpenAI(
            api_key=api_key or os.getenv("OPENAI_API_KEY"),
            base_url=base_url or os.getenv("OPENAI_BASE_URL") or None,
        )

        system_msg = ChatMessage("system", system_prompt)
        self._messages: List[ChatMessage] = [system_msg]
        self._full_history: List[ChatMessage] = [system_msg]

        self._model = model
        self._max_history = max(3, int(max_history))
        self._defaults: Dict[str, Any] = {
            "temperature": float(temperature),
            "top_p": float(top_p),
            "max_tokens": int(max_tokens),
            "seed": int(seed) if seed is not None else None,
        }

    # ------------------------------- core API -------------------------------- #
    def send(self, user_msg: str, **overrides: Any) -> str:
        """Send a user message and return the assistant's text reply.

        Args:
            user_msg: The message to send as the "user".
            **overrides: Per-call values for temperature, top_p, max_tokens
                or seed.

        Returns:
            Assistant text content (empty string if the reply had none).

        Raises:
            RuntimeError: If the OpenAI API call fails.
        """
        user = ChatMessage("user", user_msg)
        self._messages.append(user)
        self._full_history.append(user)
        self._trim_history()

        params = dict(self._defaults)
        params.update({k: overrides[k] for k in _PARAM_KEYS if overrides.get(k) is not None})

        try:
            response = self._client.chat.completions.create(
                model=self._model,
                messages=[m.as_dict() for m in self._messages],
                temperature=params["temperature"],
                top_p=params["top_p"],
                max_tokens=params["max_tokens"],
                seed=params["seed"] if params["seed"] is not None else NOT_GIVEN,
            )
        except OpenAIError as exc:
            raise RuntimeError(f"OpenAI API error: {exc}") from exc

        content = ""
        if response.choices:
            content = response.choices[0].message.content or ""

        assistant = ChatMessage("assistant", content)
        self._messages.append(assistant)
        self._full_history.append(assistant)
        self._trim_history()

        logger.info("chat turn completed (model=%s, %d chars)", self._model, len(content))
        logger.debug("[USER]\n%s\n[ASSISTANT]\n%s", user_msg, content)
        return content

    # ----------------------------- helpers ---------------------------------- #
    def _trim_history(self) -> None:
        """Limit trimmed history to ``max_history`` while preserving system(0)."""
        excess = len(self._messages) - self._max_history
        if excess > 0:
            del self._messages[1 : 1 + excess]

    # ------------------------------- exports -------------------------------- #
    def export_dialog_json(self, path: str | os.PathLike) -> None:
        """Export the full conversation as a JSON array of messages."""
        data = [m.as_dict() for m in self._full_history]
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

    # ------------------------------- accessors ------------------------------ #
    @property
    def history(self) -> List[ChatMessage]:
        """Return a copy of the trimmed history used for inference."""
        return list(self._messages)

    @property
    def full_history(self) -> List[ChatMessage]:
        """Return the full, untrimmed conversation history."""
        return list(self._full_history)
