"""
Shared fixtures: scripted chat engines standing in for a local model server.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple, Union

import pytest

Reply = Union[str, BaseException]


class ScriptedEngine:
    """Chat engine whose reply depends on the user prompt."""

    def __init__(self, replies: Optional[Dict[str, Reply]] = None, default: Reply = "Neutral"):
        self.replies = replies or {}
        self.default = default
        self.calls: List[Tuple[str, str, float]] = []
        self.before_reply: Optional[Callable[[int], None]] = None

    def complete(self, system_prompt: str, user_prompt: str, temperature: float = 0.1) -> str:
        self.calls.append((system_prompt, user_prompt, temperature))
        if self.before_reply is not None:
            self.before_reply(len(self.calls))
        reply = self.replies.get(user_prompt, self.default)
        if isinstance(reply, BaseException):
            raise reply
        return reply


@pytest.fixture
def make_engine() -> Callable[..., ScriptedEngine]:
    def _make(replies: Optional[Dict[str, Reply]] = None, default: Reply = "Neutral") -> ScriptedEngine:
        return ScriptedEngine(replies, default)

    return _make
