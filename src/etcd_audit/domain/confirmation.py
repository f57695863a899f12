"""Interactive confirmation gates for expensive read operations."""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

_YES = re.compile(r"^[Yy]$")

FORENSIC_TOKEN = "FORENSIC"

Prompt = Callable[[str], str]


@dataclass(frozen=True)
class ConfirmationGate:
    """Ask the operator before cluster-heavy work.

    Any answer other than the expected one counts as refusal.
    """

    prompt: Prompt
    assume_yes: bool = False

    def confirm(self, question: str) -> bool:
        """Ask a y/N question; skipped when assume_yes is set."""
        if self.assume_yes:
            return True
        answer = self.prompt(f"{question} (y/N): ")
        return bool(_YES.match(answer.strip()))

    def confirm_token(self, question: str, token: str = FORENSIC_TOKEN) -> bool:
        """Require a typed token; assume_yes is ignored."""
        answer = self.prompt(f"{question} Type '{token}' to continue: ")
        return answer.strip().lower() == token.lower()
