"""Operator confirmation sources."""

import sys
from collections.abc import Iterable
from typing import Protocol, TextIO


class ConfirmationSource(Protocol):
    """Something that answers a yes/no prompt with a single line."""

    def confirm(self, prompt: str) -> str: ...


class StdinConfirmation:
    """Reads the operator's answer from a text stream, blocking until a line arrives."""

    def __init__(
        self, stream: TextIO | None = None, output: TextIO | None = None
    ) -> None:
        self.stream = stream if stream is not None else sys.stdin
        self.output = output if output is not None else sys.stdout

    def confirm(self, prompt: str) -> str:
        self.output.write(prompt)
        self.output.flush()
        # readline returns "" on EOF, which never matches the affirmative token
        return self.stream.readline().rstrip("\r\n")


class ScriptedConfirmation:
    """Answers prompts from a fixed list of replies."""

    def __init__(self, answers: Iterable[str]) -> None:
        self.answers = list(answers)
        self.prompts: list[str] = []

    def confirm(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.answers:
            return ""
        return self.answers.pop(0)
