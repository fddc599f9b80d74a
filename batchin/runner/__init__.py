"""Batch run orchestration."""

from batchin.runner.confirmation import (
    ConfirmationSource,
    ScriptedConfirmation,
    StdinConfirmation,
)
from batchin.runner.controller import BatchRunController, RunReport, RunState

__all__ = [
    "BatchRunController",
    "ConfirmationSource",
    "RunReport",
    "RunState",
    "ScriptedConfirmation",
    "StdinConfirmation",
]
