"""
Apply orchestration for pihole-ha

Runs external commands and sequences the mutating setup phases.
"""

from pihole_ha.orchestration.apply import ApplyOrchestrator, ApplyPhase, ApplyReport
from pihole_ha.orchestration.commands import CommandResult, CommandRunner

__all__ = [
    "ApplyOrchestrator",
    "ApplyPhase",
    "ApplyReport",
    "CommandResult",
    "CommandRunner",
]
