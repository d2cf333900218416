"""
pihole-ha Network Module

Host interface queries and post-apply state inspection.
"""

from .interfaces import is_address_bound, list_interfaces
from .state_probe import ObservedRole, ProbeReport, StateProbe

__all__ = [
    "is_address_bound",
    "list_interfaces",
    "ObservedRole",
    "ProbeReport",
    "StateProbe",
]
