"""
pihole-ha

Configures one node of a two-node keepalived failover pair for Pi-hole.
"""

__version__ = "0.1.0"
