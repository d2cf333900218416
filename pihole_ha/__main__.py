#!/usr/bin/env python3
"""
pihole-ha CLI Entry Point

Allows running the setup as a module: python -m pihole_ha
"""

from __future__ import annotations

import sys

from pihole_ha.core.service import main as setup_main

if __name__ == "__main__":
    try:
        sys.exit(setup_main())
    except KeyboardInterrupt:
        print("\nSetup interrupted by user")
        sys.exit(1)
    except Exception as e:
        print(f"Fatal error: {e.__class__.__name__}: {e}")
        sys.exit(1)
