#!/usr/bin/env python3
"""
Launcher for the council terminal dashboard.

  python dashboard.py              # cafeteria committee queue
  python dashboard.py president    # president / vice-president queue
"""

import sys

from cafeteria.adapters.dashboard_tui import main


if __name__ == "__main__":
    role = sys.argv[1] if len(sys.argv) > 1 else "committee"
    try:
        print("🚀 Starting the Cafeteria Council dashboard...")
        main(role=role)
    except ValueError as e:
        print(f"❌ {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        print("\n👋 Leaving the dashboard...")
        sys.exit(0)
