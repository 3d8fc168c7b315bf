#!/usr/bin/env python3
"""
Field Agent
===========
Thin entry-point. All logic lives in src.agent.cli.

Usage:
    python3 run_agent.py --coordinator 10.0.0.5        # real robot
    python3 run_agent.py --simulate                    # in-memory robot
"""

from src.agent.cli import main

if __name__ == "__main__":
    main()
