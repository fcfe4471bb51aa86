#!/usr/bin/env python3
"""
INFINITE STAIRS Launcher
=========================
Run this script to start the game.
"""

from infinite_stairs.main import main

if __name__ == "__main__":
    main()
