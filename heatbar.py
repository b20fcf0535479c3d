#!/usr/bin/env python3
"""
Heatbar - Live per-address network traffic heat chart.

Captures packets (root/CAP_NET_RAW needed for live capture), keeps a decaying
per-address byte count and draws it as a ranked bar chart with Textual.

This is the entry point script. The implementation is in src/heatbar/.

    sudo python heatbar.py -i en0
"""

from src.utils.cli import main

if __name__ == "__main__":
    main()
