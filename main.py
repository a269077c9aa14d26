#!/usr/bin/env python3
"""
MTGA Log Decoder - Main Entry Point

Usage:
    python main.py replay Player.log      # Decode a saved log
    python main.py follow                 # Follow the live log
    python main.py --json follow          # One JSON object per decoded item
"""

import sys
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Add src directory to Python path
src_path = Path(__file__).parent / "src"
sys.path.insert(0, str(src_path))

# Import and run the main application
from arena_log.core.app import main

if __name__ == "__main__":
    sys.exit(main())
