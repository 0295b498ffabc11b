#!/usr/bin/env python3
"""
Run script for the trunk-processor upload service
"""
from trunk_processor.main import run

if __name__ == "__main__":
    run()
