#!/usr/bin/env python3
"""
Walk through the agent without the HTTP server.

Runs the integration self-test, sends a sample question through the chat
pipeline, prints the sprint summary counters, then processes a few more
phrasings. Uses the same .env as the server; without credentials everything
runs in mock mode and chat messages are only logged.

Run from project root:

    python scripts/run_example.py
"""

import logging
import sys
from pathlib import Path

# Project root on path so "sprintbot" resolves without installing
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from sprintbot.agent.graph import build_agent
from sprintbot.core.config import load_settings

QUERIES = [
    "What is the current sprint status?",
    "How many items are blocked?",
    "Show me the sprint progress",
    "Count the work items in progress",
]


def main() -> int:
    logging.basicConfig(level=logging.INFO)
    settings = load_settings()
    agent = build_agent(settings)

    print("1. Testing integration...")
    try:
        agent.test_integration()
    except Exception as e:
        print(f"   Integration test failed: {e}")
        return 1

    print("2. Processing a sample query...")
    agent.process_query("How many work items are ready for production?")

    print("3. Getting sprint summary...")
    report = agent.generate_sprint_summary()
    print(f"   Sprint: {report.sprint.name}")
    print(f"   Total Items: {report.total_items}")
    print(f"   Ready for Production: {report.ready_for_production}")
    print(f"   In Progress: {report.in_progress}")
    print(f"   Blocked: {report.blocked}")

    print("4. Testing different query types...")
    for query in QUERIES:
        delivered = agent.process_query(query)
        print(f"   {query!r}: delivered={delivered}")

    agent.tracker.close()
    agent.notifier.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
