#!/usr/bin/env python3
"""
Create the hosted InsightEar GPT assistant with its tool definitions.

Prints the new assistant id; put it in .env as ASSISTANT_ID. Use --update ID to
refresh instructions and tools on an existing assistant instead of creating one.

Run from project root:

    python scripts/create_assistant.py
    python scripts/create_assistant.py --model gpt-4o
    python scripts/create_assistant.py --update asst_abc123
"""

import argparse
import sys
from pathlib import Path

# Project root on path so "insightear" resolves without an install
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from openai import OpenAI

from insightear.agent.tools import ASSISTANT_INSTRUCTIONS, ASSISTANT_TOOLS
from insightear.core.config import ASSISTANT_MODEL, ASSISTANT_NAME, OPENAI_API_KEY


def main() -> None:
    parser = argparse.ArgumentParser(description="Create or update the InsightEar GPT assistant.")
    parser.add_argument("--model", default=ASSISTANT_MODEL, help=f"Model for the assistant (default: {ASSISTANT_MODEL}).")
    parser.add_argument("--update", metavar="ASSISTANT_ID", help="Update this assistant instead of creating a new one.")
    args = parser.parse_args()

    if not OPENAI_API_KEY:
        print("OPENAI_API_KEY is not set (see .env).", file=sys.stderr)
        sys.exit(1)

    client = OpenAI(api_key=OPENAI_API_KEY)
    if args.update:
        assistant = client.beta.assistants.update(
            args.update,
            name=ASSISTANT_NAME,
            model=args.model,
            instructions=ASSISTANT_INSTRUCTIONS,
            tools=ASSISTANT_TOOLS,
        )
        print(f"Updated assistant {assistant.id} ({len(ASSISTANT_TOOLS)} tools).")
        return

    assistant = client.beta.assistants.create(
        name=ASSISTANT_NAME,
        model=args.model,
        instructions=ASSISTANT_INSTRUCTIONS,
        tools=ASSISTANT_TOOLS,
    )
    print(f"Created assistant {assistant.id} ({len(ASSISTANT_TOOLS)} tools).")
    print(f"Add to .env:\n  ASSISTANT_ID={assistant.id}")


if __name__ == "__main__":
    main()
