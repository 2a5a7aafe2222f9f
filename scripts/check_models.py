"""Prints the Gemini models visible to GEMINI_API_KEY / GOOGLE_API_KEY."""
import asyncio
import os
import sys

# Add parent dir to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from podcaster.config import settings
from podcaster.services.model_catalog import list_models

async def main() -> int:
    if not settings.GEMINI_API_KEY:
        print("GEMINI_API_KEY (or GOOGLE_API_KEY) is not set.")
        return 1
    try:
        names = await list_models(settings.GEMINI_API_KEY)
    except Exception as e:
        print(f"Error fetching models: {e}")
        return 1
    print("Available models:")
    for name in names:
        print(f"- {name}")
    return 0

if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
