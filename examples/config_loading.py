"""config_loading.py"""
from pathlib import Path

from cliroute.config import loader

processor = loader(Path(__file__).parent / "cliroute.yaml")

if __name__ == "__main__":
    import asyncio

    for mismatch in processor.check_examples():
        print(f"Example '{mismatch.example}' does not route to '{mismatch.handler}'.")
    asyncio.run(processor.run())
