"""deploy_actions.py"""
import asyncio


async def deploy(target: str, tag: list[str] | None = None, dry_run: bool = False) -> int:
    """Deploy a target."""
    await asyncio.sleep(0.1)
    print(f"Deploying {target} tags={tag} dry_run={dry_run}")
    return 0


def status() -> None:
    print("All systems nominal.")


def announce(context) -> None:
    print(f"Running {context.signature}")
