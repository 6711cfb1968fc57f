import asyncio
import random

from cliroute import CliProcessor, HelpOptionBundle, TimeoutOptionBundle
from cliroute.utils import setup_logging

setup_logging()

processor = CliProcessor(bundles=[HelpOptionBundle(), TimeoutOptionBundle(default_timeout=10)])


@processor.command(
    "deploy <target>",
    examples=["deploy web --tag v1,v2", "deploy db --limit.replicas 3 --dry-run"],
    option_metadata={"tag": {"aliases": "--tag|-t", "csv": True}},
    logging_hooks=True,
)
async def deploy(
    target: str,
    tag: list[str] | None = None,
    limit: dict[str, int] | None = None,
    dry_run: bool = False,
) -> int:
    """Deploy a target."""
    await asyncio.sleep(0.2)
    if random.random() < 0.1:
        raise RuntimeError("Random failure!")
    print(f"Deploying {target} tags={tag} limits={dict(limit)} dry_run={dry_run}")
    return 0


@processor.command("status")
def status() -> None:
    """Show the deployment status."""
    print("All systems nominal.")


@processor.command("status <target>")
def status_of(target: str) -> None:
    """Show the status of one target."""
    print(f"{target}: nominal")


if __name__ == "__main__":
    asyncio.run(processor.run())
