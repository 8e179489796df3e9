"""Command-line portfolio summary."""

import asyncio
import logging

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from .domain.models.claim_set import Provenance
from .infrastructure.config import session_from_env
from .infrastructure.dependencies import ServiceContainer

logger = logging.getLogger(__name__)


def render(console: Console, claim_set, analytics) -> None:
    if claim_set.provenance == Provenance.BACKEND:
        console.print("[green]✅ Connected to LinkedTrust backend[/green]")
    else:
        console.print("[yellow]📦 Local storage mode[/yellow]")
    if claim_set.notice:
        console.print(f"[dim]{claim_set.notice}[/dim]")

    console.print(
        f"{analytics.count} achievement{'s' if analytics.count != 1 else ''} • "
        f"⭐ {analytics.average_rating} avg rating"
    )

    table = Table("ID", "Category", "Stars", "Date", "Statement")
    for claim in claim_set.claims:
        table.add_row(
            str(claim.id),
            claim.aspect or "project",
            "⭐" * (claim.stars or 0),
            claim.effective_date or "",
            claim.statement,
        )
    console.print(table)

    for entry in analytics.top_categories():
        console.print(f"  {entry.category}: {entry.count}")


async def main():
    """Load the portfolio for the environment's session and print it."""
    load_dotenv()
    logging.basicConfig(
        level=logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    container = ServiceContainer()
    session = session_from_env()
    console = Console()
    try:
        claim_set = await container.get_claim_sync_service().load_claims(session)
        analytics = container.get_analytics_service().summarize(claim_set)
        render(console, claim_set, analytics)
    finally:
        await container.shutdown()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
