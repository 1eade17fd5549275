#!/usr/bin/env python3
"""Interactive CLI for the feedback prioritizer.

This allows users to:
1. Paste feedback directly in the terminal
2. See the ranked priority list and urgency/impact matrix
3. See critical alert notifications
4. Review stored analytics with the ``stats`` command
"""
import asyncio
import logging
import sys
from typing import Optional
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich import box
from rich.prompt import Prompt

from config import config
from database import init_db, get_db_session, fetch_recent_items
from errors import ClassifierError
from pipeline import AnalysisOutcome, FeedbackPipeline
from quadrants import QUADRANT_LABELS, partition
from aggregator import summarize, utc_today
from schemas import AnalyticsSummary, FeedbackItem

console = Console()

SENTIMENT_ICONS = {"positive": "😊", "negative": "😞", "neutral": "😐"}
QUADRANT_STYLES = {"critical": "red", "urgent": "yellow", "important": "blue", "low": "green"}
MATRIX_PREVIEW = 3


def urgency_style(urgency: int) -> str:
    if urgency >= 8:
        return "bold red"
    if urgency >= 5:
        return "yellow"
    return "green"


class InteractiveFeedbackSystem:
    """Interactive feedback prioritization system."""

    def __init__(self, pipeline: Optional[FeedbackPipeline] = None):
        """Initialize the system."""
        self.pipeline = pipeline or FeedbackPipeline()

    async def analyze_feedback(self, feedback_text: str) -> AnalysisOutcome:
        """Classify, score and store one submission."""
        console.print("[yellow]🤖 Analyzing with AI...[/yellow]")
        async with get_db_session() as db:
            return await self.pipeline.analyze(db, feedback_text)

    def display_priority_list(self, items):
        """Display items ranked by priority score."""
        table = Table(
            title="📋 Priority List",
            box=box.ROUNDED,
            show_header=True,
            header_style="bold magenta"
        )

        table.add_column("#", style="dim", width=3)
        table.add_column("Title", style="cyan")
        table.add_column("Category")
        table.add_column("Urgency", justify="right")
        table.add_column("Impact", justify="right")
        table.add_column("Priority", justify="right", style="bold")
        table.add_column("", width=2)

        for index, item in enumerate(items, start=1):
            table.add_row(
                str(index),
                item.title,
                item.category,
                f"[{urgency_style(item.urgency)}]{item.urgency}/10[/]",
                f"{item.impact}/10",
                str(item.priority_score),
                SENTIMENT_ICONS.get(item.sentiment, "😐")
            )

        console.print(table)

    def display_matrix(self, items):
        """Display the urgency/impact matrix, a few items per quadrant."""
        quadrants = partition(items, config.thresholds())

        for name, label in QUADRANT_LABELS.items():
            bucket = getattr(quadrants, name)
            lines = [
                f"• {item.title} [dim]({item.category} • Score: {item.priority_score})[/dim]"
                for item in bucket[:MATRIX_PREVIEW]
            ]
            if len(bucket) > MATRIX_PREVIEW:
                lines.append(f"[dim]+{len(bucket) - MATRIX_PREVIEW} more items[/dim]")

            console.print(Panel(
                "\n".join(lines) or "[dim]No items[/dim]",
                title=f"{label} ({len(bucket)})",
                border_style=QUADRANT_STYLES[name],
                box=box.ROUNDED
            ))

    def display_alert(self, item: FeedbackItem):
        """Display a critical alert notification."""
        alert_content = f"""
[bold red] CRITICAL FEEDBACK[/bold red]

[bold]Title:[/bold] {item.title}
[bold]Category:[/bold] {item.category}
[bold]Priority:[/bold] {item.priority_score} (urgency {item.urgency}, impact {item.impact})
[bold]Summary:[/bold] {item.summary}
        """

        console.print()
        console.print(Panel(
            alert_content,
            title="🚨 ALERT 🚨",
            border_style="bold red",
            box=box.DOUBLE,
            padding=(1, 2)
        ))

    def display_outcome(self, outcome: AnalysisOutcome):
        """Display everything produced by one analysis."""
        items = outcome.intake.items
        if not items:
            console.print("[yellow]The classifier returned no feedback items.[/yellow]")
        else:
            self.display_priority_list(items)
            self.display_matrix(items)

        if outcome.intake.dropped:
            console.print(f"[yellow]⚠️  {outcome.intake.dropped} malformed item(s) were skipped[/yellow]")

        for item in outcome.alerts:
            self.display_alert(item)

        console.print(f"\n[dim]💾 Saved {len(items)} item(s) to database[/dim]")

    def display_analytics(self, summary: AnalyticsSummary):
        """Display category, sentiment and trend tables."""
        if summary.total_items == 0:
            console.print("[dim]No feedback data yet. Analyze some feedback to see insights![/dim]")
            return

        categories = Table(title="Feedback by Category", box=box.SIMPLE)
        categories.add_column("Category", style="cyan")
        categories.add_column("Count", justify="right")
        for name, count in summary.categories.items():
            categories.add_row(name, str(count))

        sentiments = Table(title="Sentiment", box=box.SIMPLE)
        sentiments.add_column("Sentiment")
        sentiments.add_column("Count", justify="right")
        for name, count in summary.sentiments.items():
            sentiments.add_row(f"{SENTIMENT_ICONS.get(name, '')} {name}", str(count))

        trend = Table(title=f"Priority Trends (Last {len(summary.trend)} Days)", box=box.SIMPLE)
        trend.add_column("Day")
        trend.add_column("Avg Priority", justify="right")
        trend.add_column("Count", justify="right")
        for point in summary.trend:
            trend.add_row(point.label, f"{point.avg_priority:.1f}", str(point.count))

        console.print(categories)
        console.print(sentiments)
        console.print(trend)

    async def show_stats(self):
        """Load recent items and display analytics."""
        async with get_db_session() as db:
            items = await fetch_recent_items(db, limit=config.ANALYTICS_LIMIT)

        self.display_analytics(summarize(
            items,
            today=utc_today(),
            thresholds=config.thresholds(),
            days=config.TREND_DAYS,
            zero_fill=config.SENTIMENT_ZERO_FILL
        ))

    def display_welcome(self):
        """Display welcome message."""
        welcome = f"""
[bold cyan]Customer Feedback Prioritizer[/bold cyan]
[dim]Interactive CLI Mode[/dim]

Paste feedback from surveys, support tickets or social media.
Each entry is split out and scored for:
  • Urgency and impact (1-10), priority = urgency + impact
  • Category and sentiment

Commands: [bold]stats[/bold] shows analytics, [bold]quit[/bold] exits.
Model: [green]{config.AI_MODEL}[/green]
        """

        console.print(Panel(
            welcome,
            border_style="bold blue",
            box=box.DOUBLE,
            padding=(1, 2)
        ))
        console.print()

    async def run_interactive(self):
        """Run the interactive CLI loop."""
        self.display_welcome()

        while True:
            console.print()
            console.print("[bold]Enter feedback to analyze[/bold] ('stats' for analytics, 'quit' to exit):")
            console.print()

            feedback_text = Prompt.ask("Your feedback")

            if feedback_text.lower() in ['quit', 'exit', 'q']:
                console.print("\n[cyan]Goodbye![/cyan]\n")
                break

            if feedback_text.strip().lower() == "stats":
                await self.show_stats()
                continue

            if not feedback_text.strip():
                console.print("[red]⚠️  Feedback cannot be empty[/red]")
                continue

            console.print()
            try:
                outcome = await self.analyze_feedback(feedback_text.strip())
            except ClassifierError as e:
                console.print(f"[red]❌ Analysis failed: {e.message}[/red]")
                continue

            self.display_outcome(outcome)


async def main():
    """Main entry point."""
    logging.basicConfig(
        level=logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # Initialize database
    console.print("[cyan]Initializing database...[/cyan]")
    await init_db()

    system = InteractiveFeedbackSystem()

    try:
        await system.run_interactive()
    except KeyboardInterrupt:
        console.print("\n\n[cyan] Goodbye![/cyan]\n")
        sys.exit(0)


if __name__ == "__main__":
    asyncio.run(main())
