"""Main CLI entry point for commit-progress."""

import sys
import time
import random
import logging
from pathlib import Path
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Optional, List

import click
from rich.console import Console
from rich.table import Table

from commit_progress import __version__
from commit_progress.ui.progress import ProgressTracker, CommitInfo, CommitStatus
from commit_progress.utils.config import Config
from commit_progress.utils.cost import TOKEN_PRICING, calculate_cost, format_cost, format_token_usage

# Configure logging
logging.basicConfig(level=logging.WARNING)
logger = logging.getLogger(__name__)

console = Console()

DEMO_AUTHORS = [
    "Ada Lovelace",
    "Grace Hopper",
    "Linus Torvalds",
    "Margaret Hamilton",
    "Guido van Rossum",
    "Barbara Liskov-Wing-Longname",
]


class EvaluationError(Exception):
    """Raised when a simulated evaluation fails."""

    def __init__(self, message: str, commit_hash: Optional[str] = None):
        super().__init__(message)
        self.commit_hash = commit_hash


def generate_demo_commits(count: int, seed: Optional[int] = None) -> List[CommitInfo]:
    """Generate fake commits for the demo.

    Args:
        count: Number of commits
        seed: Optional random seed

    Returns:
        List of CommitInfo objects
    """
    rng = random.Random(seed)
    commits = []
    for i in range(count):
        commit_hash = f"{rng.getrandbits(160):040x}"
        commits.append(CommitInfo(
            hash=commit_hash,
            author=rng.choice(DEMO_AUTHORS),
            date=f"2025-11-{(i % 28) + 1:02d}"
        ))
    return commits


def simulate_evaluation(
    tracker: ProgressTracker,
    commit: CommitInfo,
    provider: str,
    model: str,
    delay: float = 0.2,
    fail_rate: float = 0.0,
    seed: Optional[int] = None
) -> None:
    """Simulate one commit evaluation, reporting into the tracker.

    Token counters are reported as running totals, the way an LLM client
    accumulates usage across agent calls.

    Raises:
        EvaluationError: If the simulated evaluation fails
    """
    rng = random.Random(f"{seed}:{commit.hash}" if seed is not None else None)

    tracker.update_progress(
        commit.hash,
        status=CommitStatus.VECTORIZING,
        progress=5,
        current_step="Indexing changed files"
    )
    time.sleep(delay)

    steps = rng.randint(3, 6)
    input_tokens = 0
    output_tokens = 0

    for step in range(1, steps + 1):
        if rng.random() < fail_rate:
            raise EvaluationError(f"Agent {step}/{steps} returned no result", commit.hash)

        input_tokens += rng.randint(800, 4000)
        output_tokens += rng.randint(150, 900)
        cost = calculate_cost(provider, model, input_tokens, output_tokens)

        tracker.update_progress(
            commit.hash,
            status=CommitStatus.ANALYZING,
            progress=10 + (85 * step) // steps,
            current_step=f"Agent {step}/{steps}",
            current_step_index=step,
            total_steps=steps,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            total_cost=cost.total_cost
        )
        time.sleep(delay)

    # Completion is never throttled, so final counters ride along with it.
    final_cost = calculate_cost(provider, model, input_tokens, output_tokens)
    tracker.update_progress(
        commit.hash,
        status=CommitStatus.COMPLETE,
        progress=100,
        current_step="Done",
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        total_cost=final_cost.total_cost
    )
    logger.info(f"Evaluated {commit.short_hash}: {format_token_usage(input_tokens, output_tokens)}")


def print_summary(tracker: ProgressTracker) -> None:
    """Print the evaluation summary table.

    Args:
        tracker: Finalized progress tracker
    """
    summary = tracker.get_summary()
    totals = tracker.get_totals()

    table = Table(show_header=True, header_style="bold magenta", title="Evaluation Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Total", str(summary["total"]))
    table.add_row("Complete", str(summary["complete"]))
    table.add_row("Failed", str(summary["failed"]))
    table.add_row("Pending", str(summary["pending"]))
    table.add_row("Tokens", format_token_usage(int(totals["input_tokens"]), int(totals["output_tokens"])))
    table.add_row("Cost", format_cost(totals["total_cost"]))

    console.print(table)


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
def main(verbose: bool) -> None:
    """Commit Progress - live terminal progress for parallel commit evaluation."""
    if verbose:
        console.print(f"[bold green]commit-progress v{__version__}[/bold green]")
        logging.getLogger().setLevel(logging.INFO)


@main.command("demo")
@click.option("--commits", "commit_count", default=6, type=click.IntRange(min=1), help="Number of simulated commits")
@click.option("--workers", type=click.IntRange(min=1), help="Parallel workers (defaults to config)")
@click.option("--delay", default=0.2, type=click.FloatRange(min=0), help="Seconds per simulated step")
@click.option("--fail-rate", default=0.05, type=click.FloatRange(0, 1), help="Chance each step fails")
@click.option("--seed", type=int, help="Random seed for reproducible runs")
@click.option("--config", "config_path", type=click.Path(path_type=Path), help="Path to JSON config file")
def demo_command(
    commit_count: int,
    workers: Optional[int],
    delay: float,
    fail_rate: float,
    seed: Optional[int],
    config_path: Optional[Path]
) -> None:
    """Simulate a parallel commit evaluation with live progress rows."""
    config = Config(config_path)
    workers = workers or int(config.get("parallel_workers"))
    provider = config.get("provider")
    model = config.get("model")

    commits = generate_demo_commits(commit_count, seed=seed)
    tracker = ProgressTracker.from_config(config)
    tracker.initialize(commits)

    try:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            future_to_commit = {
                executor.submit(
                    simulate_evaluation,
                    tracker,
                    commit,
                    provider,
                    model,
                    delay=delay,
                    fail_rate=fail_rate,
                    seed=seed
                ): commit
                for commit in commits
            }

            for future in as_completed(future_to_commit):
                commit = future_to_commit[future]
                try:
                    future.result()
                except Exception as e:
                    logger.error(f"Evaluation of {commit.short_hash} failed: {e}")
                    tracker.update_progress(commit.hash, status=CommitStatus.FAILED, current_step=str(e))
    finally:
        tracker.finalize()

    print_summary(tracker)

    if tracker.get_summary()["failed"]:
        sys.exit(1)


@main.command("pricing")
def pricing_command() -> None:
    """Show the token pricing table."""
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Provider", style="cyan")
    table.add_column("Model")
    table.add_column("Input $/1M", justify="right")
    table.add_column("Output $/1M", justify="right")

    for provider, models in TOKEN_PRICING.items():
        for model, pricing in models.items():
            table.add_row(provider, model, f"{pricing['input']:.2f}", f"{pricing['output']:.2f}")

    console.print(table)


if __name__ == "__main__":
    main()
