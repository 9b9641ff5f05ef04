"""CLI entry point for notestyle."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm
from rich.table import Table

from notestyle import __version__
from notestyle.exceptions import NotestyleError

console = Console()


class NotestyleGroup(click.Group):
    """Command group that turns library errors into a clean exit."""

    def invoke(self, ctx: click.Context):
        try:
            return super().invoke(ctx)
        except NotestyleError as e:
            console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
            raise SystemExit(1) from e


@click.group(cls=NotestyleGroup)
@click.version_option(version=__version__)
@click.option(
    "--log-level",
    envvar="NOTESTYLE_LOG_LEVEL",
    default="WARNING",
    show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging verbosity",
)
def main(log_level: str) -> None:
    """Learn your writing style from samples and notes."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


# ---------------------------------------------------------------------------
# profile — show the learned profile
# ---------------------------------------------------------------------------


@main.command()
def profile() -> None:
    """Show your current style profile and training status."""
    trainer = _open_trainer()
    prof = trainer.profile()
    status = trainer.training_status()

    console.print(
        f"\n[bold]Style Profile[/bold] (based on {status.samples_count} samples, "
        f"{status.tokens_count} words)\n"
    )
    filled = status.confidence // 10
    bar = "[green]" + ("+" * filled) + "[/green]" + "[dim]" + ("-" * (10 - filled)) + "[/dim]"
    ready = "[green]ready[/green]" if status.is_ready else "[yellow]needs more writing[/yellow]"
    console.print(f"  Confidence: {bar} ({status.confidence}%) {ready}")
    if status.last_trained_at:
        console.print(f"  Last trained: {status.last_trained_at:%Y-%m-%d %H:%M}")
    console.print()

    table = Table(title="Metrics")
    table.add_column("Metric", width=26)
    table.add_column("Value", justify="right", width=10)
    for name, value in prof.metrics.to_json_dict().items():
        table.add_row(name, f"{value:.2f}")
    console.print(table)

    tags = prof.style_tags
    overrides = prof.user_overrides
    for label, derived, pinned in (
        ("Tone", tags.tone, overrides.tone),
        ("Structure", tags.structure, overrides.structure),
        ("Verbosity", tags.verbosity, overrides.verbosity),
    ):
        pin = f" [cyan](pinned: {pinned})[/cyan]" if pinned else ""
        console.print(f"  [bold]{label}[/bold]: {derived}{pin}")
    if overrides.preferred_phrases:
        console.print(f"  Prefer: {', '.join(overrides.preferred_phrases)}")
    if overrides.avoided_phrases:
        console.print(f"  Avoid: {', '.join(overrides.avoided_phrases)}")
    if overrides.custom_instructions:
        console.print(f"  Instructions: [italic]{overrides.custom_instructions}[/italic]")
    console.print()


# ---------------------------------------------------------------------------
# add / train / notes — feed writing into the profile
# ---------------------------------------------------------------------------


@main.command()
@click.argument("text", required=False)
@click.option("--file", "-f", "file_path", type=click.Path(exists=True, dir_okay=False),
              help="Read the sample from a file")
@click.option("--source", type=click.Choice(["manual", "note"]), default="manual",
              help="Where the sample came from")
@click.option("--train/--no-train", "auto_train", default=None,
              help="Train on the sample now (defaults to the profile's auto-train setting)")
def add(text: str | None, file_path: str | None, source: str, auto_train: bool | None) -> None:
    """Add a writing sample to your library."""
    if file_path:
        text = Path(file_path).read_text(encoding="utf-8")
    if not text:
        raise click.UsageError("Give the sample as TEXT or with --file.")

    trainer = _open_trainer()
    result = trainer.add_sample(text, source=source, auto_train=auto_train)

    where = "Added" if result.stored else "Used (privacy mode, not stored)"
    console.print(f"[green]{where} sample {result.sample.id}[/green] "
                  f"({result.sample.word_count} words)")
    if result.training:
        console.print(f"Confidence: {result.training.profile.training.confidence}%")


@main.command()
@click.argument("files", nargs=-1, type=click.Path(exists=True, dir_okay=False))
@click.option("--all", "use_library", is_flag=True, help="Train on every stored sample")
def train(files: tuple[str, ...], use_library: bool) -> None:
    """Train the profile on text files, or on the whole sample library."""
    trainer = _open_trainer()
    if use_library:
        result = trainer.run_full_training()
    elif files:
        texts = [Path(f).read_text(encoding="utf-8") for f in files]
        result = trainer.train(texts)
    else:
        raise click.UsageError("Pass one or more FILES, or --all.")
    _print_training(result)


@main.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True))
def notes(paths: tuple[str, ...]) -> None:
    """Train on your notes (files, or directories of .md/.txt files)."""
    files: list[Path] = []
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            found = [p for p in path.iterdir() if p.suffix in (".md", ".txt")]
            files.extend(sorted(found, key=lambda p: p.stat().st_mtime, reverse=True))
        else:
            files.append(path)

    trainer = _open_trainer()
    result = trainer.train_from_notes([f.read_text(encoding="utf-8") for f in files])
    _print_training(result)


# ---------------------------------------------------------------------------
# samples / forget — manage the sample library
# ---------------------------------------------------------------------------


@main.command()
def samples() -> None:
    """List the samples in your library."""
    trainer = _open_trainer()
    items = trainer.library.samples()
    if not items:
        console.print("[yellow]No samples yet. Use 'notestyle add' to add one.[/yellow]")
        return

    table = Table(title=f"Writing Samples ({len(items)})")
    table.add_column("ID", width=20)
    table.add_column("Source", width=7)
    table.add_column("Words", width=6, justify="right")
    table.add_column("Added", width=12)
    table.add_column("Text", width=50)
    for s in items:
        table.add_row(
            s.id, s.source, str(s.word_count), s.added_at.strftime("%Y-%m-%d"),
            s.text.replace("\n", " ")[:50],
        )
    console.print(table)


@main.command()
@click.argument("sample_id")
def forget(sample_id: str) -> None:
    """Delete a sample from your library."""
    trainer = _open_trainer()
    if trainer.delete_sample(sample_id):
        console.print(f"[green]Deleted {sample_id}.[/green]")
    else:
        console.print(f"[yellow]No sample with id {sample_id}.[/yellow]")


# ---------------------------------------------------------------------------
# prompt / override / settings — shape how the profile is used
# ---------------------------------------------------------------------------


@main.command()
def prompt() -> None:
    """Print the style instructions sent with generation requests."""
    trainer = _open_trainer()
    click.echo(trainer.style_prompt())


@main.command()
@click.option("--tone", type=click.Choice(["formal", "neutral", "casual"]))
@click.option("--structure", type=click.Choice(["bullets", "mixed", "paragraphs"]))
@click.option("--verbosity", type=click.Choice(["short", "medium", "long"]))
@click.option("--prefer", multiple=True, help="Phrase to prefer (repeatable, replaces the list)")
@click.option("--avoid", multiple=True, help="Phrase to avoid (repeatable, replaces the list)")
@click.option("--instructions", help="Free-text instructions for generation")
@click.option("--clear", is_flag=True, help="Remove all overrides first")
def override(
    tone: str | None,
    structure: str | None,
    verbosity: str | None,
    prefer: tuple[str, ...],
    avoid: tuple[str, ...],
    instructions: str | None,
    clear: bool,
) -> None:
    """Pin tone, structure or verbosity and set phrase preferences."""
    from notestyle.style.profile import UserOverrides

    changes: dict = UserOverrides().model_dump() if clear else {}
    for key, value in (("tone", tone), ("structure", structure), ("verbosity", verbosity)):
        if value:
            changes[key] = value
    if prefer:
        changes["preferred_phrases"] = list(prefer)
    if avoid:
        changes["avoided_phrases"] = list(avoid)
    if instructions is not None:
        changes["custom_instructions"] = instructions

    if not changes:
        raise click.UsageError("Nothing to change. See 'notestyle override --help'.")

    trainer = _open_trainer()
    trainer.update_overrides(**changes)
    console.print("[green]Overrides updated.[/green]\n")
    click.echo(trainer.style_prompt())


@main.command(name="settings")
@click.option("--auto-train/--no-auto-train", default=None, help="Train whenever a sample is added")
@click.option("--notes/--no-notes", "include_notes", default=None, help="Allow training on notes")
@click.option("--privacy/--no-privacy", default=None, help="Never store sample text")
def settings_cmd(
    auto_train: bool | None, include_notes: bool | None, privacy: bool | None
) -> None:
    """Show or change the profile's training settings."""
    changes = {
        key: value
        for key, value in (
            ("auto_train", auto_train),
            ("include_notes_on_train", include_notes),
            ("privacy_mode", privacy),
        )
        if value is not None
    }
    trainer = _open_trainer()
    prof = trainer.update_settings(**changes) if changes else trainer.profile()
    for key, value in prof.settings.to_json_dict().items():
        mark = "[green]on[/green]" if value else "[dim]off[/dim]"
        console.print(f"  {key}: {mark}")


# ---------------------------------------------------------------------------
# reset / export / import
# ---------------------------------------------------------------------------


@main.command()
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
def reset(yes: bool) -> None:
    """Delete your profile and every stored sample."""
    if not yes and not Confirm.ask("Delete your style profile and all samples?"):
        console.print("[dim]Nothing changed.[/dim]")
        return
    _open_trainer().reset()
    console.print("[green]Profile reset.[/green]")


@main.command(name="export")
@click.argument("path", type=click.Path(dir_okay=False, writable=True))
def export_cmd(path: str) -> None:
    """Export the profile and samples to a JSON file."""
    bundle = _open_trainer().export_bundle()
    Path(path).write_text(json.dumps(bundle, indent=2), encoding="utf-8")
    console.print(f"[green]Exported to {path}[/green]")


@main.command(name="import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
def import_cmd(path: str) -> None:
    """Replace the profile and samples with an exported JSON file."""
    trainer = _open_trainer()
    prof = trainer.import_bundle(Path(path).read_text(encoding="utf-8"))
    console.print(
        f"[green]Imported profile[/green] ({prof.training.samples_analyzed} samples analyzed, "
        f"confidence {prof.training.confidence}%)"
    )


# ---------------------------------------------------------------------------
# write — generate text in your style
# ---------------------------------------------------------------------------


@main.command()
@click.argument("request")
def write(request: str) -> None:
    """Write something in your style with Claude."""
    from notestyle.config import get_settings
    from notestyle.llm.client import ClaudeClient
    from notestyle.style.writer import StyleWriter

    settings = get_settings()
    _check_api_key(settings)
    trainer = _open_trainer(settings)
    writer = StyleWriter(ClaudeClient(settings), trainer.profile())

    with console.status("[bold green]Writing..."):
        result = writer.write(request)

    console.print()
    console.print(Panel(result.text, title="In your style"))
    for note in result.notes:
        console.print(f"[yellow]{note}[/yellow]")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _open_trainer(settings: object | None = None):
    from notestyle.config import get_settings
    from notestyle.style.trainer import open_trainer

    return open_trainer(settings or get_settings())


def _print_training(result: object) -> None:
    training = result.profile.training
    tags = result.profile.style_tags
    console.print(
        f"[bold green]Style profile updated![/bold green] "
        f"Trained on {result.samples_processed} samples."
    )
    console.print(
        f"  Samples analyzed: {training.samples_analyzed} | Words: {training.total_tokens} | "
        f"Confidence: {training.confidence}%"
    )
    console.print(f"  Tone: {tags.tone} | Structure: {tags.structure} | Verbosity: {tags.verbosity}")


def _check_api_key(settings: object) -> None:
    """Exit with a helpful message if the API key is not set."""
    if not getattr(settings, "anthropic_api_key", ""):
        console.print(
            "[bold red]Error:[/bold red] ANTHROPIC_API_KEY not set.\n"
            "Add it to your environment or the project's .env file."
        )
        raise SystemExit(1)
