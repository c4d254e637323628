"""Command line interface for daylens."""

import json
import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from daylens.context import get_default_context
from daylens.error_handling import LexiconConfigurationError
from daylens.lexicon import load_lexicon
from daylens.models import ReflectionInput
from daylens.moderation import moderate_prompt
from daylens.pipeline import ReflectionPipeline

console = Console()

_EXPLANATION_TITLES = {
    "input_summary": "What you shared",
    "detected_emotion": "Emotion",
    "detected_theme": "Theme",
    "prompt_reasoning": "Prompt design",
    "style_reasoning": "Style",
    "color_mood_reasoning": "Color and mood",
    "composition_notes": "Composition",
}


def configure_logging(level: int) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool):
    """Daylens - turn daily reflections into emotion-aware image guidance."""
    context = get_default_context()
    configure_logging(logging.DEBUG if verbose else context.numeric_log_level)
    ctx.obj = context


@cli.command()
@click.option("--activities", default="", help="What you did today")
@click.option("--mood", default="", help="How you felt")
@click.option("--challenges", default="", help="What was difficult")
@click.option("--achievements", default="", help="What went well")
@click.option("--theme", "visual_theme", default=None, help="Visual style (anime, realistic, cyberpunk, minimalist)")
@click.option("--lexicon", "lexicon_path", type=click.Path(exists=True, dir_okay=False), help="Custom lexicon JSON file")
@click.option("--json", "as_json", is_flag=True, help="Print machine-readable JSON")
@click.pass_obj
def analyze(context, activities, mood, challenges, achievements, visual_theme, lexicon_path, as_json):
    """Detect emotion and theme for a reflection and explain the style choices."""
    try:
        lexicon = load_lexicon(lexicon_path or context.lexicon_path)
    except LexiconConfigurationError as e:
        raise click.ClickException(e.message)

    reflection = ReflectionInput(
        activities=activities,
        mood=mood,
        challenges=challenges,
        achievements=achievements,
        theme=visual_theme or context.default_visual_theme,
    )
    pipeline = ReflectionPipeline(lexicon=lexicon)
    analysis = pipeline.analyze(reflection)
    final_prompt = f"{analysis.style.prompt_prefix} {analysis.style.prompt_suffix}"
    explanation = pipeline.explain(
        reflection, analysis.detection, final_prompt, style_usage=analysis.style_usage
    )

    if as_json:
        click.echo(json.dumps({
            "detection": analysis.detection.model_dump(mode="json"),
            "style": analysis.style.model_dump(mode="json"),
            "explanation": explanation.to_json(),
        }, indent=2))
        return

    detection = analysis.detection
    table = Table(title="Reflection analysis", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Emotion", detection.emotion.value)
    table.add_row("Confidence", f"{detection.confidence:.0%}")
    table.add_row("Secondary", detection.secondary_emotion.value if detection.secondary_emotion else "-")
    table.add_row("Theme", detection.theme.value)
    table.add_row("Emotion keywords", ", ".join(detection.emotion_keywords) or "-")
    table.add_row("Theme keywords", ", ".join(detection.theme_keywords) or "-")
    table.add_row("Palette", analysis.style.color_palette)
    table.add_row("Lighting", analysis.style.lighting_style)
    console.print(table)

    for key, text in explanation.to_json().items():
        console.print(Panel(text, title=_EXPLANATION_TITLES[key], expand=False))


@cli.command("check-lexicon")
@click.option("--path", "lexicon_path", type=click.Path(dir_okay=False), help="Lexicon JSON file to validate")
@click.pass_obj
def check_lexicon(context, lexicon_path):
    """Validate that every label has keywords, a palette and a scene."""
    try:
        lexicon = load_lexicon(lexicon_path or context.lexicon_path)
    except LexiconConfigurationError as e:
        console.print(f"[red]Lexicon is incomplete ({e.source}):[/red]")
        for problem in e.problems:
            console.print(f"  - {problem}")
        sys.exit(1)

    console.print(
        f"[green]Lexicon OK:[/green] {len(lexicon.emotion_keywords)} emotions, "
        f"{len(lexicon.theme_keywords)} themes ({lexicon.source})"
    )


@cli.command()
@click.argument("prompt")
def moderate(prompt):
    """Screen an image prompt for blocked terms."""
    result = moderate_prompt(prompt)
    if result.is_safe:
        console.print("[green]Prompt is safe[/green]")
        return
    console.print(f"[red]Flagged for {', '.join(result.categories)}:[/red] {', '.join(result.flagged_terms)}")
    sys.exit(1)


@cli.command()
@click.option("--host", default=None, help="Bind address")
@click.option("--port", default=None, type=int, help="Port")
@click.option("--reload", is_flag=True, help="Reload on code changes")
@click.pass_obj
def serve(context, host, port, reload):
    """Run the web API."""
    from daylens.web.app import run_server

    run_server(host=host or context.host, port=port or context.port, reload=reload)


def main():
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
