"""Command-line interface for Pluck Tuner.

Provides commands for:
- analyze: Run the tuner over an audio file
- listen: Live tuner from a microphone
- devices: List audio input devices
- note: Show the note mapping for a frequency
"""

import logging
import time
from collections import Counter
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np
import typer
from rich.console import Console
from rich.live import Live
from rich.logging import RichHandler
from rich.table import Table
from rich.text import Text

from .core import SmoothedResult, TunerConfig, TunerState, frequency_to_note

app = typer.Typer(
    name="pluck-tuner",
    help="Real-time pitch detection and tuning for plucked strings",
    rich_markup_mode="markdown",
)
console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _build_config(config_file: Optional[Path], **overrides: Any) -> TunerConfig:
    """Load config from file (if any), then apply CLI overrides."""
    try:
        config = TunerConfig.from_file(config_file) if config_file else TunerConfig()
        return config.replace(**overrides)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Invalid configuration: {e}[/red]")
        raise typer.Exit(1)


def cents_needle(cents: float, width: int = 41, span: float = 50.0) -> str:
    """ASCII needle centered on 0 cents, clamped to +/- span."""
    c = max(-span, min(span, cents))
    center = width // 2
    pos = center + int(round(c / span * center))
    bar = ["-"] * width
    bar[center] = "|"
    bar[pos] = "^"
    return "[" + "".join(bar) + "]"


def _in_tune_style(cents: float) -> str:
    if abs(cents) < 5:
        return "green"
    if abs(cents) < 15:
        return "yellow"
    return "red"


def render_state(state: TunerState) -> Text:
    """Render a tuner state for the live display."""
    if not state.is_detected:
        return Text(f"{state.status.value.capitalize()}...", style="dim")

    result = state.result
    style = _in_tune_style(result.cents)
    text = Text()
    text.append(f"{result.name:<4}", style=f"bold {style}")
    text.append(f" {result.cents:+6.1f} cents  ", style=style)
    text.append(cents_needle(result.cents), style=style)
    text.append(f"  {result.frequency:7.2f} Hz  clarity {result.clarity:.2f}", style="cyan")
    return text


@app.command()
def analyze(
    input_file: Path = typer.Argument(..., help="Input audio file"),
    frame_size: Optional[int] = typer.Option(
        None, "--frame-size", "-f", help="Samples per analysis frame"
    ),
    hop_length: Optional[int] = typer.Option(
        None, "--hop-length", help="Samples between frames"
    ),
    threshold: Optional[float] = typer.Option(
        None, "--threshold", "-t", help="YIN threshold (lower = stricter)"
    ),
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", help="JSON file with tuner settings"
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Output results as JSON (for scripting)"
    ),
    verbose: bool = typer.Option(
        False, "-v", "--verbose", help="Verbose output"
    ),
):
    """Run the tuner over an audio file and report stable readings.

    **Examples:**

        pluck-tuner analyze low-e.wav

        pluck-tuner analyze take.flac --frame-size 4096 --json
    """
    from .input import FileFrameSource
    from .session import TunerSession

    _setup_logging(verbose)
    config = _build_config(
        config_file,
        frame_size=frame_size,
        hop_length=hop_length,
        yin_threshold=threshold,
    )

    if not input_file.exists():
        console.print(f"[red]Error: File not found: {input_file}[/red]")
        raise typer.Exit(1)

    source = FileFrameSource(
        str(input_file), frame_size=config.frame_size, hop_length=config.hop_length
    )
    readings: List[TunerState] = []
    frames = 0
    started = time.perf_counter()

    try:
        with TunerSession(source, config) as session:
            if not json_output:
                console.print(f"[blue]Analyzing:[/blue] {input_file}")
                console.print(
                    f"  Duration: {source.duration:.2f}s, Sample rate: {source.sample_rate}Hz"
                )
            for state in session.states():
                frames += 1
                if state.is_detected:
                    readings.append(state)
    except (ValueError, RuntimeError) as e:
        console.print(f"[red]Analysis failed: {e}[/red]")
        raise typer.Exit(1)

    elapsed = time.perf_counter() - started
    summary = summarize_readings([s.result for s in readings])

    if json_output:
        console.print_json(
            data={
                "input": str(input_file),
                "frames": frames,
                "detected_frames": len(readings),
                "elapsed_seconds": elapsed,
                "summary": summary,
                "readings": [s.to_dict() for s in readings],
                "config": config.to_dict(),
            }
        )
        return

    console.print(f"  Processed {frames} frames in {elapsed:.2f}s")
    if not readings:
        console.print("[yellow]No stable pitch detected[/yellow]")
        return

    if verbose:
        _show_readings_table(readings)

    console.print(
        f"[green]Dominant note: {summary['note']}[/green] "
        f"({summary['median_frequency']:.2f} Hz, {summary['median_cents']:+.1f} cents)"
    )


def summarize_readings(results: List[SmoothedResult]) -> Optional[Dict[str, Any]]:
    """Dominant note and its median frequency/cents across readings."""
    if not results:
        return None

    counts = Counter(r.name for r in results)
    dominant, count = counts.most_common(1)[0]
    matching = [r for r in results if r.name == dominant]
    return {
        "note": dominant,
        "readings": count,
        "median_frequency": float(np.median([r.frequency for r in matching])),
        "median_cents": float(np.median([r.cents for r in matching])),
    }


@app.command()
def listen(
    device: Optional[int] = typer.Option(
        None, "--device", "-d", help="Input device index (see `devices`)"
    ),
    sample_rate: Optional[int] = typer.Option(
        None, "--sample-rate", "-r", help="Capture sample rate in Hz"
    ),
    frame_size: Optional[int] = typer.Option(
        None, "--frame-size", "-f", help="Samples per analysis frame"
    ),
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", help="JSON file with tuner settings"
    ),
    verbose: bool = typer.Option(
        False, "-v", "--verbose", help="Verbose output"
    ),
):
    """Live tuner from a microphone. Press Ctrl+C to stop."""
    from .input import MicrophoneFrameSource
    from .session import TunerSession

    _setup_logging(verbose)
    config = _build_config(config_file, sample_rate=sample_rate, frame_size=frame_size)

    source = MicrophoneFrameSource(
        sample_rate=config.sample_rate,
        frame_size=config.frame_size,
        hop_length=config.hop_length,
        device=device,
    )

    console.print("[blue]Live tuner started.[/blue] Press Ctrl+C to quit.")
    try:
        with TunerSession(source, config) as session:
            with Live(render_state(session.state), console=console, refresh_per_second=30) as live:
                for state in session.states():
                    live.update(render_state(state))
    except KeyboardInterrupt:
        console.print("\nStopped.")
    except ImportError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"[red]Audio capture failed: {e}[/red]")
        console.print("[yellow]Tip: run `pluck-tuner devices` and pass --device[/yellow]")
        raise typer.Exit(1)


@app.command()
def devices():
    """List audio input devices."""
    from .input import list_input_devices

    try:
        inputs = list_input_devices()
    except ImportError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    table = Table(title="Input Devices")
    table.add_column("Index", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Channels", style="yellow")
    table.add_column("Default rate", style="magenta")

    for info in inputs:
        table.add_row(
            str(info["index"]),
            info["name"],
            str(info["channels"]),
            f"{info['default_samplerate']:.0f} Hz",
        )

    console.print(table)


@app.command()
def note(
    frequency: float = typer.Argument(..., help="Frequency in Hz"),
):
    """Show the nearest note and cents deviation for a frequency."""
    if frequency <= 0:
        console.print("[red]Error: Frequency must be positive[/red]")
        raise typer.Exit(1)

    info = frequency_to_note(frequency)
    console.print(
        f"{frequency:.2f} Hz -> [bold]{info.name}[/bold] "
        f"({info.cents:+.1f} cents) {cents_needle(info.cents)}"
    )


def _show_readings_table(readings: List[TunerState]):
    """Display stabilized readings in a table."""
    table = Table(title="Detected Readings")
    table.add_column("Time (s)", style="green")
    table.add_column("Note", style="cyan")
    table.add_column("Frequency (Hz)", style="yellow")
    table.add_column("Cents", style="magenta")
    table.add_column("Clarity")

    for state in readings:
        result = state.result
        table.add_row(
            f"{state.timestamp / 1000:.3f}",
            result.name,
            f"{result.frequency:.2f}",
            f"{result.cents:+.1f}",
            f"{result.clarity:.2f}",
        )

    console.print(table)


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
