"""Terminal view of a decoded file: transcription, waveform and spectrogram."""

import time
import logging
from typing import List, Optional

import numpy as np
from rich.console import Console, ConsoleOptions, RenderResult
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from ..models.audio import SampleBuffer
from ..models.spectrogram import Spectrogram
from ..models.transcription import TranscriptionSegment

logger = logging.getLogger(__name__)

# Standalone renders (outside a Layout) get this many rows
DEFAULT_VIEW_HEIGHT = 8

MAX_DISPLAY_BINS = 100
INTENSITY_COLORS = ("blue", "green", "yellow", "red")
PARTIAL_BLOCKS = " ▁▂▃▄▅▆▇█"


def waveform_columns(samples: np.ndarray, width: int) -> np.ndarray:
    """Per-column RMS of the signal, scaled so the loudest sample maps to 0.95."""
    samples = np.asarray(samples, dtype=np.float32)
    if not samples.size or width <= 0:
        return np.zeros(0, dtype=np.float32)

    max_amplitude = float(np.max(np.abs(samples)))
    scale = 0.95 / max_amplitude if max_amplitude > 0 else 1.0

    points_per_column = max(1, samples.size // width)
    columns = [
        np.sqrt(np.mean(np.square(samples[start:start + points_per_column])))
        for start in range(0, samples.size, points_per_column)
    ]
    return (np.asarray(columns[:width], dtype=np.float32) * scale)


def spectrogram_intensity(magnitudes: np.ndarray) -> np.ndarray:
    """Map dB values onto [0, 1], with -100 dB and below at 0 and 0 dB at 1."""
    return np.clip((np.asarray(magnitudes, dtype=np.float32) + 100.0) / 100.0, 0.0, 1.0)


def intensity_level(intensity: float) -> Optional[int]:
    """Colour bucket (0-3) for an intensity, or None when it is too faint to draw."""
    if intensity <= 0.1:
        return None
    return min(int(intensity * 3.99), len(INTENSITY_COLORS) - 1)


def render_waveform(buffer: SampleBuffer, width: int, height: int) -> Text:
    """Draw the RMS envelope as a bar chart."""
    columns = waveform_columns(buffer.samples, width)
    if not columns.size:
        return Text("No samples", style="dim italic")

    text = Text()
    for row in range(height - 1, -1, -1):
        line = []
        for value in columns:
            level = float(value) * height - row
            if level >= 1.0:
                line.append(PARTIAL_BLOCKS[-1])
            elif level > 0.0:
                line.append(PARTIAL_BLOCKS[int(level * (len(PARTIAL_BLOCKS) - 1))])
            else:
                line.append(" ")
        text.append("".join(line).rstrip(), style="cyan")
        if row:
            text.append("\n")
    return text


def render_spectrogram(spectrogram: Spectrogram, width: int, height: int) -> Text:
    """Draw the lowest bins as a heat map, low frequencies at the bottom."""
    if not spectrogram.num_frames or not spectrogram.num_bins:
        return Text("No spectrogram frames", style="dim italic")

    bin_count = min(spectrogram.num_bins, MAX_DISPLAY_BINS)
    time_step = max(1, spectrogram.num_frames // max(width, 1))
    frame_indices = np.arange(0, spectrogram.num_frames, time_step)[:width]
    intensities = spectrogram_intensity(spectrogram.magnitudes[frame_indices, :bin_count])

    # Several bins can share a row; the row shows the strongest of them
    row_of_bin = (np.arange(bin_count) * height) // bin_count
    grid = np.zeros((height, len(frame_indices)), dtype=np.float32)
    for row in range(height):
        in_row = row_of_bin == row
        if in_row.any():
            grid[row] = intensities[:, in_row].max(axis=1)

    text = Text()
    for row in range(height - 1, -1, -1):
        for value in grid[row]:
            level = intensity_level(float(value))
            if level is None:
                text.append(" ")
            else:
                text.append("█", style=INTENSITY_COLORS[level])
        if row:
            text.append("\n")
    return text


class WaveformView:
    """Renderable that sizes the waveform to the space rich gives it."""

    def __init__(self, buffer: SampleBuffer):
        self.buffer = buffer

    def __rich_console__(self, console: Console, options: ConsoleOptions) -> RenderResult:
        yield render_waveform(self.buffer, options.max_width, options.height or DEFAULT_VIEW_HEIGHT)


class SpectrogramView:
    """Renderable that sizes the spectrogram to the space rich gives it."""

    def __init__(self, spectrogram: Spectrogram):
        self.spectrogram = spectrogram

    def __rich_console__(self, console: Console, options: ConsoleOptions) -> RenderResult:
        yield render_spectrogram(self.spectrogram, options.max_width, options.height or DEFAULT_VIEW_HEIGHT)


class Visualizer:
    """Shows transcription, waveform and spectrogram in three stacked panels."""

    def __init__(self,
                 buffer: SampleBuffer,
                 spectrogram: Spectrogram,
                 segments: Optional[List[TranscriptionSegment]] = None,
                 console: Optional[Console] = None):
        self.buffer = buffer
        self.spectrogram = spectrogram
        self.segments = segments or []
        self.console = console or Console()

    def create_layout(self) -> Layout:
        """Create the three-panel layout."""
        layout = Layout()
        layout.split_column(
            Layout(name="transcription", ratio=30),
            Layout(name="waveform", ratio=35),
            Layout(name="spectrogram", ratio=35),
        )
        layout["transcription"].update(self.transcription_panel())
        layout["waveform"].update(self.waveform_panel())
        layout["spectrogram"].update(self.spectrogram_panel())
        return layout

    def transcription_panel(self) -> Panel:
        if self.segments:
            lines = [f"[{seg.start:.2f}s - {seg.end:.2f}s] {seg.text.strip()}" for seg in self.segments]
            body = Text("\n".join(lines), style="white")
        else:
            body = Text("No transcription", style="dim white italic")
        return Panel(body, title="Transcription", border_style="blue")

    def waveform_panel(self) -> Panel:
        title = f"Waveform (0.0s - {self.buffer.duration_seconds:.1f}s)"
        return Panel(WaveformView(self.buffer), title=title, border_style="green")

    def spectrogram_panel(self) -> Panel:
        title = "Spectrogram"
        if self.spectrogram.num_frames and self.spectrogram.num_bins:
            bin_count = min(self.spectrogram.num_bins, MAX_DISPLAY_BINS)
            max_freq = float(self.spectrogram.frequencies[bin_count - 1])
            duration = float(self.spectrogram.time_points[-1])
            title = f"Spectrogram (0-{max_freq:.0f}Hz, 0.0s - {duration:.1f}s)"
        return Panel(SpectrogramView(self.spectrogram), title=title, border_style="magenta")

    def run(self, hold_seconds: float = 5.0) -> None:
        """Show the view for hold_seconds, then restore the terminal.

        When stdout is not a terminal the layout is printed once instead.
        """
        layout = self.create_layout()

        if not self.console.is_terminal:
            self.console.print(layout)
            return

        with Live(layout, console=self.console, screen=True, auto_refresh=False) as live:
            live.refresh()
            try:
                time.sleep(hold_seconds)
            except KeyboardInterrupt:
                logger.info("Keyboard interrupt received")
        logger.debug("Visualizer closed")
