"""Main application entry point for audioscope."""

import os
import sys
import argparse
import logging
from pathlib import Path
from typing import Optional

from audioscope import __version__
from audioscope.analysis.spectrogram import validate_window_size
from audioscope.errors import AudioscopeError, InvalidWindowSize
from audioscope.services.analysis_service import AnalysisService
from audioscope.services.transcription_service import BACKENDS
from audioscope.ui.visualizer import Visualizer

from .config import AudioscopeConfig

logger = logging.getLogger(__name__)


class Application:

    def __init__(self, config: AudioscopeConfig):
        self.config = config
        self.analysis_service = AnalysisService(config)

    def run(self, input_path: Path, transcribe: bool = True) -> None:
        result = self.analysis_service.analyze(input_path, transcribe=transcribe)

        visualizer = Visualizer(result.buffer, result.spectrogram, result.segments)
        visualizer.run(hold_seconds=float(self.config.get('display.hold_seconds', 5)))


def setup_environment() -> None:
    """One-time process setup: keep native recognition engines quiet."""
    os.environ.setdefault("WHISPER_PRINT_DEBUG", "0")
    os.environ.setdefault("WHISPER_PRINT_PROGRESS", "0")


def setup_logging(config: AudioscopeConfig, level: str = "ERROR") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path')
    console_output = config.get('logging.console_output', True)

    handlers = []

    if log_file_path:
        log_dir = Path(log_file_path).parent
        log_dir.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file_path)
        file_handler.setLevel(logging.DEBUG)
        file_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
        )
        file_handler.setFormatter(file_formatter)
        handlers.append(file_handler)

    # Console logs go to stderr so they do not tear the rich display
    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("audioscope starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")


def window_size_arg(value: str) -> int:
    """argparse type for --window-size."""
    try:
        window_size = int(value)
        validate_window_size(window_size)
    except (ValueError, InvalidWindowSize):
        raise argparse.ArgumentTypeError(f"window size must be a power of two, got '{value}'")
    return window_size


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="audioscope",
        description="audioscope - spectrogram, waveform and transcription of an audio file"
    )

    parser.add_argument(
        "-i", "--input",
        type=Path,
        required=True,
        help="Path to the audio file to analyze"
    )

    parser.add_argument(
        "-w", "--window-size",
        type=window_size_arg,
        help="Window size for FFT, must be a power of 2 (default: 1024)"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: built-in settings)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (default: ERROR)"
    )

    parser.add_argument(
        "--backend",
        choices=BACKENDS,
        help="Speech recognition backend (overrides config)"
    )

    parser.add_argument(
        "--no-transcribe",
        action="store_true",
        help="Skip speech recognition"
    )

    parser.add_argument(
        "--hold",
        type=float,
        help="Seconds to keep the display on screen (overrides config)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"audioscope v{__version__}"
    )
    return parser


def main(argv: Optional[list] = None) -> None:
    """Main entry point for the audioscope command."""
    args = build_parser().parse_args(argv)

    setup_environment()
    try:
        config = AudioscopeConfig(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.window_size is not None:
        config.set('analysis.window_size', args.window_size)
    if args.backend:
        config.set('recognition.backend', args.backend)
    if args.hold is not None:
        config.set('display.hold_seconds', args.hold)
    setup_logging(config, args.log_level or config.get('logging.level', 'ERROR'))

    try:
        app = Application(config)
        app.run(args.input, transcribe=not args.no_transcribe)
    except KeyboardInterrupt:
        print("\nInterrupted")
    except (AudioscopeError, ValueError, FileNotFoundError) as e:
        logging.error(f"Application error: {e}")
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
