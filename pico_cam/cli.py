"""Command-line interface for pico_cam.

Supports the interactive live preview and headless/JSON modes for scripting.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from pico_cam.core.frame import ChannelOrder


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--scale",
        type=int,
        default=1,
        help="Nearest-neighbour upscale factor for saved output (default: 1).",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output structured JSON (pipe-friendly).",
    )
    parser.add_argument(
        "--print",
        dest="print_frame",
        action="store_true",
        help="Also print the (first) dithered frame to stdout as text.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Show stack traces on error (with --json).",
    )


def _parse_size(value: str) -> tuple[int, int]:
    try:
        w, h = value.lower().split("x")
        return int(w), int(h)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"Expected WIDTHxHEIGHT, got {value!r}"
        ) from None


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pico-cam",
        description="Retro 160x120 black/white dithered camera.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # --- live subcommand ---
    live = subparsers.add_parser(
        "live",
        help="Live dithered preview from a camera or media file.",
    )
    live.add_argument("input", nargs="?", help="Optional media file to preview.")
    live.add_argument(
        "--camera",
        type=int,
        default=None,
        help="Camera device index (default: $PICO_CAM_CAMERA or 0).",
    )
    live.add_argument(
        "--save-dir",
        default=None,
        help="Directory for snapshots (default: $PICO_CAM_SAVE_DIR or cwd).",
    )
    live.add_argument(
        "--scale",
        type=int,
        default=1,
        help="Nearest-neighbour upscale factor for snapshots (default: 1).",
    )
    live.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging (shown in the textual console).",
    )

    # --- convert subcommand ---
    convert = subparsers.add_parser(
        "convert",
        help="Dither an image, GIF, video or raw frame dump.",
    )
    convert.add_argument("input", help="Input file path.")
    convert.add_argument(
        "-o", "--output",
        help="Output file path. Defaults to <input>_pico.<ext> (.png for stills).",
    )
    convert.add_argument(
        "--raw-size",
        type=_parse_size,
        default=None,
        metavar="WxH",
        help="Treat input as a raw packed 4-channel frame of this size.",
    )
    convert.add_argument(
        "--stride",
        type=int,
        default=None,
        help="Bytes per row for --raw-size input (default: width * 4).",
    )
    convert.add_argument(
        "--channel-order",
        choices=[c.value for c in ChannelOrder],
        default=ChannelOrder.BGRA.value,
        help="Channel order of --raw-size input (default: bgra).",
    )
    _add_common(convert)

    # --- snap subcommand ---
    snap = subparsers.add_parser(
        "snap",
        help="Capture a single camera frame and save it.",
    )
    snap.add_argument(
        "-o", "--output",
        help="Output file path. Defaults to a timestamped PNG in the save dir.",
    )
    snap.add_argument(
        "--camera",
        type=int,
        default=None,
        help="Camera device index (default: $PICO_CAM_CAMERA or 0).",
    )
    snap.add_argument(
        "--save-dir",
        default=None,
        help="Directory for snapshots (default: $PICO_CAM_SAVE_DIR or cwd).",
    )
    _add_common(snap)

    return parser


def _configure_logging(verbose: bool, tui: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    if tui:
        from textual.logging import TextualHandler

        logging.basicConfig(level=level, handlers=[TextualHandler()])
    else:
        logging.basicConfig(
            level=level,
            stream=sys.stderr,
            format="%(levelname)s %(name)s: %(message)s",
        )


def _auto_output_path(input_path: Path, fmt: str) -> Path:
    """Generate default output path from input.

    GIFs stay GIFs, videos keep their container when it can be written
    (otherwise .mp4), and everything else becomes a PNG.
    """
    from pico_cam.core.writer import VIDEO_OUTPUT_SUFFIXES

    if fmt == "gif":
        suffix = ".gif"
    elif fmt == "video":
        suffix = input_path.suffix.lower()
        if suffix not in VIDEO_OUTPUT_SUFFIXES:
            suffix = ".mp4"
    else:
        suffix = ".png"
    return input_path.parent / f"{input_path.stem}_pico{suffix}"


def _json_error(message: str, code: str) -> None:
    """Print JSON error to stderr and exit with code 1."""
    err = {"status": "error", "error": message, "code": code}
    print(json.dumps(err), file=sys.stderr)
    sys.exit(1)


def _fail(args: argparse.Namespace, message: str, code: str) -> None:
    if args.json:
        if args.debug:
            import traceback
            traceback.print_exc(file=sys.stderr)
        _json_error(message, code)
    print(f"Error: {message}", file=sys.stderr)
    sys.exit(1)


def _settings_from_args(args: argparse.Namespace):
    from pico_cam.core.settings import Settings

    return Settings().with_overrides(
        camera_index=getattr(args, "camera", None),
        save_dir=Path(args.save_dir) if getattr(args, "save_dir", None) else None,
        scale=args.scale,
    )


def _print_bitmap(bitmap) -> None:
    from pico_cam.core.render import blocks_from_bitmap

    print("\n".join(blocks_from_bitmap(bitmap)))


def _run_convert_raw(args: argparse.Namespace) -> None:
    """Dither a raw packed frame dump into a single image."""
    from pico_cam.core.errors import PipelineError
    from pico_cam.core.pipeline import process_frame
    from pico_cam.core.writer import save_bitmap

    input_path = Path(args.input).resolve()
    if not input_path.exists():
        _fail(args, f"File not found: {input_path}", "FILE_NOT_FOUND")
    width, height = args.raw_size
    stride = args.stride if args.stride is not None else width * 4
    output_path = (
        Path(args.output).resolve()
        if args.output
        else input_path.parent / f"{input_path.stem}_pico.png"
    )

    try:
        bitmap = process_frame(
            input_path.read_bytes(),
            width,
            height,
            stride,
            ChannelOrder(args.channel_order),
        )
        save_bitmap(bitmap, output_path, scale=args.scale)
    except PipelineError as e:
        _fail(args, str(e), "INVALID_INPUT")
    except (OSError, ValueError) as e:
        _fail(args, str(e), "PROCESSING_ERROR")

    if args.print_frame:
        _print_bitmap(bitmap)
    _report(args, str(input_path), output_path, {
        "input_frames": 1,
        "output_frames": 1,
        "input_format": "raw",
        "channel_order": args.channel_order,
    })


def _report(args: argparse.Namespace, input_display: str, output_path: Path, metadata: dict) -> None:
    if not args.json:
        print(f"Saved to {output_path}", file=sys.stderr)
        return
    result = {
        "status": "success",
        "input": input_display,
        "output": str(output_path),
        "settings": {"scale": args.scale},
        "metadata": {
            "width": 160,
            "height": 120,
            "output_format": output_path.suffix.lstrip("."),
            **metadata,
        },
    }
    print(json.dumps(result, indent=2))


def _run_convert(args: argparse.Namespace) -> None:
    """Run the headless convert pipeline."""
    from pico_cam.core.errors import PipelineError
    from pico_cam.core.pipeline import process_media_frame
    from pico_cam.core.reader import open_media
    from pico_cam.core.writer import save_output

    if args.raw_size is not None:
        _run_convert_raw(args)
        return

    input_path = Path(args.input).resolve()
    if not input_path.exists():
        _fail(args, f"File not found: {input_path}", "FILE_NOT_FOUND")

    try:
        reader = open_media(input_path)
    except (ValueError, OSError) as e:
        _fail(args, str(e), "INVALID_INPUT")

    info = reader.info
    output_path = (
        Path(args.output).resolve()
        if args.output
        else _auto_output_path(input_path, info.format)
    )

    frame_count = 0
    first_bitmap = None

    def processed_frames():
        nonlocal frame_count, first_bitmap
        for raw_frame in reader.frames():
            processed = process_media_frame(raw_frame)
            if first_bitmap is None:
                first_bitmap = processed.bitmap
            # Counted before yielding: still outputs stop after one frame.
            frame_count += 1
            yield processed

    def on_progress(current: int, total: int) -> None:
        if not args.json:
            print(f"\rProcessing frame {current}/{total}...", end="", file=sys.stderr)

    try:
        save_output(
            processed_frames(),
            output_path,
            fps=info.fps,
            scale=args.scale,
            on_progress=on_progress,
            total_frames=info.frame_count,
        )
    except PipelineError as e:
        _fail(args, str(e), "INVALID_INPUT")
    except (OSError, ValueError) as e:
        _fail(args, str(e), "PROCESSING_ERROR")

    if not args.json:
        print(file=sys.stderr)
    if args.print_frame and first_bitmap is not None:
        _print_bitmap(first_bitmap)
    _report(args, str(input_path), output_path, {
        "input_frames": info.frame_count,
        "output_frames": frame_count,
        "fps": info.fps,
        "input_format": info.format,
    })


def _run_snap(args: argparse.Namespace) -> None:
    """Capture one frame from the camera and save it."""
    from pico_cam.core.camera import CameraSource, capture_single
    from pico_cam.core.writer import save_bitmap, snapshot_path

    try:
        settings = _settings_from_args(args)
    except ValueError as e:
        _fail(args, str(e), "INVALID_INPUT")

    output_path = (
        Path(args.output).resolve()
        if args.output
        else snapshot_path(settings.save_dir).resolve()
    )

    try:
        with CameraSource(settings.camera_index) as camera:
            bitmap = capture_single(camera)
    except OSError as e:
        _fail(args, str(e), "CAMERA_ERROR")

    try:
        save_bitmap(bitmap, output_path, scale=settings.scale)
    except (OSError, ValueError) as e:
        _fail(args, str(e), "PROCESSING_ERROR")

    if args.print_frame:
        _print_bitmap(bitmap)
    _report(args, f"camera:{settings.camera_index}", output_path, {
        "input_frames": 1,
        "output_frames": 1,
        "input_format": "camera",
    })


def _run_live(args: argparse.Namespace) -> None:
    from pico_cam.app import run_app

    try:
        settings = _settings_from_args(args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    if args.input and not Path(args.input).exists():
        print(f"Error: File not found: {args.input}", file=sys.stderr)
        sys.exit(1)
    run_app(settings=settings, input_path=args.input)


def main(argv: list[str] | None = None) -> None:
    """Main entry point.

    Routing:
      pico-cam convert <file> [opts]  → headless conversion
      pico-cam snap [opts]            → headless single capture
      pico-cam live [file] [opts]     → TUI
      pico-cam <file>                 → TUI previewing the file
      pico-cam                        → TUI on the default camera
    """
    raw_args = sys.argv[1:] if argv is None else argv
    # A bare file path would otherwise be consumed as a subcommand name.
    if raw_args and not raw_args[0].startswith("-") and raw_args[0] not in (
        "live", "convert", "snap",
    ):
        raw_args = ["live", *raw_args]
    elif not raw_args:
        raw_args = ["live"]

    parser = _build_parser()
    args = parser.parse_args(raw_args)
    if args.command is None:
        parser.print_help()
        return

    _configure_logging(args.verbose, tui=args.command == "live")
    if args.command == "convert":
        _run_convert(args)
    elif args.command == "snap":
        _run_snap(args)
    else:
        _run_live(args)
