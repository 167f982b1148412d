import argparse
import sys
import time
from pathlib import Path

from core.archive import archive_entry_name, write_archive
from core.config import BubbleConfig, LayoutConfig, OutputConfig, RenderingConfig
from core.pipeline import generate_bubbles
from core.text.text_processing import split_paragraphs
from core.validation import validate_config
from utils.exceptions import ValidationError
from utils.logging import log_message


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Render Japanese text as vertical manga speech-bubble images"
    )
    parser.add_argument(
        "--input",
        type=str,
        required=True,
        help="Path to a UTF-8 text file, or '-' for stdin. Blank lines separate bubbles.",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Path of the zip archive to write (default: ./output/<timestamp>/bubbles.zip)",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Also write each bubble as a separate PNG into this directory",
    )
    # --- Font Arguments ---
    parser.add_argument(
        "--font",
        dest="font_path",
        type=str,
        default=None,
        help="Font file (.ttf, .otf, .ttc) for bubble text",
    )
    parser.add_argument(
        "--font-dir",
        type=str,
        default=None,
        help="Directory to pick a font file from (bold variants preferred)",
    )
    parser.add_argument(
        "--font-size", type=float, default=24.0, help="Font size in logical pixels"
    )
    # --- Layout Arguments ---
    parser.add_argument(
        "--char-height", type=int, default=28, help="Vertical cell size per character"
    )
    parser.add_argument(
        "--line-spacing", type=int, default=34, help="Horizontal distance between columns"
    )
    parser.add_argument(
        "--safety-margin",
        type=float,
        default=1.3,
        help="Multiplier keeping glyphs clear of the curved bubble edge",
    )
    # --- Output Arguments ---
    parser.add_argument(
        "--scale", type=int, default=4, help="Supersampling factor of the output image"
    )
    parser.add_argument(
        "--png-compression",
        type=int,
        default=6,
        help="PNG compression level (0-9, higher is more compression)",
    )
    parser.add_argument(
        "--no-mask",
        dest="apply_mask",
        action="store_false",
        help="Keep the rectangular corners instead of clipping to the ellipse",
    )
    parser.set_defaults(apply_mask=True)
    parser.add_argument(
        "--workers", type=int, default=1, help="Number of bubbles rendered in parallel"
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Print detailed logs"
    )
    return parser


def read_document(input_arg: str) -> str:
    if input_arg == "-":
        return sys.stdin.read()
    input_path = Path(input_arg)
    if not input_path.is_file():
        raise FileNotFoundError(f"Input '{input_arg}' is not a valid file.")
    return input_path.read_text(encoding="utf-8")


def main():
    args = build_parser().parse_args()

    config = BubbleConfig(
        layout=LayoutConfig(
            char_height=args.char_height,
            line_spacing=args.line_spacing,
            safety_margin=args.safety_margin,
        ),
        rendering=RenderingConfig(
            font_path=args.font_path,
            font_dir=args.font_dir,
            font_size=args.font_size,
            scale_factor=args.scale,
        ),
        output=OutputConfig(
            png_compression=args.png_compression,
            apply_mask=args.apply_mask,
        ),
        verbose=args.verbose,
    )

    try:
        validate_config(config)
        document = read_document(args.input)
    except (FileNotFoundError, ValidationError) as e:
        log_message(f"Error: {e}", always_print=True)
        sys.exit(1)

    paragraphs = split_paragraphs(document)
    if not paragraphs:
        log_message("Error: input contains no text.", always_print=True)
        sys.exit(1)

    if args.output:
        archive_path = Path(args.output)
    else:
        timestamp = time.strftime("%Y%m%d_%H%M%S")
        archive_path = Path("./output") / timestamp / config.output.archive_name
        log_message(
            f"--output not specified, using default: {archive_path}", always_print=True
        )

    output_dir = Path(args.output_dir) if args.output_dir else None
    if output_dir is not None:
        if output_dir.exists() and not output_dir.is_dir():
            log_message(
                f"Error: Specified --output-dir '{output_dir}' is not a directory.",
                always_print=True,
            )
            sys.exit(1)
        output_dir.mkdir(parents=True, exist_ok=True)

    def _write_png(index: int, png_bytes: bytes) -> None:
        if output_dir is None:
            return
        png_path = output_dir / archive_entry_name(index, config.output.entry_template)
        png_path.write_bytes(png_bytes)
        log_message(f"Saved {png_path}", verbose=config.verbose)

    log_message(f"Rendering {len(paragraphs)} bubbles...", always_print=True)
    results = generate_bubbles(
        paragraphs, config, on_generated=_write_png, max_workers=max(1, args.workers)
    )

    if not len(results):
        log_message("Error: no bubbles could be rendered.", always_print=True)
        sys.exit(1)

    write_archive(
        results,
        archive_path,
        entry_template=config.output.entry_template,
        verbose=config.verbose,
    )
    missing = results.missing()
    if missing:
        log_message(
            f"Warning: skipped bubbles {', '.join(str(i + 1) for i in missing)}",
            always_print=True,
        )
    log_message(
        f"Done. {len(results)}/{len(paragraphs)} bubbles saved to {archive_path}",
        always_print=True,
    )


if __name__ == "__main__":
    main()
