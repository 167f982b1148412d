import argparse
import os
import sys
from pathlib import Path

import gradio as gr

import core
from ui import layout


def custom_except_hook(exc_type, exc_value, exc_traceback):
    if issubclass(exc_type, gr.Error):
        print(f"Gradio-handled Error: {exc_value}")
    else:
        import traceback

        print("--- Uncaught Exception ---")
        traceback.print_exception(exc_type, exc_value, exc_traceback)
        print("--------------------------")


sys.excepthook = custom_except_hook

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Manga Bubble Generator")
    parser.add_argument(
        "--fonts",
        type=str,
        default="./fonts",
        help="Base directory containing font pack subdirectories",
    )
    parser.add_argument(
        "--open-browser",
        action="store_true",
        help="Automatically open in the default web browser",
    )
    parser.add_argument(
        "--port", type=int, default=7676, help="Port number for the web UI"
    )
    args = parser.parse_args()

    FONTS_BASE_DIR = Path(args.fonts)
    os.makedirs(FONTS_BASE_DIR, exist_ok=True)

    print(f"Manga Bubble Generator version: {core.__version__}")

    app = layout.create_layout(fonts_base_dir=FONTS_BASE_DIR)

    app.queue()
    app.launch(inbrowser=args.open_browser, server_port=args.port, show_error=True)
