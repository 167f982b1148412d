import os
import shutil
import subprocess
import sys
import tempfile
from typing import List, Optional

from utils.exceptions import ClipboardError
from utils.logging import log_message

PNG_MIME_TYPE = "image/png"
CLIPBOARD_TIMEOUT_SECONDS = 10


def _linux_command() -> Optional[List[str]]:
    if os.environ.get("WAYLAND_DISPLAY") and shutil.which("wl-copy"):
        return ["wl-copy", "--type", PNG_MIME_TYPE]
    if shutil.which("xclip"):
        return ["xclip", "-selection", "clipboard", "-t", PNG_MIME_TYPE, "-i"]
    if shutil.which("wl-copy"):
        return ["wl-copy", "--type", PNG_MIME_TYPE]
    return None


def _copy_via_temp_file(png_bytes: bytes, build_command) -> None:
    fd, temp_path = tempfile.mkstemp(suffix=".png")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(png_bytes)
        _run(build_command(temp_path), None)
    finally:
        try:
            os.remove(temp_path)
        except OSError as e_clean:
            log_message(f"Failed to clean up temporary file: {e_clean}", always_print=True)


def _run(command: List[str], stdin_bytes: Optional[bytes]) -> None:
    try:
        result = subprocess.run(
            command,
            input=stdin_bytes,
            capture_output=True,
            timeout=CLIPBOARD_TIMEOUT_SECONDS,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        raise ClipboardError(f"Clipboard command '{command[0]}' failed: {e}") from e

    if result.returncode != 0:
        stderr = result.stderr.decode("utf-8", errors="replace").strip()
        raise ClipboardError(
            f"Clipboard command '{command[0]}' exited with {result.returncode}: {stderr}"
        )


def copy_image_to_clipboard(png_bytes: bytes, verbose: bool = False) -> None:
    """
    Writes PNG bytes to the platform clipboard as an image.

    Uses wl-copy or xclip on Linux, osascript on macOS and PowerShell on
    Windows.

    Raises:
        ClipboardError: If no clipboard tool is available or the write fails
    """
    if not png_bytes:
        raise ClipboardError("Nothing to copy: image is empty.")

    if sys.platform == "darwin":
        _copy_via_temp_file(
            png_bytes,
            lambda path: [
                "osascript",
                "-e",
                f'set the clipboard to (read (POSIX file "{path}") as «class PNGf»)',
            ],
        )
    elif sys.platform == "win32":
        _copy_via_temp_file(
            png_bytes,
            lambda path: [
                "powershell",
                "-NoProfile",
                "-STA",
                "-Command",
                "Add-Type -AssemblyName System.Windows.Forms, System.Drawing; "
                f"[System.Windows.Forms.Clipboard]::SetImage([System.Drawing.Image]::FromFile('{path}'))",
            ],
        )
    else:
        command = _linux_command()
        if command is None:
            raise ClipboardError(
                "No clipboard tool found. Install wl-clipboard or xclip."
            )
        _run(command, png_bytes)

    log_message(f"Copied {len(png_bytes)} bytes to clipboard", verbose=verbose)
