import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from PIL import Image

from core.config import BubbleConfig
from core.image.image_utils import encode_png
from core.rendering import render_bubble
from core.text.drawing_engine import BubbleFont
from core.text.layout_engine import LayoutPlan, compute_layout
from core.text.text_processing import normalize_text
from utils.logging import log_message

GeneratedCallback = Callable[[int, bytes], None]


class BubbleResults:
    """Thread-safe map from paragraph index to its PNG bytes.

    Each completion writes its own index; a later write for the same index
    replaces the earlier one. Indices that never resolved stay absent.
    """

    def __init__(self, count: int = 0):
        self._lock = threading.Lock()
        self._count = count
        self._images: Dict[int, bytes] = {}

    def set(self, index: int, png_bytes: bytes) -> None:
        with self._lock:
            self._images[index] = png_bytes
            self._count = max(self._count, index + 1)

    def get(self, index: int) -> Optional[bytes]:
        with self._lock:
            return self._images.get(index)

    def items(self) -> List[Tuple[int, bytes]]:
        with self._lock:
            return sorted(self._images.items())

    def missing(self) -> List[int]:
        with self._lock:
            return [i for i in range(self._count) if i not in self._images]

    def __len__(self) -> int:
        with self._lock:
            return len(self._images)

    def __iter__(self) -> Iterator[Tuple[int, bytes]]:
        return iter(self.items())

    def __contains__(self, index: int) -> bool:
        with self._lock:
            return index in self._images


def prepare_layout(text: str, config: Optional[BubbleConfig] = None) -> LayoutPlan:
    """Normalizes a paragraph and computes its layout plan."""
    config = config or BubbleConfig()
    normalized = normalize_text(text)
    log_message(f"Normalized text: {normalized!r}", verbose=config.verbose)
    return compute_layout(normalized, config.layout)


def render_paragraph(
    text: str,
    config: Optional[BubbleConfig] = None,
    export_quality: bool = True,
    bubble_font: Optional[BubbleFont] = None,
) -> Image.Image:
    """Runs normalize, layout and render for one paragraph."""
    config = config or BubbleConfig()
    plan = prepare_layout(text, config)
    return render_bubble(
        plan,
        export_quality=export_quality,
        config=config.rendering,
        bubble_font=bubble_font,
        verbose=config.verbose,
    )


def generate_bubble(
    text: str,
    index: int = 0,
    config: Optional[BubbleConfig] = None,
    on_generated: Optional[GeneratedCallback] = None,
    export_quality: bool = True,
    bubble_font: Optional[BubbleFont] = None,
) -> bytes:
    """
    Produces the PNG bytes for one paragraph.

    When ``export_quality`` is set the bubble is masked to its ellipse and
    ``on_generated(index, png_bytes)`` is called before returning.

    Args:
        text (str): Paragraph text (raw, not yet normalized)
        index (int): Paragraph position, passed back to the callback
        config (BubbleConfig): Pipeline configuration
        on_generated (callable): Receives (index, png_bytes) for export renders
        export_quality (bool): Whether to apply the elliptical mask
        bubble_font (BubbleFont): Preloaded font shared across paragraphs

    Returns:
        bytes: PNG-encoded bubble image

    Raises:
        FontError, RenderingError, EncodingError: Surfaced to the caller
    """
    config = config or BubbleConfig()
    image = render_paragraph(
        text, config, export_quality=export_quality and config.output.apply_mask,
        bubble_font=bubble_font,
    )
    png_bytes = encode_png(
        image, png_compression=config.output.png_compression, verbose=config.verbose
    )

    if export_quality and on_generated is not None:
        on_generated(index, png_bytes)
    return png_bytes


def generate_bubbles(
    paragraphs: Sequence[str],
    config: Optional[BubbleConfig] = None,
    on_generated: Optional[GeneratedCallback] = None,
    max_workers: int = 1,
    progress_callback: Optional[Callable[[float, str], None]] = None,
) -> BubbleResults:
    """
    Generates one bubble per paragraph and collects them by index.

    A paragraph that fails, including one whose ``on_generated`` listener
    raises, is logged and left out of the results; the other paragraphs are
    unaffected. Nothing is retried.

    Args:
        paragraphs (Sequence[str]): Trimmed paragraphs in display order
        config (BubbleConfig): Pipeline configuration
        on_generated (callable): Optional extra listener for (index, png_bytes)
        max_workers (int): Number of paragraphs rendered in parallel
        progress_callback (callable): Optional (fraction, description) reporter

    Returns:
        BubbleResults: Index-keyed PNG bytes for every paragraph that resolved

    Raises:
        Exception: Whatever ``progress_callback`` raises, from any worker
    """
    config = config or BubbleConfig()
    results = BubbleResults(count=len(paragraphs))
    total = len(paragraphs)
    completed = 0
    completed_lock = threading.Lock()
    start_time = time.time()

    def _on_generated(index: int, png_bytes: bytes) -> None:
        # Recorded only after every listener has accepted the bubble
        if on_generated is not None:
            on_generated(index, png_bytes)
        results.set(index, png_bytes)

    def _run(index: int, text: str) -> None:
        nonlocal completed
        try:
            generate_bubble(text, index, config, on_generated=_on_generated)
        except Exception as e:
            log_message(
                f"Bubble {index + 1} failed, skipping: {e}", always_print=True
            )
        finally:
            with completed_lock:
                completed += 1
                done = completed
            if progress_callback is not None:
                progress_callback(done / total, f"Rendered {done}/{total} bubbles")

    if max_workers > 1 and total > 1:
        with ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="bubble_render"
        ) as executor:
            futures = [
                executor.submit(_run, index, text)
                for index, text in enumerate(paragraphs)
            ]
            for future in futures:
                future.result()
    else:
        for index, text in enumerate(paragraphs):
            _run(index, text)

    log_message(
        f"Generated {len(results)}/{total} bubbles in {time.time() - start_time:.2f}s",
        verbose=config.verbose,
    )
    return results
