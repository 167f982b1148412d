"""
Image processing modules for the bubble generator.

This subpackage contains modules for:
- Elliptical alpha masking
- PNG encoding
"""

from .image_utils import apply_elliptical_mask, elliptical_outside_mask, encode_png

__all__ = [
    "apply_elliptical_mask",
    "elliptical_outside_mask",
    "encode_png",
]
