"""
Composite module for frame rendering.

This subpackage rasterizes a composition into pixels. It paints the
background, the zoomed screenshot and the frame border with NumPy and
applies the effect filter to the flattened surface.

Key modules:

- :py:mod:`screenframe.composite.composite`: Main compositing functions
- :py:mod:`screenframe.composite.paint`: Layer painting (background cover
  fit, screenshot placement, bezel)
- :py:mod:`screenframe.composite.filters`: CSS filter parsing and rendering

Example usage::

    from screenframe.composite import composite_pil

    image = composite_pil(state)
    image.save('frame.png')
"""

from screenframe.composite.composite import composite, composite_pil, render_preview

__all__ = [
    "composite",
    "composite_pil",
    "render_preview",
]
