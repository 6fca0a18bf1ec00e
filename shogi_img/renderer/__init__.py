"""Rendering subpackage.

Turns a read-only position into an RGBA image. The renderer focuses on:

* A fixed paint order: board, last-move highlight, pieces, hand panels.
* Deterministic layout from :mod:`shogi_img.layout`.
* Lightweight Pillow compositing over assets decoded once per generator.

See :mod:`shogi_img.renderer.generator` for the compositor.
"""

from .generator import Generator, default_generator, pos2img

__all__ = ["Generator", "default_generator", "pos2img"]
