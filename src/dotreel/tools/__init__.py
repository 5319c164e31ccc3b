"""External tool adapters.

Each adapter exposes one narrow capability so the pipeline can be driven
with fakes in tests:

- graphviz: ``render(source, output)``
- imagemagick: ``composite(inputs, output)``
- viewer: ``present(artifact)``
- upstream: ``run()``
"""

from dotreel.tools.graphviz import GraphvizRenderer
from dotreel.tools.imagemagick import ImageMagickCompositor
from dotreel.tools.viewer import ViewerPresenter
from dotreel.tools.upstream import UpstreamRunner

__all__ = [
    "GraphvizRenderer",
    "ImageMagickCompositor",
    "ViewerPresenter",
    "UpstreamRunner",
]
