"""
Contour lines from a scalar raster via a min/max mipmap quadtree.

Re-exports the public API so `from contours import ContourMipmap` works.
"""
from contours.helpers import GeoTransform, georeference, replace_nodata
from contours.mipmap import ContourMipmap
from contours.pyramid import MipmapLevel, MipmapPyramid
from contours.quadtree import QuadtreeContourWalker, QuadtreeVisitor
from contours.smoothing import smooth_line
from contours.stitching import SegmentStitcher, stitch_segments

__all__ = [
    'ContourMipmap',
    'GeoTransform',
    'MipmapLevel',
    'MipmapPyramid',
    'QuadtreeContourWalker',
    'QuadtreeVisitor',
    'SegmentStitcher',
    'georeference',
    'replace_nodata',
    'smooth_line',
    'stitch_segments',
]
