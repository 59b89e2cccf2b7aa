"""Leaf-node geometry helpers. No engine imports."""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import NDArray
from skimage.draw import polygon as draw_polygon


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (screen-raster convention)."""
    return int(math.floor(value + 0.5))


def rotate(x: float, y: float, degrees: float) -> tuple[float, float]:
    """Rotate (x, y) about the origin. Positive = clockwise on a y-down screen."""
    rad = math.radians(degrees)
    c, s = math.cos(rad), math.sin(rad)
    return (x * c - y * s, x * s + y * c)


def inverse_affine(
    tx: float,
    ty: float,
    rotation: float,
    scale_x: float,
    scale_y: float,
) -> tuple[float, float, float, float, float, float]:
    """Output→source coefficients for `out = t + R(rotation) · S · src`.

    Returned in the (a, b, c, d, e, f) order Pillow's AFFINE transform
    expects: src_x = a·x + b·y + c, src_y = d·x + e·y + f.
    """
    rad = math.radians(rotation)
    c, s = math.cos(rad), math.sin(rad)
    return (
        c / scale_x,
        s / scale_x,
        -(c * tx + s * ty) / scale_x,
        -s / scale_y,
        c / scale_y,
        (s * tx - c * ty) / scale_y,
    )


def extract_polygons(geom) -> list:
    """Extract all Polygon objects from any Shapely geometry."""
    polys = []
    if geom.is_empty:
        return polys
    if geom.geom_type == "Polygon":
        polys = [geom]
    elif geom.geom_type == "MultiPolygon":
        polys = list(geom.geoms)
    elif geom.geom_type == "GeometryCollection":
        for g in geom.geoms:
            polys.extend(extract_polygons(g))
    return polys


def rasterize_geometry(geom, height: int, width: int) -> NDArray[np.bool_]:
    """Boolean coverage of a Shapely geometry, sampled at pixel centers."""
    mask = np.zeros((height, width), dtype=bool)
    for poly in extract_polygons(geom):
        part = np.zeros_like(mask)
        ext = np.asarray(poly.exterior.coords)
        rr, cc = draw_polygon(ext[:, 1] - 0.5, ext[:, 0] - 0.5, shape=mask.shape)
        part[rr, cc] = True
        for ring in poly.interiors:
            hole = np.asarray(ring.coords)
            rr, cc = draw_polygon(hole[:, 1] - 0.5, hole[:, 0] - 0.5, shape=mask.shape)
            part[rr, cc] = False
        mask |= part
    return mask

