# python/flipmetric/__init__.py
# Public Python API for the FLIP perceptual image difference metric
# Exists to expose image construction, the metric, color mapping and pooling from one namespace
# RELEVANT FILES: python/flipmetric/metric.py, python/flipmetric/pooling.py, python/flipmetric/colormaps/__init__.py
import logging

from .errors import (
    FlipError,
    InvalidDimensions,
    DimensionMismatch,
    OutOfBounds,
    InvalidParameter,
)
from .image import (
    PixelBuffer,
    ColorImage,
    ScalarImage,
    create_color_image,
    create_scalar_image,
    read_color_image,
    read_scalar_image,
)
from .config import FlipParameters, MetricConfig, load_metric_config
from .metric import DEFAULT_PIXELS_PER_DEGREE, pixels_per_degree, compute_error_map
from .histogram import Histogram
from .pooling import Pool
from .report import FlipSummary, summarize, evaluate, plot_histogram

# Colormaps public surface
from .colormaps import (
    Colormap,
    get as get_colormap,
    available as available_colormaps,
    build_map,
    builtin_ramp,
    color_map,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "FlipError",
    "InvalidDimensions",
    "DimensionMismatch",
    "OutOfBounds",
    "InvalidParameter",
    "PixelBuffer",
    "ColorImage",
    "ScalarImage",
    "create_color_image",
    "create_scalar_image",
    "read_color_image",
    "read_scalar_image",
    "FlipParameters",
    "MetricConfig",
    "load_metric_config",
    "DEFAULT_PIXELS_PER_DEGREE",
    "pixels_per_degree",
    "compute_error_map",
    "Histogram",
    "Pool",
    "FlipSummary",
    "summarize",
    "evaluate",
    "plot_histogram",
    "Colormap",
    "get_colormap",
    "available_colormaps",
    "build_map",
    "builtin_ramp",
    "color_map",
]
