from .core import Colormap, from_stops, from_listed
from .registry import register, get, available
from .core_palettes import RAMP_SIZE  # triggers core registration on import
from .mapping import build_map, builtin_ramp, color_map
__all__ = ["Colormap", "from_stops", "from_listed", "register", "get", "available", "RAMP_SIZE",
           "build_map", "builtin_ramp", "color_map"]
