"""Enumeration type definitions"""

from enum import Enum


class Renderer(str, Enum):
    """Serialization targets"""

    LARAVILT = "laravilt"
    INERTIA = "inertia"
    FLUTTER = "flutter"


class OptionSourceType(str, Enum):
    STATIC = "static"
    RELATIONSHIP = "relationship"
    COMPUTED = "computed"
