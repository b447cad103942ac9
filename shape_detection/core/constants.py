"""Application constants."""

APP_NAME = "shape-detection"
VERSION = "1.0.0"

SHAPE_TYPES = ("circle", "square", "rectangle", "triangle", "pentagon")

# Edge map levels
EDGE_NONE = 0
EDGE_WEAK = 127
EDGE_STRONG = 255
