"""AssetPack - declarative asset bundling.

This package assembles named output bundles from ordered source files and
previously built outputs, pipes them through external tools such as
minifiers, and publishes them to versioned target paths.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
