"""LiftLog - workout tracking with double-progression weight suggestions."""

import importlib.metadata

try:
    __version__ = importlib.metadata.version("liftlog")
except importlib.metadata.PackageNotFoundError:
    __version__ = "unknown"
