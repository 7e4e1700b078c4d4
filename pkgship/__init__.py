"""pkgship - interactive release packaging and publication for Poetry projects."""

__version__ = "0.1.0"
