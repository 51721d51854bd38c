"""Release lookup, image resolution, component files, binary installation and build information for a self-hosted Dapr runtime."""

__version__ = "0.1.0"