"""VPK Toolkit - read Valve VPK directories and extract CS2 econ textures."""

__version__ = "0.1.0"
