"""Convert comma or semicolon separated text files into JSON arrays."""

__version__ = "0.1.0"
