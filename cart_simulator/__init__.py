# Cart Simulator

__version__ = "1.0.0"
