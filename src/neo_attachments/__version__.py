"""Version information for neo-attachments."""

__version__ = "0.1.0"
