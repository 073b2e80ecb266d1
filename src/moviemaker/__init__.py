"""Movie Maker - media asset editing on top of ffmpeg."""

__version__ = "0.1.0"
