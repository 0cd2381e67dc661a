from .ffmpeg import build_gif as ffmpeg_build_gif
from .gifsicle import optimize_gif as gifsicle_optimize_gif
from .pillow import build_gif as pillow_build_gif

__all__ = [
    # FFmpeg
    "ffmpeg_build_gif",
    # gifsicle
    "gifsicle_optimize_gif",
    # Pillow (in-process)
    "pillow_build_gif",
]
