"""Video Transcode Planner - plan and supervise multi-output ffmpeg jobs."""

__version__ = "0.1.0"
