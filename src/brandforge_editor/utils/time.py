"""Time formatting and parsing utilities."""

import math


class TimeUtils:
    """Utility class for time calculations."""

    @staticmethod
    def format_timecode(seconds: float) -> str:
        """
        Format seconds for timeline display.

        Args:
            seconds: Time in seconds

        Returns:
            Time string in format "MM:SS"
        """
        if seconds < 0 or math.isnan(seconds):
            seconds = 0

        minutes = int(seconds // 60)
        secs = int(seconds % 60)
        return f"{minutes:02d}:{secs:02d}"

    @staticmethod
    def parse_ffmpeg_time(time_str: str) -> float | None:
        """
        Parse an FFmpeg progress time.

        Args:
            time_str: Time string in format "HH:MM:SS.micro"

        Returns:
            Time in seconds, None when FFmpeg reports no value ("N/A")
        """
        parts = time_str.strip().split(":")
        if len(parts) != 3:
            return None

        try:
            hours = int(parts[0])
            minutes = int(parts[1])
            seconds = float(parts[2])
        except ValueError:
            return None

        return max(0.0, hours * 3600 + minutes * 60 + seconds)

    @staticmethod
    def format_filter_seconds(seconds: float) -> str:
        """Format seconds for an FFmpeg filter argument (millisecond precision)."""
        return f"{seconds:.3f}"
