import sys
from typing import Optional, TextIO


class ProgressReporter:
    """Prints one plain progress line per call."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream

    def write_progress(
        self,
        activity: str,
        status: str,
        current_operation: str,
        percent: int
    ) -> None:
        """Display a progress line such as 'Fetching zones - Zone 2 of 4: example.com (50%)'."""
        stream = self.stream or sys.stdout
        print(f"{activity} - {status}: {current_operation} ({percent}%)", file=stream)
