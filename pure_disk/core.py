# core.py
from typing import Optional
from pure_disk.utils.logger import RichAppLogger

# The logger wrapper of the current run, set by the CLI before any prompt is shown
app_logger: Optional[RichAppLogger] = None
