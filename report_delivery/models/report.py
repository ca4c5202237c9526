"""
Report context handed to output devices.

The report execution engine renders the report to a local file and then
calls the device's process() with a ReportContext describing that file and
the output it targets.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class ReportOutput:
    """The output being executed: target device, remote folder and options."""
    device: Any
    folder: str = "/"
    zip_result: bool = False
    information: str = ""
    error: str = ""

    @property
    def folder_with_separators(self) -> str:
        """Remote folder with leading and trailing separators."""
        folder = (self.folder or "").strip().replace('\\', '/').strip('/')
        if not folder:
            return "/"
        return f"/{folder}/"


@dataclass
class ReportContext:
    """A rendered report ready to be delivered."""
    result_file_path: str
    output: ReportOutput
    result_file_name: Optional[str] = None
    translator: Optional[Callable[[str], str]] = None
    messages: List[str] = field(default_factory=list)

    def __post_init__(self):
        if not self.result_file_name:
            self.result_file_name = os.path.basename(self.result_file_path)

    def translate(self, text: str, *args: Any) -> str:
        """Translate a message template and format it with the arguments."""
        template = self.translator(text) if self.translator else text
        return template.format(*args)

    def log_message(self, text: str, *args: Any) -> str:
        """Record an execution message for the report."""
        message = text.format(*args)
        self.messages.append(message)
        logger.info(message)
        return message
