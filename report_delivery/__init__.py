"""
Report Delivery

Output device that delivers rendered reports to remote file servers
over FTP, FTPS, SFTP, SCP and WebDAV.
"""

__version__ = "0.1.0"

from report_delivery.devices import OutputDevice, OutputFileServerDevice
from report_delivery.models.report import ReportContext, ReportOutput

__all__ = [
    "OutputDevice",
    "OutputFileServerDevice",
    "ReportContext",
    "ReportOutput",
]
