"""
Hook points of the file server device.

A device has two hooks: the session hook opens a transfer session for the
device, the processing hook delivers a report. Both are configured as
``"package.module:callable"`` references; an empty reference selects the
built-in default defined here.
"""

import importlib
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Optional, TypeVar

from report_delivery.core.exceptions import ConfigurationError
from report_delivery.models.config import TransferMode, TransferOptions
from report_delivery.models.report import ReportContext
from report_delivery.transfer.base import TransferSession
from report_delivery.transfer.factory import SessionFactory
from report_delivery.utils.helpers import create_zip, get_unique_file_name

if TYPE_CHECKING:
    from report_delivery.devices.file_server import OutputFileServerDevice

logger = logging.getLogger(__name__)

SessionHook = Callable[["OutputFileServerDevice"], TransferSession]
ProcessingHook = Callable[[ReportContext], None]

HookT = TypeVar("HookT", bound=Callable)


def resolve_hook(reference: Optional[str], default: HookT) -> HookT:
    """
    Resolve a hook reference to a callable.

    Args:
        reference: ``"package.module:attribute"``, the attribute may be dotted
        default: Hook returned when the reference is empty

    Returns:
        The referenced callable

    Raises:
        ConfigurationError: If the reference is malformed or cannot be imported
    """
    if not reference or not reference.strip():
        return default

    module_name, separator, attribute = reference.strip().partition(':')
    if not separator or not module_name or not attribute:
        raise ConfigurationError(
            f"Invalid hook reference '{reference}'. Expected 'package.module:function'."
        )

    try:
        target = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"Unable to import hook module '{module_name}': {e}") from e

    for part in attribute.split('.'):
        try:
            target = getattr(target, part)
        except AttributeError as e:
            raise ConfigurationError(
                f"Hook '{attribute}' not found in module '{module_name}'"
            ) from e

    if not callable(target):
        raise ConfigurationError(f"Hook '{reference}' is not callable")

    logger.debug(f"Resolved hook {reference}")
    return target


def default_session_hook(device: "OutputFileServerDevice") -> TransferSession:
    """Open a session with the device's connection settings."""
    device.validate()
    session = SessionFactory.create_session(device.session_options())
    return session.open()


def default_processing_hook(report: ReportContext) -> None:
    """
    Upload the report result to the output folder of the device.

    When the output asks for it, the result is zipped first and
    ``report.result_file_path`` then points at the archive.
    """
    output = report.output
    device = output.device

    result_file_name = report.result_file_name
    if output.zip_result:
        source = Path(report.result_file_path)
        zip_path = get_unique_file_name(source.with_suffix('.zip'))
        create_zip(source, report.result_file_name, zip_path)
        result_file_name = Path(report.result_file_name).stem + '.zip'
        report.result_file_path = zip_path

    options = TransferOptions(transfer_mode=TransferMode.AUTOMATIC, overwrite=True)
    remote_path = output.folder_with_separators + result_file_name

    session = device.open_session()
    try:
        session.put_file(report.result_file_path, remote_path, options)
    finally:
        device.close_session()

    output.information = report.translate("Report result generated in '{0}'", remote_path)
    report.log_message("Report result generated in '{0}'", remote_path)
