"""
Base class for output devices.

An output device receives a rendered report and delivers it somewhere.
Devices are Pydantic models persisted as XML files, one file per device.
Saving is guarded against concurrent edits: the device remembers the
state of its backing file when it last read or wrote it and refuses to
overwrite a file that changed since.
"""

import logging
import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, ClassVar, Dict, Optional, Type, TypeVar, Union

from pydantic import BaseModel, Field, PrivateAttr

from report_delivery.core.exceptions import (
    ConfigurationError,
    DeviceLoadError,
    FileConflictError,
)
from report_delivery.utils.helpers import calculate_file_checksum

logger = logging.getLogger(__name__)

DeviceT = TypeVar("DeviceT", bound="OutputDevice")


class OutputDevice(BaseModel, ABC):
    """
    A pluggable destination for rendered reports.

    Fields marked ``exclude=True`` hold runtime state and are never written
    to the device file.
    """

    XML_ROOT: ClassVar[str] = "OutputDevice"
    DEVICE_LABEL: ClassVar[str] = "Device"

    guid: str
    name: str

    error: str = Field("", exclude=True)
    information: str = Field("", exclude=True)
    file_path: Optional[str] = Field(None, exclude=True)
    last_modification: Optional[int] = Field(None, exclude=True)

    _content_digest: Optional[str] = PrivateAttr(None)

    @property
    def full_name(self) -> str:
        return f"{self.name} ({self.DEVICE_LABEL})"

    @abstractmethod
    def process(self, report: Any) -> None:
        """Deliver a rendered report."""

    @abstractmethod
    def validate(self) -> None:
        """Raise ValidationError if the device is not usable."""

    # Persistence

    def to_xml(self) -> ET.Element:
        """Serialize the persisted fields to an XML element."""
        root = ET.Element(self.XML_ROOT)
        for key, value in self.model_dump(mode='json').items():
            child = ET.SubElement(root, key)
            if value is None:
                child.text = ""
            elif isinstance(value, bool):
                child.text = "true" if value else "false"
            else:
                child.text = str(value)
        return root

    @classmethod
    def from_xml(cls: Type[DeviceT], root: ET.Element) -> DeviceT:
        """Build a device from an XML element written by to_xml()."""
        if root.tag != cls.XML_ROOT:
            raise ValueError(f"Unexpected root element '{root.tag}', expected '{cls.XML_ROOT}'")

        data: Dict[str, Any] = {}
        for child in root:
            field_info = cls.model_fields.get(child.tag)
            if field_info is None or field_info.exclude:
                logger.debug(f"Ignoring unknown element '{child.tag}'")
                continue
            data[child.tag] = child.text or ""
        return cls.model_validate(data)

    @classmethod
    def load_from_file(
        cls: Type[DeviceT],
        path: Union[str, Path],
        ignore_exceptions: bool = False
    ) -> Optional[DeviceT]:
        """
        Load a device from its XML file.

        The device name is taken from the file's base name.

        Args:
            path: Device file
            ignore_exceptions: Return None instead of raising on failure

        Returns:
            The device, or None when loading failed and errors are ignored

        Raises:
            DeviceLoadError: If the file cannot be read or parsed
        """
        path = Path(path)
        try:
            device = cls.from_xml(ET.parse(path).getroot())
            device.name = path.stem
            device.file_path = str(path)
            device._remember_file_state(path)
        except Exception as e:
            if not ignore_exceptions:
                raise DeviceLoadError(
                    f"Unable to read the file '{path}'.\n{e}",
                    path=str(path)
                ) from e
            logger.warning(f"Ignoring unreadable device file {path}: {e}")
            return None

        logger.debug(f"Loaded {cls.__name__} '{device.name}' from {path}")
        return device

    def save_to_file(self, path: Optional[Union[str, Path]] = None) -> None:
        """
        Save the device to an XML file.

        Args:
            path: Target file, defaults to the file the device was loaded from

        Raises:
            FileConflictError: If the file changed since it was last loaded or saved
            ConfigurationError: If no path is given and the device has no file
        """
        target = path or self.file_path
        if not target:
            raise ConfigurationError("No file path given to save the device")
        target = Path(target)

        if self.last_modification is not None and target.exists() and self._file_changed(target):
            raise FileConflictError(
                "Unable to save the Output Device file. "
                "The file has been modified by another user.",
                path=str(target)
            )

        self.name = target.stem
        tree = ET.ElementTree(self.to_xml())
        ET.indent(tree)
        target.parent.mkdir(parents=True, exist_ok=True)
        tree.write(target, encoding='utf-8', xml_declaration=True)

        self.file_path = str(target)
        self._remember_file_state(target)
        logger.info(f"Saved {self.__class__.__name__} '{self.name}' to {target}")

    def _remember_file_state(self, path: Path) -> None:
        self.last_modification = path.stat().st_mtime_ns
        self._content_digest = calculate_file_checksum(path)

    def _file_changed(self, path: Path) -> bool:
        if path.stat().st_mtime_ns != self.last_modification:
            return True
        return self._content_digest is not None and calculate_file_checksum(path) != self._content_digest
