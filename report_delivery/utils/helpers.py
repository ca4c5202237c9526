"""
Helper utilities for Report Delivery.

This module contains various utility functions used throughout
the application for common file and configuration operations.
"""

import hashlib
import json
import os
import zipfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml


def calculate_file_checksum(file_path: Union[str, Path], algorithm: str = "sha256") -> str:
    """
    Calculate checksum for a file.

    Args:
        file_path: Path to the file
        algorithm: Hash algorithm (md5, sha1, sha256, sha512)

    Returns:
        Hexadecimal checksum string
    """
    hash_obj = hashlib.new(algorithm)

    with open(file_path, "rb") as f:
        for chunk in iter(lambda: f.read(4096), b""):
            hash_obj.update(chunk)

    return hash_obj.hexdigest()


def format_bytes(bytes_count: int) -> str:
    """Format bytes into human-readable string."""
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if bytes_count < 1024.0:
            return f"{bytes_count:.1f} {unit}"
        bytes_count /= 1024.0
    return f"{bytes_count:.1f} PB"


def get_unique_file_name(file_path: Union[str, Path]) -> str:
    """
    Return file_path, or the first free 'name (n).ext' variant next to it.

    Args:
        file_path: Desired file path

    Returns:
        A path that does not exist yet
    """
    path = Path(file_path)
    candidate = path
    counter = 1
    while candidate.exists():
        candidate = path.with_name(f"{path.stem} ({counter}){path.suffix}")
        counter += 1
    return str(candidate)


def create_zip(source_path: Union[str, Path], entry_name: str, zip_path: Union[str, Path]) -> str:
    """
    Compress a single file into a new ZIP archive.

    Args:
        source_path: File to compress
        entry_name: Name of the file inside the archive
        zip_path: Archive to create

    Returns:
        Path of the created archive
    """
    with zipfile.ZipFile(zip_path, 'w', zipfile.ZIP_DEFLATED) as zf:
        zf.write(source_path, os.path.basename(entry_name))
    return str(zip_path)


def load_config_file(file_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load configuration from YAML or JSON file.

    Args:
        file_path: Path to configuration file

    Returns:
        Configuration dictionary
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    with open(file_path, 'r', encoding='utf-8') as f:
        if file_path.suffix.lower() in ['.yaml', '.yml']:
            return yaml.safe_load(f)
        elif file_path.suffix.lower() == '.json':
            return json.load(f)
        else:
            raise ValueError(f"Unsupported configuration file format: {file_path.suffix}")


def sanitize_dict(data: Dict[str, Any], sensitive_keys: Optional[List[str]] = None) -> Dict[str, Any]:
    """
    Sanitize dictionary by masking sensitive values.

    Args:
        data: Dictionary to sanitize
        sensitive_keys: List of keys to mask (default: common sensitive keys)

    Returns:
        Sanitized dictionary
    """
    if sensitive_keys is None:
        sensitive_keys = ['password', 'passwd', 'secret', 'passphrase', 'token']

    def _sanitize_value(key: str, value: Any) -> Any:
        if isinstance(value, dict):
            return sanitize_dict(value, sensitive_keys)
        elif any(sensitive_key in key.lower() for sensitive_key in sensitive_keys):
            return "***MASKED***" if value else value
        else:
            return value

    return {key: _sanitize_value(key, value) for key, value in data.items()}
