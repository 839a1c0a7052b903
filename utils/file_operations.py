"""
File operation utilities for the block matching toolkit.

This module provides path management for the ``set_*/<pair>`` input layout
and structured saving of arrays and JSON metadata.
"""

import json
import numpy as np
from typing import Dict, Any, List, Union
from pathlib import Path
import shutil

from utils.logger_config import get_logger

logger = get_logger(__name__)


class PathManager:
    """Manages paths and directory operations for stereo pair batches."""

    @staticmethod
    def ensure_directory_exists(path: Path, clear_if_exists: bool = False) -> Path:
        """
        Ensure directory exists, optionally clearing it if it already exists.

        Args:
            path: Directory path to create
            clear_if_exists: Whether to clear directory if it already exists

        Returns:
            Path: The created/validated directory path
        """
        path = Path(path)
        if clear_if_exists and path.exists():
            shutil.rmtree(path)

        path.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Ensured directory exists: {path}")

        return path

    @staticmethod
    def create_numbered_directory(base_path: Path, folder_name: str) -> Path:
        """
        Create ``base_path/folder_name``, or ``folder_name(1)``, ``(2)``... if taken.

        Args:
            base_path: Parent directory
            folder_name: Preferred folder name

        Returns:
            Path: The newly created directory
        """
        base_path = Path(base_path)
        new_path = base_path / folder_name
        counter = 1
        while new_path.exists():
            new_path = base_path / f"{folder_name}({counter})"
            counter += 1

        new_path.mkdir(parents=True)
        logger.debug(f"Created result directory: {new_path}")
        return new_path

    @staticmethod
    def validate_input_structure(input_path: Path) -> List[Path]:
        """
        Validate and return list of set directories in input path.

        Args:
            input_path: Input directory path

        Returns:
            List[Path]: List of valid set directories

        Raises:
            ValueError: If no valid set directories found
        """
        input_path = Path(input_path)
        if not input_path.exists():
            raise ValueError(f"Input path does not exist: {input_path}")

        set_folders = [p for p in input_path.glob('set_*') if p.is_dir()]

        if not set_folders:
            raise ValueError(f"No 'set_*' folders found in {input_path}")

        logger.info(f"Found {len(set_folders)} set folders in {input_path}")
        return sorted(set_folders)

    @staticmethod
    def find_image_file(folder: Path, stem: str) -> Union[Path, None]:
        """
        Find ``<stem>.<ext>`` in a folder, preferring ``.npy`` over image formats.

        Args:
            folder: Directory to search
            stem: File name without extension (e.g. 'left')

        Returns:
            Path or None: First match, or None if nothing matches
        """
        candidates = sorted(Path(folder).glob(f"{stem}.*"),
                            key=lambda p: (p.suffix.lower() != '.npy', p.name))
        return candidates[0] if candidates else None


def _to_json_compatible(value: Any) -> Any:
    """json.dump fallback for numpy scalars and arrays."""
    if isinstance(value, np.integer):
        return int(value)
    if isinstance(value, np.floating):
        return float(value)
    if isinstance(value, np.bool_):
        return bool(value)
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, Path):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class DataSaver:
    """Handles saving of various data types in standard formats."""

    @staticmethod
    def save_numpy_array(
        array: np.ndarray,
        output_path: Path,
        filename: str,
        format_type: str = 'npy'
    ) -> bool:
        """
        Save numpy array in specified format.

        Args:
            array: Numpy array to save
            output_path: Output directory
            filename: Output filename (without extension)
            format_type: Format ('csv', 'npy', 'txt')

        Returns:
            bool: True if successful
        """
        try:
            output_path = Path(output_path)
            output_path.mkdir(parents=True, exist_ok=True)

            if format_type == 'csv':
                full_path = output_path / f"{filename}.csv"
                np.savetxt(full_path, array, delimiter=',')
            elif format_type == 'npy':
                full_path = output_path / f"{filename}.npy"
                np.save(full_path, array)
            elif format_type == 'txt':
                full_path = output_path / f"{filename}.txt"
                np.savetxt(full_path, array)
            else:
                raise ValueError(f"Unsupported format: {format_type}")

            logger.debug(f"Saved array to {full_path}")
            return True

        except Exception as e:
            logger.error(f"Failed to save array {filename}: {e}")
            return False

    @staticmethod
    def save_json_data(
        data: Dict[str, Any],
        output_path: Path,
        filename: str,
        indent: int = 2
    ) -> bool:
        """
        Save dictionary data as JSON, converting numpy values on the way.

        Args:
            data: Data to save
            output_path: Output directory
            filename: Output filename (without extension)
            indent: JSON indentation

        Returns:
            bool: True if successful
        """
        try:
            output_path = Path(output_path)
            output_path.mkdir(parents=True, exist_ok=True)
            full_path = output_path / f"{filename}.json"

            with open(full_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, ensure_ascii=False, indent=indent, default=_to_json_compatible)

            logger.debug(f"Saved JSON to {full_path}")
            return True

        except Exception as e:
            logger.error(f"Failed to save JSON {filename}: {e}")
            return False
