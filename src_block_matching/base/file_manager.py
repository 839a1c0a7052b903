"""
Base file management utilities for batch processing.

This module provides the base class for saving per-pair results in the
``<output>/<folder_name>/<set>/<pair>`` layout.
"""

from pathlib import Path
from typing import Dict, Any
from abc import ABC, abstractmethod

from utils.file_operations import PathManager, DataSaver
from utils.logger_config import get_logger


class BaseFileManager(ABC):
    """
    Base class for file management operations.

    Provides common functionality for:
    - Directory structure setup
    - Metadata saving
    - Save-result bookkeeping and logging

    Subclasses implement the module-specific save operations.
    """

    def __init__(self, base_output_path: Path, folder_name: str = ""):
        """
        Initialize base file manager.

        Args:
            base_output_path: Base path for output files
            folder_name: Specific folder name for this processing type
        """
        self.base_output_path = Path(base_output_path)
        self.folder_name = folder_name or self.get_folder_name()
        self.logger = get_logger(f"{__name__}.{self.__class__.__name__}")

        self.processing_stats = {
            'total_operations': 0,
            'successful_operations': 0,
            'failed_operations': 0
        }

    def setup_output_directories(self, set_name: str, pair_name: str) -> Dict[str, Path]:
        """
        Set up output directory structure for a specific image pair.

        Args:
            set_name: Name of the image set
            pair_name: Name of the image pair

        Returns:
            Dict[str, Path]: Dictionary containing the output path
        """
        output_pair_folder = self.base_output_path / self.folder_name / set_name / pair_name
        PathManager.ensure_directory_exists(output_pair_folder)

        self.logger.info(f"Set up directories for {set_name}/{pair_name}")
        return {'output': output_pair_folder}

    def save_metadata(self, metadata: Dict[str, Any], output_paths: Dict[str, Path],
                      pair_name: str, filename_prefix: str = "metadata") -> Dict[str, bool]:
        """
        Save metadata to JSON files in all specified paths.

        Args:
            metadata: Metadata dictionary to save
            output_paths: Dictionary of output paths
            pair_name: Name of the image pair
            filename_prefix: Prefix for the metadata filename

        Returns:
            Dict[str, bool]: Save results for each location
        """
        results = {}
        filename = f'{filename_prefix}_{pair_name}'

        for location_name, path in output_paths.items():
            success = DataSaver.save_json_data(metadata, path, filename)
            results[f'{location_name}_metadata'] = success
            self._record_operation(success)

        return results

    def _record_operation(self, success: bool) -> None:
        self.processing_stats['total_operations'] += 1
        if success:
            self.processing_stats['successful_operations'] += 1
        else:
            self.processing_stats['failed_operations'] += 1

    def log_save_results(self, pair_name: str, results: Dict[str, Dict[str, bool]]) -> None:
        """
        Log summary of save operation results.

        Args:
            pair_name: Name of the processed pair
            results: Dictionary of save results by category
        """
        total_operations = sum(len(category_results) for category_results in results.values())
        successful_operations = sum(
            sum(1 for success in category_results.values() if success)
            for category_results in results.values()
        )

        self.logger.info(f"Save results for {pair_name}: "
                         f"{successful_operations}/{total_operations} operations successful")

        for category, category_results in results.items():
            failed_ops = [op for op, success in category_results.items() if not success]
            if failed_ops:
                self.logger.warning(f"Failed {category} operations: {failed_ops}")

    def get_processing_statistics(self) -> Dict[str, Any]:
        """Get current processing statistics, including the success rate."""
        stats = self.processing_stats.copy()
        if stats['total_operations'] > 0:
            stats['success_rate'] = stats['successful_operations'] / stats['total_operations']
        else:
            stats['success_rate'] = 0
        return stats

    @abstractmethod
    def get_folder_name(self) -> str:
        """
        Get the specific folder name for this file manager type.

        Returns:
            str: Folder name for this processing type
        """
