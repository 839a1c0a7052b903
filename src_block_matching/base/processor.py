"""
Base processor class for batch stereo processing.

This module provides the base class that walks ``set_*/<pair>`` input
folders and runs one processing pipeline per stereo pair.
"""

import datetime
from pathlib import Path
from typing import Dict, Any, List
from abc import ABC, abstractmethod

from utils.file_operations import PathManager
from utils.logger_config import get_logger


class BaseProcessor(ABC):
    """
    Base class for batch processing operations.

    Provides common functionality for:
    - Input structure validation
    - Per-pair pipeline coordination
    - Error handling and logging
    - Processing state management

    Subclasses implement the module-specific pipeline.
    """

    def __init__(self, config, processing_type: str):
        """
        Initialize base processor.

        Args:
            config: Configuration object with processing parameters
            processing_type: Type of processing (e.g. 'disparity')
        """
        self.config = config
        self.processing_type = processing_type
        self.logger = get_logger(f"{__name__}.{self.__class__.__name__}")

        # Processing state
        self.current_pair_info: Dict[str, Any] = {}
        self.processing_statistics = {
            'processed_pairs': 0,
            'failed_pairs': []
        }

        self.input_folder = None
        self.output_folder = Path(self.config.save_path_result)
        self._setup_input_folder()

        self.logger.info(f"{self.__class__.__name__} initialized for {processing_type} processing")
        self.logger.info(f"  Input folder: {self.input_folder}")
        self.logger.info(f"  Output folder: {self.output_folder}")

    def process_all_sets(self) -> Dict[str, Any]:
        """
        Main entry point for processing all image sets.

        Failures of single pairs are logged and recorded; processing moves on
        to the next pair.

        Returns:
            Dict[str, Any]: Processing statistics
        """
        self.logger.info(f"Starting to process all image sets for {self.processing_type}")

        try:
            set_folders = self._validate_input_structure()
        except ValueError as e:
            self.logger.error(str(e))
            return self.processing_statistics

        for set_folder in set_folders:
            self._process_set(set_folder)

        self.logger.info(f"All image sets processed for {self.processing_type}: "
                         f"{self.processing_statistics['processed_pairs']} pairs succeeded, "
                         f"{len(self.processing_statistics['failed_pairs'])} failed")
        return self.processing_statistics

    def _validate_input_structure(self) -> List[Path]:
        if not self.input_folder:
            raise ValueError("Input folder not configured")

        return PathManager.validate_input_structure(self.input_folder)

    def _process_set(self, set_folder: Path) -> None:
        set_name = set_folder.name
        self.logger.info(f"Processing set: {set_name}")

        pair_folders = sorted(p for p in set_folder.iterdir() if p.is_dir())

        if not pair_folders:
            self.logger.warning(f"No pair directories found in {set_name}")
            return

        for pair_folder in pair_folders:
            try:
                self._process_image_pair(set_name, pair_folder)
                self.processing_statistics['processed_pairs'] += 1
            except Exception as e:
                self.logger.error(f"Failed to process pair {pair_folder.name} in set {set_name}: {e}")
                self.processing_statistics['failed_pairs'].append(f"{set_name}/{pair_folder.name}")
                continue

        self.logger.info(f"Set {set_name} processed")

    def _process_image_pair(self, set_name: str, pair_folder: Path) -> None:
        """
        Process a single image pair through the complete processing pipeline.

        Args:
            set_name: Name of the image set
            pair_folder: Path to the pair folder
        """
        pair_name = pair_folder.name
        self.logger.info(f"Processing image pair: {set_name}/{pair_name}")

        self.current_pair_info = {
            'set_name': set_name,
            'pair_name': pair_name,
            'pair_folder': str(pair_folder),
            'timestamp': datetime.datetime.now().isoformat(),
            'processing_type': self.processing_type
        }

        processing_results = self._execute_processing_pipeline(pair_folder)
        self._save_processing_results(processing_results, pair_name)

        self.logger.info(f"Successfully processed {set_name}/{pair_name}")

    def get_processing_info(self) -> Dict[str, Any]:
        """
        Get comprehensive information about current processing setup.

        Returns:
            Dict[str, Any]: Processing information
        """
        return {
            'processing_type': self.processing_type,
            'input_folder': str(self.input_folder) if self.input_folder else None,
            'output_folder': str(self.output_folder),
            'current_pair_info': self.current_pair_info,
            'configuration': self._get_processor_specific_config(),
            'processing_ready': self._is_processing_ready()
        }

    @abstractmethod
    def _setup_input_folder(self) -> None:
        """Setup input folder path specific to processor type."""

    @abstractmethod
    def _execute_processing_pipeline(self, pair_folder: Path) -> Dict[str, Any]:
        """
        Execute the main processing pipeline for a single pair.

        Args:
            pair_folder: Path to the pair folder

        Returns:
            Dict[str, Any]: Processing results
        """

    @abstractmethod
    def _save_processing_results(self, processing_results: Dict[str, Any], pair_name: str) -> None:
        """
        Save processing results using the appropriate file manager.

        Args:
            processing_results: Results from processing
            pair_name: Name of the image pair
        """

    @abstractmethod
    def _get_processor_specific_config(self) -> Dict[str, Any]:
        """Get processor-specific configuration parameters."""

    @abstractmethod
    def _is_processing_ready(self) -> bool:
        """Check if processor is ready for processing."""
