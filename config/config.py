import json
from pathlib import Path
from typing import Dict, Any

from src_block_matching.disparity.parameters import BlockMatchingConfig, SelectionPolicy
from utils.file_operations import PathManager
from utils.logger_config import get_logger

logger = get_logger(__name__)


class Config:
    """JSON backed configuration; every key is also readable as an attribute."""

    def __init__(self, config_path: str):
        self.config_path = Path(config_path)
        self.config_data = self._load_config(self.config_path)
        self._init_block_matching_defaults()
        self._validate_block_matching_config()
        self._check_folder(self.config_data["save_path_result"])

    def _load_config(self, config_path: Path) -> Dict[str, Any]:
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as config_file:
                config_data = json.load(config_file)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in config file {config_path}: {e}") from e

        # Process string formatting for paths that contain {case_name}
        self._process_string_formatting(config_data)
        return config_data

    def _process_string_formatting(self, config_data: Dict[str, Any]) -> None:
        """Replace {case_name} in string values with the configured case name."""
        case_name = config_data.get("case_name", "")

        for key, value in config_data.items():
            if isinstance(value, str) and "{case_name}" in value:
                try:
                    config_data[key] = value.format(case_name=case_name)
                except (KeyError, ValueError, IndexError) as e:
                    # Keep original value if formatting fails
                    logger.warning(f"Could not format value for key '{key}': {e}")

    def _init_block_matching_defaults(self) -> None:
        """Fill in defaults for every block matching key not present in the file."""
        defaults = {
            "case_name": "default",
            "input_path": "input",
            "result_root": "result",
            "save_path_result": "{case_name}",
            # Disparity search range (inclusive) and window half extents
            "MIN_DISPARITY": 0,
            "MAX_DISPARITY": 64,
            "REGION_RADIUS_X": 2,
            "REGION_RADIUS_Y": 2,
            # Selection
            "SELECTION_POLICY": "WTA",
            "MAX_LR_ERROR": 1,
            "TEXTURE_THRESHOLD": 0.0,
            # Output
            "save_formats": ["npy"],
            "need_chart": "False",
            "log_file": None,
        }

        for key, value in defaults.items():
            self.config_data.setdefault(key, value)

        # defaults may reference {case_name} too
        self._process_string_formatting(self.config_data)

    def _validate_block_matching_config(self) -> None:
        """Validate block matching parameters by building the kernel configuration."""
        for key in ("MIN_DISPARITY", "MAX_DISPARITY", "REGION_RADIUS_X",
                    "REGION_RADIUS_Y", "MAX_LR_ERROR"):
            value = self.config_data[key]
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{key} must be an integer, got {value!r}")

        threshold = self.config_data["TEXTURE_THRESHOLD"]
        if isinstance(threshold, bool) or not isinstance(threshold, (int, float)):
            raise ValueError(f"TEXTURE_THRESHOLD must be a number, got {threshold!r}")

        formats = self.config_data["save_formats"]
        if not isinstance(formats, list) or not set(formats) <= {"npy", "csv", "tiff"}:
            raise ValueError(f"save_formats must be a list drawn from npy/csv/tiff, got {formats!r}")

        # Raises DisparityConfigurationError for inconsistent values
        self.to_block_matching_config()

    def _check_folder(self, folder_name: str) -> None:
        """Create a fresh, numbered result folder below ``result_root``."""
        new_path = PathManager.create_numbered_directory(Path(self.config_data["result_root"]), folder_name)
        self.config_data["save_path_result"] = str(new_path)

    def to_block_matching_config(self) -> BlockMatchingConfig:
        """Build the kernel configuration from the file's block matching keys."""
        return BlockMatchingConfig(
            min_disparity=self.config_data["MIN_DISPARITY"],
            max_disparity=self.config_data["MAX_DISPARITY"],
            region_radius_x=self.config_data["REGION_RADIUS_X"],
            region_radius_y=self.config_data["REGION_RADIUS_Y"],
            selection_policy=SelectionPolicy.parse(self.config_data["SELECTION_POLICY"]),
            max_lr_error=self.config_data["MAX_LR_ERROR"],
            texture_threshold=float(self.config_data["TEXTURE_THRESHOLD"]),
        )

    def is_chart_enabled(self) -> bool:
        return str(self.config_data.get("need_chart", "False")) == "True"

    def get_block_matching_summary(self) -> str:
        """Get a one-line summary of the block matching configuration."""
        return (f"disparity=[{self.MIN_DISPARITY}, {self.MAX_DISPARITY}], "
                f"radius=({self.REGION_RADIUS_X}, {self.REGION_RADIUS_Y}), "
                f"policy={self.SELECTION_POLICY}")

    def __getattr__(self, name: str) -> Any:
        if name != "config_data" and name in self.__dict__.get("config_data", {}):
            return self.config_data[name]
        raise AttributeError(f"'{self.__class__.__name__}' object has no attribute '{name}'")
