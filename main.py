import argparse
import logging
from pathlib import Path

from config.config import Config
from src_block_matching import BlockMatchingDisparityCalculator
from utils.logger_config import LoggerConfig


def load_config(config_path: str) -> Config:
    """
    Load configuration from a JSON file.

    Args:
        config_path (str): Path to the configuration JSON file.

    Returns:
        Config: Loaded configuration object.
    """
    return Config(config_path)


def process_disparity(config: Config) -> dict:
    """
    Compute disparity maps for every stereo pair of the configured input folder.

    Args:
        config (Config): Configuration object containing processing parameters.

    Returns:
        dict: Processing statistics.
    """
    calculator = BlockMatchingDisparityCalculator(config)
    return calculator.create_disparity()


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="SAD block matching disparity maps for rectified stereo pairs")
    parser.add_argument('--config', default="config/config_block_matching.json",
                        help='Path to the configuration JSON file')
    parser.add_argument('--log-level', default="INFO",
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level')
    parser.add_argument('--log-file', default=None, help='Optional log file path')
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """
    Main function to execute the disparity pipeline.
    """
    args = parse_args(argv)
    config = load_config(args.config)

    # Modules configure the default logger on import; replace it with the requested one
    log_file = args.log_file or config.log_file
    LoggerConfig.reset()
    LoggerConfig.setup_root_logger(
        level=getattr(logging, args.log_level),
        log_file=Path(log_file) if log_file else None
    )
    logger = LoggerConfig.get_logger(__name__)

    statistics = process_disparity(config)

    if statistics['failed_pairs']:
        logger.warning(f"Failed pairs: {statistics['failed_pairs']}")
        return 1

    logger.info("Processing completed successfully")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
