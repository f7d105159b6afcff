"""
Shared logging setup based on the pulse service configuration.
"""
import logging
from pathlib import Path

from pulse.config import PulseConfig, load_config


def setup_logging(config: PulseConfig) -> Path:
    """
    Configure the root logger from an already loaded config.

    Parameters
    ----------
    config : PulseConfig
        Loaded service configuration.

    Returns
    -------
    Path
        The log file receiving records at the configured level.
    """
    base_dir = Path(config.output_base_dir)
    level = getattr(logging, config.logging.level.upper(), logging.INFO)

    base_dir.mkdir(parents=True, exist_ok=True)
    log_file = base_dir / config.logging.log_filename

    # Clear existing handlers
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)

    formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")

    file_handler = logging.FileHandler(log_file, mode="a")
    file_handler.setFormatter(formatter)
    file_handler.setLevel(level)

    # Console handler for warnings and above
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(logging.WARNING)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)
    return log_file


def setup_logging_from_config(config_path: Path) -> Path:
    """
    Set up global logging based on the config.yaml settings.

    Parameters
    ----------
    config_path : Path
        Path to the YAML configuration file.
    """
    return setup_logging(load_config(config_path))
