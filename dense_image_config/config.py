import json
import logging
from typing import Dict, Any, List, Optional
from pathlib import Path

from dense_image_utils.logger_config import LoggerConfig, get_logger

logger = get_logger(__name__)


class Config:
    """
    Library configuration.

    Values come from an optional JSON file; anything the file does not set is
    filled from the defaults below, so ``Config()`` alone is a complete
    configuration.
    """

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path
        self.config_data = self._load_config(config_path) if config_path else {}
        self._init_gabor_stack_defaults()
        self._init_logging_defaults()
        self._validate_gabor_stack_config()

    def _load_config(self, config_path: str) -> Dict[str, Any]:
        with open(config_path, 'r') as config_file:
            config_data = json.load(config_file)

        if not isinstance(config_data, dict):
            raise ValueError(f"Configuration root must be a JSON object: {config_path}")
        return config_data

    def _init_gabor_stack_defaults(self) -> None:
        """Initialize default parameters of the Gabor phase stack.

        Four periods times four orientations give the 16 output channels,
        each filter pair uses a 31x31 support with sigma = 2 * period.
        """
        defaults = {
            "gabor_periods": [4, 8, 16, 32],
            "gabor_angles": [0, 45, 90, 135],
            "gabor_kernel_size": 31,
            "gabor_sigma_factor": 2.0,
        }
        for k, v in defaults.items():
            self.config_data.setdefault(k, v)

    def _init_logging_defaults(self) -> None:
        self.config_data.setdefault("log_level", "INFO")
        self.config_data.setdefault("log_file", None)

    def _validate_gabor_stack_config(self) -> None:
        """Validate Gabor phase stack parameters."""
        periods = self.config_data["gabor_periods"]
        angles = self.config_data["gabor_angles"]
        size = self.config_data["gabor_kernel_size"]
        sigma_factor = self.config_data["gabor_sigma_factor"]

        if not isinstance(periods, list) or not periods:
            raise ValueError("gabor_periods must be a non-empty list")
        if any(not isinstance(p, (int, float)) or p <= 0 for p in periods):
            raise ValueError(f"gabor_periods must contain positive numbers, got {periods}")

        if not isinstance(angles, list) or not angles:
            raise ValueError("gabor_angles must be a non-empty list")
        if any(not isinstance(a, (int, float)) for a in angles):
            raise ValueError(f"gabor_angles must contain numbers, got {angles}")

        if not isinstance(size, int) or size <= 0:
            raise ValueError("gabor_kernel_size must be a positive integer")
        if size % 2 == 0:
            logger.warning(f"Even gabor_kernel_size ({size}) shifts the filter centre by half a pixel")

        if not isinstance(sigma_factor, (int, float)) or sigma_factor <= 0:
            raise ValueError("gabor_sigma_factor must be a positive number")

    def get_gabor_stack_settings(self) -> Dict[str, Any]:
        """Return a copy of the Gabor phase stack parameters."""
        return {
            "periods": list(self.config_data["gabor_periods"]),
            "angles": list(self.config_data["gabor_angles"]),
            "kernel_size": self.config_data["gabor_kernel_size"],
            "sigma_factor": self.config_data["gabor_sigma_factor"],
        }

    def get_channel_count(self) -> int:
        """Number of channels a Gabor phase stack has under this configuration."""
        return len(self.config_data["gabor_periods"]) * len(self.config_data["gabor_angles"])

    def apply_logging(self) -> logging.Logger:
        """Reconfigure the library root logger from ``log_level``/``log_file``."""
        level = logging.getLevelName(str(self.config_data["log_level"]).upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log_level: {self.config_data['log_level']}")

        log_file = self.config_data.get("log_file")
        return LoggerConfig.setup_root_logger(
            level=level,
            log_file=Path(log_file) if log_file else None,
            force=True
        )

    def __getattr__(self, name: str) -> Any:
        if name != "config_data" and name in self.__dict__.get("config_data", {}):
            return self.config_data[name]
        raise AttributeError(f"'{self.__class__.__name__}' object has no attribute '{name}'")
