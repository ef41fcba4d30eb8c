"""Configuration persistence manager for the site image processor.

This module handles loading and saving of image conversion settings to/from JSON files.
"""

import json
from dataclasses import asdict
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple

from models import CONFIG_FILE, ConversionMode, ImageConversionConfig, SaveFormat


class ConfigManager:
    """Handles loading and saving of image conversion configuration."""

    def __init__(self, config_path: Path = CONFIG_FILE):
        """Initialize config manager.

        Args:
            config_path: Path to configuration file (defaults to ~/.site_images_config.json)
        """
        self.config_path = Path(config_path)

    def load(self) -> ImageConversionConfig:
        """Load configuration from file, returning defaults if not found.

        Returns:
            ImageConversionConfig with loaded or default values
        """
        config = ImageConversionConfig()

        try:
            if self.config_path.exists():
                with open(self.config_path, "r") as f:
                    data = json.load(f)
                # Missing keys fall back to defaults
                config = ImageConversionConfig(
                    conversion_mode=ConversionMode(
                        data.get("conversion_mode", config.conversion_mode.value)
                    ),
                    save_format=SaveFormat(
                        data.get("save_format", config.save_format.value)
                    ),
                    dither_algorithm=data.get("dither_algorithm", config.dither_algorithm),
                    threshold=int(data.get("threshold", config.threshold)),
                    max_image_width=int(
                        data.get("max_image_width", config.max_image_width)
                    ),
                )
                print(f"✓ Loaded configuration from {self.config_path}")
        except (OSError, ValueError, TypeError, AttributeError) as e:
            print(f"Warning: Could not load config file: {e}")
            config = ImageConversionConfig()

        return config

    def save(self, config: ImageConversionConfig) -> Tuple[bool, Optional[str]]:
        """Save configuration to file.

        Args:
            config: ImageConversionConfig to save

        Returns:
            Tuple of (success: bool, error_message: Optional[str])
        """
        data = {
            key: value.value if isinstance(value, Enum) else value
            for key, value in asdict(config).items()
        }
        try:
            with open(self.config_path, "w") as f:
                json.dump(data, f, indent=2)
            return True, None
        except OSError as e:
            return False, str(e)
