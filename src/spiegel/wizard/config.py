"""
Spiegel Configuration

Resolves where installed steps live and where they render. Values come from
built-in defaults, an optional spiegel.yaml file, the environment (a .env
next to the config file is loaded first) and explicit arguments, in
increasing priority.
"""

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from dotenv import load_dotenv

from spiegel.wizard.exceptions import ConfigError
from spiegel.wizard.logging_config import get_logger
from spiegel.wizard.validators import validate_region


logger = get_logger("config")

CONFIG_FILENAME = "spiegel.yaml"
STEPS_DIR = "steps"
STEP_DESC_FILENAME = "step.json"
STEPS_DESC_FILENAME = "steps.json"
DEFAULT_REGION = "#content-holder"


def get_parent_dir(executable: Optional[str] = None) -> Path:
    """Get the directory the application is being run out of.

    When running from inside a macOS bundle the path is cut before the first
    component containing '.app', so steps sit beside the bundle rather than
    inside it.

    Args:
        executable: Path of the running executable (default: sys.executable)

    Returns:
        Parent directory for externally installed steps
    """
    exe_dir = Path(executable or sys.executable).parent
    parts = exe_dir.parts

    for cut_index, part in enumerate(parts):
        if ".app" in part:
            return Path(*parts[:cut_index]) if cut_index else Path(exe_dir.anchor or ".")

    return exe_dir


@dataclass
class WizardConfig:
    """Resolved wizard configuration."""
    steps_dir: Path
    manifest_name: str = STEPS_DESC_FILENAME
    descriptor_name: str = STEP_DESC_FILENAME
    region: str = DEFAULT_REGION
    config_path: Optional[Path] = None

    @property
    def manifest_path(self) -> Path:
        return self.steps_dir / self.manifest_name

    def to_dict(self) -> Dict[str, Any]:
        return {
            "steps_dir": str(self.steps_dir),
            "manifest": self.manifest_name,
            "descriptor": self.descriptor_name,
            "region": self.region,
            "config_path": str(self.config_path) if self.config_path else None,
        }


def find_config_file(config_path: Optional[Path] = None) -> Optional[Path]:
    """Locate the configuration file.

    Resolution order:
    1. Explicit path (must exist)
    2. SPIEGEL_CONFIG environment variable (must exist)
    3. spiegel.yaml in the current directory, if present

    Returns:
        Path to the config file, or None when running on defaults
    """
    if config_path is not None:
        if not config_path.exists():
            raise ConfigError(
                f"Config file not found: {config_path}",
                config_key="config",
            )
        return config_path

    env_path = os.environ.get("SPIEGEL_CONFIG")
    if env_path:
        path = Path(env_path)
        if not path.exists():
            raise ConfigError(
                f"Config file not found: {path}",
                config_key="SPIEGEL_CONFIG",
            )
        return path

    candidate = Path.cwd() / CONFIG_FILENAME
    if candidate.exists():
        return candidate

    return None


def _read_config_file(path: Path) -> Dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}", details=str(e))
    except OSError as e:
        raise ConfigError(f"Cannot read {path}", details=str(e))

    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping of settings")

    return data


def load_config(
    config_path: Optional[Path] = None,
    steps_dir: Optional[Union[str, Path]] = None,
    region: Optional[str] = None,
) -> WizardConfig:
    """Load the wizard configuration.

    Args:
        config_path: Explicit spiegel.yaml to read
        steps_dir: Explicit steps directory, overriding everything else
        region: Explicit destination region, overriding everything else

    Returns:
        Resolved WizardConfig
    """
    path = find_config_file(config_path)
    file_config: Dict[str, Any] = {}

    if path is not None:
        env_path = path.parent / ".env"
        if env_path.exists():
            load_dotenv(env_path)
            logger.debug("Loaded .env from %s", env_path)
        file_config = _read_config_file(path)
        logger.debug("Loaded config from %s", path)

    # Steps directory
    if steps_dir is not None:
        resolved_steps = Path(steps_dir)
    elif os.environ.get("SPIEGEL_STEPS_DIR"):
        resolved_steps = Path(os.environ["SPIEGEL_STEPS_DIR"])
    elif file_config.get("steps_dir"):
        resolved_steps = Path(str(file_config["steps_dir"])).expanduser()
        if not resolved_steps.is_absolute() and path is not None:
            resolved_steps = path.parent / resolved_steps
    else:
        resolved_steps = get_parent_dir() / STEPS_DIR

    # Destination region
    resolved_region = (
        region
        or os.environ.get("SPIEGEL_REGION")
        or file_config.get("region")
        or DEFAULT_REGION
    )
    valid, message = validate_region(resolved_region)
    if not valid:
        raise ConfigError(
            f"Invalid region {resolved_region!r}: {message}",
            config_key="region",
        )

    config = WizardConfig(
        steps_dir=resolved_steps.resolve(),
        manifest_name=str(file_config.get("manifest", STEPS_DESC_FILENAME)),
        descriptor_name=str(file_config.get("descriptor", STEP_DESC_FILENAME)),
        region=resolved_region,
        config_path=path,
    )
    logger.debug("Using steps directory %s", config.steps_dir)
    return config
