import os
import copy
import logging
from pathlib import Path
from typing import Optional, Tuple, Dict, Any

import yaml
from dotenv import load_dotenv

from creature_refiner.models import RefinementConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/refiner_config.yaml"

DEFAULT_CONFIG: Dict[str, Any] = {
    "refinement": {
        "target_score": 4.0,
        "max_iterations": 3,
        "enable_logging": True,
        "enable_persistence": True,
        "generate_layout": True,
        "parallel_generation": True,
        "max_workers": 4,
    },
    "termination": {
        "min_improvement": 0.0,
    },
    "storage": {
        "work_dir": "run_workspace",
    },
    "generation": {},
}


def load_environment() -> None:
    load_dotenv()


def configure_logging(level: Optional[str] = None) -> None:
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if value is None and isinstance(merged.get(key), dict):
            continue
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_refiner_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load the YAML run configuration merged over the built-in defaults.

    A missing or unreadable file yields the defaults.
    """
    config_path = Path(path or DEFAULT_CONFIG_PATH)
    if not config_path.exists():
        if path:
            logger.warning(f"Config file {config_path} not found, using defaults")
        return copy.deepcopy(DEFAULT_CONFIG)

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Failed to load config: {e}")
        return copy.deepcopy(DEFAULT_CONFIG)

    if not isinstance(data, dict):
        logger.warning(f"Ignoring {config_path}: top level must be a mapping")
        return copy.deepcopy(DEFAULT_CONFIG)

    return _merge(DEFAULT_CONFIG, data)


def build_refinement_config(
    config: Dict[str, Any],
    overrides: Optional[Dict[str, Any]] = None,
) -> RefinementConfig:
    """Build a RefinementConfig from a loaded config dict plus CLI overrides.

    Override values of None are ignored.
    """
    values = dict(config.get("refinement") or {})
    values["min_improvement"] = (config.get("termination") or {}).get("min_improvement", 0.0)

    for key, value in (overrides or {}).items():
        if value is not None:
            values[key] = value

    valid_fields = RefinementConfig.__dataclass_fields__.keys()
    unknown = set(values) - set(valid_fields)
    if unknown:
        logger.warning(f"Ignoring unknown refinement settings: {', '.join(sorted(unknown))}")

    return RefinementConfig(**{k: v for k, v in values.items() if k in valid_fields})


def get_openai_config() -> Tuple[Optional[str], str, str]:
    api_key = os.getenv("OPENAI_API_KEY")
    base_url = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
    model = os.getenv("OPENAI_MODEL", "gpt-4o")

    if not api_key:
        logger.warning("Warning: OPENAI_API_KEY not found in environment variables.")

    return api_key, base_url, model
