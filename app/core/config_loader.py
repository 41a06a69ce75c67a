import json
import os
import logging
from functools import lru_cache
from typing import Dict, Any, List, Optional

from app.core.config import settings

logger = logging.getLogger("app")

def load_campus_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Loads campus configuration (locations, notification switches) from JSON.
    Raises FileNotFoundError if config is missing, ValueError if it is not valid JSON.
    """
    config_path = path or settings.CAMPUS_CONFIG_PATH
    if not os.path.exists(config_path):
        logger.critical(f"❌ Campus config '{config_path}' not found! The app cannot start without it.")
        raise FileNotFoundError(f"Configuration file not found at {config_path}")

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            config = json.load(f)
            logger.info(f"✅ Campus config loaded for: {config.get('campus_name', 'Unknown')}")
            return config
    except json.JSONDecodeError as e:
        logger.critical(f"❌ Invalid JSON in campus config: {e}")
        raise ValueError(f"Invalid JSON in config file: {e}")

@lru_cache(maxsize=1)
def get_campus_config() -> Dict[str, Any]:
    return load_campus_config()

def get_locations(config: Dict[str, Any]) -> Dict[str, str]:
    """
    Returns: Dict {location_id: display_name}, e.g. {'seminar': 'Seminar Hall'}.
    """
    return config.get("locations", {})

def get_location_name(config: Dict[str, Any], location_id: str) -> str:
    """Display name for a location id; unknown ids are returned unchanged."""
    return get_locations(config).get(location_id, location_id)

def location_aliases(config: Dict[str, Any], location_id: str) -> List[str]:
    """Both spellings a stored row may use for the same room (id and display name)."""
    name = get_location_name(config, location_id)
    return [location_id] if name == location_id else [location_id, name]
