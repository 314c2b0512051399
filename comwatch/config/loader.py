import yaml
from pathlib import Path
from .models import AppConfig

def load_config(config_path: Path) -> AppConfig:
    """Loads YAML config and parses it into AppConfig Pydantic model."""
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, 'r') as f:
        data = yaml.safe_load(f) or {}

    # Single directory given as a plain string
    scan_dirs = data.get("scan_dirs")
    if isinstance(scan_dirs, str):
        data["scan_dirs"] = [scan_dirs]

    return AppConfig(**data)
