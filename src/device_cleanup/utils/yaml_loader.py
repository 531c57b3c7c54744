import yaml
from pathlib import Path

DEFAULT_CONFIG_DIR = Path(__file__).resolve().parents[3] / "config"


def load_yaml(filename, config_dir=None):
    """Load a YAML file, relative to the config directory unless absolute.

    An empty file loads as an empty dict.
    """
    file_path = Path(filename)
    if not file_path.is_absolute():
        file_path = Path(config_dir or DEFAULT_CONFIG_DIR) / file_path
    with open(file_path, 'r', encoding='utf-8') as f:
        return yaml.safe_load(f) or {}
