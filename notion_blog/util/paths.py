from pathlib import Path
from typing import Optional
import os

def resolve_storage_dir(storage_dir: str, base: Optional[Path] = None) -> Path:
    """Absolute storage dir; relative values hang off ``base`` (the config file's dir, else cwd)."""
    p = Path(os.path.expanduser(storage_dir))
    if p.is_absolute():
        return p
    return ((base or Path.cwd()) / p).resolve()

def ensure_dir(p: Path):
    p.mkdir(parents=True, exist_ok=True)
