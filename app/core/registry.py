import yaml
from pathlib import Path
from typing import List, Optional

class ModelRegistry:
    def __init__(self, path: str):
        self._path = Path(path)
        data = self._load()
        self._aliases = data.get("models") or {}
        self._available = list(data.get("available") or [])
        self._default = data.get("default")

    def _load(self):
        with open(self._path, "r") as f:
            data = yaml.safe_load(f)
        return data or {}

    @property
    def default(self) -> Optional[str]:
        return self._default

    def available(self) -> List[str]:
        """Backend model ids advertised by GET /v1/models."""
        return list(self._available)

    def resolve(self, model_name: str) -> str:
        """
        If model_name is an alias (e.g. 'opus'), return its backend id.
        Otherwise return model_name unchanged (passthrough).
        """
        return self._aliases.get(model_name, model_name)
