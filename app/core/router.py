from app.core.registry import ModelRegistry
from app.schemas.chat import DEFAULT_NOTION_MODEL

class ModelRouter:
    def __init__(self, registry: ModelRegistry):
        self.registry = registry

    def select(self, requested_model: str) -> str:
        if not requested_model:
            requested_model = self.registry.default or DEFAULT_NOTION_MODEL
        return self.registry.resolve(requested_model)
