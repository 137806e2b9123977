from fastapi import APIRouter, Depends
from app.api.deps import get_model_router, require_bearer_token
from app.core.emitter import current_timestamp
from app.core.router import ModelRouter
from app.schemas.chat import Model, ModelList

router = APIRouter()


@router.get("/models", response_model=ModelList, dependencies=[Depends(require_bearer_token)])
async def list_models(model_router: ModelRouter = Depends(get_model_router)):
    """List the Notion models this proxy can target, OpenAI /v1/models style."""
    created = current_timestamp()
    return ModelList(
        data=[Model(id=model_id, created=created) for model_id in model_router.registry.available()]
    )
