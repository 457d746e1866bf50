from fastapi import APIRouter, Depends

from app.dependencies import get_client_manager
from app.schemas.research import ResearchChatRequest, ResearchChatResponse
from app.services.research_services import research_chat
from vidsentry.client_manager import ClientManager

router = APIRouter(prefix="/api", tags=["research"])


@router.post("/research-chat", response_model=ResearchChatResponse)
async def research_chat_route(
    data: ResearchChatRequest,
    manager: ClientManager = Depends(get_client_manager),
):
    return await research_chat(data.text, data.history, manager)
