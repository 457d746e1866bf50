from fastapi.responses import JSONResponse
from loguru import logger

from vidsentry.client_manager import ClientManager
from vidsentry.exceptions import InvalidInputException
from vidsentry.utils.error_handler import ErrorHandler


async def research_chat(text, history, manager: ClientManager):
    if not text or not str(text).strip():
        return JSONResponse({"error": "Text is required"}, status_code=400)

    try:
        response_text = await manager.get_chat_adapter().chat(text, history)
    except InvalidInputException as e:
        return JSONResponse({"error": str(e)}, status_code=400)
    except Exception as e:
        logger.exception(f"Error in research chat: {e}")
        return JSONResponse(
            {"error": "Error processing request", "details": ErrorHandler.describe(e)},
            status_code=500,
        )

    return {"response": response_text, "status": "success"}
