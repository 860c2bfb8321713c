from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from ..errors import GenerationError
from ..schemas import ChatDebug, ChatRefinementRequest, ChatResponse
from ..services.generation import GenerationService

router = APIRouter()


@router.post("/chat", response_model=ChatResponse, response_model_by_alias=True)
async def refine_html(payload: ChatRefinementRequest, request: Request):
    service: GenerationService = request.app.state.generation_service
    try:
        result = await service.handle_refine(payload)
    except GenerationError as exc:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    return ChatResponse(
        text=result.text,
        debug=ChatDebug(
            message_length=len(payload.message or ""),
            response_length=result.diagnostics.length,
            has_script=result.diagnostics.has_script_tag,
            has_js_keywords=result.diagnostics.has_interactivity_keywords,
            conversation_length=len(payload.conversation_history),
        ),
    )
