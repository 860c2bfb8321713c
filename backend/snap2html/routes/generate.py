from typing import Optional
from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from ..errors import GenerationError
from ..schemas import GenerateDebug, GenerateResponse
from ..services.generation import GenerationService
from ..services.uploads import stage_upload
from ..utils import parse_flag

router = APIRouter()


@router.post("/generate", response_model=GenerateResponse, response_model_by_alias=True)
async def generate_html(
    request: Request,
    screenshot: Optional[UploadFile] = File(None),
    prompt: Optional[str] = Form(None),
    include_javascript: Optional[str] = Form(None),
    make_interactive: Optional[str] = Form(None),
):
    service: GenerationService = request.app.state.generation_service
    try:
        staged = None
        if screenshot is not None and screenshot.filename:
            staged = await run_in_threadpool(
                stage_upload, screenshot.file, screenshot.filename, service.settings.upload_dir
            )
        result = await service.handle_generate(
            staged,
            prompt=prompt,
            include_javascript=parse_flag(include_javascript),
            make_interactive=parse_flag(make_interactive),
        )
    except GenerationError as exc:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    return GenerateResponse(
        text=result.text,
        debug=GenerateDebug(
            prompt_used=result.prompt_used or "",
            response_length=result.diagnostics.length,
            has_script=result.diagnostics.has_script_tag,
            has_js_keywords=result.diagnostics.has_interactivity_keywords,
        ),
    )
