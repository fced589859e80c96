"""FastAPI application: symptom intake, analysis, follow-up and voice upload."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from symptom_assist.config import settings
from symptom_assist.errors import SymptomAssistError
from symptom_assist.gemini.gateway import AIGateway
from symptom_assist.intake import IntakeSession, extract_from_upload
from symptom_assist.models import (
    DiagnosisResult,
    FollowUpRequest,
    FollowUpResponse,
    Symptom,
    SymptomListResponse,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

_gateway: AIGateway | None = None
_intake: IntakeSession | None = None


def get_gateway() -> AIGateway:
    global _gateway
    if _gateway is None:
        _gateway = AIGateway()
    return _gateway


def get_intake() -> IntakeSession:
    global _intake
    if _intake is None:
        _intake = IntakeSession()
    return _intake


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not settings.gemini_api_key:
        logger.warning("GEMINI_API_KEY is not set. AI calls will fail until it is configured.")
    logger.info(
        "Gemini configured with model %s (analysis timeout %.0fs).",
        settings.gemini_model,
        settings.analyze_timeout_seconds,
    )
    yield
    logger.info("Shutting down.")


app = FastAPI(
    title="Symptom Assist",
    description="Symptom intake and preliminary assessment using Gemini",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SymptomAssistError)
async def symptom_assist_error_handler(request: Request, exc: SymptomAssistError):
    logger.warning("%s %s failed: [%s] %s", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.get("/health")
async def health():
    return {
        "status": "ok" if settings.gemini_api_key else "degraded",
        "model": settings.gemini_model,
        "api_key_configured": bool(settings.gemini_api_key),
    }


@app.get("/symptoms", response_model=SymptomListResponse)
async def list_symptoms():
    intake = get_intake()
    return SymptomListResponse(symptoms=intake.symptoms, is_analyzing=intake.is_analyzing)


@app.post("/symptoms", response_model=SymptomListResponse, status_code=201)
async def add_symptom(symptom: Symptom):
    intake = get_intake()
    intake.add_symptom(symptom)
    return SymptomListResponse(symptoms=intake.symptoms, is_analyzing=intake.is_analyzing)


@app.delete("/symptoms/{index}", response_model=SymptomListResponse)
async def remove_symptom(index: int):
    intake = get_intake()
    intake.remove_symptom(index)
    return SymptomListResponse(symptoms=intake.symptoms, is_analyzing=intake.is_analyzing)


@app.post("/symptoms/audio", response_model=SymptomListResponse)
async def add_symptoms_from_audio(request: Request):
    """Accept a raw audio body (AAC in an MP4 container) and merge extracted symptoms."""
    audio_bytes = await request.body()
    intake = get_intake()
    extracted = await extract_from_upload(audio_bytes, get_gateway())
    intake.add_symptoms(extracted)
    return SymptomListResponse(symptoms=intake.symptoms, is_analyzing=intake.is_analyzing)


@app.post("/analyze", response_model=DiagnosisResult)
async def analyze():
    return await get_intake().analyze(get_gateway())


@app.post("/follow-up", response_model=FollowUpResponse)
async def follow_up(payload: FollowUpRequest):
    answer = await get_intake().ask_follow_up(get_gateway(), payload.question)
    return FollowUpResponse(answer=answer)


@app.post("/reset")
async def reset():
    get_intake().reset(get_gateway())
    return {"message": "Session reset."}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "symptom_assist.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
    )
