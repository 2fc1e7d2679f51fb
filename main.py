import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, File, HTTPException, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

import services
from classification import Classifier, detect_waste, generate_waste_name, get_classifier, suggest_quantity
from config import Settings
from database import Database
from errors import EcoWasteError
from schemas import (
    AITestRequest,
    AuthResponse,
    DetectionResponse,
    EntryCreate,
    EntryCreateResponse,
    EntryListResponse,
    LoginRequest,
    PlacesResponse,
    SignupRequest,
    UserProfileResponse,
    WasteTypesResponse,
)
from waste_types import COLLECTION_PLACES, WASTE_TYPES, category_values

logger = logging.getLogger(__name__)


def get_db(request: Request) -> Database:
    return request.app.state.db


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_active_classifier(request: Request) -> Classifier:
    return request.app.state.classifier


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def register_error_handlers(app: FastAPI):
    @app.exception_handler(EcoWasteError)
    async def ecowaste_error(request: Request, exc: EcoWasteError):
        return _error(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if not errors:
            return _error(400, "Invalid request")
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "Invalid value")
        return _error(400, f"{field}: {message}" if field else message)

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error(500, "Internal server error")


def create_app(
    settings: Optional[Settings] = None,
    db: Optional[Database] = None,
    classifier: Optional[Classifier] = None,
) -> FastAPI:
    settings = settings or Settings.from_env()

    logging.basicConfig(
        level=settings.log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    app = FastAPI(title="EcoWaste API")
    app.state.settings = settings
    app.state.db = db if db is not None else Database()
    app.state.classifier = classifier or get_classifier(settings.classifier, seed=settings.classifier_seed)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    @app.get("/")
    def read_root():
        return {"message": "EcoWaste API is running"}

    @app.get("/api/ping")
    def ping():
        return {"message": "pong", "timestamp": datetime.now(timezone.utc).isoformat()}

    # ---- reference data ----

    @app.get("/api/waste/types", response_model=WasteTypesResponse)
    def waste_types():
        return WasteTypesResponse(waste_types=list(WASTE_TYPES))

    @app.get("/api/waste/places", response_model=PlacesResponse)
    def collection_places():
        return PlacesResponse(places=list(COLLECTION_PLACES))

    # ---- entries ----

    @app.post(
        "/api/waste/entries",
        status_code=201,
        response_model=EntryCreateResponse,
        response_model_exclude_none=True,
    )
    def create_waste_entry(
        payload: EntryCreate,
        db: Database = Depends(get_db),
        settings: Settings = Depends(get_settings),
    ):
        entry, new_total = services.submit_entry(db, payload, default_user_id=settings.default_user_id)
        return EntryCreateResponse(
            entry=entry,
            credits_earned=entry.credits_earned,
            new_total_credits=new_total,
        )

    @app.get("/api/waste/entries", response_model=EntryListResponse, response_model_exclude_none=True)
    @app.get("/api/waste/entries/{user_id}", response_model=EntryListResponse, response_model_exclude_none=True)
    def get_waste_entries(
        user_id: Optional[int] = None,
        db: Database = Depends(get_db),
        settings: Settings = Depends(get_settings),
    ):
        entries = db.entries.list_for_user(user_id if user_id is not None else settings.default_user_id)
        return EntryListResponse(entries=entries, total=len(entries))

    # ---- users ----

    @app.get("/api/users/{user_id}", response_model=UserProfileResponse)
    def get_user_profile(user_id: int, db: Database = Depends(get_db)):
        return UserProfileResponse(user=services.user_profile(db, user_id))

    @app.post("/api/auth/login", response_model=AuthResponse)
    def login_user(payload: LoginRequest, db: Database = Depends(get_db)):
        user = services.login(db, payload.email)
        return AuthResponse(user=user, token=services.issue_token())

    @app.post("/api/auth/signup", status_code=201, response_model=AuthResponse)
    def signup_user(payload: SignupRequest, db: Database = Depends(get_db)):
        user = services.signup(db, payload.name, payload.email)
        return AuthResponse(user=user, token=services.issue_token())

    # ---- AI detection ----

    @app.post("/api/ai/detect", response_model=DetectionResponse, response_model_exclude_none=True)
    async def detect_image(
        file: UploadFile = File(...),
        settings: Settings = Depends(get_settings),
        classifier: Classifier = Depends(get_active_classifier),
    ):
        # At most one byte past the cap
        contents = await file.read(settings.max_image_bytes + 1)
        if not contents:
            raise HTTPException(status_code=400, detail="No image provided")
        if len(contents) > settings.max_image_bytes:
            raise HTTPException(status_code=400, detail="Image file is too large")

        detection = await run_in_threadpool(detect_waste, classifier, contents)
        category = detection.category
        return DetectionResponse(
            detected_type=category.value,
            label=detection.top.label,
            confidence=detection.top.confidence,
            raw_predictions=detection.predictions,
            suggested_name=generate_waste_name(category.value),
            suggested_quantity=suggest_quantity(category),
            waste_type=category,
        )

    @app.post("/api/ai/test")
    def test_ai_detection(payload: AITestRequest):
        return {
            "success": True,
            "message": "AI detection test successful",
            "received": {
                "hasImageData": bool(payload.image_data),
                "detectedType": payload.detected_type,
                "confidence": payload.confidence,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
            "supportedWasteTypes": category_values(),
        }

    @app.get("/api/ai/stats")
    def get_ai_stats(
        db: Database = Depends(get_db),
        classifier: Classifier = Depends(get_active_classifier),
    ):
        return services.ai_stats(db, classifier.name)

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.port)
