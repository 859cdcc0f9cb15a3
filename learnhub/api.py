from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse, Response
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR

from learnhub.config import SessionLocal, create_db, settings
from learnhub.routes.achievement_routes import achievement_routes
from learnhub.routes.auth_routes import auth_routes
from learnhub.routes.game_routes import game_routes
from learnhub.routes.learning_path_routes import learning_path_routes
from learnhub.routes.progress_routes import progress_routes
from learnhub.routes.user_routes import user_routes
from learnhub.services.achievement_evaluator import seed_achievements
from learnhub.services.learning_paths import seed_learning_paths
from learnhub.utils.logger import clear_request_id, configure_logging, set_request_id

logger = configure_logging(log_dir=settings.LOG_DIR, level=settings.LOG_LEVEL)


def seed_catalog() -> int:
    db = SessionLocal()
    try:
        created = seed_achievements(db)
        paths = seed_learning_paths(db)
        db.commit()
        return created + paths
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db()
    if settings.SEED_ACHIEVEMENTS_ON_STARTUP:
        logger.info("catalog ready created=%s", seed_catalog())
    yield


app = FastAPI(title="LearnHub", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_logger(request: Request, call_next):
    rid = set_request_id(request.headers.get("x-request-id"))
    try:
        logger.info("request start method=%s path=%s client=%s", request.method, request.url.path, request.client)
        response: Response = await call_next(request)
        logger.info("request end status=%s method=%s path=%s", response.status_code, request.method, request.url.path)
        response.headers["x-request-id"] = rid
        return response
    except Exception:
        logger.exception("request error method=%s path=%s", request.method, request.url.path)
        raise
    finally:
        clear_request_id()


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    # Log server-side errors with stack traces; client errors as warnings.
    if exc.status_code >= 500:
        logger.exception("http error status=%s method=%s path=%s detail=%s", exc.status_code, request.method, request.url.path, exc.detail)
    else:
        logger.warning("http error status=%s method=%s path=%s detail=%s", exc.status_code, request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("validation error method=%s path=%s errors=%s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=422, content={"detail": jsonable_errors(exc)})


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    # ctx may carry the raw exception object, which is not JSON serializable.
    return [{k: v for k, v in err.items() if k != "ctx"} for err in exc.errors()]


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    # Never leak internal exception details to clients.
    logger.exception("unhandled error method=%s path=%s", request.method, request.url.path)
    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal Server Error"},
    )


@app.get("/")
async def read_root():
    return {"message": "LearnHub is Healthy"}

app.include_router(auth_routes, prefix="/auth")
app.include_router(progress_routes, prefix="/progress")
app.include_router(achievement_routes, prefix="/achievements")
app.include_router(game_routes, prefix="/games")
app.include_router(learning_path_routes, prefix="/learning-paths")
app.include_router(user_routes)


def main() -> None:
    uvicorn.run("learnhub.api:app", host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
