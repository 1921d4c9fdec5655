import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import Body, FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

import database
from schemas import PoemCreate

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

POEMS_PATH = "/api/poems"
POEMS_COLLECTION = "poems"

# CORS setup
CORS_ORIGIN = os.getenv("CORS_ORIGIN", "*")

MISSING_FIELDS_ERROR = "Missing required fields: title and content."


def cors_headers() -> dict:
    return {
        "Access-Control-Allow-Credentials": "true",
        "Access-Control-Allow-Origin": CORS_ORIGIN,
        "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type",
    }


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    database.reset_db()


# App setup
app = FastAPI(title="Poems API", lifespan=lifespan)


@app.middleware("http")
async def error_boundary(request: Request, call_next):
    """Turn unexpected failures into a generic 500 and attach CORS headers."""
    try:
        response = await call_next(request)
    except Exception:
        logger.exception("API error on %s %s", request.method, request.url.path)
        response = error_response(500, "Internal Server Error")
    response.headers.update(cors_headers())
    return response


@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 405:
        return error_response(405, "Method not allowed")
    return error_response(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def invalid_body(request: Request, exc: RequestValidationError):
    return error_response(400, "Invalid JSON body.")


@app.options(POEMS_PATH, status_code=204)
def preflight():
    return Response(status_code=204)


@app.get(POEMS_PATH)
def list_poems():
    # newest first
    return database.get_documents(POEMS_COLLECTION, sort_field="createdAt")


@app.post(POEMS_PATH, status_code=201)
def create_poem(body: Any = Body(None)):
    if not isinstance(body, dict):
        body = {}
    try:
        poem = PoemCreate.model_validate(body)
    except ValidationError:
        return error_response(400, MISSING_FIELDS_ERROR)

    new_id = database.create_document(POEMS_COLLECTION, poem.to_document(datetime.now(timezone.utc)))
    logger.info("Poem created: %s", new_id)
    return {"message": "Poem created", "id": new_id}


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
