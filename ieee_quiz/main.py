import logging
import time
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request

from ieee_quiz.config import get_settings
from ieee_quiz.database import init_db
from ieee_quiz.errors import QuizError, quiz_error_handler
from ieee_quiz.questions import get_question_bank
from ieee_quiz.routers import contact, leaderboard, quiz, user

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    # Fail at startup rather than on the first quiz request
    get_question_bank()
    yield


app = FastAPI(
    title="IEEE Daily Quiz",
    description="Daily IEEE quiz with XP, badges and a leaderboard",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_exception_handler(QuizError, quiz_error_handler)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info("%s %s -> %d (%.1f ms)", request.method, request.url.path, response.status_code, elapsed_ms)
    return response


# Routers
app.include_router(user.router)
app.include_router(quiz.router)
app.include_router(leaderboard.router)
app.include_router(contact.router)


@app.get("/health")
async def health():
    return {"status": "ok"}


def run():
    uvicorn.run("ieee_quiz.main:app", host=settings.app_host, port=settings.app_port)


if __name__ == "__main__":
    run()
