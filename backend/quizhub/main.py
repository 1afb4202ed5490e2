"""FastAPI application entrypoint and HTTP controllers.

This module defines the HTTP endpoints of the quiz backend. Controllers
are intentionally thin: they accept requests, delegate to services, and
return JSON responses.

Endpoints implemented:
- POST /auth/register
- POST /auth/login
- PUT /users/{user_id}/role
- GET, POST /teachers
- POST /questions/check
- GET /quizzes
- POST /quizzes
- GET, PUT, DELETE /quizzes/{quiz_id}
- GET /quizzes/{quiz_id}/definition
- POST /quizzes/{quiz_id}/submit
- GET /quizzes/{quiz_id}/submissions
- GET /health
"""

import json
import logging
import time
import uuid
from typing import Any, Dict, Optional

from fastapi import Body, Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from sqlmodel import Session

from . import models, repositories, services
from .auth import get_optional_user, require_admin, require_author
from .config import SUPPORTED_LANGUAGES, settings
from .database import create_db_and_tables, get_session
from .schemas import QuizSubmissionIn, RegisterIn, RoleIn, TeacherIn
from .utils.question_validation import get_question_validation_summary, validate_question
from .utils.rate_limit import InMemoryRateLimiter

app = FastAPI(title="Quiz API")
logger = logging.getLogger("quizhub.api")
if not logger.handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)
app.state.submit_rate_limiter = InMemoryRateLimiter(max_keys=settings.RATE_LIMIT_MAX_KEYS)

# Wide-open CORS keeps local editor frontends working without extra config in dev.
if settings.ALLOW_DEV_CORS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

create_db_and_tables()


def _client_host(request: Request) -> str:
    return request.client.host if request.client else "unknown"


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    response: Response
    try:
        response = await call_next(request)
    except Exception:
        elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
        logger.exception(
            "request_failed %s",
            json.dumps(
                {
                    "request_id": req_id,
                    "path": request.url.path,
                    "method": request.method,
                    "duration_ms": elapsed_ms,
                    "client": _client_host(request),
                },
                ensure_ascii=True,
            ),
        )
        raise
    response.headers["X-Request-ID"] = req_id
    elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
    if request.url.path.startswith("/quizzes"):
        logger.info(
            "request_done %s",
            json.dumps(
                {
                    "request_id": req_id,
                    "path": request.url.path,
                    "method": request.method,
                    "status_code": response.status_code,
                    "duration_ms": elapsed_ms,
                    "client": _client_host(request),
                },
                ensure_ascii=True,
            ),
        )
    return response


def _language(language: Optional[str]) -> str:
    lang = (language or settings.DEFAULT_LANGUAGE).lower()
    if lang not in SUPPORTED_LANGUAGES:
        raise HTTPException(status_code=400, detail=f"unsupported language: {language}")
    return lang


def _enforce_submit_rate_limit(request: Request) -> None:
    limiter: InMemoryRateLimiter = request.app.state.submit_rate_limiter
    key = _client_host(request)
    allowed, retry_after = limiter.allow(
        key, settings.SUBMIT_RATE_LIMIT_PER_MIN, settings.SUBMIT_RATE_LIMIT_WINDOW_SECONDS
    )
    if not allowed:
        raise HTTPException(
            status_code=429,
            detail=f"rate limit exceeded; retry after {retry_after}s",
            headers={"Retry-After": str(retry_after)},
        )


def _invalid_quiz_response(exc: services.QuizValidationError) -> JSONResponse:
    errors = exc.errors.model_dump(mode="json")
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Invalid quiz definition",
            "summary": str(exc),
            "quiz_errors": errors["quiz_errors"],
            "question_errors": errors["question_errors"],
            "total_error_count": errors["total_error_count"],
        },
    )


@app.post('/auth/register')
def register(payload: RegisterIn, db: Session = Depends(get_session)):
    """Register a new user (idempotent).

    Returns the existing user if the username is already taken so the
    operation can be repeated safely by automation and tests.
    """
    existing = repositories.UserRepository(db).get_by_username(payload.username)
    if existing:
        return {'id': existing.id, 'username': existing.username, 'role': existing.role}
    user = services.AuthService(db).register(payload.username, payload.password)
    return {'id': user.id, 'username': user.username, 'role': user.role}


@app.post('/auth/login')
def login(payload: RegisterIn, db: Session = Depends(get_session)):
    """Authenticate a user and return a short-lived JWT token."""
    token = services.AuthService(db).authenticate(payload.username, payload.password)
    if not token:
        raise HTTPException(status_code=401, detail='invalid credentials')
    return {'access_token': token}


@app.put('/users/{user_id}/role')
def set_user_role(user_id: int, payload: RoleIn, db: Session = Depends(get_session), admin: models.User = Depends(require_admin)):
    try:
        user = services.AuthService(db).set_role(user_id, payload.role)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    logger.info("role_changed user=%s role=%s by=%s", user.id, user.role, admin.id)
    return {'id': user.id, 'username': user.username, 'role': user.role}


@app.post('/teachers')
def create_teacher(payload: TeacherIn, db: Session = Depends(get_session), user: models.User = Depends(require_author)):
    try:
        teacher = services.TeacherService(db).create(payload.name, payload.email)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {'id': teacher.id, 'name': teacher.name, 'email': teacher.email}


@app.get('/teachers')
def list_teachers(db: Session = Depends(get_session)):
    return [{'id': t.id, 'name': t.name, 'email': t.email} for t in services.TeacherService(db).list()]


@app.post('/questions/check')
def check_question(question: Dict[str, Any] = Body(...), user: models.User = Depends(require_author)):
    """Report editor completeness of a single draft question."""
    result = validate_question(question)
    result['summary'] = get_question_validation_summary(question)
    return result


@app.get('/quizzes')
def list_quizzes(language: Optional[str] = None, db: Session = Depends(get_session)):
    return services.QuizService(db).list_quizzes(_language(language))


@app.post('/quizzes', status_code=201)
def create_quiz(payload: Dict[str, Any] = Body(...), db: Session = Depends(get_session), user: models.User = Depends(require_author)):
    """Validate and store a quiz definition.

    Invalid definitions are answered with 422 and the validation issues
    grouped per question, ready for the editor to display.
    """
    try:
        quiz = services.QuizService(db).create_quiz(payload)
    except services.QuizValidationError as e:
        return _invalid_quiz_response(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {'id': quiz.id, 'title': quiz.title, 'questionCount': len(quiz.questions)}


@app.get('/quizzes/{quiz_id}')
def get_quiz(quiz_id: int, language: Optional[str] = None, db: Session = Depends(get_session)):
    """Student view of a quiz in the requested language."""
    lang = _language(language)
    try:
        return services.QuizService(db).student_view(quiz_id, lang)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.get('/quizzes/{quiz_id}/definition')
def get_quiz_definition(quiz_id: int, db: Session = Depends(get_session), user: models.User = Depends(require_author)):
    try:
        return services.QuizService(db).definition(quiz_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.put('/quizzes/{quiz_id}')
def replace_quiz(quiz_id: int, payload: Dict[str, Any] = Body(...), db: Session = Depends(get_session), user: models.User = Depends(require_author)):
    try:
        quiz = services.QuizService(db).replace_quiz(quiz_id, payload)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except services.QuizValidationError as e:
        return _invalid_quiz_response(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {'id': quiz.id, 'title': quiz.title, 'questionCount': len(quiz.questions)}


@app.delete('/quizzes/{quiz_id}', status_code=204)
def delete_quiz(quiz_id: int, db: Session = Depends(get_session), user: models.User = Depends(require_author)):
    try:
        services.QuizService(db).delete_quiz(quiz_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return Response(status_code=204)


@app.post('/quizzes/{quiz_id}/submit')
def submit_quiz(
    quiz_id: int,
    submission: QuizSubmissionIn,
    request: Request,
    db: Session = Depends(get_session),
    user: Optional[models.User] = Depends(get_optional_user),
):
    """Grade a submission.

    Anyone may submit; only submissions of signed-in users are stored.
    """
    _enforce_submit_rate_limit(request)
    grading = services.GradingService(db)
    try:
        result = grading.submit(quiz_id, submission.answers, user.id if user else None)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except services.AnswerFormatError as e:
        return JSONResponse(status_code=422, content={'detail': str(e), 'errors': e.problems})
    return result.model_dump(by_alias=True, mode="json")


@app.get('/quizzes/{quiz_id}/submissions')
def list_submissions(quiz_id: int, db: Session = Depends(get_session), user: models.User = Depends(require_author)):
    try:
        return services.GradingService(db).list_submissions(quiz_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.get("/health")
def health():
    """Lightweight health check for uptime monitoring."""
    return {"status": "ok"}
