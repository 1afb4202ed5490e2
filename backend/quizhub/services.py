"""Business logic services used by HTTP controllers.

This module holds small service classes that coordinate repositories and
the pure helpers in `utils`. Services are intentionally thin: they
perform validation, execute domain logic and persist aggregates via
repositories. Controllers translate the exceptions raised here into HTTP
responses.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Mapping, Optional

import jwt
from passlib.context import CryptContext
from sqlmodel import Session

from . import models, repositories
from .config import settings
from .schemas import (
    Answer,
    GroupedValidationErrors,
    QuestionIn,
    QuestionType,
    QuizIn,
    Role,
    SubmissionResult,
    camel_alias,
)
from .utils.option_content import get_localized_option_text, get_option_image_url
from .utils.option_transformers import db_options_to_app, app_options_to_db_inputs
from .utils.question_types import create_default_multiple_choice_data, validate_answer_format
from .utils.quiz_schema import validate_quiz_payload
from .utils.scoring import ScorableOption, ScorableQuestion, score_quiz, to_submission_result
from .utils.validation_errors import get_validation_summary, parse_validation_errors

PWD_CTX = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

logger = logging.getLogger("quizhub.grading")
authoring_logger = logging.getLogger("quizhub.authoring")

# Stored with every submission so readers can tell the answers layout apart.
SUBMISSION_FORMAT_VERSION = "2.0"

# Keys under which each question type keeps its configuration in `answers_data`.
TYPE_DATA_FIELDS = {
    QuestionType.MULTIPLE_CHOICE: "multiple_choice_data",
    QuestionType.TEXT_INPUT: "text_input_data",
    QuestionType.DROPDOWN: "dropdown_data",
    QuestionType.ORDERING: "ordering_data",
    QuestionType.MATCHING: "matching_data",
}


class QuizValidationError(ValueError):
    """Raised when an authoring payload fails validation."""
    def __init__(self, errors: GroupedValidationErrors):
        super().__init__(get_validation_summary(errors))
        self.errors = errors


class AnswerFormatError(ValueError):
    """Raised when submitted answers do not have the shape their questions expect."""
    def __init__(self, problems: List[dict]):
        super().__init__(f"{len(problems)} answer(s) have an invalid format")
        self.problems = problems


def _localized(obj, field: str, language: str) -> Optional[str]:
    """Pick `<field>_<language>` when set, falling back to the base field."""
    if language != "en":
        value = getattr(obj, f"{field}_{language}", None)
        if value:
            return value
    return getattr(obj, field, None)


class AuthService:
    """Authentication related operations (register + authenticate)."""
    def __init__(self, session: Session):
        self.session = session
        self.user_repo = repositories.UserRepository(session)

    def register(self, username: str, password: str) -> models.User:
        """Create a new user with a hashed password.

        Usernames listed in `ADMIN_USERNAMES` are created as ADMIN; every
        other account starts as USER. Returns the persisted `User`.
        """
        hashed = PWD_CTX.hash(password)
        role = Role.ADMIN if username in settings.ADMIN_USERNAMES else Role.USER
        u = models.User(username=username, password_hash=hashed, role=role.value)
        return self.user_repo.create(u)

    def authenticate(self, username: str, password: str):
        """Verify credentials and return a signed JWT token on success.

        Returns `None` if authentication fails.
        """
        user = self.user_repo.get_by_username(username)
        if not user:
            return None
        if not PWD_CTX.verify(password, user.password_hash):
            return None
        expire = datetime.now(timezone.utc) + timedelta(hours=settings.JWT_EXPIRE_HOURS)
        payload = {"user_id": user.id, "username": user.username, "role": user.role, "exp": int(expire.timestamp())}
        return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)

    def set_role(self, user_id: int, role: Role) -> models.User:
        user = self.user_repo.get(user_id)
        if not user:
            raise LookupError(f"user not found: {user_id}")
        return self.user_repo.set_role(user, role.value)


class QuizService:
    """Author quizzes and present them to students."""
    def __init__(self, session: Session):
        self.session = session
        self.quiz_repo = repositories.QuizRepository(session)
        self.teacher_repo = repositories.TeacherRepository(session)

    def validate(self, payload: Mapping) -> QuizIn:
        """Parse an authoring payload or raise `QuizValidationError`."""
        quiz_in, issues = validate_quiz_payload(payload)
        if quiz_in is None:
            errors = parse_validation_errors(issues)
            authoring_logger.info("quiz_rejected errors=%d", errors.total_error_count)
            raise QuizValidationError(errors)
        return quiz_in

    def _teacher(self, teacher_id: str) -> models.Teacher:
        teacher = self.teacher_repo.get(int(teacher_id)) if teacher_id.isdigit() else None
        if not teacher:
            raise ValueError(f"teacher not found: {teacher_id}")
        return teacher

    def _add_questions(self, quiz: models.Quiz, questions: List[QuestionIn]) -> None:
        for position, q in enumerate(questions, start=1):
            data_field = TYPE_DATA_FIELDS.get(q.question_type)
            data = getattr(q, data_field) if data_field else None
            if q.question_type == QuestionType.MULTIPLE_CHOICE and data is None:
                data = create_default_multiple_choice_data()
            question = models.Question(
                quiz_id=quiz.id,
                position=position,
                text=q.text,
                text_sl=q.text_sl,
                text_hr=q.text_hr,
                question_type=q.question_type.value,
                answers_data=data.model_dump(by_alias=True, mode="json") if data is not None else None,
            )
            options = []
            for row in app_options_to_db_inputs(q.options):
                row.pop("id")
                options.append(models.Option(**row))
            self.quiz_repo.add_question(question, options)

    def create_quiz(self, payload: Mapping) -> models.Quiz:
        """Validate and persist a new quiz with its questions and options."""
        quiz_in = self.validate(payload)
        teacher = self._teacher(quiz_in.teacher_id)
        quiz = self.quiz_repo.create(models.Quiz(
            title=quiz_in.title,
            title_sl=quiz_in.title_sl,
            title_hr=quiz_in.title_hr,
            description=quiz_in.description,
            description_sl=quiz_in.description_sl,
            description_hr=quiz_in.description_hr,
            teacher_id=teacher.id,
        ))
        self._add_questions(quiz, quiz_in.questions)
        quiz = self.quiz_repo.commit(quiz)
        authoring_logger.info("quiz_created id=%s questions=%d", quiz.id, len(quiz_in.questions))
        return quiz

    def replace_quiz(self, quiz_id: int, payload: Mapping) -> models.Quiz:
        """Replace header and questions of an existing quiz.

        Earlier submissions are kept; they store their own score snapshot.
        """
        quiz = self.get_quiz(quiz_id)
        quiz_in = self.validate(payload)
        teacher = self._teacher(quiz_in.teacher_id)
        for field in ("title", "title_sl", "title_hr", "description", "description_sl", "description_hr"):
            setattr(quiz, field, getattr(quiz_in, field))
        quiz.teacher_id = teacher.id
        self.quiz_repo.clear_questions(quiz)
        self._add_questions(quiz, quiz_in.questions)
        quiz = self.quiz_repo.commit(quiz)
        authoring_logger.info("quiz_replaced id=%s questions=%d", quiz.id, len(quiz_in.questions))
        return quiz

    def delete_quiz(self, quiz_id: int) -> None:
        self.quiz_repo.delete(self.get_quiz(quiz_id))
        authoring_logger.info("quiz_deleted id=%s", quiz_id)

    def get_quiz(self, quiz_id: int) -> models.Quiz:
        quiz = self.quiz_repo.get(quiz_id)
        if not quiz:
            raise LookupError(f"quiz not found: {quiz_id}")
        return quiz

    def list_quizzes(self, language: str) -> List[dict]:
        return [
            {
                "id": quiz.id,
                "title": _localized(quiz, "title", language),
                "description": _localized(quiz, "description", language),
                "teacherId": quiz.teacher_id,
                "questionCount": len(quiz.questions),
            }
            for quiz in self.quiz_repo.list()
        ]

    def student_view(self, quiz_id: int, language: str) -> dict:
        """Localized quiz for answering; correctness is never included."""
        quiz = self.get_quiz(quiz_id)
        questions = []
        for q in quiz.questions:
            item = {
                "id": str(q.id),
                "text": _localized(q, "text", language),
                "questionType": q.question_type,
                "options": [
                    {
                        "id": option.id,
                        "text": get_localized_option_text(option, language),
                        "imageUrl": get_option_image_url(option),
                    }
                    for option in db_options_to_app(q.options)
                ],
            }
            if q.question_type == QuestionType.MULTIPLE_CHOICE.value and q.answers_data:
                item["multipleChoiceData"] = {
                    key: q.answers_data.get(key) for key in ("minSelections", "maxSelections", "scoringMethod")
                }
            questions.append(item)
        return {
            "id": quiz.id,
            "title": _localized(quiz, "title", language),
            "description": _localized(quiz, "description", language),
            "questions": questions,
        }

    def definition(self, quiz_id: int) -> dict:
        """Full authoring representation, suitable for a `PUT` round trip."""
        quiz = self.get_quiz(quiz_id)
        questions = []
        for q in quiz.questions:
            item = {
                "id": str(q.id),
                "text": q.text,
                "text_sl": q.text_sl,
                "text_hr": q.text_hr,
                "questionType": q.question_type,
                "options": [o.model_dump(by_alias=True, mode="json") for o in db_options_to_app(q.options)],
            }
            data_field = TYPE_DATA_FIELDS.get(QuestionType(q.question_type))
            if data_field and q.answers_data is not None:
                item[camel_alias(data_field)] = q.answers_data
            questions.append(item)
        return {
            "id": quiz.id,
            "title": quiz.title,
            "title_sl": quiz.title_sl,
            "title_hr": quiz.title_hr,
            "description": quiz.description,
            "description_sl": quiz.description_sl,
            "description_hr": quiz.description_hr,
            "teacherId": str(quiz.teacher_id),
            "questions": questions,
        }


class GradingService:
    """Grade submitted quizzes and persist results."""
    def __init__(self, session: Session):
        self.session = session
        self.quiz_repo = repositories.QuizRepository(session)
        self.submission_repo = repositories.SubmissionRepository(session)

    @staticmethod
    def _scorable(question: models.Question) -> ScorableQuestion:
        return ScorableQuestion(
            id=str(question.id),
            question_type=question.question_type,
            answers_data=question.answers_data,
            options=[ScorableOption(id=str(o.id), correct=o.correct) for o in question.options],
            correct_option_id=str(question.correct_option_id) if question.correct_option_id is not None else None,
        )

    @staticmethod
    def check_answer_formats(quiz: models.Quiz, answers: Mapping[str, Answer]) -> List[dict]:
        """Return `{questionId, error}` entries for answers with the wrong shape."""
        problems = []
        for question in quiz.questions:
            key = str(question.id)
            if key not in answers:
                continue
            check = validate_answer_format(question.question_type, answers[key])
            if not check.is_valid:
                problems.append({"questionId": key, "error": check.error})
        return problems

    def submit(self, quiz_id: int, answers: Dict[str, Answer], user_id: Optional[int] = None) -> SubmissionResult:
        """Score `answers` against the stored quiz.

        Anonymous submissions are scored but not stored. For an
        authenticated user the submission is persisted; a failed write is
        logged and the score is still returned.
        """
        quiz = self.quiz_repo.get(quiz_id)
        if not quiz:
            raise LookupError(f"quiz not found: {quiz_id}")
        problems = self.check_answer_formats(quiz, answers)
        if problems:
            raise AnswerFormatError(problems)
        score = score_quiz([self._scorable(q) for q in quiz.questions], answers)
        submission_id = None
        if user_id is not None:
            submission = models.QuizSubmission(
                quiz_id=quiz.id,
                user_id=user_id,
                score=score.percentage,
                answers={
                    "submittedAnswers": answers,
                    "scoreDetails": score.model_dump(by_alias=True, mode="json"),
                    "version": SUBMISSION_FORMAT_VERSION,
                },
            )
            try:
                submission_id = self.submission_repo.create(submission)
            except Exception:
                self.session.rollback()
                logger.exception("submission_persist_failed quiz=%s user=%s", quiz.id, user_id)
        logger.info(
            "quiz_graded quiz=%s score=%.1f correct=%d/%d",
            quiz.id, score.percentage, score.correct_questions, score.total_questions,
        )
        return to_submission_result(score, submission_id)

    def list_submissions(self, quiz_id: int) -> List[dict]:
        if not self.quiz_repo.get(quiz_id):
            raise LookupError(f"quiz not found: {quiz_id}")
        return [
            {
                "id": s.id,
                "userId": s.user_id,
                "score": s.score,
                "answers": s.answers,
                "createdAt": s.created_at.isoformat(),
            }
            for s in self.submission_repo.list_for_quiz(quiz_id)
        ]


class TeacherService:
    def __init__(self, session: Session):
        self.session = session
        self.teacher_repo = repositories.TeacherRepository(session)

    def create(self, name: str, email: Optional[str] = None) -> models.Teacher:
        if not name or not name.strip():
            raise ValueError("teacher name is required")
        return self.teacher_repo.create(models.Teacher(name=name.strip(), email=email))

    def list(self) -> List[models.Teacher]:
        return self.teacher_repo.list()
