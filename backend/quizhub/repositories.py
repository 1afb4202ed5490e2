"""Repository classes encapsulating database operations.

Each repository is small and focused on a single aggregate (users,
teachers, quizzes, submissions). Repositories return SQLModel objects
and perform commits/refreshes where appropriate.
"""

from typing import List, Optional

from sqlmodel import Session, select

from . import models


class UserRepository:
    """CRUD operations for `User` objects."""
    def __init__(self, session: Session):
        self.session = session

    def create(self, user: models.User) -> models.User:
        """Persist a new user and return the managed instance."""
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user

    def get_by_username(self, username: str) -> Optional[models.User]:
        """Return a `User` by username or `None` if not found."""
        stmt = select(models.User).where(models.User.username == username)
        return self.session.exec(stmt).first()

    def get(self, user_id: int) -> Optional[models.User]:
        """Get a `User` by primary key."""
        return self.session.get(models.User, user_id)

    def set_role(self, user: models.User, role: str) -> models.User:
        user.role = role
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user


class TeacherRepository:
    def __init__(self, session: Session):
        self.session = session

    def create(self, teacher: models.Teacher) -> models.Teacher:
        self.session.add(teacher)
        self.session.commit()
        self.session.refresh(teacher)
        return teacher

    def get(self, teacher_id: int) -> Optional[models.Teacher]:
        return self.session.get(models.Teacher, teacher_id)

    def list(self) -> List[models.Teacher]:
        return self.session.exec(select(models.Teacher).order_by(models.Teacher.name)).all()


class QuizRepository:
    """CRUD operations for `Quiz` aggregates (questions and options included)."""
    def __init__(self, session: Session):
        self.session = session

    def create(self, quiz: models.Quiz) -> models.Quiz:
        """Persist a quiz header and return the managed instance."""
        self.session.add(quiz)
        self.session.commit()
        self.session.refresh(quiz)
        return quiz

    def add_question(self, question: models.Question, options: List[models.Option]) -> models.Question:
        """Create a question and attach provided options.

        The question is flushed first to obtain an id, then options are
        attached. For single choice questions the first option marked
        correct becomes `correct_option_id`.
        """
        self.session.add(question)
        self.session.flush()
        for opt in options:
            opt.question_id = question.id
            self.session.add(opt)
        self.session.flush()
        if question.question_type == "SINGLE_CHOICE":
            correct = next((o for o in options if o.correct), None)
            question.correct_option_id = correct.id if correct else None
            self.session.add(question)
        return question

    def clear_questions(self, quiz: models.Quiz) -> None:
        """Delete every question (and its options) of `quiz`."""
        for question in list(quiz.questions):
            for opt in list(question.options):
                self.session.delete(opt)
            self.session.delete(question)
        self.session.flush()
        self.session.refresh(quiz)

    def commit(self, quiz: models.Quiz) -> models.Quiz:
        self.session.add(quiz)
        self.session.commit()
        self.session.refresh(quiz)
        return quiz

    def get(self, quiz_id: int) -> Optional[models.Quiz]:
        """Fetch a quiz by id."""
        return self.session.get(models.Quiz, quiz_id)

    def list(self) -> List[models.Quiz]:
        return self.session.exec(select(models.Quiz).order_by(models.Quiz.created_at.desc())).all()

    def delete(self, quiz: models.Quiz) -> None:
        """Delete a quiz; questions, options and submissions cascade."""
        self.session.delete(quiz)
        self.session.commit()


class SubmissionRepository:
    """Persist and query quiz submissions."""
    def __init__(self, session: Session):
        self.session = session

    def create(self, submission: models.QuizSubmission) -> int:
        """Store a `QuizSubmission` and return the id assigned at flush."""
        self.session.add(submission)
        self.session.flush()
        submission_id = submission.id
        self.session.commit()
        return submission_id

    def list_for_quiz(self, quiz_id: int) -> List[models.QuizSubmission]:
        stmt = (
            select(models.QuizSubmission)
            .where(models.QuizSubmission.quiz_id == quiz_id)
            .order_by(models.QuizSubmission.created_at.desc())
        )
        return self.session.exec(stmt).all()
