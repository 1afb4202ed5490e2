"""CLI script to validate a quiz definition (JSON) and store it in the backend DB.
Usage: python scripts/import_quiz.py FILE --teacher-id ID [--dry-run]
"""
import sys
import argparse
import json
import pathlib
# Ensure `backend/` is on sys.path so `quizhub` package imports work when running this script directly
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
from sqlmodel import Session
from quizhub.database import create_db_and_tables, engine
from quizhub import services
from quizhub.utils.validation_errors import format_error_path


def print_errors(exc: services.QuizValidationError) -> None:
    """Print the validation summary followed by one breadcrumb line per issue."""
    print(str(exc))
    for issue in exc.errors.quiz_errors:
        print(f'  {format_error_path(issue.path)}: {issue.message}')
    for index in sorted(exc.errors.question_errors):
        for issue in exc.errors.question_errors[index]:
            print(f'  {format_error_path(issue.path)}: {issue.message}')


def main(path: pathlib.Path, teacher_id: str, dry_run: bool = False) -> int:
    """Validate `path` and, unless `dry_run`, persist it for `teacher_id`.

    Returns a process exit code: 0 on success, 1 for an unreadable file
    and 2 for an invalid definition.
    """
    try:
        payload = json.loads(path.read_text(encoding='utf-8'))
    except (OSError, json.JSONDecodeError) as e:
        print(f'Cannot read {path}: {e}')
        return 1
    if not isinstance(payload, dict):
        print(f'{path} must contain a JSON object')
        return 1
    payload['teacherId'] = teacher_id
    create_db_and_tables()
    with Session(engine) as session:
        svc = services.QuizService(session)
        try:
            if dry_run:
                quiz_in = svc.validate(payload)
                print(f'Valid quiz "{quiz_in.title}" with {len(quiz_in.questions)} question(s); nothing stored')
                return 0
            quiz = svc.create_quiz(payload)
        except services.QuizValidationError as e:
            print_errors(e)
            return 2
        except ValueError as e:
            print(f'Error importing {path}: {e}')
            return 1
        print(f'Imported {path}: quiz {quiz.id} with {len(quiz.questions)} question(s)')
    return 0


if __name__ == '__main__':
    parser = argparse.ArgumentParser()
    parser.add_argument('file', type=pathlib.Path, help='Quiz definition in JSON')
    parser.add_argument('--teacher-id', required=True, help='Owning teacher id')
    parser.add_argument('--dry-run', action='store_true', help='Validate only, do not store')
    args = parser.parse_args()
    sys.exit(main(args.file, args.teacher_id, dry_run=args.dry_run))
