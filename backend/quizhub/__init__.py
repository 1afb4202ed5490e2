"""Application package for the quiz authoring and grading backend.

This package exposes the quiz core (question types, option content,
validation grouping and scoring) together with the service, repository
and model modules used by the FastAPI application. Individual modules
contain the concrete implementations and documentation.
"""
