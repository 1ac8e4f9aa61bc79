"""
FastAPI dependencies for the process-scoped collaborators built in the
application lifespan (completion client, document storage).
"""
from fastapi import Depends, Request

from app.core.config import Settings, get_settings
from app.services.completion_client import CompletionClient
from app.services.document_storage import LocalDocumentStorage
from app.services.question_generator import QuestionGenerator


def get_completion_client(request: Request) -> CompletionClient:
    return request.app.state.completion_client


def get_document_storage(request: Request) -> LocalDocumentStorage:
    return request.app.state.document_storage


def get_question_generator(
    client: CompletionClient = Depends(get_completion_client),
    settings: Settings = Depends(get_settings),
) -> QuestionGenerator:
    return QuestionGenerator(client, summary_temperature=settings.summary_temperature)
