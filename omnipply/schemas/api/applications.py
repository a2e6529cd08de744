from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field


class StartApplicationRequest(BaseModel):
    program_id: str = Field(..., description="Program to apply to")


class AnswersPayload(BaseModel):
    """Answers keyed by question key; free-form values."""

    answers: Dict[str, Any] = Field(default_factory=dict)


class ApplicationView(BaseModel):
    """Application with its schema and answers reconciled against it."""

    application: Dict[str, Any]
    schema_fields: List[Dict[str, Any]] = Field(default_factory=list, alias="schema")
    answers: Dict[str, Any] = Field(default_factory=dict)
    rendered: List[Tuple[str, str]] = Field(default_factory=list, description="(label, display) rows")
    word_counts: Dict[str, str] = Field(default_factory=dict, description="\"12/100 words\" per word-limited question")

    model_config = {"populate_by_name": True}


class SubmitResponse(BaseModel):
    submitted: bool
    result: Optional[Any] = None
