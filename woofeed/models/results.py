from __future__ import annotations

from typing import Any, List, Literal, Optional

from pydantic import BaseModel

FieldStatus = Literal["pass", "error", "warning", "missing", "skipped"]


class FieldIssue(BaseModel):
    field: str
    error: str


class ValidationResult(BaseModel):
    is_valid: bool
    errors: List[FieldIssue] = []
    warnings: List[FieldIssue] = []


class CommonError(BaseModel):
    error: str
    count: int


class ValidationSummary(BaseModel):
    total: int = 0
    invalid: int = 0
    with_warnings: int = 0
    total_errors: int = 0
    total_warnings: int = 0
    common_errors: List[CommonError] = []


class FieldResult(BaseModel):
    attribute: str
    requirement: str
    status: FieldStatus
    value: Any = None
    message: Optional[str] = None
    description: str = ""


class CategoryScore(BaseModel):
    key: str
    label: str
    order: int
    score: int
    fields: List[FieldResult] = []


class ScoreResult(BaseModel):
    overall: int
    grade: str
    error_count: int = 0
    warning_count: int = 0
    passed_count: int = 0
    total_fields_checked: int = 0
    category_scores: List[CategoryScore] = []
    no_data_found: bool = False
