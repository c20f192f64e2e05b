"""Pydantic request models for the ConverText API."""

from typing import List, Optional

from pydantic import BaseModel


class EvaluateRequest(BaseModel):
    text: str
    task_description: str
    example_output: Optional[str] = None


class ConvertRequest(BaseModel):
    text: str
    task_description: str
    example_output: Optional[str] = None
    tool_args: Optional[List[str]] = None
    owner_id: str = "default"


class RoutineCreateRequest(BaseModel):
    name: Optional[str] = None
    owner_id: str = "default"


class StepCreateRequest(BaseModel):
    text: str = ""
    task_description: str = ""
    example_output: Optional[str] = None
    run: bool = False
    tool_args: Optional[List[str]] = None


class StepRunRequest(BaseModel):
    tool_args: Optional[List[str]] = None


class StepSubmitRequest(BaseModel):
    task_description: str
    example_output: Optional[str] = None
    text: Optional[str] = None
    tool_args: Optional[List[str]] = None


class TemplateCreateRequest(BaseModel):
    execution_id: str
    name: str
    description: str = ""


class TemplateReplayRequest(BaseModel):
    owner_id: str = "default"
