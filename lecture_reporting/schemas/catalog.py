"""
lecture_reporting/schemas/catalog.py
Programs, modules and lecture assignments.

*Update models are partial: only fields present in the request body are
applied (read them with `model_dump(exclude_unset=True)`).
"""
from typing import Optional

from pydantic import BaseModel, Field


class ProgramCreate(BaseModel):
    code: Optional[str] = Field(None, description="Unique program code, e.g. SE101")
    name: Optional[str] = None
    faculty_id: Optional[int] = None


class ProgramUpdate(BaseModel):
    code: Optional[str] = None
    name: Optional[str] = None
    faculty_id: Optional[int] = None


class ModuleCreate(BaseModel):
    name: Optional[str] = None
    program_id: Optional[int] = None
    faculty_id: Optional[int] = Field(None, description="Defaults to the program's faculty")
    total_registered_students: Optional[int] = None


class ModuleUpdate(BaseModel):
    name: Optional[str] = None
    program_id: Optional[int] = None
    faculty_id: Optional[int] = None
    total_registered_students: Optional[int] = None


class AssignmentCreate(BaseModel):
    module_id: Optional[int] = None
    program_id: Optional[int] = None
    lecturer_id: Optional[int] = None


class AssignmentUpdate(BaseModel):
    module_id: Optional[int] = None
    program_id: Optional[int] = None
    lecturer_id: Optional[int] = None
