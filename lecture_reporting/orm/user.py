"""
lecture_reporting/orm/user.py
User accounts and the closed role enumeration.

The role is fixed at signup; there is no role-change operation.
"""
from enum import Enum

from sqlalchemy import Column, Integer, String, ForeignKey

from lecture_reporting.orm.base import BaseModel, enum_column_type


class UserRole(str, Enum):
    """User roles - closed set, values match the stored/display names"""
    lecturer = "Lecturer"
    program_leader = "Program Leader"
    principal_lecturer = "Principal Lecturer"
    student = "Student"


class User(BaseModel):
    """
    Platform user.

    Students must carry a program_id: module access for student challenges
    and module ratings is granted through program membership.
    """
    __tablename__ = "users"

    name = Column(String(100), nullable=False)
    email = Column(String(150), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(enum_column_type(UserRole, "user_role"), nullable=False, index=True)

    faculty_id = Column(
        Integer,
        ForeignKey("faculties.id"),
        nullable=True,
        index=True
    )
    program_id = Column(
        Integer,
        ForeignKey("programs.id"),
        nullable=True,
        index=True
    )

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role={self.role})>"

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value if self.role else None,
            "faculty_id": self.faculty_id,
            "program_id": self.program_id,
        }
