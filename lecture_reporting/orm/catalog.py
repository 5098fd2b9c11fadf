"""
lecture_reporting/orm/catalog.py
Faculties, programs and modules - the referential backbone.

Deletion of programs and modules is guarded in the catalog service by
dependency counts; the foreign keys here are the store-level backstop.
"""
from sqlalchemy import Column, Integer, String, ForeignKey, UniqueConstraint, CheckConstraint

from lecture_reporting.orm.base import Base, BaseModel


class Faculty(Base):
    __tablename__ = "faculties"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    name = Column(String(100), nullable=False, unique=True)

    def to_dict(self):
        return {"id": self.id, "name": self.name}


class Program(BaseModel):
    """A degree/diploma track within a faculty, identified by a unique code."""
    __tablename__ = "programs"

    code = Column(String(20), nullable=False, unique=True, index=True)
    name = Column(String(150), nullable=False)
    faculty_id = Column(Integer, ForeignKey("faculties.id"), nullable=True, index=True)
    # Plain column: users.program_id already references programs
    created_by = Column(Integer, nullable=True)

    def __repr__(self):
        return f"<Program(id={self.id}, code='{self.code}')>"

    def to_dict(self):
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "faculty_id": self.faculty_id,
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class Module(BaseModel):
    """
    A single course/subject within a program.

    faculty_id is denormalized from the program at creation time.
    """
    __tablename__ = "modules"

    name = Column(String(200), nullable=False)
    program_id = Column(Integer, ForeignKey("programs.id"), nullable=False, index=True)
    faculty_id = Column(Integer, ForeignKey("faculties.id"), nullable=True, index=True)
    total_registered_students = Column(Integer, nullable=False)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    __table_args__ = (
        UniqueConstraint("name", "program_id", name="uq_module_name_program"),
        CheckConstraint("total_registered_students >= 1", name="ck_module_min_students"),
    )

    def __repr__(self):
        return f"<Module(id={self.id}, name='{self.name}', program_id={self.program_id})>"

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "program_id": self.program_id,
            "faculty_id": self.faculty_id,
            "total_registered_students": self.total_registered_students,
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
