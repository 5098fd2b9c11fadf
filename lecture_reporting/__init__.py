"""
Lecture reporting platform backend.

Weekly lecture reports, lecturer and student challenges, module ratings
and the program/module catalog they hang off.
"""
__version__ = "1.0.0"
