"""
lecture_reporting/routes
HTTP routers, one per workflow, mounted under /api by main.py.
"""
