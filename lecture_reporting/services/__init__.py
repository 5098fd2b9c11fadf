"""
lecture_reporting/services
One module per workflow. Every function takes the session as its first argument.
"""
