"""
Document Requests module - Student document requests and their processing.
"""
