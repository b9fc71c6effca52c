"""
Students module - Student accounts and the admin actions on them.
"""
