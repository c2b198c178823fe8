"""
Creator accounts.

Registration and login are handled outside this application; any flow that
establishes a Flask-Login session for a ``User`` authenticates a creator.
"""
