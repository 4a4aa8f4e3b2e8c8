"""
Registration, login and the authenticated user's profile.
"""
