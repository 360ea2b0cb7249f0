"""
Animals module (admin catalogue with optional photo).
"""
