"""
StringWizard gateway front.

FastAPI application serving the generated routing table.
"""
