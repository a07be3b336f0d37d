"""
Tirumala Residency HMS - booking, folio and front-desk backend
"""
__version__ = "1.0.0"
