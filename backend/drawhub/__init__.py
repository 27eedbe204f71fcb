"""DrawHub - engineering drawing upload and review service"""

__version__ = "1.0.0"
