# pdf_mailer/models/__init__.py

from .submission import Submission

__all__ = ["Submission"]
