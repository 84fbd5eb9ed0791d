"""
Onboarder
Shared SQLAlchemy handle.

Usage:
    from onboarder.models import db
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
