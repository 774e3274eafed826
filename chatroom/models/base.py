"""
Declarative base for the SQL store tables
"""
from sqlalchemy.orm import declarative_base

Base = declarative_base()
