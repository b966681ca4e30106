"""
Declarative base for all LabOps models
"""
from sqlalchemy.orm import declarative_base

Base = declarative_base()
