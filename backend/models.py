from flask_sqlalchemy import SQLAlchemy
from shared.models import Base, ApplicationRecord, ResponseRecord

db = SQLAlchemy(model_class=Base)

__all__ = ['db', 'ApplicationRecord', 'ResponseRecord']
