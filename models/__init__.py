from models.user import User
from models.micropost import Micropost
from models.relationship import Relationship

__all__ = ['User', 'Micropost', 'Relationship']
