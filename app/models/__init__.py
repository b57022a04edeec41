from .user import User, UserRole, user_managers
from .todo import Todo
