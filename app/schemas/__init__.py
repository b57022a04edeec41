from .user import UserCreate, UserLogin, UserUpdate, UserOut, UserBasic, UserDetail, UserCreated, ManagerRef, PasswordChange, PasswordReset
from .tokens import Token
from .todo import TodoCreate, TodoCompletion, TodoReassign, TodoOut
from .hierarchy import ManagerEdgeCreate, OperationResult
