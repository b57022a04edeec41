from pydantic import BaseModel

class ManagerEdgeCreate(BaseModel):
    manager_id: int

class OperationResult(BaseModel):
    success: bool = True
    message: str = ""
