from pydantic import BaseModel

class LoginRequest(BaseModel):
    email: str
    password: str

class AuthData(BaseModel):
    token: str
    user_id: str
    token_type: str = "bearer"
