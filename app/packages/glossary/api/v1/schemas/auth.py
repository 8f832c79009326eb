"""认证相关的请求与响应模型。"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from app.packages.glossary.api.v1.schemas.common import ResponseEnvelope


class SignInRequest(BaseModel):
    email: str = Field(..., max_length=255)


class SignInData(BaseModel):
    email: str


class UserProfileItem(BaseModel):
    id: str
    email: str
    role: str
    is_admin: bool
    created_at: Optional[str] = None
    last_sign_in_at: Optional[str] = None


class TokenResponseData(BaseModel):
    """兑换登录链接后签发的令牌信息。"""

    access_token: str
    token_type: Literal["bearer"]
    user: UserProfileItem


class SessionData(BaseModel):
    user: UserProfileItem


SignInResponse = ResponseEnvelope[SignInData]
TokenResponse = ResponseEnvelope[TokenResponseData]
SessionResponse = ResponseEnvelope[SessionData]
SignOutResponse = ResponseEnvelope[None]
