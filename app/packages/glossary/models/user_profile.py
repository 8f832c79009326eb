"""用户资料模型：免密登录后按邮箱建立，角色决定是否可以进行审核操作。"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from app.packages.glossary.core.constants import DEFAULT_USER_ROLE
from app.packages.glossary.models.base import Base, CreatedAtMixin, UUIDPrimaryKeyMixin


class UserProfile(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    __tablename__ = "user_profiles"

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=DEFAULT_USER_ROLE)
    last_sign_in_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
