"""用户资料的数据库访问方法。"""

from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from app.packages.glossary.crud.base import CRUDBase
from app.packages.glossary.models.user_profile import UserProfile


class CRUDUserProfile(CRUDBase[UserProfile]):
    def get_by_email(self, db: Session, email: str) -> Optional[UserProfile]:
        normalized = (email or "").strip().lower()
        return self.query(db).filter(UserProfile.email == normalized).first()


user_profile_crud = CRUDUserProfile(UserProfile)
