"""数据模型集合，导入后即可在 ``Base.metadata`` 中完成建表注册。"""

from .base import Base
from .term import GlossaryTerm
from .user_profile import UserProfile

__all__ = ["Base", "GlossaryTerm", "UserProfile"]
