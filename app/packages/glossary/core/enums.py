"""枚举定义：约束用户角色、用语状态与专业分类的可选值。"""

from enum import Enum


class RoleEnum(str, Enum):
    ADMIN = "admin"
    USER = "user"


class TermStatusEnum(str, Enum):
    """用语审核状态：驳回即删除，因此只有两个可达状态。"""

    PENDING = "pending"
    APPROVED = "approved"


class DisciplineEnum(str, Enum):
    """十个固定的专业分类（공종），顺序即展示顺序。"""

    GENERAL = "General"
    ARCHITECTURE = "Architecture"
    ELECTRICAL = "Electrical"
    PIPING = "Piping"
    CIVIL = "Civil"
    INSTRUMENT_CONTROL = "Instrument & Control"
    FIRE_PROTECTION = "Fire Protection"
    HVAC = "HVAC"
    STRUCTURE = "Structure"
    CELL = "Cell"


class DuplicateMatchEnum(str, Enum):
    EN = "en"
    KR = "kr"
    BOTH = "both"
