"""用语模型：一行对应一条中英（韩英）对照的技术用语。"""

from typing import Optional

from sqlalchemy import CheckConstraint, Index, String, Text, event
from sqlalchemy.orm import Mapped, mapped_column, validates

from app.packages.glossary.core.disciplines import abbreviation_for
from app.packages.glossary.core.enums import TermStatusEnum
from app.packages.glossary.models.base import Base, CreatedAtMixin, UUIDPrimaryKeyMixin


class GlossaryTerm(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    """用语条目。``(en, kr)`` 不做唯一约束，重复检测只作为审核时的提示。"""

    __tablename__ = "glossary_terms"
    __table_args__ = (
        CheckConstraint("status IN ('pending', 'approved')", name="status_values"),
        Index("ix_glossary_terms_discipline_en", "discipline", "en"),
    )

    en: Mapped[str] = mapped_column(String(255), nullable=False)
    kr: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    discipline: Mapped[str] = mapped_column(String(50), nullable=False)
    abbreviation: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=TermStatusEnum.PENDING.value,
        index=True,
    )
    created_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True, index=True)

    @validates("discipline")
    def _sync_abbreviation(self, key: str, value: str) -> str:
        # 每次写入分类时同步重算缩写
        self.abbreviation = abbreviation_for(value)
        return value

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<GlossaryTerm {self.id} {self.en!r}/{self.kr!r} {self.status}>"


@event.listens_for(GlossaryTerm, "before_insert")
@event.listens_for(GlossaryTerm, "before_update")
def _enforce_abbreviation(mapper, connection, target: GlossaryTerm) -> None:
    # 直接赋值缩写的写入同样以工种为准
    target.abbreviation = abbreviation_for(target.discipline)
