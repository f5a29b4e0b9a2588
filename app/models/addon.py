from sqlalchemy import Integer, String, Numeric, Boolean, Text
from sqlalchemy.orm import Mapped, mapped_column
from ..db import Base

class Addon(Base):
    __tablename__ = "addons"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    name_en: Mapped[str] = mapped_column(String(120), nullable=False)
    name_ar: Mapped[str] = mapped_column(String(120), nullable=False)
    description_en: Mapped[str] = mapped_column(Text, default="", nullable=False)
    description_ar: Mapped[str] = mapped_column(Text, default="", nullable=False)

    # Recurring price; ignored when is_onetime is set
    yearly_price: Mapped[float] = mapped_column(Numeric(10, 2), default=0.0, nullable=False)
    is_onetime: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    onetime_price: Mapped[float] = mapped_column(Numeric(10, 2), default=0.0, nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False, index=True)
