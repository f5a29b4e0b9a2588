from sqlalchemy import Integer, String, Numeric, Boolean
from sqlalchemy.orm import Mapped, mapped_column
from ..db import Base

# reservations_quota sentinel for "no limit"
UNLIMITED_RESERVATIONS = -1

class Plan(Base):
    __tablename__ = "plans"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    name_en: Mapped[str] = mapped_column(String(120), nullable=False)
    name_ar: Mapped[str] = mapped_column(String(120), nullable=False)
    target_customer_en: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    target_customer_ar: Mapped[str] = mapped_column(String(255), default="", nullable=False)

    # Prices are stored VAT-inclusive
    yearly_price: Mapped[float] = mapped_column(Numeric(10, 2), default=0.0, nullable=False)
    discount_percentage: Mapped[float] = mapped_column(Numeric(5, 2), default=0.0, nullable=False)
    units_quota: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    additional_unit_price: Mapped[float] = mapped_column(Numeric(10, 2), default=0.0, nullable=False)
    reservations_quota: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    support_type_en: Mapped[str] = mapped_column(String(120), default="", nullable=False)
    support_type_ar: Mapped[str] = mapped_column(String(120), default="", nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
