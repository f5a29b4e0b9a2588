import logging
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models import Plan, Addon, UNLIMITED_RESERVATIONS

logger = logging.getLogger(__name__)


class CatalogUnavailable(Exception):
    """The plans/add-ons store could not be read."""


class PlanSnapshot(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    code: str
    name_en: str
    name_ar: str
    target_customer_en: str = ""
    target_customer_ar: str = ""
    yearly_price: float
    discount_percentage: float = 0.0
    units_quota: int
    additional_unit_price: float = 0.0
    reservations_quota: int = 0
    support_type_en: str = ""
    support_type_ar: str = ""
    sort_order: int = 0

    @property
    def has_unlimited_reservations(self) -> bool:
        return self.reservations_quota == UNLIMITED_RESERVATIONS


class AddonSnapshot(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    code: str
    name_en: str
    name_ar: str
    description_en: str = ""
    description_ar: str = ""
    yearly_price: float = 0.0
    is_onetime: bool = False
    onetime_price: float = 0.0
    sort_order: int = 0


class CatalogSnapshot(BaseModel):
    """Active plans and add-ons, each ordered by sort_order."""
    model_config = ConfigDict(frozen=True)

    plans: tuple[PlanSnapshot, ...] = ()
    addons: tuple[AddonSnapshot, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.plans

    def plan_by_code(self, code: Optional[str]) -> Optional[PlanSnapshot]:
        if not code:
            return None
        return next((p for p in self.plans if p.code == code), None)

    def addon_by_code(self, code: Optional[str]) -> Optional[AddonSnapshot]:
        if not code:
            return None
        return next((a for a in self.addons if a.code == code), None)


def list_active_plans(db: Session) -> List[PlanSnapshot]:
    rows = (
        db.query(Plan)
        .filter(Plan.is_active == True)
        .order_by(Plan.sort_order.asc(), Plan.id.asc())
        .all()
    )
    return [PlanSnapshot.model_validate(row) for row in rows]


def list_active_addons(db: Session) -> List[AddonSnapshot]:
    rows = (
        db.query(Addon)
        .filter(Addon.is_active == True)
        .order_by(Addon.sort_order.asc(), Addon.id.asc())
        .all()
    )
    return [AddonSnapshot.model_validate(row) for row in rows]


def load_catalog(db: Session) -> CatalogSnapshot:
    """
    Read the active catalog once for the current request.
    Raises CatalogUnavailable when the store cannot be queried; there is no retry.
    """
    try:
        plans = list_active_plans(db)
        addons = list_active_addons(db)
    except SQLAlchemyError as e:
        logger.exception("Failed to load pricing catalog")
        raise CatalogUnavailable(str(e)) from e
    logger.debug("Loaded catalog: %d plans, %d add-ons", len(plans), len(addons))
    return CatalogSnapshot(plans=tuple(plans), addons=tuple(addons))
