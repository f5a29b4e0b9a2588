import logging

from sqlalchemy.orm import Session

from ..config import settings
from ..models import Plan, Addon, UNLIMITED_RESERVATIONS

logger = logging.getLogger(__name__)

DEMO_PLANS = [
    {
        "code": "P-0023",
        "name_en": "Starter",
        "name_ar": "المبتدئة",
        "target_customer_en": "Small guesthouses and single properties",
        "target_customer_ar": "بيوت الضيافة الصغيرة والعقارات الفردية",
        "yearly_price": 2990,
        "discount_percentage": 0,
        "units_quota": 10,
        "additional_unit_price": 150,
        "reservations_quota": 1000,
        "support_type_en": "Email support",
        "support_type_ar": "دعم عبر البريد الإلكتروني",
        "sort_order": 1,
    },
    {
        "code": "P-0024",
        "name_en": "Growth",
        "name_ar": "النمو",
        "target_customer_en": "Growing furnished apartments",
        "target_customer_ar": "الشقق المفروشة المتنامية",
        "yearly_price": 5990,
        "discount_percentage": 10,
        "units_quota": 30,
        "additional_unit_price": 120,
        "reservations_quota": 5000,
        "support_type_en": "Chat and email support",
        "support_type_ar": "دعم عبر المحادثة والبريد",
        "sort_order": 2,
    },
    {
        "code": "P-0025",
        "name_en": "Business",
        "name_ar": "الأعمال",
        "target_customer_en": "Hotels and multi-building operators",
        "target_customer_ar": "الفنادق ومشغلو المباني المتعددة",
        "yearly_price": 9990,
        "discount_percentage": 15,
        "units_quota": 75,
        "additional_unit_price": 100,
        "reservations_quota": 20000,
        "support_type_en": "Priority support",
        "support_type_ar": "دعم ذو أولوية",
        "sort_order": 3,
    },
    {
        "code": settings.PROFESSIONAL_PLAN_CODE,
        "name_en": "Professional",
        "name_ar": "الاحترافية",
        "target_customer_en": "Large portfolios that need every feature",
        "target_customer_ar": "المحافظ الكبيرة التي تحتاج جميع المزايا",
        "yearly_price": 19990,
        "discount_percentage": 20,
        "units_quota": 200,
        "additional_unit_price": 80,
        "reservations_quota": UNLIMITED_RESERVATIONS,
        "support_type_en": "Dedicated account manager",
        "support_type_ar": "مدير حساب مخصص",
        "sort_order": 4,
    },
]

DEMO_ADDONS = [
    {
        "code": "channel_manager",
        "name_en": "Channel Manager",
        "name_ar": "مدير القنوات",
        "description_en": "Sync availability and rates with booking channels",
        "description_ar": "مزامنة التوفر والأسعار مع قنوات الحجز",
        "yearly_price": 1800,
        "sort_order": 1,
    },
    {
        "code": "smart_locks",
        "name_en": "Smart Locks Integration",
        "name_ar": "تكامل الأقفال الذكية",
        "description_en": "Issue digital keys automatically",
        "description_ar": "إصدار مفاتيح رقمية تلقائياً",
        "yearly_price": 1200,
        "sort_order": 2,
    },
    {
        "code": "website_builder",
        "name_en": "Booking Website",
        "name_ar": "موقع الحجز",
        "description_en": "Branded direct-booking website",
        "description_ar": "موقع حجز مباشر بهويتك",
        "yearly_price": 900,
        "sort_order": 3,
    },
    {
        "code": settings.OTA_ADDON_CODE,
        "name_en": "OTA Registration",
        "name_ar": "التسجيل في منصات الحجز",
        "description_en": "We list your property on the major travel agencies",
        "description_ar": "نقوم بإدراج عقارك في منصات الحجز الكبرى",
        "is_onetime": True,
        "onetime_price": 1500,
        "sort_order": 4,
    },
]


def _upsert(db: Session, model, rows: list[dict]) -> int:
    created = 0
    for row in rows:
        obj = db.query(model).filter(model.code == row["code"]).first()
        if obj is None:
            obj = model(code=row["code"])
            db.add(obj)
            created += 1
        for key, value in row.items():
            setattr(obj, key, value)
        obj.is_active = True
    return created


def seed_catalog(db: Session) -> tuple[int, int]:
    """
    Insert or refresh the demo plans and add-ons, keyed by code.
    Safe to run repeatedly. Returns (plans_created, addons_created).
    """
    plans_created = _upsert(db, Plan, DEMO_PLANS)
    addons_created = _upsert(db, Addon, DEMO_ADDONS)
    db.commit()
    logger.info("Demo catalog seeded (%d new plans, %d new add-ons)", plans_created, addons_created)
    return plans_created, addons_created


def seed_if_empty(db: Session) -> bool:
    if db.query(Plan).first() is not None:
        return False
    seed_catalog(db)
    return True
