from dataclasses import dataclass, replace

from ..config import settings


@dataclass(frozen=True)
class VatPolicy:
    """
    VAT display rules over VAT-inclusive catalog prices.

    With VAT display on, amounts are shown as stored (gross) and the VAT
    portion is reported separately. With VAT display off, amounts are shown
    net of VAT and the VAT portion is zero.
    """

    include_vat: bool = False
    rate: float = 0.15

    @property
    def divisor(self) -> float:
        return 1 + self.rate

    @property
    def rate_percent(self) -> float:
        return self.rate * 100

    def net_amount(self, amount: float) -> float:
        return amount / self.divisor

    def apply_vat(self, amount: float) -> float:
        return amount if self.include_vat else self.net_amount(amount)

    def calculate_vat_amount(self, amount: float) -> float:
        if not self.include_vat:
            return 0.0
        return amount - self.net_amount(amount)

    def toggled(self) -> "VatPolicy":
        return replace(self, include_vat=not self.include_vat)


def default_vat_policy(include_vat: bool | None = None) -> VatPolicy:
    if include_vat is None:
        include_vat = settings.VAT_DISPLAY_DEFAULT
    return VatPolicy(include_vat=bool(include_vat), rate=settings.VAT_RATE)
