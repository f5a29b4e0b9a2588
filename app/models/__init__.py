from .plan import Plan, UNLIMITED_RESERVATIONS
from .addon import Addon
