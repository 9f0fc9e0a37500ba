"""Application models package."""

from pos_terminal.models.app_setting import AppSetting
from pos_terminal.models.audit_log import PosActionLog
from pos_terminal.models.catalog import Addon, AddonGroup, CatalogItem
from pos_terminal.models.dining_table import DiningTable
from pos_terminal.models.geo import Block, City, State
from pos_terminal.models.order import Order, OrderLine, OrderLineAddon, OrderStatus, OrderType
from pos_terminal.models.payment import PaymentMethod
from pos_terminal.models.promo import Promo
from pos_terminal.models.terminal import PosUser, Terminal

__all__ = [
    "AppSetting", "PosActionLog", "Addon", "AddonGroup", "CatalogItem", "DiningTable", "Block", "City", "State",
    "Order", "OrderLine", "OrderLineAddon", "OrderStatus", "OrderType", "PaymentMethod", "Promo", "PosUser", "Terminal",
]
