from clearstock.model.base import BaseModel
from clearstock.model.restaurant import Restaurant
from clearstock.model.auth_session import AuthSession
from clearstock.model.login_attempt import LoginAttempt
from clearstock.model.account import Account
from clearstock.model.category import Category, ProductKind
from clearstock.model.location import Location
from clearstock.model.product_batch import ProductBatch, BatchStatus
from clearstock.model.stock_event import StockEvent, StockEventType
from clearstock.model.support_message import SupportMessage, SupportType

__all__ = [
    "BaseModel",
    "Restaurant",
    "AuthSession",
    "LoginAttempt",
    "Account",
    "Category",
    "ProductKind",
    "Location",
    "ProductBatch",
    "BatchStatus",
    "StockEvent",
    "StockEventType",
    "SupportMessage",
    "SupportType",
]
