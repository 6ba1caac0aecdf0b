#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w Base.metadata

from marketpay.data.models.user import UserModel
from marketpay.data.models.cart import CartModel
from marketpay.data.models.cart_item import CartItemModel
from marketpay.data.models.order import OrderModel
from marketpay.data.models.transfer import TransferModel

__all__ = ["UserModel", "CartModel", "CartItemModel", "OrderModel", "TransferModel"]
