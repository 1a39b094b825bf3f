from .enums import Department, OrderStatus, PaymentStatus, PaymentMethod, StockReason
from .staff import Employee
from .inventory import Item, StockMovement
from .orders import Order, OrderPayment, OrderEvent

__all__ = [
    'Department', 'OrderStatus', 'PaymentStatus', 'PaymentMethod', 'StockReason',
    'Employee',
    'Item', 'StockMovement',
    'Order', 'OrderPayment', 'OrderEvent',
]
