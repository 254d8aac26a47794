from .catalog import Warehouse, Design, Item, StockMovement
from .orders import AdjustmentOrder, ORDER_KIND_STORE, ORDER_KIND_CUSTOMER, ORDER_KINDS
from .receipts import Receipt, ReceiptLine, ReceiptPayment, ReferenceSequence
from .cash import CashEntry, CashDrawerBalance, DrawerOpenEvent
from .printing import PrintJob

__all__ = [
    'Warehouse', 'Design', 'Item', 'StockMovement',
    'AdjustmentOrder', 'ORDER_KIND_STORE', 'ORDER_KIND_CUSTOMER', 'ORDER_KINDS',
    'Receipt', 'ReceiptLine', 'ReceiptPayment', 'ReferenceSequence',
    'CashEntry', 'CashDrawerBalance', 'DrawerOpenEvent',
    'PrintJob',
]
