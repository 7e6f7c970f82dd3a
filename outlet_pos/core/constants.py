OUTLETS = ("harigala", "arandara")
PRODUCT_CATEGORIES = ("Bicycle", "Accessories", "Parts", "Clothing", "Tools")
PAYMENT_METHODS = ("Cash", "Card", "Bank Transfer")
DEFAULT_PAYMENT_METHOD = "Cash"

BILL_SEQUENCE_DIGITS = 3
BILL_SEQUENCE_MAX = 10 ** BILL_SEQUENCE_DIGITS - 1
