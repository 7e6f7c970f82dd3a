from fastapi import status


class PosError(Exception):
    """Base for domain errors; each subclass maps to one HTTP status."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = {key: value for key, value in details.items() if value is not None}

    def to_dict(self) -> dict:
        payload = {"detail": self.message}
        payload.update(self.details)
        return payload


class ValidationError(PosError):
    pass


class NotFound(PosError):
    status_code = status.HTTP_404_NOT_FOUND


class ProductNotFound(NotFound):
    def __init__(self, product_id):
        super().__init__(f"Product not found: {product_id}", product_id=product_id)
        self.product_id = product_id


class BillNotFound(NotFound):
    def __init__(self, bill_id):
        super().__init__(f"Bill not found: {bill_id}", bill_id=bill_id)
        self.bill_id = bill_id


class InsufficientStock(PosError):
    def __init__(self, product_id, product_name=None, requested=None, available=None):
        label = product_name or product_id
        super().__init__(
            f"Insufficient stock for {label}",
            product_id=product_id,
            product_name=product_name,
            requested=requested,
            available=available,
        )
        self.product_id = product_id


class DuplicateKey(PosError):
    pass


class DuplicateSku(DuplicateKey):
    def __init__(self, outlet, sku):
        super().__init__("SKU already exists", outlet=outlet, sku=sku)


class AllocationRace(PosError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, outlet, attempts):
        super().__init__(
            "Could not allocate a unique bill number, please retry",
            outlet=outlet,
            attempts=attempts,
        )


__all__ = [
    "AllocationRace",
    "BillNotFound",
    "DuplicateKey",
    "DuplicateSku",
    "InsufficientStock",
    "NotFound",
    "PosError",
    "ProductNotFound",
    "ValidationError",
]
