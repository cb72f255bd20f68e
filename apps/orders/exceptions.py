"""Errors raised by the cart and checkout, shown to the customer as notices."""

from rest_framework import status


class CartError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class CheckoutError(CartError):
    pass
