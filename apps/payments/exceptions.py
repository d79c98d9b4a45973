from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError


class PaymentValidationError(ValidationError):
    """Bad amount, phone number or provider. Raised before any gateway call."""


class PaymentGatewayError(APIException):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "Payment gateway request failed."
    default_code = "gateway_error"
