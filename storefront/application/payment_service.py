from storefront.infrastructure.payments import StripeGateway
from storefront.core.logging_config import get_logger
from .schemas import PaymentSheetRequest, PaymentSheetResponse, round_half_up

logger = get_logger(__name__)

def to_minor_units(amount: float) -> int:
    """Convert a major-unit amount to minor units, rounding half up like article prices."""
    return round_half_up(amount * 100)

class PaymentService:
    """Builds the bundle a mobile client needs to present a payment sheet.

    Nothing is persisted locally; every value comes from the processor.
    """

    def __init__(self, gateway: StripeGateway):
        self.gateway = gateway

    def create_payment_sheet(self, data: PaymentSheetRequest) -> PaymentSheetResponse:
        customer = self.gateway.create_customer(data.email)
        ephemeral_key = self.gateway.create_ephemeral_key(customer["id"])
        intent = self.gateway.create_payment_intent(
            amount=to_minor_units(data.amount),
            currency=data.currency.lower(),
            customer_id=customer["id"],
        )
        logger.info(f"Created payment intent {intent.get('id')} for customer {customer['id']}")
        return PaymentSheetResponse(
            payment_intent=intent["client_secret"],
            ephemeral_key=ephemeral_key["secret"],
            customer=customer["id"],
            publishable_key=self.gateway.publishable_key,
        )
