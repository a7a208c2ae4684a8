from pydantic import BaseModel


class PaymentSettingsResponse(BaseModel):
    qrCodeUrl: str
    price: float


class TransactionCreateRequest(BaseModel):
    transactionNumber: str


class TransactionCreateResponse(BaseModel):
    transactionId: str
    transactionNumber: str
    amount: float
    createdAt: str
    isPremium: bool = True
    message: str = "Your payment is being verified. You'll be notified once it's confirmed."


class TransactionItem(BaseModel):
    transactionId: str
    transactionNumber: str
    amount: float
    createdAt: str


class TransactionListResponse(BaseModel):
    items: list[TransactionItem]
