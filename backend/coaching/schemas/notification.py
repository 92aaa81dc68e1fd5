from pydantic import BaseModel


class NotificationRequest(BaseModel):
    subject: str
    message: str


class NotificationResponse(BaseModel):
    sent: bool
    message: str = "Sent"
