from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from loyaltyapi.schemas.common import Points


class WithdrawalRequest(BaseModel):
    """포인트 인출 요청"""

    order: str = Field(..., description="참조 주문 번호")
    sum: Points = Field(..., description="인출 포인트")


class Withdrawal(BaseModel):
    """포인트 인출 내역"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    order_number: str
    sum: Points
    processed_at: datetime


class WithdrawalResponse(BaseModel):
    """인출 내역 응답 항목"""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    order: str = Field(..., validation_alias="order_number")
    sum: Points
    processed_at: datetime
