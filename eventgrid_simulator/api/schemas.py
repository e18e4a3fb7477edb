from pydantic import BaseModel, ConfigDict, Field


class SubscriptionValidationResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    validation_response: str = Field(..., alias="validationResponse")
