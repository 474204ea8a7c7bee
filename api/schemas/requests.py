from pydantic import BaseModel, ConfigDict, Field, field_validator


class AddCurrencyRequest(BaseModel):
	code: str = Field(..., description='ISO 4217 currency code')
	name: str | None = Field(None, max_length=100, description='Display name')

	@field_validator('code')
	@classmethod
	def strip_code(cls, v: str):
		return v.strip()

	model_config = ConfigDict(json_schema_extra={'example': {'code': 'SEK', 'name': 'Swedish Krona'}})
