# storefront/utils/validation.py
from typing import Any, Dict, Type, TypeVar
import pydantic
from ..exceptions import ValidationError

ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)

def parse_input(model: Type[ModelT], data: Dict[str, Any]) -> ModelT:
    """Parse a payload with a pydantic schema, raising our ValidationError"""
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        messages = []
        for error in e.errors():
            field = ".".join(str(part) for part in error["loc"]) or "input"
            messages.append(f"{field}: {error['msg']}")
        raise ValidationError("; ".join(messages)) from e
