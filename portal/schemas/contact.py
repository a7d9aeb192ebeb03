from __future__ import annotations

from pydantic import BaseModel


class ContactForm(BaseModel):
    """Values typed into the contact form, carried in the session between steps."""

    name: str = ""
    email: str = ""
    message: str = ""

    model_config = {
        "json_schema_extra": {
            "example": {"name": "Taro", "email": "taro@example.com", "message": "Hello!"}
        },
    }
