from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class ResearchChatRequest(BaseModel):
    text: Optional[str] = Field(default=None, example="What should I look for in night footage?")
    history: Optional[List[Dict[str, Any]]] = Field(
        default=None,
        example=[{"role": "user", "content": "hi"}, {"role": "model", "content": "Hello!"}],
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "text": "follow up",
                    "history": [{"role": "user", "content": "hi"}],
                }
            ]
        }
    }


class ResearchChatResponse(BaseModel):
    response: str
    status: str = "success"
