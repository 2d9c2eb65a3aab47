from pydantic import BaseModel, Field
from typing import List, Optional


class Button(BaseModel):
    label: str
    data: str  # encoded callback token


class Document(BaseModel):
    filename: str
    content: bytes
    caption: Optional[str] = None


class Reply(BaseModel):
    """Transport-neutral reply: text plus optional rows of inline buttons."""
    text: str = ""
    buttons: List[List[Button]] = Field(default_factory=list)
    document: Optional[Document] = None
    parse_mode: Optional[str] = "HTML"

    def button_data(self) -> List[str]:
        """Flatten every callback token carried by the keyboard."""
        return [b.data for row in self.buttons for b in row]
