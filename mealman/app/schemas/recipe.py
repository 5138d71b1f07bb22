from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator
from pydantic.alias_generators import to_camel


def _as_text(value: Any) -> Optional[str]:
    """Coerce loosely typed inference values (numbers, lists, schema.org objects) to text."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, dict):
        value = value.get("name") or value.get("text")
        return _as_text(value)
    if isinstance(value, (list, tuple)):
        parts = [_as_text(v) for v in value]
        joined = ", ".join(p for p in parts if p)
        return joined or None
    text = str(value).strip()
    return text or None


class PlainIngredient(BaseModel):
    kind: Literal["plain"] = "plain"
    text: str


class StructuredIngredient(BaseModel):
    kind: Literal["structured"] = "structured"
    quantity: Optional[str] = None
    unit: Optional[str] = None
    name: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("quantity", "unit", "name", "notes", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Optional[str]:
        return _as_text(value)


class PlainInstruction(BaseModel):
    kind: Literal["plain"] = "plain"
    text: str


class StructuredInstruction(BaseModel):
    kind: Literal["structured"] = "structured"
    text: Optional[str] = None

    @field_validator("text", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Optional[str]:
        return _as_text(value)


Ingredient = Annotated[Union[PlainIngredient, StructuredIngredient], Field(discriminator="kind")]
Instruction = Annotated[Union[PlainInstruction, StructuredInstruction], Field(discriminator="kind")]


def _tag_items(value: Any) -> Any:
    """Tag raw strings as plain items and raw objects as structured items."""
    if value is None:
        return None
    if isinstance(value, (str, dict)):
        value = [value]
    if not isinstance(value, list):
        return value
    tagged = []
    for item in value:
        if item is None:
            continue
        if isinstance(item, BaseModel):
            tagged.append(item)
        elif isinstance(item, dict):
            if "kind" in item:
                tagged.append(item)
            else:
                tagged.append({**item, "kind": "structured"})
        else:
            tagged.append({"kind": "plain", "text": str(item)})
    return tagged


class Recipe(BaseModel):
    """A structured recipe as returned by extraction and accepted by conversion."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str
    description: Optional[str] = None
    ingredients: Optional[List[Ingredient]] = None
    instructions: Optional[List[Instruction]] = None
    prep_time: Optional[str] = None
    cook_time: Optional[str] = None
    total_time: Optional[str] = None
    servings: Optional[str] = None
    cuisine: Optional[str] = None
    author: Optional[str] = None
    notes: Union[str, List[str], None] = None
    source: Optional[str] = None
    media_type: Optional[str] = None

    @field_validator("title", mode="before")
    @classmethod
    def _require_title(cls, value: Any) -> str:
        title = _as_text(value)
        if not title:
            raise ValueError("title is required")
        return title

    @field_validator(
        "description",
        "prep_time",
        "cook_time",
        "total_time",
        "servings",
        "cuisine",
        "author",
        "source",
        "media_type",
        mode="before",
    )
    @classmethod
    def _coerce_scalar(cls, value: Any) -> Optional[str]:
        return _as_text(value)

    @field_validator("ingredients", "instructions", mode="before")
    @classmethod
    def _tag_sequences(cls, value: Any) -> Any:
        return _tag_items(value)

    @field_validator("notes", mode="before")
    @classmethod
    def _coerce_notes(cls, value: Any) -> Union[str, List[str], None]:
        if value is None:
            return None
        if isinstance(value, (list, tuple)):
            return [text for text in (_as_text(v) for v in value) if text]
        return _as_text(value)

    @field_serializer("ingredients")
    def _dump_ingredients(self, items: Optional[List[Ingredient]]) -> Optional[List[Any]]:
        if items is None:
            return None
        return [
            item.text if isinstance(item, PlainIngredient) else item.model_dump(exclude={"kind"})
            for item in items
        ]

    @field_serializer("instructions")
    def _dump_instructions(self, items: Optional[List[Instruction]]) -> Optional[List[Any]]:
        if items is None:
            return None
        return [
            item.text if isinstance(item, PlainInstruction) else item.model_dump(exclude={"kind"})
            for item in items
        ]

    def with_origin(self, source: str, media_type: str) -> "Recipe":
        """Copy with ``source``/``mediaType`` filled in where they are missing."""
        return self.model_copy(
            update={
                "source": self.source or source,
                "media_type": self.media_type or media_type,
            }
        )

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


class DetectionResult(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    has_recipe: bool
    confidence: float = Field(ge=0.0, le=1.0)
    recipe_type: Optional[str] = None

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, value: Any) -> float:
        confidence = float(value)
        return min(max(confidence, 0.0), 1.0)

    @field_validator("recipe_type", mode="before")
    @classmethod
    def _coerce_recipe_type(cls, value: Any) -> Optional[str]:
        return _as_text(value)

    @model_validator(mode="after")
    def _no_type_without_recipe(self) -> "DetectionResult":
        if not self.has_recipe:
            self.recipe_type = None
        return self


class Document(BaseModel):
    """Rendered markdown and the filename to save it under."""

    markdown: str
    filename: str
